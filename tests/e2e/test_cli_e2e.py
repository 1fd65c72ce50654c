from __future__ import annotations

"""
End-to-End (E2E) CLI Tests.

Verifies the application's external behavior by invoking the entry point
script via subprocess. These tests validate argument parsing, exit codes,
stream output (stdout/stderr), and file system side effects (artifact generation).
"""

import json
import os
import subprocess
import sys
from pathlib import Path
from typing import List

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
SRC_DIR = PROJECT_ROOT / "src"
ENTRY_POINT = SRC_DIR / "ucss_build" / "main.py"


def run_cli(args: List[str], cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    """
    Helper to execute the CLI in a separate process.

    Injects the 'src' directory into PYTHONPATH to ensure the package
    is resolvable without being installed in site-packages.

    Args:
        args: List of command line arguments (excluding 'python' and script path).
        cwd: Optional working directory for the subprocess.

    Returns:
        subprocess.CompletedProcess: The result object containing returncode, stdout, and stderr.
    """
    env = os.environ.copy()
    env["PYTHONPATH"] = str(SRC_DIR) + os.pathsep + env.get("PYTHONPATH", "")

    cmd = [sys.executable, str(ENTRY_POINT)] + args

    return subprocess.run(
        cmd,
        cwd=cwd,
        env=env,
        capture_output=True,
        text=True,
        encoding="utf-8"
    )


def test_cli_help() -> None:
    result = run_cli(["--help"])

    assert result.returncode == 0
    assert "ucss-build" in result.stdout
    assert "--compress-only" in result.stdout


def test_cli_build_and_compress(css_project: Path) -> None:
    result = run_cli(["-C", str(css_project), "--workers", "2"])

    assert result.returncode == 0, result.stderr
    assert "Build completed successfully." in result.stdout

    out = css_project / "dist" / "latest"
    assert (out / "u.min.css").exists()
    assert (out / "u.min.css.gz").exists()
    assert (out / "lib" / "layout" / "grid.clean.css.br").exists()


def test_cli_json_output(css_project: Path) -> None:
    result = run_cli(["-C", str(css_project), "--no-compress", "--prefix", "c", "--json"])

    assert result.returncode == 0, result.stderr
    data = json.loads(result.stdout)
    assert data["ok"] is True
    assert data["prefix_mode"] == "classes"
    assert data["compression"] is None
    assert len(data["artifacts"]) == 12

    minified = (css_project / "dist" / "latest" / "u.min.css").read_text(encoding="utf-8")
    assert ".ucss-btn{color:var(--fg)}" in minified


def test_cli_reads_project_config_file(css_project: Path) -> None:
    (css_project / "ucss-build.json").write_text(
        json.dumps({"output_dir": "dist/stable", "build_modules": False, "compress": False}),
        encoding="utf-8",
    )

    result = run_cli([], cwd=css_project)

    assert result.returncode == 0, result.stderr
    out = css_project / "dist" / "stable"
    assert sorted(p.name for p in out.iterdir()) == ["u.clean.css", "u.css", "u.min.css"]


def test_cli_positional_output_dir(css_project: Path) -> None:
    result = run_cli(["-C", str(css_project), "--no-compress", "preview/feature-x"])

    assert result.returncode == 0, result.stderr
    assert (css_project / "preview" / "feature-x" / "u.css").exists()


def test_cli_dump_config(css_project: Path) -> None:
    result = run_cli(["-C", str(css_project), "--dump-config", "--prefix", "v"])

    assert result.returncode == 0
    data = json.loads(result.stdout)
    assert data["prefix_mode"] == "custom_properties"
    assert not (css_project / "dist").exists()


def test_cli_missing_project_exits_2(tmp_path: Path) -> None:
    result = run_cli(["-C", str(tmp_path / "nope")])

    assert result.returncode == 2
    assert "does not exist" in result.stderr


def test_cli_verification_failure_exits_1(css_project: Path) -> None:
    (css_project / "ucss-build.json").write_text(
        json.dumps({"verify_min_sizes": {"u.min.css": 999999}}),
        encoding="utf-8",
    )

    result = run_cli(["-C", str(css_project)])

    assert result.returncode == 1
    assert "ERROR" in result.stderr
    assert not (css_project / "dist" / "latest").exists()


def test_cli_compress_only(css_project: Path) -> None:
    assert run_cli(["-C", str(css_project), "--no-compress"]).returncode == 0

    result = run_cli(["-C", str(css_project), "--compress-only", "dist/latest", "--ext", "css"])

    assert result.returncode == 0, result.stderr
    assert "Compression completed." in result.stdout
    assert (css_project / "dist" / "latest" / "u.css.gz").exists()


def test_cli_compress_only_missing_directory_exits_2(css_project: Path) -> None:
    result = run_cli(["-C", str(css_project), "--compress-only", "dist/none"])

    assert result.returncode == 2
    assert "Directory not found" in result.stderr


def test_cli_missing_import_is_reported(css_project: Path) -> None:
    (css_project / "src" / "u.css").write_text('@import "lib/ghost.css";\n.a{}\n', encoding="utf-8")

    result = run_cli(["-C", str(css_project), "--no-compress", "--no-modules"])

    assert result.returncode == 0, result.stderr
    assert "Missing import: lib/ghost.css" in result.stdout
    assert "Import not found" in result.stderr
