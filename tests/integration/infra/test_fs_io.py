from __future__ import annotations

"""
Integration tests for the FileSystem infrastructure layer.

Verifies path resolution, staging directory creation and promotion.
"""

import os
from pathlib import Path

from ucss_build.infra.fs import (
    STAGING_PREFIX,
    create_staging_dir,
    discard_dir,
    display_path,
    normalize_path,
    promote_dir,
    resolve_under,
)


def test_normalize_path_fallback(tmp_path: Path) -> None:
    assert normalize_path("", str(tmp_path)) == os.path.normpath(str(tmp_path))
    assert normalize_path("  ", str(tmp_path)) == os.path.normpath(str(tmp_path))


def test_resolve_under(tmp_path: Path) -> None:
    assert resolve_under(str(tmp_path), "dist/latest") == os.path.join(str(tmp_path), "dist", "latest")
    assert resolve_under(str(tmp_path), str(tmp_path / "abs")) == str(tmp_path / "abs")


def test_display_path_uses_forward_slashes(tmp_path: Path) -> None:
    assert display_path(str(tmp_path / "src" / "lib" / "a.css"), str(tmp_path)) == "src/lib/a.css"


def test_staging_is_created_beside_output(tmp_path: Path) -> None:
    output = tmp_path / "dist" / "latest"
    staging = create_staging_dir(str(output))

    assert os.path.dirname(staging) == str(tmp_path / "dist")
    assert os.path.basename(staging).startswith(STAGING_PREFIX)
    assert os.path.isdir(staging)


def test_promote_replaces_existing_output(tmp_path: Path) -> None:
    output = tmp_path / "out"
    output.mkdir()
    (output / "old.css").write_text("old", encoding="utf-8")
    staging = Path(create_staging_dir(str(output)))
    (staging / "new.css").write_text("new", encoding="utf-8")

    promote_dir(str(staging), str(output))

    assert sorted(p.name for p in output.iterdir()) == ["new.css"]
    assert not staging.exists()


def test_promote_merges_without_replace(tmp_path: Path) -> None:
    output = tmp_path / "out"
    (output / "lib").mkdir(parents=True)
    (output / "old.css").write_text("old", encoding="utf-8")
    staging = Path(create_staging_dir(str(output)))
    (staging / "lib").mkdir()
    (staging / "lib" / "new.css").write_text("new", encoding="utf-8")

    promote_dir(str(staging), str(output), replace=False)

    assert (output / "old.css").exists()
    assert (output / "lib" / "new.css").exists()
    assert not staging.exists()


def test_discard_dir(tmp_path: Path) -> None:
    target = tmp_path / "gone"
    (target / "x").mkdir(parents=True)

    discard_dir(str(target))
    discard_dir(str(target))
    discard_dir("")

    assert not target.exists()
