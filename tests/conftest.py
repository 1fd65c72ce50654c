from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. A sample modular CSS project shared by pipeline, engine and CLI tests.
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
def write_file(path: Path, content: str) -> Path:
    """Create parent directories and write UTF-8 text."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def css_project(tmp_path: Path) -> Path:
    """
    Create a small modular CSS project.

    Structure:
    /project
      /src
        u.css              -> imports lib/base.css and lib/layout.css
        /lib
          base.css
          layout.css       -> imports layout/grid.css
          /layout
            grid.css
    """
    root = tmp_path / "project"
    src = root / "src"

    write_file(src / "u.css", (
        '/* uCss entry */\n'
        '@import "lib/base.css";\n'
        '@import "lib/layout.css";\n'
        '\n'
        '.u-root {\n'
        '  color: var(--fg);\n'
        '}\n'
    ))
    write_file(src / "lib" / "base.css", (
        ':root {\n'
        '  --fg: #111;\n'
        '  --wp-accent: blue;\n'
        '}\n'
        '\n'
        '.btn {\n'
        '  color: var(--fg);\n'
        '}\n'
    ))
    write_file(src / "lib" / "layout.css", '@import "layout/grid.css";\n')
    write_file(src / "lib" / "layout" / "grid.css", (
        '.grid {\n'
        '  display: grid;\n'
        '  gap: 1rem;\n'
        '}\n'
    ))
    return root


@pytest.fixture
def build_config(css_project: Path) -> Dict[str, Any]:
    """
    Return a complete build configuration targeting the sample project.

    Compression is disabled; tests that cover it switch it back on.
    """
    return {
        "project_root": str(css_project),
        "entry_path": "src/u.css",
        "module_root": "src",
        "root_marker": "lib/",
        "lib_dir": "src/lib",
        "build_modules": True,
        "source_ref": "",
        "output_dir": "dist/latest",
        "clean_output": True,
        "prefix_mode": "",
        "prefix_string": "ucss",
        "class_exclusions": ["wp", "block", "editor"],
        "variable_exclusions": ["theme", "u", "ucss", "wp", "block", "editor"],
        "compress": False,
        "compression_extensions": [".css"],
        "compression_workers": 2,
        "verify_min_sizes": {},
    }
