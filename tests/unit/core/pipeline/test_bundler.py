from __future__ import annotations

"""
Unit tests for the Import Resolver and Bundler.

Verifies:
1. Root-marker and relative specifier resolution.
2. Missing-file and cycle placeholders.
3. Directive detection outside comments and strings.
4. Propagation of fatal I/O errors.
"""

from pathlib import Path
from typing import List, Optional

import pytest

from ucss_build.core.pipeline.bundler import (
    bundle,
    canonical_path,
    find_import_directives,
    resolve_specifier,
)
from ucss_build.core.processing.renderer import render_minified
from ucss_build.domain.source_models import BundleDiagnostic


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _bundle(entry: Path, src: Path, diagnostics: Optional[List[BundleDiagnostic]] = None) -> str:
    return bundle(str(entry), module_root=str(src), diagnostics=diagnostics)


# -----------------------------------------------------------------------------
# RESOLUTION
# -----------------------------------------------------------------------------

def test_root_marker_import_is_inlined(tmp_path: Path) -> None:
    src = tmp_path / "src"
    entry = _write(src / "u.css", '@import "lib/a.css";\n.u{}')
    _write(src / "lib" / "a.css", ".a{}")

    assert _bundle(entry, src) == ".a{}\n.u{}"


def test_relative_import_resolves_from_importer(tmp_path: Path) -> None:
    src = tmp_path / "src"
    entry = _write(src / "u.css", '@import "lib/a.css";')
    _write(src / "lib" / "a.css", "@import './parts/b.css';")
    _write(src / "lib" / "parts" / "b.css", "@import \"../c.css\";")
    _write(src / "lib" / "c.css", ".c{}")

    assert _bundle(entry, src) == ".c{}"


def test_resolve_specifier_rules(tmp_path: Path) -> None:
    root = str(tmp_path / "src")
    importer = str(tmp_path / "src" / "lib" / "parts")

    assert resolve_specifier("lib/a.css", importer, root) == canonical_path(str(tmp_path / "src" / "lib" / "a.css"))
    assert resolve_specifier("a.css", importer, root) == canonical_path(str(tmp_path / "src" / "lib" / "parts" / "a.css"))


def test_acyclic_bundle_has_no_live_directives(tmp_path: Path) -> None:
    src = tmp_path / "src"
    entry = _write(src / "u.css", '@import "lib/a.css";\n@import "lib/b.css";')
    _write(src / "lib" / "a.css", '@import "b.css";\n.a{}')
    _write(src / "lib" / "b.css", ".b{}")

    out = _bundle(entry, src)
    assert find_import_directives(out) == []


def test_divergent_paths_inline_twice(tmp_path: Path) -> None:
    src = tmp_path / "src"
    entry = _write(src / "u.css", '@import "a.css";\n@import "b.css";')
    _write(src / "a.css", '@import "c.css";')
    _write(src / "b.css", '@import "c.css";')
    _write(src / "c.css", ".c{}")

    out = _bundle(entry, src)
    assert out.count(".c{}") == 2
    assert "Cycle detected" not in out


# -----------------------------------------------------------------------------
# RECOVERABLE FAILURES
# -----------------------------------------------------------------------------

def test_missing_import_placeholder_at_directive_position(tmp_path: Path) -> None:
    src = tmp_path / "src"
    entry = _write(src / "u.css", 'x\n@import "lib/nope.css";\ny')
    diagnostics: List[BundleDiagnostic] = []

    out = _bundle(entry, src, diagnostics)

    assert out == "x\n/* Missing: lib/nope.css */\ny"
    assert [d.kind for d in diagnostics] == ["missing"]
    assert diagnostics[0].specifier == "lib/nope.css"


def test_placeholder_cannot_close_comment_early(tmp_path: Path) -> None:
    src = tmp_path / "src"
    entry = _write(src / "u.css", '@import "x*/y.css";\n.a{}')
    diagnostics: List[BundleDiagnostic] = []

    out = _bundle(entry, src, diagnostics)

    assert out == "/* Missing: x*\\/y.css */\n.a{}"
    assert diagnostics[0].specifier == "x*/y.css"
    assert render_minified(out) == ".a{}"


def test_missing_entry_yields_placeholder(tmp_path: Path) -> None:
    src = tmp_path / "src"
    src.mkdir()
    diagnostics: List[BundleDiagnostic] = []

    out = _bundle(src / "nope.css", src, diagnostics)

    assert out == "/* Missing: src/nope.css */"
    assert diagnostics[0].kind == "missing"


def test_two_file_cycle(tmp_path: Path) -> None:
    src = tmp_path / "src"
    a = _write(src / "a.css", '.a{}\n@import "b.css";')
    _write(src / "b.css", '.b{}\n@import "a.css";')
    diagnostics: List[BundleDiagnostic] = []

    out = _bundle(a, src, diagnostics)

    assert out == ".a{}\n.b{}\n/* Cycle detected: src/a.css */"
    assert out.count("Cycle detected") == 1
    assert [d.kind for d in diagnostics] == ["cycle"]


def test_self_import(tmp_path: Path) -> None:
    src = tmp_path / "src"
    a = _write(src / "a.css", '@import "a.css";\n.a{}')

    assert _bundle(a, src) == "/* Cycle detected: src/a.css */\n.a{}"


def test_cycle_does_not_stop_remaining_directives(tmp_path: Path) -> None:
    src = tmp_path / "src"
    a = _write(src / "a.css", '@import "b.css";')
    _write(src / "b.css", '@import "a.css";\n@import "c.css";')
    _write(src / "c.css", ".c{}")

    assert _bundle(a, src) == "/* Cycle detected: src/a.css */\n.c{}"


# -----------------------------------------------------------------------------
# DIRECTIVE DETECTION
# -----------------------------------------------------------------------------

def test_commented_directive_is_not_followed(tmp_path: Path) -> None:
    src = tmp_path / "src"
    text = '/* @import "lib/x.css"; */\n.u{}'
    entry = _write(src / "u.css", text)
    diagnostics: List[BundleDiagnostic] = []

    assert _bundle(entry, src, diagnostics) == text
    assert diagnostics == []


def test_single_quoted_directive(tmp_path: Path) -> None:
    src = tmp_path / "src"
    entry = _write(src / "u.css", "@import 'lib/a.css';")
    _write(src / "lib" / "a.css", ".a{}")

    assert _bundle(entry, src) == ".a{}"


def test_directive_inside_string_is_not_live() -> None:
    assert find_import_directives("a{content:\"@import 'x.css';\"}") == []


def test_directive_offsets_and_specifiers() -> None:
    text = '@import "a.css";\n.x{}\n@import  \'b.css\' ;'
    directives = find_import_directives(text)

    assert [d.specifier for d in directives] == ["a.css", "b.css"]
    assert text[directives[0].start:directives[0].end] == '@import "a.css";'


def test_url_form_is_not_a_directive() -> None:
    assert find_import_directives('@import url("x.css");') == []


# -----------------------------------------------------------------------------
# FATAL ERRORS
# -----------------------------------------------------------------------------

class _DeniedReader:
    """Reader serving the entry but refusing access to every import."""

    def __init__(self, entry: str, text: str) -> None:
        self.entry = entry
        self.text = text

    def read(self, path: str) -> Optional[str]:
        if path == self.entry:
            return self.text
        raise PermissionError(f"Permission denied: {path}")

    def list_files(self, directory: str, suffix: str) -> List[str]:
        return []

    def describe(self) -> str:
        return "denied"


def test_other_io_errors_propagate(tmp_path: Path) -> None:
    src = tmp_path / "src"
    entry = canonical_path(str(src / "u.css"))
    reader = _DeniedReader(entry, '@import "lib/a.css";')

    with pytest.raises(PermissionError):
        bundle(entry, module_root=str(src), reader=reader)
