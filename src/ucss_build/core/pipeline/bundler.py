from __future__ import annotations

"""
Import Resolver and Bundler.

Flattens a stylesheet and everything it imports into a single text. Each
live '@import "path";' statement is replaced, in document order, by the
fully resolved text of its target.

Resolution rules:
- Specifiers starting with the root marker (default "lib/") resolve against
  the module root (default "<project>/src").
- Every other specifier resolves relative to the importing file.

Recoverable conditions become inline placeholder comments:
- A target that does not exist -> /* Missing: <specifier> */
- A target already on the active chain -> /* Cycle detected: <path> */

Any other OSError propagates to the caller and halts the build.

Each top-level call owns its own ResolutionStack, so independent bundles can
run concurrently. The stack tracks the active chain only: a file reached
through two non-cyclic paths is inlined twice.
"""

import logging
import os
import re
from typing import Final, List, Optional

from ucss_build.core.pipeline.reader import FileSystemReader, SourceReader
from ucss_build.core.processing.masking import find_protected_spans
from ucss_build.domain.constants import CYCLE_PLACEHOLDER, DEFAULT_ROOT_MARKER, MISSING_PLACEHOLDER
from ucss_build.domain.source_models import (
    BundleDiagnostic,
    ImportDirective,
    ResolutionStack,
    SourceNode,
)
from ucss_build.infra.fs import display_path

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# DIRECTIVE PATTERN
# -----------------------------------------------------------------------------

# Whole statements only: "@import" must not continue an identifier and the
# quoted specifier must be followed by the terminating semicolon.
_IMPORT_PATTERN: Final[re.Pattern] = re.compile(
    r"(?<![\w@-])@import\s+(?P<quote>[\"'])(?P<spec>[^\"'\n]+)(?P=quote)\s*;"
)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def bundle(
        entry_path: str,
        *,
        module_root: str,
        root_marker: str = DEFAULT_ROOT_MARKER,
        reader: Optional[SourceReader] = None,
        display_root: Optional[str] = None,
        diagnostics: Optional[List[BundleDiagnostic]] = None,
) -> str:
    """
    Flatten an entry stylesheet and its imports into one text.

    Args:
        entry_path: Path of the entry file.
        module_root: Base directory for root-marker specifiers.
        root_marker: Specifier prefix redirecting resolution to module_root.
        reader: Source reader (defaults to the local filesystem).
        display_root: Directory placeholders and logs are made relative to
                      (defaults to the parent of module_root).
        diagnostics: Optional list collecting recoverable failures.

    Returns:
        str: The bundle, free of live import directives.

    Raises:
        OSError: On I/O faults other than a missing file.
    """
    source_reader = reader or FileSystemReader()
    root = os.path.abspath(module_root)
    shown_root = os.path.abspath(display_root) if display_root else os.path.dirname(root)
    collected: List[BundleDiagnostic] = diagnostics if diagnostics is not None else []

    entry = canonical_path(entry_path)
    entry_name = display_path(entry, shown_root)

    text = source_reader.read(entry)
    if text is None:
        logger.warning(f"Entry not found: {entry_name}")
        collected.append(BundleDiagnostic(kind="missing", specifier=entry_name, importer="", target=entry))
        return _placeholder(MISSING_PLACEHOLDER, entry_name)

    stack = ResolutionStack()
    stack.push(entry)
    try:
        return _resolve_node(
            parse_source(entry, text), stack, source_reader,
            root, root_marker, shown_root, collected
        )
    finally:
        stack.pop()


def parse_source(path: str, text: str) -> SourceNode:
    """
    Build a SourceNode holding the live import directives of a text.

    Directives located inside comments (or inside string literals) are not
    live and are skipped.

    Args:
        path: Canonical path of the file.
        text: File content.

    Returns:
        SourceNode: The parsed node.
    """
    return SourceNode(path=path, text=text, directives=tuple(find_import_directives(text)))


def find_import_directives(text: str) -> List[ImportDirective]:
    """
    Locate live import statements in document order.

    Args:
        text: Stylesheet source.

    Returns:
        List[ImportDirective]: Directives outside protected spans.
    """
    protected = [(start, end) for start, end, _ in find_protected_spans(text)]
    directives: List[ImportDirective] = []

    for match in _IMPORT_PATTERN.finditer(text):
        if _inside(match.start(), protected):
            continue
        directives.append(ImportDirective(
            start=match.start(),
            end=match.end(),
            specifier=match.group("spec").strip(),
        ))

    return directives


def resolve_specifier(
        specifier: str,
        importer_dir: str,
        module_root: str,
        root_marker: str = DEFAULT_ROOT_MARKER,
) -> str:
    """
    Resolve an import specifier to a canonical path.

    Args:
        specifier: Path string named by the directive.
        importer_dir: Directory of the importing file.
        module_root: Base directory for root-marker specifiers.
        root_marker: Reserved specifier prefix.

    Returns:
        str: Canonical absolute path of the target.
    """
    if root_marker and specifier.startswith(root_marker):
        return canonical_path(os.path.join(module_root, specifier))
    return canonical_path(os.path.join(importer_dir, specifier))


def canonical_path(path: str) -> str:
    """Normalize a path so that stack membership compares equal paths equally."""
    return os.path.normcase(os.path.normpath(os.path.abspath(path)))

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _resolve_node(
        node: SourceNode,
        stack: ResolutionStack,
        reader: SourceReader,
        module_root: str,
        root_marker: str,
        display_root: str,
        diagnostics: List[BundleDiagnostic],
) -> str:
    """Resolve every directive of a node and splice the results into its text."""
    if not node.directives:
        return node.text

    importer_dir = os.path.dirname(node.path)
    replacements: List[str] = []

    for directive in node.directives:
        target = resolve_specifier(directive.specifier, importer_dir, module_root, root_marker)
        target_name = display_path(target, display_root)

        if target in stack:
            logger.warning(f"Cycle detected: {display_path(node.path, display_root)} -> {target_name}")
            diagnostics.append(BundleDiagnostic(
                kind="cycle", specifier=directive.specifier, importer=node.path, target=target
            ))
            replacements.append(_placeholder(CYCLE_PLACEHOLDER, target_name))
            continue

        text = reader.read(target)
        if text is None:
            logger.warning(f"Import not found: {directive.specifier} (resolved: {target_name})")
            diagnostics.append(BundleDiagnostic(
                kind="missing", specifier=directive.specifier, importer=node.path, target=target
            ))
            replacements.append(_placeholder(MISSING_PLACEHOLDER, directive.specifier))
            continue

        stack.push(target)
        try:
            replacements.append(_resolve_node(
                parse_source(target, text), stack, reader,
                module_root, root_marker, display_root, diagnostics
            ))
        finally:
            stack.pop()

    # Splice from the last directive to the first so earlier offsets stay valid
    out = node.text
    for directive, replacement in reversed(list(zip(node.directives, replacements))):
        out = out[:directive.start] + replacement + out[directive.end:]
    return out


def _inside(offset: int, spans: List[tuple]) -> bool:
    for start, end in spans:
        if start <= offset < end:
            return True
        if start > offset:
            break
    return False


def _placeholder(template: str, name: str) -> str:
    """Format a diagnostic comment whose name cannot close the comment early."""
    return template.format(name=name.replace("*/", "*\\/"))
