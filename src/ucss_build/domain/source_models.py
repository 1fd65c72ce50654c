from __future__ import annotations

"""
Source Domain Data Models.

Defines the value objects exchanged between the reader, the bundler and the
prefixer: parsed source nodes with their import directives, the per-call
resolution stack, prefixing rules and masked spans.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Set, Tuple

from ucss_build.domain.constants import (
    DEFAULT_CLASS_EXCLUSIONS,
    DEFAULT_PREFIX_STRING,
    DEFAULT_VARIABLE_EXCLUSIONS,
    PREFIX_BOTH,
    PREFIX_CLASSES,
    PREFIX_CUSTOM_PROPERTIES,
)

# -----------------------------------------------------------------------------
# SOURCE GRAPH MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ImportDirective:
    """
    A live import statement located inside a source text.

    Attributes:
        start: Offset of the first character of the statement.
        end: Offset one past the terminating semicolon.
        specifier: Path string named by the statement.
    """
    start: int
    end: int
    specifier: str


@dataclass(frozen=True)
class SourceNode:
    """
    A source file read fresh for one bundle invocation.

    Attributes:
        path: Canonical absolute path.
        text: Raw file content.
        directives: Live import directives in document order.
    """
    path: str
    text: str
    directives: Tuple[ImportDirective, ...] = ()


@dataclass(frozen=True)
class BundleDiagnostic:
    """
    Recoverable failure found while flattening an import graph.

    Attributes:
        kind: "missing" or "cycle".
        specifier: The specifier (or entry name) that could not be inlined.
        importer: Canonical path of the file holding the directive.
        target: Resolved canonical path of the target.
    """
    kind: str
    specifier: str
    importer: str
    target: str


class ResolutionStack:
    """
    Paths on the active recursive chain of one top-level bundle call.

    Membership reflects the current chain only: a path is removed as soon as
    its subtree is resolved, so a file reached through two divergent
    non-cyclic paths is inlined twice.
    """

    def __init__(self) -> None:
        self._active: Set[str] = set()
        self._order: List[str] = []

    def __contains__(self, path: object) -> bool:
        return path in self._active

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._order))

    def push(self, path: str) -> None:
        if path in self._active:
            raise ValueError(f"Path already active on the resolution stack: {path}")
        self._active.add(path)
        self._order.append(path)

    def pop(self) -> str:
        path = self._order.pop()
        self._active.discard(path)
        return path


# -----------------------------------------------------------------------------
# REWRITING MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class PrefixRule:
    """
    Namespace isolation policy for one build channel.

    Attributes:
        category: Which token family to rename ("classes", "custom_properties", "both").
        prefix: Namespace prefix; a trailing hyphen is added when missing.
        class_exclusions: Class names (or hyphenated prefixes) left untouched.
        variable_exclusions: Custom property names (or prefixes) left untouched.
    """
    category: str = PREFIX_BOTH
    prefix: str = DEFAULT_PREFIX_STRING
    class_exclusions: Tuple[str, ...] = tuple(DEFAULT_CLASS_EXCLUSIONS)
    variable_exclusions: Tuple[str, ...] = tuple(DEFAULT_VARIABLE_EXCLUSIONS)

    @property
    def rewrites_classes(self) -> bool:
        return self.category in (PREFIX_BOTH, PREFIX_CLASSES)

    @property
    def rewrites_custom_properties(self) -> bool:
        return self.category in (PREFIX_BOTH, PREFIX_CUSTOM_PROPERTIES)

    @property
    def normalized_prefix(self) -> str:
        return self.prefix if self.prefix.endswith("-") else f"{self.prefix}-"


@dataclass(frozen=True)
class MaskedSpan:
    """
    A protected substring swapped out for an opaque placeholder.

    Attributes:
        key: Placeholder text inserted into the masked output.
        original: Exact protected content.
        kind: "comment", "string" or "url".
    """
    key: str
    original: str
    kind: str


@dataclass
class MaskResult:
    """
    Masked text and its side table, local to one masking call.
    """
    text: str
    spans: List[MaskedSpan] = field(default_factory=list)
