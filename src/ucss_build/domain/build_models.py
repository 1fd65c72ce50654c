from __future__ import annotations

"""
Build Domain Data Models.

Defines the data structures and factory functions used to communicate
results between the build engine, the compression pool and the CLI layer.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ucss_build.domain.source_models import BundleDiagnostic

# -----------------------------------------------------------------------------
# COMPRESSION MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class CompressionError:
    """
    Failure of one algorithm on one file.

    Attributes:
        rel_path: File path relative to the scanned root.
        algorithm: "gzip" or "brotli".
        error: Descriptive exception message.
    """
    rel_path: str
    algorithm: str
    error: str


@dataclass(frozen=True)
class CompressedFile:
    """
    Sizes recorded for one successfully compressed file.
    """
    rel_path: str
    original_size: int
    gzip_size: int
    brotli_size: int


@dataclass
class CompressionReport:
    """
    Outcome of one compression pass over a directory tree.

    Attributes:
        root_dir: Absolute directory that was scanned.
        discovered: Number of jobs found by the tree walk.
        attempted: Number of jobs claimed and processed by workers.
        workers: Width of the pool that processed the jobs.
        compressed: Files for which both side-cars were written.
        errors: Per-algorithm failures.
    """
    root_dir: str
    discovered: int = 0
    attempted: int = 0
    workers: int = 0
    compressed: List[CompressedFile] = field(default_factory=list)
    errors: List[CompressionError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors and self.attempted == self.discovered


# -----------------------------------------------------------------------------
# BUILD MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class BuildTask:
    """
    One unit of work scheduled by the build engine.

    Attributes:
        name: Logical output name without suffix (e.g. "u", "lib/layout/grid").
        source_path: Absolute path of the source stylesheet.
        bundled: True to resolve imports; False to render the file as-is.
    """
    name: str
    source_path: str
    bundled: bool = True


@dataclass(frozen=True)
class ArtifactRecord:
    """
    One rendered text artifact.

    Attributes:
        name: Logical entry name (e.g. "u", "lib/layout").
        variant: "raw", "clean" or "minified".
        rel_path: Path relative to the output directory.
        size: Size in bytes of the UTF-8 encoded content.
    """
    name: str
    variant: str
    rel_path: str
    size: int


@dataclass(frozen=True)
class BuildResult:
    """
    Unified result object of a complete build execution.

    Attributes:
        ok: Flag indicating success or failure.
        error: Descriptive message in case of failure.
        project_root: Normalized project directory.
        entry_path: Absolute path of the main entry file.
        output_dir: Directory holding the promoted artifacts.
        source_ref: Git reference used as source snapshot (empty for local files).
        prefix_mode: Normalized prefixing category, empty when disabled.
        artifacts: Rendered artifacts written by the build.
        diagnostics: Recoverable bundling failures (missing files, cycles).
        compression: Compression pass outcome, when compression ran.
        summary: Execution statistics for reporting.
    """
    ok: bool
    error: str

    project_root: str
    entry_path: str
    output_dir: str
    source_ref: str = ""
    prefix_mode: str = ""

    artifacts: List[ArtifactRecord] = field(default_factory=list)
    diagnostics: List[BundleDiagnostic] = field(default_factory=list)
    compression: Optional[CompressionReport] = None

    summary: Dict[str, Any] = field(default_factory=dict)


# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_error_result(
        error: str,
        cfg: Dict[str, Any],
        project_root: str = "",
        entry_path: str = "",
        output_dir: str = "",
        diagnostics: Optional[List[BundleDiagnostic]] = None,
        summary_extra: Optional[Dict[str, Any]] = None
) -> BuildResult:
    """
    Create a failed build result instance.

    Args:
        error: Detailed error description.
        cfg: The configuration used during the failed run.
        project_root: The normalized project directory.
        entry_path: Absolute path of the main entry.
        output_dir: Final output directory (left untouched by the failure).
        diagnostics: Recoverable failures collected before the abort.
        summary_extra: Additional metadata for the summary payload.

    Returns:
        BuildResult: An immutable error result object.
    """
    return BuildResult(
        ok=False,
        error=error,
        project_root=project_root,
        entry_path=entry_path,
        output_dir=output_dir,
        source_ref=cfg.get("source_ref", ""),
        prefix_mode=cfg.get("prefix_mode", ""),
        diagnostics=diagnostics or [],
        summary=summary_extra or {},
    )


def create_success_result(
        cfg: Dict[str, Any],
        project_root: str,
        entry_path: str,
        output_dir: str,
        artifacts: List[ArtifactRecord],
        diagnostics: List[BundleDiagnostic],
        compression: Optional[CompressionReport] = None,
        summary_extra: Optional[Dict[str, Any]] = None
) -> BuildResult:
    """
    Create a successful build result instance.

    Args:
        cfg: Final configuration used during execution.
        project_root: Normalized project directory.
        entry_path: Absolute path of the main entry.
        output_dir: Directory holding the promoted artifacts.
        artifacts: Rendered artifacts.
        diagnostics: Recoverable bundling failures.
        compression: Compression pass outcome.
        summary_extra: Final execution metrics.

    Returns:
        BuildResult: An immutable success result object.
    """
    return BuildResult(
        ok=True,
        error="",
        project_root=project_root,
        entry_path=entry_path,
        output_dir=output_dir,
        source_ref=cfg.get("source_ref", ""),
        prefix_mode=cfg.get("prefix_mode", ""),
        artifacts=artifacts,
        diagnostics=diagnostics,
        compression=compression,
        summary=summary_extra or {},
    )
