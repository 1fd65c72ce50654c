from __future__ import annotations

"""
Compression Job Discovery Service.

Walks an output directory once and lists every artifact eligible for
compression. The job list is fixed at discovery time: files appearing
during the compression pass (the side-cars themselves) are never picked up.
"""

import logging
import os
from typing import Iterable, List, Optional

from ucss_build.domain.constants import DEFAULT_COMPRESSION_EXTENSIONS
from ucss_build.infra.fs import display_path

logger = logging.getLogger(__name__)


# ==============================================================================
# PUBLIC API (DISCOVERY SERVICES)
# ==============================================================================

def discover_compression_jobs(
        root_dir: str,
        extensions: Optional[Iterable[str]] = None,
) -> List[str]:
    """
    Collect the files under root_dir whose extension is allowlisted.

    Unreadable sub-directories are logged and skipped so one bad folder does
    not hide the rest of the tree.

    Args:
        root_dir: Directory to scan recursively.
        extensions: Allowlisted extensions (leading dot, case-insensitive).

    Returns:
        List[str]: Absolute file paths, in deterministic walk order.
    """
    allowed = normalize_extensions(extensions if extensions is not None else DEFAULT_COMPRESSION_EXTENSIONS)
    root_abs = os.path.abspath(root_dir)
    jobs: List[str] = []

    def _on_error(err: OSError) -> None:
        logger.error(f"Error reading directory {err.filename}: {err.strerror}")

    for root, dirs, files in os.walk(root_abs, onerror=_on_error):
        dirs.sort()
        for file_name in sorted(files):
            _, ext = os.path.splitext(file_name)
            if ext.lower() in allowed:
                jobs.append(os.path.join(root, file_name))

    logger.debug(f"Discovered {len(jobs)} compression jobs in {display_path(root_abs, os.getcwd())}")
    return jobs


def normalize_extensions(extensions: Iterable[str]) -> List[str]:
    """Lower-case extensions and make sure each one starts with a dot."""
    out: List[str] = []
    for ext in extensions:
        e = ext.strip().lower()
        if not e:
            continue
        out.append(e if e.startswith(".") else f".{e}")
    return out
