from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides path normalization, staging directory management and atomic
promotion of build outputs. Acts as an abstraction over the 'os', 'shutil'
and 'tempfile' modules so the engine never leaves a half-written output
directory behind.
"""

import logging
import os
import shutil
import tempfile
from typing import Optional

logger = logging.getLogger(__name__)

STAGING_PREFIX = ".ucss-staging-"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.normpath(os.path.abspath(p))


def resolve_under(base_dir: str, path: str) -> str:
    """
    Resolve a configured path relative to a base directory.

    Absolute inputs are kept as-is (normalized).
    """
    p = os.path.expandvars(os.path.expanduser(path.strip()))
    if not os.path.isabs(p):
        p = os.path.join(base_dir, p)
    return os.path.normpath(os.path.abspath(p))


def display_path(path: str, base_dir: str) -> str:
    """
    Render a path relative to base_dir with forward slashes for placeholders and logs.

    Paths on another drive (Windows) fall back to the absolute form.
    """
    try:
        rel = os.path.relpath(path, base_dir)
    except ValueError:
        rel = path
    return rel.replace("\\", "/")

# -----------------------------------------------------------------------------
# DIRECTORY LIFECYCLE API
# -----------------------------------------------------------------------------

def create_staging_dir(output_dir: str) -> str:
    """
    Create an empty staging directory beside the final output directory.

    Staging on the same parent keeps the final promotion a rename on the
    same filesystem.

    Raises:
        OSError: If the parent cannot be created or written.
    """
    parent = os.path.dirname(os.path.abspath(output_dir))
    os.makedirs(parent, exist_ok=True)
    return tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=parent)


def discard_dir(path: str) -> None:
    """Remove a directory tree, logging instead of raising on failure."""
    if not path or not os.path.exists(path):
        return
    try:
        shutil.rmtree(path)
    except OSError as e:
        logger.error(f"Failed to remove directory '{path}': {e}")


def promote_dir(staging_dir: str, output_dir: str, replace: bool = True) -> None:
    """
    Move a completed staging directory to its final location.

    With replace=True the previous output directory is removed first;
    otherwise the staged files are merged over it.

    Raises:
        OSError: If the move fails.
    """
    if os.path.exists(output_dir):
        if replace:
            shutil.rmtree(output_dir)
        else:
            shutil.copytree(staging_dir, output_dir, dirs_exist_ok=True)
            shutil.rmtree(staging_dir)
            return

    os.replace(staging_dir, output_dir)
