from __future__ import annotations

"""
Source Reading Component.

Provides the two sources a build can read from: the working tree on the
local filesystem, or a committed snapshot addressed by a git reference.
Both report a missing file by returning None so the bundler can degrade
it to an inline placeholder. Any other I/O fault propagates.
"""

import logging
import os
import subprocess
from typing import List, Optional, Protocol

from ucss_build.infra.fs import display_path

logger = logging.getLogger(__name__)


class SourceReader(Protocol):
    """Interface expected by the bundler and the build engine."""

    def read(self, path: str) -> Optional[str]:
        ...

    def list_files(self, directory: str, suffix: str) -> List[str]:
        ...

    def describe(self) -> str:
        ...


# -----------------------------------------------------------------------------
# LOCAL FILESYSTEM
# -----------------------------------------------------------------------------

class FileSystemReader:
    """
    Read sources from the working tree.

    Undecodable bytes are replaced rather than raised, so a stray binary
    sequence never aborts a build.
    """

    def read(self, path: str) -> Optional[str]:
        """
        Read a UTF-8 text file.

        Args:
            path: Absolute file path.

        Returns:
            Optional[str]: File content, or None if the file does not exist.

        Raises:
            OSError: For faults other than a missing file (e.g. permissions).
        """
        try:
            with open(path, "r", encoding="utf-8", errors="replace", newline="") as f:
                return f.read()
        except (FileNotFoundError, NotADirectoryError, IsADirectoryError):
            return None

    def list_files(self, directory: str, suffix: str) -> List[str]:
        """List the direct children of a directory ending with suffix, sorted."""
        if not os.path.isdir(directory):
            return []
        return sorted(
            os.path.join(directory, name)
            for name in os.listdir(directory)
            if name.endswith(suffix) and os.path.isfile(os.path.join(directory, name))
        )

    def describe(self) -> str:
        return "Local filesystem"


# -----------------------------------------------------------------------------
# GIT SNAPSHOT
# -----------------------------------------------------------------------------

class GitSnapshotReader:
    """
    Read sources as they exist at a git reference (branch, tag or commit).

    Args:
        repo_root: Working tree root; paths are made relative to it.
        ref: Git reference to read from.
        git_executable: Name or path of the git binary.
    """

    def __init__(self, repo_root: str, ref: str, git_executable: str = "git") -> None:
        self.repo_root = os.path.abspath(repo_root)
        self.ref = ref
        self.git_executable = git_executable

    def read(self, path: str) -> Optional[str]:
        """
        Read a file through 'git show <ref>:<path>'.

        Returns:
            Optional[str]: File content, or None if the object does not exist at ref.

        Raises:
            OSError: If the git executable cannot be started.
        """
        result = self._run_git(["show", f"{self.ref}:{self._object_path(path)}"])
        if result.returncode != 0:
            logger.debug(f"git show failed for {self._object_path(path)}@{self.ref}: {result.stderr.strip()}")
            return None
        return result.stdout

    def list_files(self, directory: str, suffix: str) -> List[str]:
        """List the direct children of a directory at ref ending with suffix, sorted."""
        tree = self._object_path(directory).rstrip("/") + "/"
        result = self._run_git(["ls-tree", "--name-only", f"{self.ref}:{tree}"])
        if result.returncode != 0:
            return []
        names = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        return sorted(os.path.join(directory, n) for n in names if n.endswith(suffix))

    def describe(self) -> str:
        return f"git snapshot '{self.ref}'"

    def _object_path(self, path: str) -> str:
        return display_path(os.path.abspath(path), self.repo_root)

    def _run_git(self, args: List[str]) -> subprocess.CompletedProcess:
        return subprocess.run(
            [self.git_executable, *args],
            cwd=self.repo_root,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )


def create_reader(project_root: str, source_ref: str = "") -> SourceReader:
    """
    Select the reader matching the configured source.

    Args:
        project_root: Absolute project root.
        source_ref: Git reference; empty means the working tree.

    Returns:
        SourceReader: The reader instance.
    """
    if source_ref:
        return GitSnapshotReader(project_root, source_ref)
    return FileSystemReader()
