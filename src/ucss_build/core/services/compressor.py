from __future__ import annotations

"""
Static Asset Compression Service.

Produces pre-compressed side-cars for every artifact of an output tree:
<file>.gz (gzip, level 9) and <file>.br (brotli, quality 11, text mode).
Originals are never modified, so a web server can pick the best variant
from the Accept-Encoding header and fall back to the raw file.

Concurrency follows a bounded worker-pool pattern: a fixed number of
workers (one per CPU by default) repeatedly claim the next job from a
shared index. Each worker compresses one file with both algorithms before
claiming another, which caps the number of simultaneously open files to
a small multiple of the pool width regardless of the tree size.

A failure of either algorithm on one file is logged and recorded; it never
stops the other files. The pass is complete once every discovered file has
been attempted exactly once.
"""

import gzip
import logging
import os
import shutil
import threading
import zlib
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Tuple

import brotli

from ucss_build.core.services.scanner import discover_compression_jobs
from ucss_build.domain.build_models import CompressedFile, CompressionError, CompressionReport
from ucss_build.domain.constants import BROTLI_QUALITY, BROTLI_SUFFIX, GZIP_LEVEL, GZIP_SUFFIX
from ucss_build.infra.fs import display_path

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


# ==============================================================================
# PUBLIC API
# ==============================================================================

def compress_tree(
        root_dir: str,
        extensions: Optional[Iterable[str]] = None,
        workers: Optional[int] = None,
) -> CompressionReport:
    """
    Compress every allowlisted file under root_dir.

    Args:
        root_dir: Directory of already-written artifacts.
        extensions: Allowlisted extensions (defaults to the built-in list).
        workers: Pool width; None or 0 means the host CPU count.

    Returns:
        CompressionReport: Discovery and per-file outcome.
    """
    root_abs = os.path.abspath(root_dir)
    logger.info(f"Compressing files in: {root_abs}")

    jobs = discover_compression_jobs(root_abs, extensions)
    width = min(_pool_width(workers), len(jobs))
    report = CompressionReport(root_dir=root_abs, discovered=len(jobs), workers=width)

    if not jobs:
        logger.info("No files to compress.")
        return report

    work = _WorkIndex(jobs)
    report_lock = threading.Lock()

    with ThreadPoolExecutor(max_workers=width, thread_name_prefix="CompressionWorker") as executor:
        futures = [
            executor.submit(_worker_loop, work, root_abs, report, report_lock)
            for _ in range(width)
        ]
        for future in futures:
            future.result()

    logger.info(
        f"Compression complete. Files: {report.attempted}/{report.discovered}, "
        f"failures: {len(report.errors)}."
    )
    return report


def compress_file(file_path: str) -> Tuple[Optional[CompressedFile], List[CompressionError]]:
    """
    Write the gzip and brotli side-cars of one file.

    Both algorithms are attempted independently. A failed side-car is
    removed so no truncated file is left next to the original.

    Args:
        file_path: Absolute path of the file to compress.

    Returns:
        Tuple[Optional[CompressedFile], List[CompressionError]]:
            Size record when both side-cars were written, and the failures.
    """
    name = os.path.basename(file_path)
    errors: List[CompressionError] = []

    for algorithm, suffix, writer in (
            ("gzip", GZIP_SUFFIX, _write_gzip),
            ("brotli", BROTLI_SUFFIX, _write_brotli),
    ):
        target = file_path + suffix
        try:
            writer(file_path, target)
        except (OSError, zlib.error, brotli.error) as e:
            errors.append(CompressionError(rel_path=name, algorithm=algorithm, error=str(e)))
            _remove_partial(target)

    if errors:
        return None, errors

    return CompressedFile(
        rel_path=name,
        original_size=os.path.getsize(file_path),
        gzip_size=os.path.getsize(file_path + GZIP_SUFFIX),
        brotli_size=os.path.getsize(file_path + BROTLI_SUFFIX),
    ), errors


# ==============================================================================
# WORK DISTRIBUTION
# ==============================================================================

class _WorkIndex:
    """Shared job list whose next index is claimed under a lock."""

    def __init__(self, jobs: List[str]) -> None:
        self._jobs = jobs
        self._next = 0
        self._lock = threading.Lock()

    def claim(self) -> Optional[str]:
        with self._lock:
            if self._next >= len(self._jobs):
                return None
            job = self._jobs[self._next]
            self._next += 1
            return job


def _worker_loop(
        work: _WorkIndex,
        root_dir: str,
        report: CompressionReport,
        report_lock: threading.Lock,
) -> None:
    """Claim and compress jobs until the shared index is exhausted."""
    while True:
        job = work.claim()
        if job is None:
            return

        rel_path = display_path(job, root_dir)
        result, errors = compress_file(job)

        for err in errors:
            logger.error(f"Error compressing {rel_path} ({err.algorithm}): {err.error}")

        with report_lock:
            report.attempted += 1
            report.errors.extend(
                CompressionError(rel_path=rel_path, algorithm=e.algorithm, error=e.error) for e in errors
            )
            if result:
                report.compressed.append(CompressedFile(
                    rel_path=rel_path,
                    original_size=result.original_size,
                    gzip_size=result.gzip_size,
                    brotli_size=result.brotli_size,
                ))

        if result:
            logger.info(
                f"  {rel_path}: {result.original_size}b -> gz:{result.gzip_size}b br:{result.brotli_size}b"
            )


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _pool_width(workers: Optional[int]) -> int:
    if workers and workers > 0:
        return workers
    return os.cpu_count() or 1


def _write_gzip(source: str, target: str) -> None:
    # mtime=0 keeps the side-car byte-identical across rebuilds
    with open(source, "rb") as f_in, open(target, "wb") as raw_out:
        with gzip.GzipFile(
                filename=os.path.basename(source),
                mode="wb",
                compresslevel=GZIP_LEVEL,
                fileobj=raw_out,
                mtime=0,
        ) as f_out:
            shutil.copyfileobj(f_in, f_out, _CHUNK_SIZE)


def _write_brotli(source: str, target: str) -> None:
    compressor = brotli.Compressor(mode=brotli.MODE_TEXT, quality=BROTLI_QUALITY)
    with open(source, "rb") as f_in, open(target, "wb") as f_out:
        for chunk in iter(lambda: f_in.read(_CHUNK_SIZE), b""):
            f_out.write(compressor.process(chunk))
        f_out.write(compressor.finish())


def _remove_partial(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove partial side-car {path}: {e}")
