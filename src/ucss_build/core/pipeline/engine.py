from __future__ import annotations

"""
Core orchestration pipeline.

This module coordinates the entire build workflow:
1. Validates configuration and paths.
2. Selects the source reader (working tree or git snapshot).
3. Prepares a staging directory beside the output directory.
4. Builds the main entry and the library modules in parallel threads.
5. Verifies the staged artifacts.
6. Promotes staging to the final output directory.
7. Compresses the promoted artifacts.

A fatal I/O fault at any point before promotion discards the staging
directory, so the previous output stays untouched.
"""

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Tuple

from ucss_build.core.pipeline.bundler import bundle, canonical_path
from ucss_build.core.pipeline.reader import SourceReader, create_reader
from ucss_build.core.pipeline.validator import validate_config
from ucss_build.core.pipeline.writer import write_variants
from ucss_build.core.processing.prefixer import build_prefix_rule, rewrite_with_rule
from ucss_build.core.processing.renderer import render_variants
from ucss_build.core.services.compressor import compress_tree
from ucss_build.domain.build_models import (
    ArtifactRecord,
    BuildResult,
    BuildTask,
    create_error_result,
    create_success_result,
)
from ucss_build.domain.constants import (
    MISSING_PLACEHOLDER,
    SOURCE_SUFFIX,
    VARIANT_MINIFIED,
    VARIANT_RAW,
)
from ucss_build.domain.source_models import BundleDiagnostic, PrefixRule
from ucss_build.infra.fs import (
    create_staging_dir,
    discard_dir,
    display_path,
    normalize_path,
    promote_dir,
    resolve_under,
)

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def run_build(config: Optional[Dict[str, Any]]) -> BuildResult:
    """
    Execute the full build pipeline.

    Args:
        config: The configuration dictionary (raw or partial).

    Returns:
        BuildResult: Object containing status, artifacts, diagnostics and summary.
    """
    logger.info("Build started.")
    started = time.perf_counter()

    # -------------------------------------------------------------------------
    # 1) Config & Path Normalization
    # -------------------------------------------------------------------------
    cfg, warnings = validate_config(config, strict=False)
    for warning in warnings:
        logger.warning(f"Configuration Warning: {warning}")

    project_root = normalize_path(cfg["project_root"], os.getcwd())
    if not os.path.isdir(project_root):
        msg = f"Invalid project directory: {project_root}"
        logger.error(msg)
        return create_error_result(msg, cfg, project_root)

    module_root = resolve_under(project_root, cfg["module_root"])
    entry_path = resolve_under(project_root, cfg["entry_path"])
    lib_dir = resolve_under(project_root, cfg["lib_dir"])
    output_dir = resolve_under(project_root, cfg["output_dir"])

    if _contains(output_dir, project_root):
        msg = f"Output directory must not contain the project: {output_dir}"
        logger.error(msg)
        return create_error_result(msg, cfg, project_root, entry_path, output_dir)

    rule: Optional[PrefixRule] = None
    if cfg["prefix_mode"]:
        try:
            rule = build_prefix_rule(
                cfg["prefix_mode"], cfg["prefix_string"],
                cfg["class_exclusions"], cfg["variable_exclusions"]
            )
        except ValueError as e:
            logger.error(f"Invalid prefix settings: {e}")
            return create_error_result(str(e), cfg, project_root, entry_path, output_dir)

    reader = create_reader(project_root, cfg["source_ref"])
    logger.info(f"Targeting: {output_dir}")
    logger.info(f"Reading source from: {reader.describe()}")

    # -------------------------------------------------------------------------
    # 2) Task Planning & Staging
    # -------------------------------------------------------------------------
    diagnostics: List[BundleDiagnostic] = []
    artifacts: List[ArtifactRecord] = []
    staging_dir = ""

    try:
        tasks = plan_tasks(reader, entry_path, lib_dir, bool(cfg["build_modules"]))
        staging_dir = create_staging_dir(output_dir)
        logger.debug(f"Using staging directory: {staging_dir}")

        # ---------------------------------------------------------------------
        # 3) Execute Builds in Parallel
        # ---------------------------------------------------------------------
        width = max(1, min(len(tasks), os.cpu_count() or 1))
        with ThreadPoolExecutor(max_workers=width, thread_name_prefix="BuildWorker") as executor:
            futures = [
                executor.submit(
                    build_task, task, staging_dir,
                    reader=reader,
                    module_root=module_root,
                    root_marker=cfg["root_marker"],
                    display_root=project_root,
                    rule=rule,
                )
                for task in tasks
            ]
            # Collected in submission order so the result is deterministic
            for future in futures:
                records, task_diagnostics = future.result()
                artifacts.extend(records)
                diagnostics.extend(task_diagnostics)

        # ---------------------------------------------------------------------
        # 4) Verification
        # ---------------------------------------------------------------------
        problems = verify_outputs(staging_dir, tasks, artifacts, cfg["verify_min_sizes"])
        if problems:
            for problem in problems:
                logger.error(f"Verification failed: {problem}")
            discard_dir(staging_dir)
            return create_error_result(
                f"Output verification failed: {'; '.join(problems)}",
                cfg, project_root, entry_path, output_dir, diagnostics,
                summary_extra={"problems": problems},
            )

        # ---------------------------------------------------------------------
        # 5) Promotion
        # ---------------------------------------------------------------------
        promote_dir(staging_dir, output_dir, replace=bool(cfg["clean_output"]))
        staging_dir = ""

    except OSError as e:
        msg = f"Fatal I/O error: {e}"
        logger.critical(msg)
        discard_dir(staging_dir)
        return create_error_result(msg, cfg, project_root, entry_path, output_dir, diagnostics)

    # -------------------------------------------------------------------------
    # 6) Compression
    # -------------------------------------------------------------------------
    compression = None
    if cfg["compress"]:
        compression = compress_tree(output_dir, cfg["compression_extensions"], cfg["compression_workers"])

    summary = {
        "reader": reader.describe(),
        "entries": len(tasks),
        "artifacts": len(artifacts),
        "missing": sum(1 for d in diagnostics if d.kind == "missing"),
        "cycles": sum(1 for d in diagnostics if d.kind == "cycle"),
        "compressed": len(compression.compressed) if compression else 0,
        "compression_errors": len(compression.errors) if compression else 0,
        "warnings": warnings,
        "elapsed_seconds": round(time.perf_counter() - started, 3),
    }

    logger.info("Build completed successfully.")
    return create_success_result(
        cfg, project_root, entry_path, output_dir,
        artifacts, diagnostics, compression, summary
    )


def compress_only(config: Optional[Dict[str, Any]]) -> BuildResult:
    """
    Run the compression pass alone over an existing output directory.

    Args:
        config: The configuration dictionary; 'output_dir' names the tree.

    Returns:
        BuildResult: Result carrying the compression report.
    """
    cfg, warnings = validate_config(config, strict=False)
    for warning in warnings:
        logger.warning(f"Configuration Warning: {warning}")

    project_root = normalize_path(cfg["project_root"], os.getcwd())
    output_dir = resolve_under(project_root, cfg["output_dir"])

    if not os.path.isdir(output_dir):
        msg = f"Directory not found: {output_dir}"
        logger.error(msg)
        return create_error_result(msg, cfg, project_root, output_dir=output_dir)

    report = compress_tree(output_dir, cfg["compression_extensions"], cfg["compression_workers"])
    return create_success_result(
        cfg, project_root, "", output_dir, [], [], report,
        summary_extra={
            "compressed": len(report.compressed),
            "compression_errors": len(report.errors),
            "warnings": warnings,
        }
    )


def plan_tasks(
        reader: SourceReader,
        entry_path: str,
        lib_dir: str,
        build_modules: bool = True,
) -> List[BuildTask]:
    """
    List the entries to build.

    The main entry always comes first. With build_modules, every top-level
    stylesheet of lib_dir is bundled under "<lib>/<name>", and the leaves of
    the matching sub-directory are rendered under "<lib>/<name>/<leaf>".

    Args:
        reader: Source reader used to list directories.
        entry_path: Absolute path of the main entry.
        lib_dir: Absolute path of the module library directory.
        build_modules: Whether library modules are built.

    Returns:
        List[BuildTask]: Tasks in deterministic order.
    """
    tasks = [BuildTask(name=_stem(entry_path), source_path=entry_path, bundled=True)]
    if not build_modules:
        return tasks

    lib_name = os.path.basename(os.path.normpath(lib_dir))
    for module_path in reader.list_files(lib_dir, SOURCE_SUFFIX):
        module = _stem(module_path)
        tasks.append(BuildTask(name=f"{lib_name}/{module}", source_path=module_path, bundled=True))

        for leaf_path in reader.list_files(os.path.join(lib_dir, module), SOURCE_SUFFIX):
            tasks.append(BuildTask(
                name=f"{lib_name}/{module}/{_stem(leaf_path)}",
                source_path=leaf_path,
                bundled=False,
            ))

    logger.debug(f"Planned {len(tasks)} build tasks.")
    return tasks


def build_task(
        task: BuildTask,
        output_dir: str,
        *,
        reader: SourceReader,
        module_root: str,
        root_marker: str,
        display_root: str,
        rule: Optional[PrefixRule] = None,
) -> Tuple[List[ArtifactRecord], List[BundleDiagnostic]]:
    """
    Bundle (or read), prefix, render and write one entry.

    Raises:
        OSError: On fatal read or write faults.
    """
    diagnostics: List[BundleDiagnostic] = []

    if task.bundled:
        text = bundle(
            task.source_path,
            module_root=module_root,
            root_marker=root_marker,
            reader=reader,
            display_root=display_root,
            diagnostics=diagnostics,
        )
    else:
        text = reader.read(task.source_path)
        if text is None:
            name = display_path(task.source_path, display_root)
            logger.warning(f"Leaf not found: {name}")
            diagnostics.append(BundleDiagnostic(
                kind="missing", specifier=name, importer="", target=canonical_path(task.source_path)
            ))
            text = MISSING_PLACEHOLDER.format(name=name)

    if rule:
        text = rewrite_with_rule(text, rule)

    records = write_variants(output_dir, task.name, render_variants(text))
    logger.info(f"  - Built: {task.name}{SOURCE_SUFFIX}")
    return records, diagnostics


def verify_outputs(
        output_dir: str,
        tasks: List[BuildTask],
        artifacts: List[ArtifactRecord],
        min_sizes: Dict[str, int],
) -> List[str]:
    """
    Check the written artifacts before promotion.

    Args:
        output_dir: Directory holding the artifacts (staging).
        tasks: Built tasks.
        artifacts: Records returned by the writer.
        min_sizes: Relative artifact path -> minimum size in bytes.

    Returns:
        List[str]: Human-readable problems; empty when everything holds.
    """
    problems: List[str] = []
    bundled = {t.name for t in tasks if t.bundled}

    for record in artifacts:
        if record.name not in bundled or record.variant not in (VARIANT_RAW, VARIANT_MINIFIED):
            continue
        size = _size_on_disk(output_dir, record.rel_path)
        if size is None:
            problems.append(f"{record.rel_path} is missing")
        elif size == 0:
            problems.append(f"{record.rel_path} is empty")

    for rel_path, minimum in sorted(min_sizes.items()):
        size = _size_on_disk(output_dir, rel_path)
        if size is None:
            problems.append(f"{rel_path} is missing")
        elif size < minimum:
            problems.append(f"{rel_path} is too small ({size} < {minimum} bytes)")

    return problems


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _stem(path: str) -> str:
    return os.path.splitext(os.path.basename(path))[0]


def _size_on_disk(root: str, rel_path: str) -> Optional[int]:
    path = os.path.join(root, *rel_path.split("/"))
    if not os.path.isfile(path):
        return None
    return os.path.getsize(path)


def _contains(parent: str, child: str) -> bool:
    """True if child is parent itself or lies below it."""
    parent_n = os.path.normcase(parent)
    child_n = os.path.normcase(child)
    return child_n == parent_n or child_n.startswith(parent_n.rstrip(os.sep) + os.sep)
