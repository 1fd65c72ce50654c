from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: initialization of logging, loading and
merging of configuration sources (defaults, project file and CLI
overrides), build execution, and result rendering.
"""

import argparse
import json
import os
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from ucss_build.core.pipeline.engine import compress_only, run_build
from ucss_build.core.pipeline.validator import validate_config
from ucss_build.domain.build_models import BuildResult
from ucss_build.domain.config import get_default_config, load_config
from ucss_build.infra.fs import normalize_path, resolve_under
from ucss_build.infra.logging import LoggingConfig, configure_logging, get_logger, shutdown_logging
from ucss_build.interface.cli import args as cli_args

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success, 1 build failure, 2 invalid input).
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (console on stderr, optional build log)
    log_level = "DEBUG" if args.debug else "INFO"
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=args.log_file))

    try:
        return _execute(args)
    finally:
        # Drain queued records before the exit code is returned
        shutdown_logging()


def _execute(args: argparse.Namespace) -> int:
    """Run the configuration, build and rendering phases for parsed arguments."""
    logger.debug("CLI execution initiated. Resolving configuration hierarchy...")

    # 3. Resolve base configuration (defaults vs project file)
    if args.use_defaults:
        base_conf = get_default_config()
        if args.project_root:
            base_conf["project_root"] = args.project_root
    else:
        base_conf = load_config(project_root=args.project_root, config_path=args.config_path)

    # 4. Map and merge command-line overrides
    overrides = cli_args.args_to_overrides(args)
    raw_conf = _merge_config(base_conf, overrides)

    # 5. Schema validation and normalization
    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return 0

    # 6. Pre-flight input verification
    project_root = normalize_path(clean_conf["project_root"], os.getcwd())
    if not os.path.isdir(project_root):
        msg = f"Project directory does not exist: {project_root}"
        logger.error(msg)
        print(f"ERROR: {msg}", file=sys.stderr)
        return 2

    if args.compress_only:
        target = resolve_under(project_root, clean_conf["output_dir"])
        if not os.path.isdir(target):
            msg = f"Directory not found: {target}"
            logger.error(msg)
            print(f"ERROR: {msg}", file=sys.stderr)
            return 2

    # 7. Build execution phase
    try:
        if args.compress_only:
            result = compress_only(clean_conf)
        else:
            result = run_build(clean_conf)
    except KeyboardInterrupt:
        logger.warning("Build interrupted by user.")
        print("Interrupted.", file=sys.stderr)
        return 130

    # 8. Output rendering phase
    if args.json_output:
        print(json.dumps(asdict(result), ensure_ascii=False, indent=2))
    else:
        _print_human_summary(result)

    return 0 if result.ok else 1

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Perform a shallow merge of override values into the base configuration.

    Only keys known to the default configuration are merged, and None means
    "not given on the command line".

    Args:
        base: The primary configuration dictionary.
        overrides: New values to inject.

    Returns:
        Dict[str, Any]: The merged configuration state.
    """
    out = dict(base)
    known = get_default_config().keys()
    for k, v in overrides.items():
        if k in known and v is not None:
            out[k] = v
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_human_summary(result: BuildResult) -> None:
    """
    Format and print the build result to the standard output.

    Args:
        result: The build result to render.
    """
    if not result.ok:
        print(f"ERROR: {result.error}", file=sys.stderr)
        return

    print("Build completed successfully." if result.entry_path else "Compression completed.")
    print(f"Output directory: {result.output_dir}")

    if result.prefix_mode:
        print(f"Prefix mode: {result.prefix_mode}")

    if result.artifacts:
        print(f"Artifacts written: {len(result.artifacts)}")

    for diag in result.diagnostics:
        label = "Missing import" if diag.kind == "missing" else "Import cycle"
        print(f"  ! {label}: {diag.specifier}")

    report = result.compression
    if report is not None:
        print(
            f"Compressed: {len(report.compressed)}/{report.discovered} files "
            f"({report.workers} workers)"
        )
        for err in report.errors:
            print(f"  ! {err.rel_path} ({err.algorithm}): {err.error}")

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
