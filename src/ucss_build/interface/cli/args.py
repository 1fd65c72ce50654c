from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema, including help messages,
argument types, and defaults. Provides logic to translate raw argparse
namespaces into domain-compatible configuration overrides.
"""

import argparse
from typing import Any, Dict, List, Optional

from ucss_build.domain.constants import PREFIX_MODE_ALIASES

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the ucss-build CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="ucss-build",
        description="Bundle, prefix, minify and compress a modular CSS source tree.",
    )

    # --- Path Management ---
    p.add_argument(
        "output_dir",
        nargs="?",
        default=None,
        help="Output directory, relative to the project root (default: dist/latest).",
    )
    p.add_argument(
        "-C", "--project",
        dest="project_root",
        default=None,
        help="Project root directory (default: current directory).",
    )
    p.add_argument(
        "--entry",
        dest="entry_path",
        default=None,
        help="Main entry stylesheet (default: src/u.css).",
    )
    p.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path of the JSON configuration file (default: <project>/ucss-build.json).",
    )

    # --- Source Selection ---
    p.add_argument(
        "--source",
        dest="source_ref",
        default=None,
        help="Read sources from a git reference instead of the working tree.",
    )
    p.add_argument(
        "--no-modules",
        action="store_true",
        help="Build the main entry only, skipping library modules.",
    )

    # --- Namespace Isolation ---
    p.add_argument(
        "--prefix",
        dest="prefix_mode",
        choices=sorted(PREFIX_MODE_ALIASES),
        default=None,
        help="Prefix classes (c), custom properties (v) or both (p).",
    )
    p.add_argument(
        "--prefix-string",
        dest="prefix_string",
        default=None,
        help="Namespace prefix (default: ucss).",
    )
    p.add_argument(
        "--exclude-classes",
        dest="class_exclusions",
        default=None,
        help="Comma-separated class names left unprefixed.",
    )
    p.add_argument(
        "--exclude-vars",
        dest="variable_exclusions",
        default=None,
        help="Comma-separated custom property names left unprefixed.",
    )

    # --- Output & Compression ---
    p.add_argument(
        "--keep-output",
        action="store_true",
        help="Merge into the existing output directory instead of replacing it.",
    )
    p.add_argument(
        "--no-compress",
        action="store_true",
        help="Skip the gzip/brotli side-car generation.",
    )
    p.add_argument(
        "--compress-only",
        dest="compress_only",
        metavar="DIR",
        default=None,
        help="Only compress the files of an existing directory.",
    )
    p.add_argument(
        "--ext",
        dest="compression_extensions",
        default=None,
        help="Comma-separated extensions eligible for compression.",
    )
    p.add_argument(
        "--workers",
        dest="compression_workers",
        type=int,
        default=None,
        help="Compression pool width (default: CPU count).",
    )

    # --- Configuration and Diagnostic Tools ---
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore the configuration file.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration and exit.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write the build log to this file.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )

    # --- Format Selection ---
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the build result as JSON.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a domain configuration dictionary.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {}

    overrides["project_root"] = args.project_root
    overrides["entry_path"] = args.entry_path
    overrides["output_dir"] = args.compress_only or args.output_dir
    overrides["source_ref"] = args.source_ref
    overrides["prefix_mode"] = args.prefix_mode
    overrides["prefix_string"] = args.prefix_string
    overrides["compression_workers"] = args.compression_workers

    # Scope overrides
    if args.no_modules:
        overrides["build_modules"] = False
    if args.keep_output:
        overrides["clean_output"] = False
    if args.no_compress:
        overrides["compress"] = False

    # List overrides
    if args.class_exclusions is not None:
        overrides["class_exclusions"] = _split_csv(args.class_exclusions)
    if args.variable_exclusions is not None:
        overrides["variable_exclusions"] = _split_csv(args.variable_exclusions)
    if args.compression_extensions:
        overrides["compression_extensions"] = _split_csv(args.compression_extensions)

    return overrides

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    """
    Convert a comma-separated string into a list of sanitized strings.
    """
    if value is None:
        return None
    parts = [x.strip() for x in value.split(",")]
    return [x for x in parts if x]
