from __future__ import annotations

"""
Configuration Domain Management.

Provides the default build configuration and loads project-level overrides
from an optional JSON file stored next to the sources. Persistence is
read-only: the build never writes its own configuration back.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from ucss_build.domain.constants import (
    CONFIG_FILE_NAME,
    CURRENT_CONFIG_VERSION,
    DEFAULT_CLASS_EXCLUSIONS,
    DEFAULT_COMPRESSION_EXTENSIONS,
    DEFAULT_ENTRY_PATH,
    DEFAULT_LIB_DIR,
    DEFAULT_MODULE_ROOT,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PREFIX_STRING,
    DEFAULT_ROOT_MARKER,
    DEFAULT_VARIABLE_EXCLUSIONS,
)

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default build configuration.
    This dictionary drives the behavior of the build engine.

    Relative paths are resolved against 'project_root'.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Source Layout
        "project_root": os.getcwd(),
        "entry_path": DEFAULT_ENTRY_PATH,
        "module_root": DEFAULT_MODULE_ROOT,
        "root_marker": DEFAULT_ROOT_MARKER,
        "lib_dir": DEFAULT_LIB_DIR,
        "build_modules": True,

        # Source Snapshot
        "source_ref": "",

        # Output
        "output_dir": DEFAULT_OUTPUT_DIR,
        "clean_output": True,

        # Namespace Isolation
        "prefix_mode": "",
        "prefix_string": DEFAULT_PREFIX_STRING,
        "class_exclusions": list(DEFAULT_CLASS_EXCLUSIONS),
        "variable_exclusions": list(DEFAULT_VARIABLE_EXCLUSIONS),

        # Compression
        "compress": True,
        "compression_extensions": list(DEFAULT_COMPRESSION_EXTENSIONS),
        "compression_workers": 0,

        # Verification
        "verify_min_sizes": {},
    }


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def get_config_path(project_root: Optional[str] = None) -> str:
    """
    Resolve the location of the project configuration file.
    """
    return os.path.join(project_root or os.getcwd(), CONFIG_FILE_NAME)


def load_config_file(path: str) -> Dict[str, Any]:
    """
    Load raw overrides from a JSON configuration file.

    A missing file yields no overrides. A corrupted file is reported and
    ignored so the build falls back to defaults.

    Args:
        path: Absolute path of the JSON file.

    Returns:
        Dict[str, Any]: Overrides found in the file (may be empty).
    """
    if not os.path.exists(path):
        logger.debug(f"Config file not found at {path}. Using defaults.")
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config '{path}': {e}. Using defaults.")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Corrupted config file '{path}'. Ignoring it.")
        return {}

    version = data.pop("version", CURRENT_CONFIG_VERSION)
    if version != CURRENT_CONFIG_VERSION:
        logger.info(f"Config file version {version} differs from {CURRENT_CONFIG_VERSION}.")

    return data


# -----------------------------------------------------------------------------
# Facade API
# -----------------------------------------------------------------------------
def load_config(project_root: Optional[str] = None, config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Retrieve the effective configuration: defaults merged with the file overrides.
    """
    defaults = get_default_config()
    if project_root:
        defaults["project_root"] = project_root

    path = config_path or get_config_path(defaults["project_root"])
    defaults.update(load_config_file(path))
    return defaults
