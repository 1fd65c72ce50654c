from __future__ import annotations

"""
Configuration Validation Service.

Acts as the gatekeeper of the build engine, ensuring that the configuration
dictionary conforms to the expected schema. Handles type coercion, prefix
mode aliases, extension normalization and default value injection.
"""

import logging
from typing import Any, Dict, List, Tuple

from ucss_build.core.services.scanner import normalize_extensions
from ucss_build.domain.config import get_default_config
from ucss_build.domain.constants import DEFAULT_COMPRESSION_EXTENSIONS, PREFIX_MODE_ALIASES

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Converts untrusted inputs (JSON file, CLI) into strictly typed
    parameters and fills missing keys with domain defaults.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raises exceptions on type mismatch instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: The normalized configuration and
                                          a list of warnings.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    # 1. Base Type Validation
    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    unknown = sorted(k for k in config if k not in defaults)
    for key in unknown:
        warnings.append(f"Unknown config key '{key}' ignored.")
        merged.pop(key, None)

    # 2. Schema Definition
    string_fields = [
        "project_root", "entry_path", "module_root", "root_marker",
        "lib_dir", "output_dir", "prefix_string",
    ]

    # Empty is meaningful for these: disabled prefixing, working tree source
    optional_string_fields = ["source_ref", "prefix_mode"]

    bool_fields = ["build_modules", "clean_output", "compress"]

    list_fields = ["class_exclusions", "variable_exclusions", "compression_extensions"]

    # 3. Field Processing
    for field in string_fields:
        merged[field] = _as_str(merged.get(field), defaults[field], field, warnings, strict)

    for field in optional_string_fields:
        merged[field] = _as_str(merged.get(field), "", field, warnings, strict, allow_empty=True)

    for field in bool_fields:
        merged[field] = _as_bool(merged.get(field), defaults[field], field, warnings, strict)

    for field in list_fields:
        merged[field] = _as_list_str(merged.get(field), defaults[field], field, warnings, strict)

    merged["compression_workers"] = _as_int(
        merged.get("compression_workers"), defaults["compression_workers"],
        "compression_workers", warnings, strict
    )
    merged["verify_min_sizes"] = _as_size_map(
        merged.get("verify_min_sizes"), "verify_min_sizes", warnings, strict
    )

    # 4. Domain-Specific Normalization
    merged["compression_extensions"] = _normalize_extensions(merged["compression_extensions"], warnings, strict)
    merged["prefix_mode"] = _normalize_prefix_mode(merged["prefix_mode"], warnings, strict)

    return merged, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(
        value: Any,
        fallback: str,
        field: str,
        warnings: List[str],
        strict: bool,
        allow_empty: bool = False,
) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        if v or allow_empty:
            return v
        return fallback

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_int(value: Any, fallback: int, field: str, warnings: List[str], strict: bool) -> int:
    """Accept non-negative integers, coercing numeric strings when lenient."""
    if value is None:
        return fallback
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value

    if not strict and isinstance(value, str) and value.strip().isdigit():
        warnings.append(f"Field '{field}' converted from '{value}' to int.")
        return int(value.strip())

    msg = f"Invalid field '{field}': expected non-negative int, received {value!r}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_list_str(value: Any, fallback: List[str], field: str, warnings: List[str], strict: bool) -> List[str]:
    """
    Ensure input is a list of sanitized strings, supporting CSV parsing.

    An explicit empty list is kept: it disables the defaults (e.g. no exclusions).
    """
    if value is None:
        return list(fallback)

    if isinstance(value, str) and not strict:
        items = [x.strip() for x in value.split(",") if x.strip()]
        warnings.append(f"Field '{field}' converted from CSV string to list.")
        return items

    if isinstance(value, list):
        out: List[str] = []
        for i, item in enumerate(value):
            if isinstance(item, str):
                s = item.strip()
                if s:
                    out.append(s)
            else:
                msg = f"Invalid item in '{field}[{i}]': expected str."
                if strict:
                    raise TypeError(msg)
                warnings.append(f"{msg} Item discarded.")
        return out

    msg = f"Invalid field '{field}': expected list[str], received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return list(fallback)


def _as_size_map(value: Any, field: str, warnings: List[str], strict: bool) -> Dict[str, int]:
    """Validate a mapping of relative artifact path -> minimum byte size."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = f"Invalid field '{field}': expected dict, received {type(value).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using fallback.")
        return {}

    out: Dict[str, int] = {}
    for key, size in value.items():
        if isinstance(key, str) and isinstance(size, int) and not isinstance(size, bool) and size >= 0:
            out[key.strip().replace("\\", "/")] = size
            continue
        msg = f"Invalid entry in '{field}': {key!r} -> {size!r}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Entry discarded.")
    return out


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: DOMAIN NORMALIZATION
# -----------------------------------------------------------------------------

def _normalize_extensions(exts: List[str], warnings: List[str], strict: bool) -> List[str]:
    """Ensure all file extensions are lower-case and prefixed with a dot."""
    for ext in exts:
        e = ext.strip().lower()
        if e and not e.startswith("."):
            if strict:
                raise ValueError(f"Invalid extension '{ext}': must start with '.'.")
            warnings.append(f"Extension '{ext}' corrected to '.{e}'.")
    out = normalize_extensions(exts)
    return out if out else list(DEFAULT_COMPRESSION_EXTENSIONS)


def _normalize_prefix_mode(mode: str, warnings: List[str], strict: bool) -> str:
    """Map short flags (p/c/v) and full names to the canonical category."""
    if not mode:
        return ""
    normalized = PREFIX_MODE_ALIASES.get(mode.lower())
    if normalized:
        return normalized

    msg = f"Invalid prefix mode '{mode}': expected one of {sorted(PREFIX_MODE_ALIASES)}."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Prefixing disabled.")
    return ""
