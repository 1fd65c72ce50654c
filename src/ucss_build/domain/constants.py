from __future__ import annotations

"""
Domain Constants and Static Data Structures.

Centralizes the naming rules of the build: artifact suffixes, placeholder
templates for recoverable bundling failures, and the default allowlists
consumed by the prefixer and the compression pool.
"""

from typing import Dict, List

CURRENT_CONFIG_VERSION = "1.0.0"
CONFIG_FILE_NAME = "ucss-build.json"

# -----------------------------------------------------------------------------
# SOURCE LAYOUT
# -----------------------------------------------------------------------------

DEFAULT_ENTRY_PATH = "src/u.css"
DEFAULT_MODULE_ROOT = "src"
DEFAULT_LIB_DIR = "src/lib"
DEFAULT_ROOT_MARKER = "lib/"
DEFAULT_OUTPUT_DIR = "dist/latest"
SOURCE_SUFFIX = ".css"

# -----------------------------------------------------------------------------
# ARTIFACT NAMING
# -----------------------------------------------------------------------------

VARIANT_RAW = "raw"
VARIANT_CLEAN = "clean"
VARIANT_MINIFIED = "minified"

# Infix inserted between the stem and the extension for each tier
VARIANT_INFIX: Dict[str, str] = {
    VARIANT_RAW: "",
    VARIANT_CLEAN: ".clean",
    VARIANT_MINIFIED: ".min",
}

# -----------------------------------------------------------------------------
# DIAGNOSTIC PLACEHOLDERS
# -----------------------------------------------------------------------------

MISSING_PLACEHOLDER = "/* Missing: {name} */"
CYCLE_PLACEHOLDER = "/* Cycle detected: {name} */"

# -----------------------------------------------------------------------------
# PREFIXING POLICY
# -----------------------------------------------------------------------------

PREFIX_CLASSES = "classes"
PREFIX_CUSTOM_PROPERTIES = "custom_properties"
PREFIX_BOTH = "both"

# Short channel flags accepted from the command line
PREFIX_MODE_ALIASES: Dict[str, str] = {
    "p": PREFIX_BOTH,
    "c": PREFIX_CLASSES,
    "v": PREFIX_CUSTOM_PROPERTIES,
    PREFIX_BOTH: PREFIX_BOTH,
    PREFIX_CLASSES: PREFIX_CLASSES,
    PREFIX_CUSTOM_PROPERTIES: PREFIX_CUSTOM_PROPERTIES,
}

DEFAULT_PREFIX_STRING = "ucss"

# Interop hooks left untouched (host platform and framework globals)
DEFAULT_CLASS_EXCLUSIONS: List[str] = ["wp", "block", "editor"]
DEFAULT_VARIABLE_EXCLUSIONS: List[str] = ["theme", "u", "ucss", "wp", "block", "editor"]

# -----------------------------------------------------------------------------
# COMPRESSION
# -----------------------------------------------------------------------------

DEFAULT_COMPRESSION_EXTENSIONS: List[str] = [".css", ".js", ".html", ".svg", ".json", ".xml"]
GZIP_LEVEL = 9
BROTLI_QUALITY = 11
GZIP_SUFFIX = ".gz"
BROTLI_SUFFIX = ".br"
