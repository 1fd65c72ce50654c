from __future__ import annotations

"""
Artifact Persistence Component.

Writes the rendered tiers of one entry next to each other:
<stem>.css, <stem>.clean.css and <stem>.min.css.
"""

import logging
import os
from typing import Dict, List

from ucss_build.domain.build_models import ArtifactRecord
from ucss_build.domain.constants import SOURCE_SUFFIX, VARIANT_INFIX

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# FILE OUTPUT MANAGEMENT
# -----------------------------------------------------------------------------

def artifact_rel_path(name: str, variant: str, suffix: str = SOURCE_SUFFIX) -> str:
    """
    Compute the output path of one tier, relative to the output directory.

    Args:
        name: Logical entry name using forward slashes (e.g. "lib/layout").
        variant: Tier identifier.
        suffix: File extension of the source.

    Returns:
        str: Relative path such as "lib/layout.min.css".
    """
    return f"{name}{VARIANT_INFIX[variant]}{suffix}"


def write_variants(
        output_dir: str,
        name: str,
        variants: Dict[str, str],
        suffix: str = SOURCE_SUFFIX,
) -> List[ArtifactRecord]:
    """
    Persist every rendered tier of one entry.

    Args:
        output_dir: Root directory of the build output (usually staging).
        name: Logical entry name.
        variants: Tier identifier -> rendered text.
        suffix: File extension of the source.

    Returns:
        List[ArtifactRecord]: One record per written file.

    Raises:
        OSError: If a directory or file cannot be written.
    """
    records: List[ArtifactRecord] = []

    for variant, content in variants.items():
        rel_path = artifact_rel_path(name, variant, suffix)
        target = os.path.join(output_dir, *rel_path.split("/"))
        os.makedirs(os.path.dirname(target), exist_ok=True)

        data = content.encode("utf-8")
        with open(target, "wb") as f:
            f.write(data)

        records.append(ArtifactRecord(name=name, variant=variant, rel_path=rel_path, size=len(data)))

    logger.debug(f"Wrote {len(records)} artifacts for '{name}'.")
    return records
