"""
Entry-point manifest staging.
"""

import logging
from pathlib import Path
from typing import Sequence

logger = logging.getLogger(__name__)


def render_manifest(classes: Sequence[str]) -> str:
    """Render one include directive naming every class, in the given order."""
    if not classes:
        return ""
    return f"include {', '.join(classes)}\n"


def stage_manifest(sandbox_path: Path, classes: Sequence[str], manifest: str = "base.pp") -> Path:
    """
    Write the entry-point manifest into the sandbox.

    Returns:
        Path of the written manifest
    """
    path = Path(sandbox_path) / manifest
    path.write_text(render_manifest(classes), encoding="utf-8")
    logger.debug(f"Wrote manifest {path} including {len(classes)} class(es)")
    return path
