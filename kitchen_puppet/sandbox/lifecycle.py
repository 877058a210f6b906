"""
Creation and removal of the local sandbox directory.
"""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def create_sandbox(instance_name: str, root: Optional[Path] = None) -> Path:
    """
    Create a fresh, uniquely named sandbox directory.

    Args:
        instance_name: Instance name, used to namespace the directory
        root: Parent directory (default: the system temp directory)

    Returns:
        Absolute path of the new, empty directory
    """
    path = Path(tempfile.mkdtemp(prefix=f"{instance_name}-sandbox-", dir=root)).resolve()
    logger.debug(f"Creating local sandbox in {path}")
    return path


def cleanup_sandbox(path: Optional[Path]) -> None:
    """Recursively remove a sandbox; a missing or unset path is a no-op."""
    if path is None:
        return
    path = Path(path)
    if not path.exists():
        return

    logger.debug(f"Cleaning up local sandbox in {path}")
    shutil.rmtree(path)
