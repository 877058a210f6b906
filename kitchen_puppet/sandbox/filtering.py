"""
Removal of non-module files (specs, CI config, VCS metadata) from the
sandbox module tree.
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

MODULE_DESCRIPTORS = ("Modulefile", "metadata.json")
MODULE_DIRECTORIES = ("manifests", "templates", "files", "lib")


def module_file_patterns() -> list[str]:
    """Glob patterns, relative to the modules directory, of files Puppet needs."""
    patterns = ["*/README.*"]
    patterns.extend(f"*/{name}" for name in MODULE_DESCRIPTORS)
    patterns.extend(f"*/{name}/**/*" for name in MODULE_DIRECTORIES)
    return patterns


def filter_module_files(modules_path: Path) -> list[Path]:
    """
    Delete every file in the module tree that is not a module file.

    Directories are left in place, even when emptied.

    Args:
        modules_path: The sandbox's modules/ directory

    Returns:
        Sorted paths of the removed files
    """
    modules_path = Path(modules_path)
    if not modules_path.is_dir():
        return []

    logger.info("Removing non-module files in sandbox")

    all_files = {p for p in modules_path.rglob("*") if p.is_file()}
    module_files = set()
    for pattern in module_file_patterns():
        module_files.update(p for p in modules_path.glob(pattern) if p.is_file())

    removed = sorted(all_files - module_files)
    for path in removed:
        path.unlink()
    logger.debug(f"Removed {len(removed)} non-module file(s) from {modules_path}")
    return removed
