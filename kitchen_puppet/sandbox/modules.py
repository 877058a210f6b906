"""
Module resolution: populate the sandbox's modules/ tree from the project.

The strategy is chosen by which marker exists in the project root, in a
fixed order:

1. Puppetfile        resolved by librarian-puppet
2. modules/          copied as is (plus the project itself when it also
                     carries a Modulefile)
3. Modulefile        the project is packaged as a single module

A Puppetfile wins over a stale modules/ directory because it pins the
dependency set.
"""

import logging
import shutil
from pathlib import Path
from typing import Callable, Optional

from .errors import ConfigurationError
from .lifecycle import cleanup_sandbox
from .modulefile import read_modulefile
from .resolver import DependencyResolver, LibrarianPuppet, resolve_with_librarian

logger = logging.getLogger(__name__)

PUPPETFILE = "Puppetfile"
MODULES_DIR = "modules"
MODULEFILE = "Modulefile"

STRATEGY_PUPPETFILE = "puppetfile"
STRATEGY_MODULES = "modules"
STRATEGY_MODULEFILE = "modulefile"

# Entries of the project root that make up the project's own module
_THIS_MODULE_GLOBS = ("Modulefile", "metadata.json", "README.*", "lib", "manifests", "files", "templates")

ResolverFactory = Callable[[Path, Path], DependencyResolver]


def select_strategy(kitchen_root: Path) -> Optional[str]:
    """Return the resolution strategy for a project root, or None."""
    kitchen_root = Path(kitchen_root)
    if (kitchen_root / PUPPETFILE).is_file():
        return STRATEGY_PUPPETFILE
    if (kitchen_root / MODULES_DIR).is_dir():
        return STRATEGY_MODULES
    if (kitchen_root / MODULEFILE).is_file():
        return STRATEGY_MODULEFILE
    return None


def resolve_modules(
    kitchen_root: Path,
    sandbox_path: Path,
    resolver_factory: Optional[ResolverFactory] = None,
) -> str:
    """
    Populate <sandbox>/modules from the project root.

    Args:
        kitchen_root: Project root to search
        sandbox_path: Sandbox directory; removed when no strategy applies
        resolver_factory: Builds the Puppetfile resolver from
            (puppetfile, install_path); defaults to LibrarianPuppet

    Returns:
        Name of the strategy that was used

    Raises:
        ConfigurationError: If the project root has no module source
    """
    kitchen_root = Path(kitchen_root)
    modules_path = Path(sandbox_path) / MODULES_DIR
    strategy = select_strategy(kitchen_root)

    if strategy == STRATEGY_PUPPETFILE:
        factory = resolver_factory or LibrarianPuppet
        resolve_puppetfile(kitchen_root / PUPPETFILE, modules_path, factory)
    elif strategy == STRATEGY_MODULES:
        copy_modules(kitchen_root, modules_path)
    elif strategy == STRATEGY_MODULEFILE:
        copy_this_module(kitchen_root, modules_path)
    else:
        cleanup_sandbox(sandbox_path)
        logger.error(f"Puppetfile, modules/ directory, Modulefile must exist in {kitchen_root}")
        raise ConfigurationError(
            f"Module(s) could not be found: one of Puppetfile, modules/ directory,"
            f" Modulefile must exist in {kitchen_root}"
        )
    return strategy


def resolve_puppetfile(puppetfile: Path, modules_path: Path, factory: ResolverFactory) -> None:
    logger.info("Resolving module dependencies with Librarian-Puppet")
    logger.debug(f"Using Puppetfile from {puppetfile}")
    resolve_with_librarian(factory(puppetfile, modules_path))


def copy_modules(kitchen_root: Path, modules_path: Path) -> None:
    """Copy the project's modules/ directory, then the project itself if it is a module."""
    source = kitchen_root / MODULES_DIR
    logger.info("Preparing modules from project directory")
    logger.debug(f"Using modules from {source}")

    shutil.copytree(source, modules_path, symlinks=True, dirs_exist_ok=True)
    if (kitchen_root / MODULEFILE).is_file():
        copy_this_module(kitchen_root, modules_path)


def copy_this_module(kitchen_root: Path, modules_path: Path) -> Path:
    """
    Package the project root as a module named by its Modulefile.

    Returns:
        The created module directory
    """
    modulefile = kitchen_root / MODULEFILE
    logger.info("Preparing current project directory as a module")
    logger.debug(f"Using Modulefile from {modulefile}")

    metadata = read_modulefile(modulefile)
    if not metadata.full_name:
        raise ConfigurationError(
            "The Modulefile does not define the 'name' key."
            " Please add: `name '<author>-<module_name>'` to Modulefile and retry"
        )
    module_path = modules_path / metadata.name
    logger.debug(
        f"Packaging module {metadata.name} by {metadata.author}"
        f" version {metadata.version or 'unversioned'}"
        f" with {len(metadata.dependencies)} declared dependencies"
    )

    module_path.mkdir(parents=True, exist_ok=True)
    for pattern in _THIS_MODULE_GLOBS:
        for entry in sorted(kitchen_root.glob(pattern)):
            target = module_path / entry.name
            if entry.is_dir():
                shutil.copytree(entry, target, symlinks=True, dirs_exist_ok=True)
            else:
                shutil.copy2(entry, target)
    return module_path
