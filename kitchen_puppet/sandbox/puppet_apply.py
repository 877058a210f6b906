"""
Provisioner that converges an instance with puppet apply.
"""

import logging
from pathlib import Path
from typing import Optional

from . import commands
from .base import Instance, Provisioner
from .config import ProvisionerConfig
from .filtering import filter_module_files
from .hiera import stage_hiera
from .lifecycle import cleanup_sandbox, create_sandbox
from .manifest import stage_manifest
from .modules import MODULES_DIR, ResolverFactory, resolve_modules
from .resolver import LibrarianPuppet

logger = logging.getLogger(__name__)


class PuppetApplyProvisioner(Provisioner):
    """
    Assembles a local sandbox (manifest, Hiera data, modules) and generates
    the commands that apply it on the instance.
    """

    def __init__(
        self,
        instance: Instance,
        config: Optional[ProvisionerConfig] = None,
        resolver_factory: Optional[ResolverFactory] = None,
        tmp_root: Optional[Path] = None,
    ):
        """
        Initialize the provisioner.

        Args:
            instance: The instance being converged
            config: Provisioner settings (creates default if None)
            resolver_factory: Overrides the Puppetfile resolver (default:
                librarian-puppet run as config.librarian_command)
            tmp_root: Parent directory for sandboxes (default: system temp)
        """
        self.instance = instance
        self.config = config or ProvisionerConfig()
        self.resolver_factory = resolver_factory or self._librarian
        self.tmp_root = tmp_root
        self.sandbox_path: Optional[Path] = None

    def _librarian(self, puppetfile: Path, install_path: Path) -> LibrarianPuppet:
        return LibrarianPuppet(puppetfile, install_path, self.config.librarian_command)

    @property
    def home_path(self) -> str:
        return self.config.remote_path

    def install_command(self) -> Optional[str]:
        return commands.install_command(self.config)

    def init_command(self) -> str:
        return commands.init_command(self.home_path, self.config.use_sudo)

    def prepare_command(self) -> str:
        return commands.prepare_command()

    def run_command(self) -> str:
        return commands.run_command(self.config)

    def run_command_exit_codes(self) -> list[int]:
        return commands.run_command_exit_codes(self.config)

    def create_sandbox(self) -> Path:
        """
        Build a fresh sandbox for the instance.

        The directory is removed before any error propagates.

        Returns:
            Absolute path of the sandbox
        """
        self.cleanup_sandbox()
        self.sandbox_path = create_sandbox(self.instance.name, self.tmp_root)

        try:
            stage_hiera(self.sandbox_path, self.instance.hiera, self.home_path)
            stage_manifest(self.sandbox_path, self.instance.classes, self.config.manifest)
            resolve_modules(self.config.kitchen_root, self.sandbox_path, self.resolver_factory)
            if self.config.strict_module_filtering:
                filter_module_files(self.sandbox_path / MODULES_DIR)
        except BaseException:
            self.cleanup_sandbox()
            raise

        return self.sandbox_path

    def cleanup_sandbox(self) -> None:
        if self.sandbox_path is None:
            return
        cleanup_sandbox(self.sandbox_path)
        self.sandbox_path = None
