"""
Configuration management for the Puppet apply provisioner.
"""

import json
import logging
import os
import posixpath
import re
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "kitchen_puppet.json"

# Repo URLs are pasted into a single-quoted bash -c script
_REPO_URL = re.compile(r"""^https?://[^\s'"\\$`]+$""")


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _repo_url(value: str) -> str:
    if not isinstance(value, str) or not _REPO_URL.match(value):
        raise ValueError(f"Repository URL must be a plain http(s) URL, got {value!r}")
    return value.rstrip("/")


class ProvisionerConfig:
    """Settings the host hands to the provisioner, with optional persistence."""

    def __init__(
        self,
        config_dir: Optional[Path] = None,
        overrides: Optional[dict[str, Any]] = None,
    ):
        """
        Initialize provisioner configuration.

        Args:
            config_dir: Directory holding kitchen_puppet.json (nothing is
                loaded or saved when None)
            overrides: Values supplied by the host, applied after the file
        """
        self.config_dir = config_dir
        self.config_file = config_dir / CONFIG_FILE_NAME if config_dir else None

        # Default configuration
        self._config = {
            "kitchen_root": os.getcwd(),
            # Where the sandbox lands on the instance
            "remote_path": "/tmp/kitchen-puppet-apply",
            "manifest": "base.pp",
            # Install Puppet from the Puppet Labs package repositories first
            "require_puppet_package": False,
            "puppet_apt_repo": "http://apt.puppetlabs.com",
            "puppet_yum_repo": "https://yum.puppetlabs.com",
            # Drop everything but manifests, templates, files and lib
            "strict_module_filtering": True,
            # Treat puppet's "changes applied" exit status (2) as success
            "detailed_exitcodes": True,
            "use_sudo": True,
            "puppet_apply_args": [],
            "librarian_command": "librarian-puppet",
        }

        for key, value in self._load().items():
            if key not in self._config:
                logger.warning(f"Ignoring unknown provisioner setting {key!r} in {self.config_file}")
                continue
            setattr(self, key, value)

        for key, value in (overrides or {}).items():
            if key not in self._config:
                raise ValueError(f"Unknown provisioner setting: {key}")
            setattr(self, key, value)

    def _load(self) -> dict[str, Any]:
        """
        Read configuration from disk.

        Values are applied through the property setters by the caller, so an
        invalid value in the file raises ValueError like an invalid override.
        """
        if self.config_file is None or not self.config_file.exists():
            return {}
        try:
            with open(self.config_file) as f:
                loaded = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load provisioner config: {e}")
            return {}
        if not isinstance(loaded, dict):
            logger.warning(f"Ignoring provisioner config {self.config_file}: not a JSON object")
            return {}
        return loaded

    def save(self):
        """Save configuration to disk."""
        if self.config_file is None:
            return
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w") as f:
            json.dump(self._config, f, indent=2)

    @property
    def kitchen_root(self) -> Path:
        """Project root searched for Puppetfile, modules/ and Modulefile."""
        return Path(self._config["kitchen_root"]).resolve()

    @kitchen_root.setter
    def kitchen_root(self, value):
        self._config["kitchen_root"] = str(value)

    @property
    def remote_path(self) -> str:
        return self._config["remote_path"]

    @remote_path.setter
    def remote_path(self, value: str):
        if not isinstance(value, str) or not posixpath.isabs(value):
            raise ValueError(f"remote_path must be absolute, got {value!r}")
        self._config["remote_path"] = value.rstrip("/") or "/"

    @property
    def manifest(self) -> str:
        return self._config["manifest"]

    @manifest.setter
    def manifest(self, value: str):
        if not isinstance(value, str) or not value.endswith(".pp") or "/" in value:
            raise ValueError(f"manifest must be a bare .pp file name, got {value!r}")
        self._config["manifest"] = value

    @property
    def require_puppet_package(self) -> bool:
        return self._config["require_puppet_package"]

    @require_puppet_package.setter
    def require_puppet_package(self, value: bool):
        self._config["require_puppet_package"] = _as_bool(value)

    @property
    def puppet_apt_repo(self) -> str:
        return self._config["puppet_apt_repo"]

    @puppet_apt_repo.setter
    def puppet_apt_repo(self, value: str):
        self._config["puppet_apt_repo"] = _repo_url(value)

    @property
    def puppet_yum_repo(self) -> str:
        return self._config["puppet_yum_repo"]

    @puppet_yum_repo.setter
    def puppet_yum_repo(self, value: str):
        self._config["puppet_yum_repo"] = _repo_url(value)

    @property
    def strict_module_filtering(self) -> bool:
        return self._config["strict_module_filtering"]

    @strict_module_filtering.setter
    def strict_module_filtering(self, value: bool):
        self._config["strict_module_filtering"] = _as_bool(value)

    @property
    def detailed_exitcodes(self) -> bool:
        return self._config["detailed_exitcodes"]

    @detailed_exitcodes.setter
    def detailed_exitcodes(self, value: bool):
        self._config["detailed_exitcodes"] = _as_bool(value)

    @property
    def use_sudo(self) -> bool:
        return self._config["use_sudo"]

    @use_sudo.setter
    def use_sudo(self, value: bool):
        self._config["use_sudo"] = _as_bool(value)

    @property
    def puppet_apply_args(self) -> list[str]:
        """Extra arguments appended to the puppet apply invocation."""
        return list(self._config["puppet_apply_args"])

    @puppet_apply_args.setter
    def puppet_apply_args(self, value: list[str]):
        if isinstance(value, str):
            raise ValueError("puppet_apply_args must be a list of arguments")
        self._config["puppet_apply_args"] = [str(arg) for arg in value]

    @property
    def librarian_command(self) -> str:
        return self._config["librarian_command"]

    @librarian_command.setter
    def librarian_command(self, value: str):
        if not value:
            raise ValueError("librarian_command must not be empty")
        self._config["librarian_command"] = value

    def get_status(self) -> dict:
        """Get the effective settings as a dictionary."""
        return {
            "kitchen_root": str(self.kitchen_root),
            "remote_path": self.remote_path,
            "manifest": self.manifest,
            "require_puppet_package": self.require_puppet_package,
            "puppet_apt_repo": self.puppet_apt_repo,
            "puppet_yum_repo": self.puppet_yum_repo,
            "strict_module_filtering": self.strict_module_filtering,
            "detailed_exitcodes": self.detailed_exitcodes,
            "use_sudo": self.use_sudo,
            "puppet_apply_args": self.puppet_apply_args,
            "librarian_command": self.librarian_command,
        }
