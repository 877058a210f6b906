"""
Base classes and interfaces for provisioner implementations.
"""

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class Instance(BaseModel):
    """The instance being converged, as described by the host."""

    name: str
    # Order is significant to Puppet, never re-sort
    classes: list[str] = Field(default_factory=list)
    hiera: dict[Any, Any] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def _name_is_usable_as_prefix(cls, value: str) -> str:
        if not value:
            raise ValueError("instance name must not be empty")
        if os.sep in value or (os.altsep and os.altsep in value):
            raise ValueError(f"instance name must not contain a path separator: {value!r}")
        return value


class Provisioner(ABC):
    """Abstract capability interface a host uses to converge an instance."""

    @property
    @abstractmethod
    def home_path(self) -> str:
        """Fixed path the sandbox is copied to on the remote instance."""
        pass

    @abstractmethod
    def install_command(self) -> Optional[str]:
        """
        Shell command that installs the configuration tool.

        Returns:
            The command, or None when nothing needs to be installed
        """
        pass

    @abstractmethod
    def init_command(self) -> str:
        """Shell command that clears any previous sandbox on the instance."""
        pass

    @abstractmethod
    def prepare_command(self) -> str:
        """Shell command run after the sandbox has been transferred."""
        pass

    @abstractmethod
    def run_command(self) -> str:
        """Shell command that converges the instance."""
        pass

    @abstractmethod
    def run_command_exit_codes(self) -> list[int]:
        """Exit codes of run_command() that count as success."""
        pass

    @abstractmethod
    def create_sandbox(self) -> Path:
        """
        Assemble the local sandbox.

        Returns:
            Absolute path of the sandbox directory
        """
        pass

    @abstractmethod
    def cleanup_sandbox(self) -> None:
        """Remove the local sandbox, if one was created."""
        pass
