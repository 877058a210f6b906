"""
Puppetfile resolution delegated to librarian-puppet.

librarian-puppet keeps its cache and lock state next to the Puppetfile,
so two sandboxes resolving from the same project must never run it at
the same time. RESOLVER_LOCK serializes every resolve/install pair in
the process.
"""

import logging
import os
import shutil
import subprocess
import threading
from collections import deque
from pathlib import Path
from typing import Optional, Protocol

from .errors import ResolverError, ResolverUnavailableError

logger = logging.getLogger(__name__)

RESOLVER_LOCK = threading.Lock()

# Lines of librarian output kept for error messages
_OUTPUT_TAIL = 20


class DependencyResolver(Protocol):
    def resolve(self) -> None:
        ...

    def install(self) -> None:
        ...


class LibrarianPuppet:
    """Installs the modules pinned by a Puppetfile into a target directory."""

    def __init__(self, puppetfile: Path, install_path: Path, command: str = "librarian-puppet"):
        self.puppetfile = Path(puppetfile)
        self.install_path = Path(install_path)
        self.command = command
        self._executable: Optional[str] = None

    @property
    def project_root(self) -> Path:
        return self.puppetfile.parent

    def environment(self) -> dict[str, str]:
        """Process environment pointing librarian's install path at the sandbox."""
        env = os.environ.copy()
        env["LIBRARIAN_PUPPET_PATH"] = str(self.install_path)
        return env

    def resolve(self) -> None:
        """Locate the librarian-puppet executable and check the Puppetfile."""
        executable = shutil.which(self.command)
        if executable is None:
            logger.error(
                "The `librarian-puppet' gem is missing and must be installed."
                " Run `gem install librarian-puppet` or add the following"
                " to your Gemfile if you are using Bundler: `gem 'librarian-puppet'`."
            )
            raise ResolverUnavailableError(
                f"Could not load Librarian-Puppet ({self.command!r} not found on PATH)."
                " Run `gem install librarian-puppet` and retry"
            )
        if not self.puppetfile.is_file():
            raise ResolverError(f"Puppetfile not found at {self.puppetfile}")
        self._executable = executable

    def install(self) -> None:
        """Run librarian-puppet install into install_path."""
        if self._executable is None:
            self.resolve()

        self.install_path.mkdir(parents=True, exist_ok=True)
        # The install path comes from LIBRARIAN_PUPPET_PATH; --path would be
        # saved into the project's .librarian config
        args = [self._executable, "install"]
        logger.debug(f"Running {' '.join(args)} in {self.project_root}")

        process = subprocess.run(
            args,
            cwd=self.project_root,
            env=self.environment(),
            capture_output=True,
            text=True,
            check=False,
        )
        if process.returncode != 0:
            tail = deque((process.stderr or process.stdout).splitlines(), maxlen=_OUTPUT_TAIL)
            message = f"librarian-puppet install failed (rc={process.returncode})"
            if tail:
                message = f"{message}: " + "\n".join(tail)
            raise ResolverError(message)


def resolve_with_librarian(resolver: DependencyResolver) -> None:
    """Run both resolver phases while holding the process-wide lock."""
    with RESOLVER_LOCK:
        resolver.resolve()
        resolver.install()
