"""
Reader for the legacy Puppet Modulefile descriptor.

A Modulefile is a small Ruby DSL:

    name    'puppetlabs-apache'
    version '1.0.0'
    dependency 'puppetlabs/stdlib', '>= 2.4.0'

Only the literal string arguments are needed here, so each line is
tokenized with shlex instead of being evaluated.
"""

import re
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .errors import ConfigurationError

_DIRECTIVE = re.compile(r"^\s*(?P<key>[a-z_]+)\b(?P<args>.*)$")
_FULL_NAME = re.compile(r"^(?P<author>[^-/]+)[-/](?P<name>.+)$")
_KNOWN_KEYS = {"name", "version", "dependency"}


@dataclass
class ModuleMetadata:
    """Fields read from a Modulefile."""

    full_name: Optional[str] = None
    version: Optional[str] = None
    dependencies: list[tuple[str, Optional[str]]] = field(default_factory=list)

    @property
    def author(self) -> Optional[str]:
        return self._split()[0] if self.full_name else None

    @property
    def name(self) -> Optional[str]:
        """Short module name, the directory name Puppet expects on its modulepath."""
        return self._split()[1] if self.full_name else None

    def _split(self) -> tuple[str, str]:
        match = _FULL_NAME.match(self.full_name)
        if match is None:
            raise ConfigurationError(
                f"The Modulefile name {self.full_name!r} is not a valid full module name."
                " Use the form '<author>-<module_name>'"
            )
        return match.group("author"), match.group("name")


def _arguments(raw: str) -> list[str]:
    lexer = shlex.shlex(raw, posix=True)
    lexer.whitespace += ",()"
    lexer.whitespace_split = True
    lexer.commenters = "#"
    return list(lexer)


def parse_modulefile(text: str) -> ModuleMetadata:
    """Parse Modulefile content into ModuleMetadata."""
    metadata = ModuleMetadata()
    for line in text.splitlines():
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        match = _DIRECTIVE.match(line)
        if match is None or match.group("key") not in _KNOWN_KEYS:
            continue
        try:
            args = _arguments(match.group("args"))
        except ValueError as e:
            raise ConfigurationError(f"Could not parse Modulefile line {line.strip()!r}: {e}") from e
        if not args:
            continue

        key = match.group("key")
        if key == "name":
            metadata.full_name = args[0]
        elif key == "version":
            metadata.version = args[0]
        elif key == "dependency":
            metadata.dependencies.append((args[0], args[1] if len(args) > 1 else None))
    return metadata


def read_modulefile(path: Path) -> ModuleMetadata:
    """Read and parse a Modulefile from disk."""
    return parse_modulefile(Path(path).read_text(encoding="utf-8"))
