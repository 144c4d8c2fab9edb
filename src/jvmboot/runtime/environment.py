"""Immutable view of the process environment used by probes and the launch."""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Union


@dataclass(frozen=True)
class ProbeEnvironment:
    """Environment variables as a value.

    Probes never touch ``os.environ``; derived environments are built with
    the ``with_*`` methods and handed to subprocesses explicitly.
    """

    variables: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "variables", MappingProxyType(dict(self.variables)))

    @classmethod
    def from_os(cls, defaults: Optional[Mapping[str, str]] = None) -> "ProbeEnvironment":
        """Snapshot ``os.environ``, layered over optional defaults (e.g. a .env file)."""
        merged: Dict[str, str] = {
            key: value for key, value in (defaults or {}).items() if value is not None
        }
        merged.update(os.environ)
        return cls(merged)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        value = self.variables.get(name)
        return value if value else default

    @property
    def path_entries(self) -> List[str]:
        raw = self.variables.get("PATH", "")
        return [entry for entry in raw.split(os.pathsep) if entry]

    def with_path_prepended(self, directory: Union[str, Path]) -> "ProbeEnvironment":
        """Return a copy with ``directory`` first on PATH."""
        entries = [str(directory)] + self.path_entries
        return self.with_variable("PATH", os.pathsep.join(entries))

    def with_variable(self, name: str, value: str) -> "ProbeEnvironment":
        updated = dict(self.variables)
        updated[name] = value
        return ProbeEnvironment(updated)

    def for_runtime(self, home_path: Path, bin_path: Path) -> "ProbeEnvironment":
        """Environment for a child running on the given runtime."""
        return self.with_variable("JAVA_HOME", str(home_path)).with_path_prepended(bin_path)

    def which(self, command: str) -> Optional[str]:
        """Resolve ``command`` against this environment's PATH."""
        return shutil.which(command, path=self.variables.get("PATH", ""))

    def as_dict(self) -> Dict[str, str]:
        return dict(self.variables)
