"""Data types for runtime resolution."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class BundleType(str, Enum):
    """Whether a runtime is execution-only or a full development kit."""

    JRE = "jre"
    JDK = "jdk"


class Provider(str, Enum):
    """Remote catalogs runtimes can be fetched from.

    - ADOPTIUM: REST catalog returning a JSON descriptor with a binary link
    - ZULU: templated URL pointing straight at the binary
    """

    ADOPTIUM = "adoptium"
    ZULU = "zulu"


@dataclass(frozen=True)
class RuntimeSpec:
    """The one runtime requirement of the packaged application.

    Attributes:
        version: Required Java version as configured (e.g., "11", "1.8")
        bundle_type: JRE or JDK
        javafx: Whether the runtime must bundle JavaFX
        provider: Catalog to provision from when nothing local matches
    """

    version: str
    bundle_type: BundleType = BundleType.JRE
    javafx: bool = False
    provider: Provider = Provider.ZULU

    @property
    def variant_suffix(self) -> str:
        return "fx" if self.javafx else ""

    @property
    def cache_key(self) -> str:
        """Version directory name under the bundle directory."""
        return f"{self.version}{self.variant_suffix}"


@dataclass
class RuntimeCandidate:
    """A runtime found by the locator, before a launch decision is made."""

    home_path: Path
    source: str  # "override", "java_home", "path", "cache"
    detected_version: Optional[float] = None

    def to_installed(self) -> "InstalledRuntime":
        return InstalledRuntime.from_home(self.home_path)

    def __repr__(self) -> str:
        version_str = f" v{self.detected_version}" if self.detected_version else ""
        return f"<RuntimeCandidate{version_str} @ {self.home_path} ({self.source})>"


def java_executable_name() -> str:
    return "java.exe" if os.name == "nt" else "java"


@dataclass(frozen=True)
class InstalledRuntime:
    """The runtime selected for this invocation."""

    home_path: Path
    bin_path: Path

    @classmethod
    def from_home(cls, home_path: Path) -> "InstalledRuntime":
        home_path = Path(home_path)
        return cls(home_path=home_path, bin_path=home_path / "bin")

    @property
    def java_executable(self) -> Path:
        return self.bin_path / java_executable_name()
