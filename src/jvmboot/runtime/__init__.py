"""Java runtime resolution: version matching, cache layout and locating."""

from .environment import ProbeEnvironment
from .locator import RuntimeLocator
from .types import BundleType, InstalledRuntime, Provider, RuntimeCandidate, RuntimeSpec

__all__ = [
    "BundleType",
    "InstalledRuntime",
    "ProbeEnvironment",
    "Provider",
    "RuntimeCandidate",
    "RuntimeLocator",
    "RuntimeSpec",
]
