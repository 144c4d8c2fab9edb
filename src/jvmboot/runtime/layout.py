"""On-disk cache layout for provisioned runtimes.

Layout::

    {cache_root}/{jre|jdk}/{version}[fx]/{vendor dir}/[Contents/Home/]bin/java

The vendor directory name comes from the archive and is not known in
advance, so it is discovered by checking each subdirectory against the
known runtime layouts.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

from ..errors import RuntimeLayoutError
from .types import BundleType, RuntimeSpec, java_executable_name

# Probe order for cached runtimes, richest bundle first
CACHE_PROBE_ORDER: Tuple[Tuple[BundleType, bool], ...] = (
    (BundleType.JDK, True),
    (BundleType.JDK, False),
    (BundleType.JRE, True),
    (BundleType.JRE, False),
)

# Relative paths from a vendor directory to the runtime home
HOME_LAYOUTS: Tuple[Tuple[str, ...], ...] = (
    ("Contents", "Home"),  # macOS .jdk bundles
    (),
)


def install_dir(cache_root: Path, bundle_type: BundleType, version: str, javafx: bool) -> Path:
    """Directory a runtime with these attributes is installed into."""
    suffix = "fx" if javafx else ""
    return Path(cache_root) / bundle_type.value / f"{version}{suffix}"


def install_dir_for(cache_root: Path, spec: RuntimeSpec) -> Path:
    return install_dir(cache_root, spec.bundle_type, spec.version, spec.javafx)


def satisfies(bundle_type: BundleType, javafx: bool, spec: RuntimeSpec) -> bool:
    """A JDK can stand in for a JRE and a JavaFX build for a plain one."""
    if spec.bundle_type is BundleType.JDK and bundle_type is not BundleType.JDK:
        return False
    if spec.javafx and not javafx:
        return False
    return True


def cache_probe_dirs(cache_root: Path, spec: RuntimeSpec) -> List[Path]:
    """Install directories to probe for ``spec``, in priority order."""
    return [
        install_dir(cache_root, bundle_type, spec.version, javafx)
        for bundle_type, javafx in CACHE_PROBE_ORDER
        if satisfies(bundle_type, javafx, spec)
    ]


def _runtime_home(directory: Path) -> Optional[Path]:
    for layout in HOME_LAYOUTS:
        home = directory.joinpath(*layout)
        if (home / "bin" / java_executable_name()).is_file():
            return home
    return None


def find_runtime_home(directory: Path) -> Path:
    """Find the single runtime home inside an install directory.

    Args:
        directory: Install directory, usually from :func:`install_dir`

    Returns:
        The runtime home (the directory holding ``bin/java``)

    Raises:
        RuntimeLayoutError: If no subdirectory holds a runtime, or more than
            one does (e.g. leftovers from an earlier partial install)
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise RuntimeLayoutError(directory)

    homes: List[Path] = []
    for child in sorted(directory.iterdir()):
        if not child.is_dir() or child.name.startswith("."):
            continue
        home = _runtime_home(child)
        if home is not None:
            homes.append(home)

    if not homes:
        # Archives without a top-level vendor directory
        flat = _runtime_home(directory)
        if flat is not None:
            return flat
        raise RuntimeLayoutError(directory)

    if len(homes) > 1:
        raise RuntimeLayoutError(directory, homes)

    return homes[0]
