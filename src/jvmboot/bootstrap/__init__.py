"""Bootstrap utilities for provisioning a Java runtime into the local cache."""

from .downloader import DownloadArtifact, download_artifact, parse_sidecar, verify_artifact
from .extractor import extract_archive
from .providers import (
    AdoptiumSource,
    PlatformInfo,
    RuntimeSource,
    ZuluSource,
    detect_platform,
    get_source,
)
from .provisioner import RuntimeProvisioner

__all__ = [
    # Providers
    "AdoptiumSource",
    "PlatformInfo",
    "RuntimeSource",
    "ZuluSource",
    "detect_platform",
    "get_source",
    # Pipeline
    "DownloadArtifact",
    "RuntimeProvisioner",
    "download_artifact",
    "extract_archive",
    "parse_sidecar",
    "verify_artifact",
]
