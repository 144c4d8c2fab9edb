"""Remote runtime catalogs.

Each provider maps the host OS and CPU architecture into its own vocabulary
through fixed tables, then produces a :class:`DownloadArtifact`:

- Adoptium: REST catalog lookup, the JSON descriptor carries the binary link
- Zulu: templated binary URL, no lookup round trip

An OS or architecture missing from the tables raises
:class:`UnsupportedPlatformError` before any request is made.
"""

from __future__ import annotations

import logging
import platform
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlencode, urlsplit, urlunsplit

import httpx

from ..errors import DownloadError, ProvisionError, UnsupportedPlatformError
from ..runtime.types import Provider, RuntimeSpec
from ..runtime.version import normalize
from .downloader import SIDECAR_SUFFIX, DownloadArtifact

logger = logging.getLogger(__name__)

ADOPTIUM_API_URL = "https://api.adoptium.net/v3"
ZULU_BINARY_URL = "https://api.azul.com/zulu/download/community/v1.0/bundles/latest/binary"


@dataclass(frozen=True)
class PlatformInfo:
    """Host operating system and CPU architecture, lower-cased."""

    system: str
    machine: str


def detect_platform() -> PlatformInfo:
    return PlatformInfo(system=platform.system().lower(), machine=platform.machine().lower())


# Lookup tables: host value -> provider value
ADOPTIUM_OS: Dict[str, str] = {
    "linux": "linux",
    "darwin": "mac",
    "windows": "windows",
    "aix": "aix",
    "sunos": "solaris",
}

ADOPTIUM_ARCH: Dict[str, str] = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "i386": "x32",
    "i686": "x32",
    "x86": "x32",
    "arm64": "aarch64",
    "aarch64": "aarch64",
    "ppc64": "ppc64",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
}

ZULU_OS: Dict[str, str] = {
    "linux": "linux",
    "darwin": "macos",
    "windows": "windows",
}

# Zulu splits the architecture into family and bitness
ZULU_ARCH: Dict[str, Tuple[str, str]] = {
    "x86_64": ("x86", "64"),
    "amd64": ("x86", "64"),
    "arm64": ("arm", "64"),
    "aarch64": ("arm", "64"),
}


def feature_version(version: str) -> int:
    """Feature release number used by catalogs (``1.8`` -> 8, ``17.0.2`` -> 17)."""
    value = normalize(version)
    if value < 2:
        return round((value - 1) * 10)
    return int(value)


def sidecar_url(url: str) -> str:
    """Append the sidecar suffix to the URL path, keeping any query string."""
    parts = urlsplit(url)
    return urlunsplit(parts._replace(path=parts.path + SIDECAR_SUFFIX))


def _lookup(table: Dict[str, Any], key: str, provider: str, kind: str) -> Any:
    try:
        return table[key]
    except KeyError:
        raise UnsupportedPlatformError(provider, kind, key) from None


class RuntimeSource(ABC):
    """Base class for provider strategies."""

    name = "base"

    @abstractmethod
    def platform_params(self, host: PlatformInfo) -> Dict[str, str]:
        """Translate the host platform into this provider's query vocabulary."""

    @abstractmethod
    async def resolve(
        self,
        spec: RuntimeSpec,
        client: httpx.AsyncClient,
        scratch_dir: Path,
        host: Optional[PlatformInfo] = None,
    ) -> DownloadArtifact:
        """Produce the artifact to download for ``spec``."""


class AdoptiumSource(RuntimeSource):
    """Eclipse Adoptium REST catalog."""

    name = "adoptium"

    def __init__(self, base_url: str = ADOPTIUM_API_URL):
        self.base_url = base_url.rstrip("/")

    def platform_params(self, host: PlatformInfo) -> Dict[str, str]:
        return {
            "os": _lookup(ADOPTIUM_OS, host.system, self.name, "operating system"),
            "architecture": _lookup(ADOPTIUM_ARCH, host.machine, self.name, "architecture"),
        }

    def query_url(self, spec: RuntimeSpec) -> str:
        return f"{self.base_url}/assets/latest/{feature_version(spec.version)}/hotspot"

    async def resolve(
        self,
        spec: RuntimeSpec,
        client: httpx.AsyncClient,
        scratch_dir: Path,
        host: Optional[PlatformInfo] = None,
    ) -> DownloadArtifact:
        if spec.javafx:
            raise ProvisionError("Adoptium does not publish JavaFX bundles; use the zulu provider")

        params = self.platform_params(host or detect_platform())
        params["image_type"] = spec.bundle_type.value
        params["vendor"] = "eclipse"

        url = self.query_url(spec)
        logger.debug("Querying %s with %s", url, params)
        response = await client.get(url, params=params, headers={"Accept": "application/json"})
        if not response.is_success:
            raise DownloadError(str(response.url), response.status_code)

        try:
            descriptor = response.json()
        except ValueError as e:
            raise ProvisionError(f"Unexpected catalog response from {url}: {e}") from e
        if not descriptor:
            raise ProvisionError(f"No {spec.bundle_type.value} {spec.version} release found for {params}")

        try:
            package = descriptor[0]["binary"]["package"]
            link = package["link"]
            name = package.get("name") or Path(urlsplit(link).path).name
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise ProvisionError(f"Unexpected catalog response from {url}: {e!r}") from e

        return DownloadArtifact(
            url=link,
            checksum_url=package.get("checksum_link") or sidecar_url(link),
            local_path=scratch_dir / name,
        )


class ZuluSource(RuntimeSource):
    """Azul Zulu bundles, addressed by a templated binary URL."""

    name = "zulu"

    def __init__(self, binary_url: str = ZULU_BINARY_URL):
        self.binary_url = binary_url

    def platform_params(self, host: PlatformInfo) -> Dict[str, str]:
        os_name = _lookup(ZULU_OS, host.system, self.name, "operating system")
        arch, bitness = _lookup(ZULU_ARCH, host.machine, self.name, "architecture")
        return {"os": os_name, "arch": arch, "hw_bitness": bitness}

    @staticmethod
    def archive_ext(os_name: str, arch: str, javafx: bool) -> str:
        if os_name == "linux" and (javafx or arch == "arm"):
            return "tar.gz"
        return "zip"

    def build_url(self, spec: RuntimeSpec, host: PlatformInfo) -> Tuple[str, str]:
        """Return the binary URL and archive extension for ``spec``."""
        params = self.platform_params(host)
        ext = self.archive_ext(params["os"], params["arch"], spec.javafx)
        query = {
            "java_version": str(feature_version(spec.version)),
            "ext": ext,
            "bundle_type": spec.bundle_type.value,
            "javafx": "true" if spec.javafx else "false",
            "arch": params["arch"],
            "hw_bitness": params["hw_bitness"],
            "os": params["os"],
        }
        return f"{self.binary_url}?{urlencode(query)}", ext

    async def resolve(
        self,
        spec: RuntimeSpec,
        client: httpx.AsyncClient,
        scratch_dir: Path,
        host: Optional[PlatformInfo] = None,
    ) -> DownloadArtifact:
        url, ext = self.build_url(spec, host or detect_platform())
        file_name = f"{spec.bundle_type.value}{spec.version}{spec.variant_suffix}.{ext}"
        return DownloadArtifact(
            url=url,
            checksum_url=sidecar_url(url),
            local_path=scratch_dir / file_name,
        )


def get_source(
    provider: Provider,
    adoptium_url: str = ADOPTIUM_API_URL,
    zulu_url: str = ZULU_BINARY_URL,
) -> RuntimeSource:
    """Get the source strategy for a provider.

    Raises:
        ValueError: If the provider is not supported
    """
    if provider is Provider.ADOPTIUM:
        return AdoptiumSource(adoptium_url)
    if provider is Provider.ZULU:
        return ZuluSource(zulu_url)
    raise ValueError(f"Provider '{provider}' not supported")

