"""Runtime provisioning: download, verify, install and extract.

Stages run strictly in order and each one fails with its own exception:

1. resolve source    -> UnsupportedPlatformError / DownloadError
2. download          -> DownloadError
3. verify            -> ChecksumError
4. install           -> ProvisionError
5. extract           -> ProvisionError

Extraction happens in a staging directory that replaces the install
directory only once a runtime home has been found in it; on failure the
staging directory is removed and the cache is left as it was.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
import sys
import tempfile
from pathlib import Path
from typing import Optional

import httpx

from ..errors import ProvisionError, RuntimeLayoutError
from ..runtime.layout import find_runtime_home, install_dir_for
from ..runtime.types import InstalledRuntime, RuntimeSpec
from .downloader import DownloadArtifact, download_artifact, verify_artifact
from .extractor import extract_archive
from .providers import PlatformInfo, RuntimeSource

logger = logging.getLogger(__name__)


def default_scratch_dir() -> Path:
    return Path(tempfile.gettempdir()) / "jvmboot"


def staging_dir_for(target_dir: Path) -> Path:
    """Hidden sibling of ``target_dir`` that archives are unpacked into."""
    return target_dir.with_name(f".{target_dir.name}.partial")


def _remove_tree(path: Path) -> None:
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)


def _swap_in(staging_dir: Path, target_dir: Path) -> None:
    _remove_tree(target_dir)
    staging_dir.rename(target_dir)


class RuntimeProvisioner:
    """Install a runtime into the local cache from a remote provider."""

    def __init__(
        self,
        cache_root: Path,
        source: RuntimeSource,
        scratch_dir: Optional[Path] = None,
        http_timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        host: Optional[PlatformInfo] = None,
    ):
        """Initialize provisioner.

        Args:
            cache_root: Root of the runtime cache
            source: Provider strategy producing the download artifact
            scratch_dir: Where downloads land before verification
            http_timeout: Seconds per HTTP operation, None for no limit
            transport: Optional httpx transport (used by tests)
            host: Platform override, detected when None
        """
        self.cache_root = Path(cache_root)
        self.source = source
        self.scratch_dir = Path(scratch_dir) if scratch_dir else default_scratch_dir()
        self.http_timeout = http_timeout
        self.transport = transport
        self.host = host

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            follow_redirects=True,
            timeout=httpx.Timeout(self.http_timeout),
            transport=self.transport,
        )

    async def provision(self, spec: RuntimeSpec) -> InstalledRuntime:
        """Download and install a runtime for ``spec``.

        Returns:
            The installed runtime, rooted inside the cache

        Raises:
            ProvisionError: Or one of its subclasses, on any stage failure
        """
        target_dir = install_dir_for(self.cache_root, spec)

        try:
            artifact = await self._download(spec)
        except httpx.HTTPError as e:
            raise ProvisionError(f"Network error while fetching runtime: {e}") from e

        print("🔐 Verifying checksum...", file=sys.stderr)
        await verify_artifact(artifact)

        # Whatever already sits in target_dir is replaced, never merged
        staging_dir = staging_dir_for(target_dir)
        try:
            await asyncio.to_thread(_remove_tree, staging_dir)
            archive = await self._install(artifact, staging_dir)

            print(f"📂 Extracting into {target_dir}", file=sys.stderr)
            await extract_archive(archive, staging_dir)

            try:
                home = find_runtime_home(staging_dir)
            except RuntimeLayoutError as e:
                raise ProvisionError(f"Installed runtime is not usable: {e}") from e

            await asyncio.to_thread(_swap_in, staging_dir, target_dir)
        except OSError as e:
            artifact.discard()
            await asyncio.to_thread(shutil.rmtree, staging_dir, True)
            raise ProvisionError(f"Could not install runtime into {target_dir}: {e}") from e
        except Exception:
            artifact.discard()
            await asyncio.to_thread(shutil.rmtree, staging_dir, True)
            raise

        installed = InstalledRuntime.from_home(target_dir / home.relative_to(staging_dir))
        print(f"✅ Java runtime installed at {installed.home_path}", file=sys.stderr)
        return installed

    async def _download(self, spec: RuntimeSpec) -> DownloadArtifact:
        async with self._client() as client:
            artifact = await self.source.resolve(spec, client, self.scratch_dir, self.host)
            print(
                f"📦 Downloading Java {spec.version} {spec.bundle_type.value.upper()} "
                f"from {self.source.name}...",
                file=sys.stderr,
            )
            logger.info("Downloading %s", artifact.url)
            try:
                await download_artifact(client, artifact)
            except Exception:
                artifact.discard()
                raise
        return artifact

    async def _install(self, artifact: DownloadArtifact, target_dir: Path) -> Path:
        """Move the verified artifact into the cache and drop the scratch files."""
        target_dir.mkdir(parents=True, exist_ok=True)
        dest = target_dir / artifact.local_path.name
        try:
            await asyncio.to_thread(shutil.move, str(artifact.local_path), str(dest))
        except OSError as e:
            artifact.discard()
            raise ProvisionError(f"Could not install {artifact.local_path.name} into {target_dir}: {e}") from e
        artifact.checksum_path.unlink(missing_ok=True)
        logger.debug("Installed %s", dest)
        return dest
