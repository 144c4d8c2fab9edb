"""Artifact download and checksum verification."""

from __future__ import annotations

import asyncio
import hashlib
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import httpx

from ..errors import ChecksumError, DownloadError, ProvisionError

logger = logging.getLogger(__name__)

SIDECAR_SUFFIX = ".sha256.txt"
CHUNK_SIZE = 1024 * 64

_DIGEST = re.compile(r"^\s*([0-9a-fA-F]{64})(?:\s|$)")


@dataclass(frozen=True)
class DownloadArtifact:
    """One runtime archive to fetch, with its checksum sidecar."""

    url: str
    checksum_url: str
    local_path: Path

    @property
    def checksum_path(self) -> Path:
        return self.local_path.with_name(self.local_path.name + SIDECAR_SUFFIX)

    def discard(self) -> None:
        """Delete the artifact and its sidecar if present."""
        for path in (self.local_path, self.checksum_path):
            path.unlink(missing_ok=True)


async def download_file(client: httpx.AsyncClient, url: str, dest: Path) -> Path:
    """Stream ``url`` into ``dest``.

    Raises:
        DownloadError: If the server answers with a non-success status
    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    logger.debug("GET %s -> %s", url, dest)

    async with client.stream("GET", url) as response:
        if not response.is_success:
            raise DownloadError(url, response.status_code)
        with open(dest, "wb") as f:
            async for chunk in response.aiter_bytes(CHUNK_SIZE):
                f.write(chunk)

    return dest


async def download_artifact(client: httpx.AsyncClient, artifact: DownloadArtifact) -> DownloadArtifact:
    """Fetch the checksum sidecar first, then the artifact itself."""
    await download_file(client, artifact.checksum_url, artifact.checksum_path)
    await download_file(client, artifact.url, artifact.local_path)
    return artifact


def parse_sidecar(text: str) -> str:
    """Read the digest from a ``<hex>  <filename>`` sidecar.

    A sidecar holding only the digest is accepted as well.
    """
    match = _DIGEST.match(text)
    if not match:
        raise ProvisionError(f"Malformed checksum file: {text[:80]!r}")
    return match.group(1).lower()


def sha256_file(path: Path) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for block in iter(lambda: f.read(CHUNK_SIZE), b""):
            digest.update(block)
    return digest.hexdigest()


async def verify_artifact(artifact: DownloadArtifact, expected: Optional[str] = None) -> DownloadArtifact:
    """Compare the artifact's SHA-256 with its sidecar.

    On mismatch the artifact and sidecar are deleted.

    Raises:
        ChecksumError: If the digests differ
    """
    if expected is None:
        expected = parse_sidecar(artifact.checksum_path.read_text(encoding="utf-8"))

    actual = await asyncio.to_thread(sha256_file, artifact.local_path)
    if actual != expected:
        artifact.discard()
        raise ChecksumError(artifact.local_path, expected, actual)

    logger.debug("Checksum OK for %s", artifact.local_path.name)
    return artifact
