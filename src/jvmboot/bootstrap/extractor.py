"""Archive extraction for downloaded runtimes.

The strategy is picked from the file extension: ``.zip`` or ``.tar.gz`` /
``.tgz``. The archive is deleted once it has been unpacked.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import stat
import tarfile
import zipfile
from pathlib import Path

from ..errors import ProvisionError

logger = logging.getLogger(__name__)

TAR_SUFFIXES = (".tar.gz", ".tgz")


def _inside(dest: Path, target: Path) -> bool:
    try:
        target.resolve().relative_to(dest.resolve())
        return True
    except ValueError:
        return False


def extract_zip(archive: Path, dest: Path) -> Path:
    """Unpack a zip archive, restoring Unix permission bits and symlinks."""
    with zipfile.ZipFile(archive) as zf:
        for info in zf.infolist():
            target = dest / info.filename
            if not _inside(dest, target):
                raise ProvisionError(f"Refusing to extract {info.filename!r} outside {dest}")

            if info.is_dir():
                target.mkdir(parents=True, exist_ok=True)
                continue

            target.parent.mkdir(parents=True, exist_ok=True)
            mode = info.external_attr >> 16

            if stat.S_ISLNK(mode) and os.name != "nt":
                link = zf.read(info).decode("utf-8")
                if target.is_symlink() or target.exists():
                    target.unlink()
                os.symlink(link, target)
                continue

            with zf.open(info) as src, open(target, "wb") as dst:
                shutil.copyfileobj(src, dst)

            # Zip entries made on Unix carry the mode in the high bits
            if mode & 0o777:
                os.chmod(target, mode & 0o777)

    return dest


def extract_tar(archive: Path, dest: Path) -> Path:
    with tarfile.open(archive, "r:*") as tf:
        if hasattr(tarfile, "data_filter"):
            tf.extractall(dest, filter="data")
        else:
            for member in tf.getmembers():
                if not _inside(dest, dest / member.name):
                    raise ProvisionError(f"Refusing to extract {member.name!r} outside {dest}")
            tf.extractall(dest)
    return dest


def _strategy(archive: Path):
    name = archive.name.lower()
    if name.endswith(".zip"):
        return extract_zip
    if name.endswith(TAR_SUFFIXES):
        return extract_tar
    raise ProvisionError(f"Unsupported archive format: {archive.name}")


async def extract_archive(archive: Path, dest: Path) -> Path:
    """Extract ``archive`` into ``dest`` and delete the archive.

    Args:
        archive: Path to a ``.zip``, ``.tar.gz`` or ``.tgz`` file
        dest: Directory to unpack into (created if missing)

    Returns:
        ``dest``

    Raises:
        ProvisionError: If the format is unknown or the archive is corrupt
    """
    strategy = _strategy(archive)
    dest.mkdir(parents=True, exist_ok=True)
    logger.debug("Extracting %s -> %s", archive, dest)

    try:
        await asyncio.to_thread(strategy, archive, dest)
    except (zipfile.BadZipFile, tarfile.TarError) as e:
        raise ProvisionError(f"Could not extract {archive.name}: {e}") from e

    archive.unlink()
    return dest
