"""Exception hierarchy for runtime resolution, provisioning and launch."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence


class LauncherError(Exception):
    """Base class for every error raised by jvmboot."""


class ConfigError(LauncherError):
    """Raised when the launcher configuration is missing or invalid."""


class ParseError(LauncherError, ValueError):
    """Raised when a string holds no recognizable Java version.

    Callers treat this as "no match", never as a fatal condition.
    """

    def __init__(self, raw: str):
        self.raw = raw
        preview = raw.strip().splitlines()[0] if raw.strip() else ""
        super().__init__(f"No Java version found in {preview!r}")


class RuntimeLayoutError(LauncherError):
    """Raised when a cache directory has zero or several runtime roots."""

    def __init__(self, directory: Path, candidates: Optional[Sequence[Path]] = None):
        self.directory = directory
        self.candidates: List[Path] = list(candidates or [])
        if self.candidates:
            names = ", ".join(sorted(c.name for c in self.candidates))
            message = f"Ambiguous runtime layout in {directory}: {names}"
        else:
            message = f"No runtime found in {directory}"
        super().__init__(message)


class ProvisionError(LauncherError):
    """Raised when a runtime cannot be downloaded and installed."""


class UnsupportedPlatformError(ProvisionError):
    """Raised when the OS or CPU architecture has no provider mapping."""

    def __init__(self, provider: str, kind: str, value: str):
        self.provider = provider
        self.kind = kind
        self.value = value
        super().__init__(f"Unsupported {kind} for {provider}: {value}")


class DownloadError(ProvisionError):
    """Raised when a download answers with a non-success HTTP status."""

    def __init__(self, url: str, status_code: int):
        self.url = url
        self.status_code = status_code
        super().__init__(f"Download failed with HTTP {status_code}: {url}")


class ChecksumError(ProvisionError):
    """Raised when a downloaded artifact does not match its sidecar digest."""

    def __init__(self, path: Path, expected: str, actual: str):
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"File and checksum don't match for {path.name}: "
            f"expected {expected}, got {actual}"
        )
