"""jvmboot: locate or provision a Java runtime, then launch a packaged app."""

from .errors import (
    ChecksumError,
    ConfigError,
    DownloadError,
    LauncherError,
    ParseError,
    ProvisionError,
    RuntimeLayoutError,
    UnsupportedPlatformError,
)

__version__ = "0.1.0"

__all__ = [
    "ChecksumError",
    "ConfigError",
    "DownloadError",
    "LauncherError",
    "ParseError",
    "ProvisionError",
    "RuntimeLayoutError",
    "UnsupportedPlatformError",
    "__version__",
]
