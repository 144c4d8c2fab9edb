"""Configuration file parser for the launcher.

The packaging step writes ``jvmboot.toml`` next to the application jars; its
values are opaque to the launcher and passed through as-is. Environment
variables (optionally seeded from a ``.env`` file in the app directory)
override where noted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import dotenv_values

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # Fallback for Python 3.10

from ..bootstrap.providers import ADOPTIUM_API_URL, ZULU_BINARY_URL
from ..errors import ConfigError, ParseError
from ..launcher.plan import (
    DEFAULT_PROPERTY_NAMESPACE,
    ClasspathMode,
    JarMode,
    LaunchMode,
    LaunchSettings,
)
from ..runtime.environment import ProbeEnvironment
from ..runtime.types import BundleType, Provider, RuntimeSpec
from ..runtime.version import normalize

CONFIG_FILE_NAME = "jvmboot.toml"
DOTENV_FILE_NAME = ".env"
CACHE_ROOT_ENV = "JVMBOOT_HOME"
DEFAULT_CACHE_DIR = "~/.jvmboot"

# Unsubstituted template values such as "{{JAR_NAME}}"
_PLACEHOLDER = re.compile(r"^\{\{\s*[A-Za-z0-9_]+\s*\}\}$")


def _resolved(value: Any) -> Optional[str]:
    """Return ``value`` as a string, or None if empty or still a placeholder."""
    if value is None:
        return None
    text = str(value).strip()
    if not text or _PLACEHOLDER.match(text):
        return None
    return text


_TRUE_VALUES = ("true", "yes", "1")
_FALSE_VALUES = ("false", "no", "0")


def _bool(value: Any, default: bool, key: str) -> bool:
    """Read a flag that may arrive as a TOML bool or a substituted string."""
    if isinstance(value, bool):
        return value
    text = _resolved(value)
    if text is None:
        return default
    if text.lower() in _TRUE_VALUES:
        return True
    if text.lower() in _FALSE_VALUES:
        return False
    raise ConfigError(f"Invalid {key} {value!r}; expected true or false")


def _float(value: Any, key: str) -> Optional[float]:
    text = _resolved(value)
    if text is None:
        return None
    try:
        return float(text)
    except ValueError:
        raise ConfigError(f"Invalid {key} {value!r}; expected a number of seconds") from None


@dataclass
class RuntimeSection:
    """The ``[runtime]`` table."""

    version: str = ""
    bundle_type: BundleType = BundleType.JRE
    javafx: bool = False
    provider: Provider = Provider.ZULU


@dataclass
class AppSection:
    """The ``[app]`` table."""

    jar: Optional[str] = None
    main_class: Optional[str] = None
    classpath: str = ""
    port: str = ""
    war_path: str = ""
    property_namespace: str = DEFAULT_PROPERTY_NAMESPACE


@dataclass
class LauncherSection:
    """The ``[launcher]`` table."""

    prefer_java_home: bool = True
    cache_dir: str = DEFAULT_CACHE_DIR
    http_timeout: Optional[float] = None


@dataclass
class ProvidersSection:
    """The ``[providers]`` table, endpoint overrides for mirrors."""

    adoptium_url: str = ADOPTIUM_API_URL
    zulu_url: str = ZULU_BINARY_URL


@dataclass
class LauncherConfig:
    """Complete launcher configuration."""

    app_dir: Path
    runtime: RuntimeSection = field(default_factory=RuntimeSection)
    app: AppSection = field(default_factory=AppSection)
    launcher: LauncherSection = field(default_factory=LauncherSection)
    providers: ProvidersSection = field(default_factory=ProvidersSection)
    env: ProbeEnvironment = field(default_factory=ProbeEnvironment)

    def runtime_spec(self) -> RuntimeSpec:
        return RuntimeSpec(
            version=self.runtime.version,
            bundle_type=self.runtime.bundle_type,
            javafx=self.runtime.javafx,
            provider=self.runtime.provider,
        )

    def launch_mode(self) -> LaunchMode:
        if self.app.jar:
            return JarMode(self.app.jar)
        if self.app.main_class:
            return ClasspathMode(classpath=self.app.classpath, main_class=self.app.main_class)
        raise ConfigError("Neither app.jar nor app.main_class is configured")

    def launch_settings(self) -> LaunchSettings:
        return LaunchSettings(
            app_dir=self.app_dir,
            mode=self.launch_mode(),
            port=self.app.port,
            war_path=self.app.war_path,
            property_namespace=self.app.property_namespace,
        )

    def cache_root(self, env: Optional[ProbeEnvironment] = None) -> Path:
        """Cache root; ``JVMBOOT_HOME`` wins over the config file."""
        override = (env or self.env).get(CACHE_ROOT_ENV)
        return Path(override or self.launcher.cache_dir).expanduser()


def find_config_file(app_dir: Path) -> Optional[Path]:
    """Find jvmboot.toml in the app directory."""
    config_file = app_dir / CONFIG_FILE_NAME
    if config_file.exists():
        return config_file
    return None


def _enum(enum_cls: Any, value: Any, key: str) -> Any:
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ConfigError(f"Invalid {key} {value!r}; expected one of: {allowed}") from None


def _load_environment(app_dir: Path, environ: Optional[Mapping[str, str]]) -> ProbeEnvironment:
    if environ is not None:
        return ProbeEnvironment(environ)
    dotenv_file = app_dir / DOTENV_FILE_NAME
    defaults: Dict[str, Optional[str]] = dotenv_values(dotenv_file) if dotenv_file.exists() else {}
    return ProbeEnvironment.from_os(defaults)


def load_config(app_dir: Path, environ: Optional[Mapping[str, str]] = None) -> LauncherConfig:
    """Load configuration from jvmboot.toml.

    Args:
        app_dir: Directory holding the application and its jvmboot.toml
        environ: Environment to use instead of os.environ plus .env

    Returns:
        LauncherConfig resolved once; launch mode placeholders are already
        collapsed to None

    Raises:
        ConfigError: If the file is missing, unreadable or incomplete
    """
    app_dir = Path(app_dir).resolve()
    config_file = find_config_file(app_dir)
    if not config_file:
        raise ConfigError(f"No {CONFIG_FILE_NAME} found in {app_dir}")

    try:
        with open(config_file, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Could not read {config_file}: {e}") from e

    config = LauncherConfig(app_dir=app_dir, env=_load_environment(app_dir, environ))

    # Parse runtime config
    runtime_data = data.get("runtime", {})
    version = _resolved(runtime_data.get("version"))
    if not version:
        raise ConfigError(f"runtime.version is required in {config_file}")
    try:
        normalize(version)
    except ParseError as e:
        raise ConfigError(f"Invalid runtime.version {version!r}") from e
    config.runtime.version = version
    config.runtime.bundle_type = _enum(
        BundleType, _resolved(runtime_data.get("bundle_type")) or "jre", "runtime.bundle_type"
    )
    config.runtime.javafx = _bool(runtime_data.get("javafx"), False, "runtime.javafx")
    config.runtime.provider = _enum(
        Provider, _resolved(runtime_data.get("provider")) or "zulu", "runtime.provider"
    )

    # Parse app config
    app_data = data.get("app", {})
    config.app.jar = _resolved(app_data.get("jar"))
    config.app.main_class = _resolved(app_data.get("main_class"))
    config.app.classpath = _resolved(app_data.get("classpath")) or ""
    config.app.port = _resolved(app_data.get("port")) or ""
    config.app.war_path = _resolved(app_data.get("war_path")) or ""
    config.app.property_namespace = (
        _resolved(app_data.get("property_namespace")) or DEFAULT_PROPERTY_NAMESPACE
    )

    # Parse launcher config
    launcher_data = data.get("launcher", {})
    config.launcher.prefer_java_home = _bool(
        launcher_data.get("prefer_java_home"), True, "launcher.prefer_java_home"
    )
    config.launcher.cache_dir = _resolved(launcher_data.get("cache_dir")) or DEFAULT_CACHE_DIR
    config.launcher.http_timeout = _float(launcher_data.get("http_timeout"), "launcher.http_timeout")

    # Parse provider endpoints
    providers_data = data.get("providers", {})
    config.providers.adoptium_url = _resolved(providers_data.get("adoptium_url")) or ADOPTIUM_API_URL
    config.providers.zulu_url = _resolved(providers_data.get("zulu_url")) or ZULU_BINARY_URL

    # Fail early rather than after a download
    config.launch_mode()

    return config
