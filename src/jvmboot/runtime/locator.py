"""Best-effort search for an already available Java runtime."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

from ..errors import ParseError, RuntimeLayoutError
from .environment import ProbeEnvironment
from .layout import cache_probe_dirs, find_runtime_home
from .types import RuntimeCandidate, RuntimeSpec, java_executable_name
from .version import matches, normalize, parse_version_output

logger = logging.getLogger(__name__)

OVERRIDE_ENV = "JVMBOOT_JAVA_HOME"
JAVA_HOME_ENV = "JAVA_HOME"
DEFAULT_PROBE_TIMEOUT = 15.0


class RuntimeLocator:
    """Locate a runtime satisfying a :class:`RuntimeSpec`.

    Priority:
    1. ``JVMBOOT_JAVA_HOME``, trusted without a version check
    2. ``JAVA_HOME`` (when ``prefer_java_home`` is set)
    3. ``java`` on PATH
    4. The local cache, richest compatible bundle first

    Every failed step falls through to the next one; nothing here raises
    for a missing or mismatched runtime.
    """

    def __init__(
        self,
        cache_root: Path,
        prefer_java_home: bool = True,
        probe_timeout: Optional[float] = DEFAULT_PROBE_TIMEOUT,
    ):
        """Initialize locator.

        Args:
            cache_root: Root of the provisioned-runtime cache
            prefer_java_home: Whether JAVA_HOME is tried before PATH
            probe_timeout: Seconds to wait for ``java -version``
        """
        self.cache_root = Path(cache_root)
        self.prefer_java_home = prefer_java_home
        self.probe_timeout = probe_timeout

    async def locate(
        self,
        spec: RuntimeSpec,
        env: ProbeEnvironment,
    ) -> Optional[RuntimeCandidate]:
        """Return the first matching runtime, or None if every strategy failed."""
        target = normalize(spec.version)

        # 1. Unconditional override (highest priority)
        candidate = self._check_override(env)
        if candidate:
            return candidate

        # 2. Configured home
        if self.prefer_java_home:
            candidate = await self._check_java_home(env, target)
            if candidate:
                return candidate

        # 3. System PATH
        candidate = await self._check_system_path(env, target)
        if candidate:
            return candidate

        # 4. Local cache
        return await self._check_cache(spec, env, target)

    def _check_override(self, env: ProbeEnvironment) -> Optional[RuntimeCandidate]:
        override = env.get(OVERRIDE_ENV)
        if not override:
            return None

        home = Path(override).expanduser()
        if not home.is_dir():
            logger.debug("%s=%s does not exist, ignoring", OVERRIDE_ENV, override)
            return None

        logger.debug("Using runtime override %s", home)
        return RuntimeCandidate(home_path=home, source="override")

    async def _check_java_home(
        self,
        env: ProbeEnvironment,
        target: float,
    ) -> Optional[RuntimeCandidate]:
        java_home = env.get(JAVA_HOME_ENV)
        if not java_home:
            return None
        return await self._check_home(Path(java_home).expanduser(), "java_home", env, target)

    async def _check_system_path(
        self,
        env: ProbeEnvironment,
        target: float,
    ) -> Optional[RuntimeCandidate]:
        java = env.which("java")
        if not java:
            logger.debug("No java on PATH")
            return None

        # Follow symlinks such as /usr/bin/java -> /usr/lib/jvm/.../bin/java
        bin_path = Path(java).resolve().parent
        version = await self.probe_version(java, env)
        if not matches(version, target):
            logger.debug("java on PATH reports %s, need %s", version, target)
            return None

        return RuntimeCandidate(home_path=bin_path.parent, source="path", detected_version=version)

    async def _check_cache(
        self,
        spec: RuntimeSpec,
        env: ProbeEnvironment,
        target: float,
    ) -> Optional[RuntimeCandidate]:
        for directory in cache_probe_dirs(self.cache_root, spec):
            try:
                home = find_runtime_home(directory)
            except RuntimeLayoutError as e:
                logger.debug("Skipping cache entry: %s", e)
                continue

            candidate = await self._check_home(home, "cache", env, target)
            if candidate:
                return candidate

        return None

    async def _check_home(
        self,
        home: Path,
        source: str,
        env: ProbeEnvironment,
        target: float,
    ) -> Optional[RuntimeCandidate]:
        bin_path = home / "bin"
        java = bin_path / java_executable_name()
        if not java.exists():
            logger.debug("%s has no %s", home, java.name)
            return None

        version = await self.probe_version(java, env.with_path_prepended(bin_path))
        if not matches(version, target):
            logger.debug("%s reports %s, need %s", home, version, target)
            return None

        return RuntimeCandidate(home_path=home, source=source, detected_version=version)

    async def probe_version(
        self,
        executable: Union[str, Path],
        env: ProbeEnvironment,
    ) -> Optional[float]:
        """Run ``java -version`` and return the normalized version, or None."""
        try:
            process = await asyncio.create_subprocess_exec(
                str(executable),
                "-version",
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env.as_dict(),
            )
        except OSError as e:
            logger.debug("Could not run %s: %s", executable, e)
            return None

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.probe_timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            logger.debug("%s -version timed out", executable)
            return None

        if process.returncode != 0:
            return None

        # java -version reports on stderr
        output = stderr.decode(errors="replace") + stdout.decode(errors="replace")
        try:
            return parse_version_output(output)
        except ParseError:
            return None
