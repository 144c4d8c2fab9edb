"""Sequencing of locate, provision and launch for one invocation."""

from __future__ import annotations

import logging
import sys
from typing import Optional, Sequence

from .bootstrap import RuntimeProvisioner, get_source
from .config import LauncherConfig
from .launcher import ProcessLauncher
from .runtime import InstalledRuntime, ProbeEnvironment, RuntimeLocator

logger = logging.getLogger(__name__)


class Orchestrator:
    """Locate a runtime, provision one if needed, then launch the app.

    Collaborators can be injected; by default they are built from the config.
    ``env`` replaces the environment captured at config load.
    """

    def __init__(
        self,
        config: LauncherConfig,
        env: Optional[ProbeEnvironment] = None,
        locator: Optional[RuntimeLocator] = None,
        provisioner: Optional[RuntimeProvisioner] = None,
        launcher: Optional[ProcessLauncher] = None,
    ):
        self.config = config
        self.env = env or config.env
        self.spec = config.runtime_spec()
        cache_root = config.cache_root(self.env)

        self.locator = locator or RuntimeLocator(
            cache_root,
            prefer_java_home=config.launcher.prefer_java_home,
        )
        self.provisioner = provisioner or RuntimeProvisioner(
            cache_root,
            get_source(
                self.spec.provider,
                adoptium_url=config.providers.adoptium_url,
                zulu_url=config.providers.zulu_url,
            ),
            http_timeout=config.launcher.http_timeout,
        )
        self.launcher = launcher or ProcessLauncher(config.launch_settings(), self.env)

    async def resolve_runtime(self) -> InstalledRuntime:
        """Select the one runtime this invocation will use."""
        candidate = await self.locator.locate(self.spec, self.env)
        if candidate is not None:
            logger.info("Using %r", candidate)
            return candidate.to_installed()

        print(f"Downloading Java runtime for version {self.spec.version}", file=sys.stderr)
        return await self.provisioner.provision(self.spec)

    async def run(self, raw_args: Sequence[str]) -> int:
        runtime = await self.resolve_runtime()
        return await self.launcher.launch(runtime, raw_args)


async def run(
    config: LauncherConfig,
    raw_args: Sequence[str],
    env: Optional[ProbeEnvironment] = None,
) -> int:
    """Run the configured application and return its exit status."""
    return await Orchestrator(config, env=env).run(raw_args)
