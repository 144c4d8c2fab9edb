"""Child process execution with stdin relay and exit-code forwarding."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import sys
import threading
from typing import BinaryIO, Optional, Sequence

from ..errors import LauncherError
from ..runtime.environment import ProbeEnvironment
from ..runtime.types import InstalledRuntime
from .plan import LaunchPlan, LaunchSettings, build_launch_plan

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 64


def _default_stdin() -> Optional[BinaryIO]:
    stream = sys.stdin
    if stream is None:
        return None
    return getattr(stream, "buffer", None)


class StdinRelay:
    """Forward bytes from a blocking stream to a child's stdin.

    The source is read in a daemon thread so a parent blocked on an idle
    terminal never keeps the interpreter alive after the child exits.
    """

    def __init__(self, source: Optional[BinaryIO]):
        self.source = source

    def _read(self) -> bytes:
        read = getattr(self.source, "read1", None) or self.source.read
        return read(CHUNK_SIZE)

    def _reader(self, loop: asyncio.AbstractEventLoop, queue: "asyncio.Queue[bytes]") -> None:
        while True:
            try:
                chunk = self._read()
            except (OSError, ValueError):
                chunk = b""
            try:
                loop.call_soon_threadsafe(queue.put_nowait, chunk)
            except RuntimeError:
                # Event loop already closed
                return
            if not chunk:
                return

    async def pump(self, process: asyncio.subprocess.Process) -> None:
        if process.stdin is None:
            return
        if self.source is None:
            process.stdin.close()
            return

        loop = asyncio.get_running_loop()
        queue: "asyncio.Queue[bytes]" = asyncio.Queue()
        threading.Thread(
            target=self._reader, args=(loop, queue), name="jvmboot-stdin", daemon=True
        ).start()

        while True:
            chunk = await queue.get()
            try:
                if not chunk:
                    process.stdin.close()
                    return
                process.stdin.write(chunk)
                await process.stdin.drain()
            except (BrokenPipeError, ConnectionResetError):
                # Child closed its input
                return


def exit_status(returncode: int) -> int:
    """Map a subprocess return code to a process exit status.

    Children killed by signal N report -N; shells report that as 128 + N.
    """
    if returncode < 0:
        return 128 - returncode
    return returncode


class ProcessLauncher:
    """Spawn the Java application and wait for it."""

    def __init__(
        self,
        settings: LaunchSettings,
        env: ProbeEnvironment,
        stdin: Optional[BinaryIO] = None,
        relay_stdin: bool = True,
    ):
        self.settings = settings
        self.env = env
        self.stdin = stdin if stdin is not None else _default_stdin()
        self.relay_stdin = relay_stdin

    def plan(self, runtime: InstalledRuntime, raw_args: Sequence[str]) -> LaunchPlan:
        return build_launch_plan(runtime, raw_args, self.settings)

    async def launch(self, runtime: InstalledRuntime, raw_args: Sequence[str]) -> int:
        """Run the application on ``runtime`` and return its exit status."""
        return await self.run(self.plan(runtime, raw_args), runtime)

    async def run(self, plan: LaunchPlan, runtime: InstalledRuntime) -> int:
        command = plan.command()
        logger.debug("Launching %s", command)

        child_env = self.env.for_runtime(runtime.home_path, runtime.bin_path)
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.PIPE if self.relay_stdin else None,
                env=child_env.as_dict(),
            )
        except OSError as e:
            raise LauncherError(f"Could not start {command[0]}: {e}") from e

        relay = asyncio.create_task(StdinRelay(self.stdin).pump(process))
        try:
            returncode = await process.wait()
        finally:
            relay.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await relay

        logger.debug("Child exited with %s", returncode)
        return exit_status(returncode)
