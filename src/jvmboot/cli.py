"""Command line entry point.

Every argument belongs to the Java application: ``-D``/``-X`` flags go to
the JVM, the rest to the program. The app directory (holding
``jvmboot.toml``) comes from the caller, ``JVMBOOT_APP_DIR`` or the current
directory.

Example:
    JVMBOOT_APP_DIR=/opt/myapp jvmboot -Xmx512m --port 9000
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional, Union

from .config import load_config
from .errors import LauncherError
from .orchestrator import run

APP_DIR_ENV = "JVMBOOT_APP_DIR"
LOG_LEVEL_ENV = "JVMBOOT_LOG_LEVEL"


def setup_logging() -> None:
    # stdout belongs to the child process
    level_name = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def resolve_app_dir(app_dir: Optional[Union[str, Path]] = None) -> Path:
    if app_dir:
        return Path(app_dir)
    return Path(os.environ.get(APP_DIR_ENV) or Path.cwd())


def run_launcher(argv: List[str], app_dir: Optional[Union[str, Path]] = None) -> int:
    """Run the launcher and return the exit status instead of exiting."""
    try:
        config = load_config(resolve_app_dir(app_dir))
        return asyncio.run(run(config, argv))
    except LauncherError as e:
        logging.getLogger(__name__).debug("Launcher failed", exc_info=True)
        print(f"❌ {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


def main(app_dir: Optional[Union[str, Path]] = None) -> None:
    """Console script entry point.

    Packaged apps can ship a two-line script calling
    ``main(Path(__file__).parent)`` next to their jars.
    """
    setup_logging()
    sys.exit(run_launcher(sys.argv[1:], app_dir))


if __name__ == "__main__":
    main()
