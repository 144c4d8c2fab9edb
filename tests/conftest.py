"""Pytest configuration and shared fixtures."""

import io
import stat
import tarfile
import zipfile
from pathlib import Path
from typing import Callable, Optional

import pytest

# Fake runtimes only use shell builtins so tests can run with an empty PATH.
FAKE_JAVA_TEMPLATE = """#!/bin/sh
if [ "$1" = "-version" ]; then
    echo 'openjdk version "{version}" 2022-01-18' >&2
    exit {version_exit}
fi
here="${{0%/*}}"
: > "$here/../args.txt"
for arg in "$@"; do
    printf '%s\\n' "$arg" >> "$here/../args.txt"
done
printf '%s\\n' "$JAVA_HOME" > "$here/../java_home.txt"
{stdin_block}exit {exit_code}
"""

STDIN_BLOCK = """: > "$here/../stdin.txt"
while IFS= read -r line; do
    printf '%s\\n' "$line" >> "$here/../stdin.txt"
done
"""


def fake_java_script(version: str = "17.0.2", exit_code: int = 0, version_exit: int = 0,
                     read_stdin: bool = True) -> str:
    return FAKE_JAVA_TEMPLATE.format(
        version=version,
        exit_code=exit_code,
        version_exit=version_exit,
        stdin_block=STDIN_BLOCK if read_stdin else "",
    )


@pytest.fixture
def make_runtime() -> Callable[..., Path]:
    """Factory writing a fake runtime home with an executable ``bin/java``.

    The fake records its arguments, JAVA_HOME and stdin next to ``bin/``
    (``args.txt``, ``java_home.txt``, ``stdin.txt``) and exits with
    ``exit_code``. With ``read_stdin=False`` it exits without reading stdin.
    """

    def _make(home: Path, version: str = "17.0.2", exit_code: int = 0, version_exit: int = 0,
              read_stdin: bool = True) -> Path:
        bin_dir = home / "bin"
        bin_dir.mkdir(parents=True, exist_ok=True)
        java = bin_dir / "java"
        java.write_text(fake_java_script(version, exit_code, version_exit, read_stdin))
        java.chmod(0o755)
        return home

    return _make


@pytest.fixture
def make_archive() -> Callable[..., bytes]:
    """Factory building an in-memory runtime archive.

    The archive holds ``{top}/bin/java`` (executable) and ``{top}/release``.
    """

    def _make(fmt: str = "zip", top: Optional[str] = "zulu17-linux_x64", version: str = "17.0.2",
              exit_code: int = 0) -> bytes:
        prefix = f"{top}/" if top else ""
        script = fake_java_script(version, exit_code).encode()
        release = f'JAVA_VERSION="{version}"\n'.encode()
        buffer = io.BytesIO()

        if fmt == "zip":
            with zipfile.ZipFile(buffer, "w") as zf:
                info = zipfile.ZipInfo(f"{prefix}bin/java")
                info.external_attr = (stat.S_IFREG | 0o755) << 16
                zf.writestr(info, script)
                zf.writestr(f"{prefix}release", release)
        else:
            with tarfile.open(fileobj=buffer, mode="w:gz") as tf:
                for name, data, mode in (
                    (f"{prefix}bin/java", script, 0o755),
                    (f"{prefix}release", release, 0o644),
                ):
                    info = tarfile.TarInfo(name)
                    info.size = len(data)
                    info.mode = mode
                    tf.addfile(info, io.BytesIO(data))

        return buffer.getvalue()

    return _make


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    """Empty runtime cache root."""
    root = tmp_path / "cache"
    root.mkdir()
    return root


@pytest.fixture
def empty_path(tmp_path: Path) -> str:
    """A PATH value holding no java."""
    directory = tmp_path / "empty-bin"
    directory.mkdir()
    return str(directory)
