"""Construction of the Java command line."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple, Union

from ..runtime.types import InstalledRuntime

# Arguments with these prefixes are JVM flags, not program arguments
JVM_FLAG_PREFIXES = ("-D", "-X")

# Prefix of the system properties handed to the app, e.g. -Djvmboot.port=8080
DEFAULT_PROPERTY_NAMESPACE = "jvmboot"


@dataclass(frozen=True)
class JarMode:
    """Run an executable jar, relative to the app directory."""

    jar: str


@dataclass(frozen=True)
class ClasspathMode:
    """Run a main class on a colon-delimited, app-relative classpath."""

    classpath: str
    main_class: str


LaunchMode = Union[JarMode, ClasspathMode]


@dataclass(frozen=True)
class LaunchSettings:
    """Build-time values the launcher passes through unchanged."""

    app_dir: Path
    mode: LaunchMode
    port: str = ""
    war_path: str = ""
    property_namespace: str = DEFAULT_PROPERTY_NAMESPACE


@dataclass(frozen=True)
class LaunchPlan:
    """Everything needed to spawn the child, built once per invocation."""

    executable: Path
    jvm_args: Tuple[str, ...]
    program_args: Tuple[str, ...]
    mode: LaunchMode
    app_dir: Path

    def command(self) -> List[str]:
        cmd = [str(self.executable), *self.jvm_args]
        if isinstance(self.mode, JarMode):
            cmd += ["-jar", str(self.app_dir / self.mode.jar)]
        else:
            cmd += ["-cp", build_classpath(self.app_dir, self.mode.classpath), self.mode.main_class]
        cmd += self.program_args
        return cmd


def split_args(raw_args: Iterable[str]) -> Tuple[List[str], List[str]]:
    """Split raw arguments into (jvm flags, program arguments), keeping order."""
    jvm_args: List[str] = []
    program_args: List[str] = []
    for arg in raw_args:
        if arg.startswith(JVM_FLAG_PREFIXES):
            jvm_args.append(arg)
        else:
            program_args.append(arg)
    return jvm_args, program_args


def system_properties(settings: LaunchSettings) -> List[str]:
    prefix = settings.property_namespace
    return [
        f"-D{prefix}.base={settings.app_dir}",
        f"-D{prefix}.port={settings.port}",
        f"-D{prefix}.war.path={settings.war_path}",
    ]


def build_classpath(app_dir: Path, classpath: str) -> str:
    """Prefix each ``:``-separated entry with ``app_dir`` and join with ``os.pathsep``."""
    entries = [part for part in classpath.split(":") if part]
    return os.pathsep.join(str(Path(app_dir) / part) for part in entries)


def build_launch_plan(
    runtime: InstalledRuntime,
    raw_args: Sequence[str],
    settings: LaunchSettings,
) -> LaunchPlan:
    jvm_args, program_args = split_args(raw_args)
    return LaunchPlan(
        executable=runtime.java_executable,
        jvm_args=tuple(system_properties(settings) + jvm_args),
        program_args=tuple(program_args),
        mode=settings.mode,
        app_dir=Path(settings.app_dir),
    )
