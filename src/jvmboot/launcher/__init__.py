"""Launch plan construction and child process execution."""

from .plan import (
    ClasspathMode,
    JarMode,
    LaunchMode,
    LaunchPlan,
    LaunchSettings,
    build_classpath,
    build_launch_plan,
    split_args,
)
from .process import ProcessLauncher, StdinRelay, exit_status

__all__ = [
    "ClasspathMode",
    "JarMode",
    "LaunchMode",
    "LaunchPlan",
    "LaunchSettings",
    "ProcessLauncher",
    "StdinRelay",
    "build_classpath",
    "build_launch_plan",
    "exit_status",
    "split_args",
]
