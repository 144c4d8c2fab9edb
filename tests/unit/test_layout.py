"""Unit tests for the runtime cache layout and the environment value."""

import os
from pathlib import Path

import pytest

from jvmboot.errors import RuntimeLayoutError
from jvmboot.runtime import BundleType, ProbeEnvironment, RuntimeSpec
from jvmboot.runtime.layout import (
    cache_probe_dirs,
    find_runtime_home,
    install_dir,
    install_dir_for,
    satisfies,
)


def _touch_java(home: Path) -> Path:
    java = home / "bin" / ("java.exe" if os.name == "nt" else "java")
    java.parent.mkdir(parents=True)
    java.write_text("")
    return home


class TestInstallDir:
    """Test cache directory naming."""

    def test_plain_jre(self, tmp_path):
        assert install_dir(tmp_path, BundleType.JRE, "17", False) == tmp_path / "jre" / "17"

    def test_javafx_jdk(self, tmp_path):
        assert install_dir(tmp_path, BundleType.JDK, "11", True) == tmp_path / "jdk" / "11fx"

    def test_from_spec(self, tmp_path):
        spec = RuntimeSpec(version="1.8", bundle_type=BundleType.JDK, javafx=True)
        assert install_dir_for(tmp_path, spec) == tmp_path / "jdk" / "1.8fx"


class TestCacheProbeDirs:
    """Test cache probe ordering."""

    def test_jre_request_probes_richest_first(self, tmp_path):
        spec = RuntimeSpec(version="17")
        assert cache_probe_dirs(tmp_path, spec) == [
            tmp_path / "jdk" / "17fx",
            tmp_path / "jdk" / "17",
            tmp_path / "jre" / "17fx",
            tmp_path / "jre" / "17",
        ]

    def test_jdk_request_skips_jres(self, tmp_path):
        spec = RuntimeSpec(version="17", bundle_type=BundleType.JDK)
        assert cache_probe_dirs(tmp_path, spec) == [
            tmp_path / "jdk" / "17fx",
            tmp_path / "jdk" / "17",
        ]

    def test_javafx_request_needs_javafx(self, tmp_path):
        spec = RuntimeSpec(version="17", javafx=True)
        assert cache_probe_dirs(tmp_path, spec) == [
            tmp_path / "jdk" / "17fx",
            tmp_path / "jre" / "17fx",
        ]

    def test_satisfies(self):
        jdk_fx = RuntimeSpec(version="17", bundle_type=BundleType.JDK, javafx=True)
        assert satisfies(BundleType.JDK, True, jdk_fx)
        assert not satisfies(BundleType.JRE, True, jdk_fx)
        assert not satisfies(BundleType.JDK, False, jdk_fx)


class TestFindRuntimeHome:
    """Test discovery of the vendor directory."""

    def test_single_vendor_dir(self, tmp_path):
        home = _touch_java(tmp_path / "zulu17.44.15-ca-jre17.0.8-linux_x64")
        assert find_runtime_home(tmp_path) == home

    def test_macos_bundle_layout(self, tmp_path):
        home = _touch_java(tmp_path / "zulu-17.jre" / "Contents" / "Home")
        assert find_runtime_home(tmp_path) == home

    def test_flat_layout(self, tmp_path):
        _touch_java(tmp_path)
        assert find_runtime_home(tmp_path) == tmp_path

    def test_ignores_non_runtime_entries(self, tmp_path):
        home = _touch_java(tmp_path / "jdk-17")
        (tmp_path / "docs").mkdir()
        (tmp_path / "readme.txt").write_text("hi")
        (tmp_path / ".partial").mkdir()
        assert find_runtime_home(tmp_path) == home

    def test_empty_directory(self, tmp_path):
        with pytest.raises(RuntimeLayoutError, match="No runtime found"):
            find_runtime_home(tmp_path)

    def test_missing_directory(self, tmp_path):
        with pytest.raises(RuntimeLayoutError):
            find_runtime_home(tmp_path / "missing")

    def test_ambiguous_layout(self, tmp_path):
        _touch_java(tmp_path / "zulu17-a")
        _touch_java(tmp_path / "zulu17-b")
        with pytest.raises(RuntimeLayoutError, match="Ambiguous") as exc_info:
            find_runtime_home(tmp_path)
        assert len(exc_info.value.candidates) == 2


class TestProbeEnvironment:
    """Test the immutable environment value."""

    def test_is_immutable(self):
        env = ProbeEnvironment({"A": "1"})
        with pytest.raises(TypeError):
            env.variables["A"] = "2"

    def test_with_variable_returns_copy(self):
        env = ProbeEnvironment({"A": "1"})
        updated = env.with_variable("A", "2")
        assert env.get("A") == "1"
        assert updated.get("A") == "2"

    def test_empty_values_read_as_missing(self):
        env = ProbeEnvironment({"JAVA_HOME": ""})
        assert env.get("JAVA_HOME") is None
        assert env.get("JAVA_HOME", "fallback") == "fallback"

    def test_path_prepended(self):
        env = ProbeEnvironment({"PATH": os.pathsep.join(["/usr/bin", "/bin"])})
        updated = env.with_path_prepended("/opt/java/bin")
        assert updated.path_entries == ["/opt/java/bin", "/usr/bin", "/bin"]
        assert env.path_entries == ["/usr/bin", "/bin"]

    def test_for_runtime(self, tmp_path):
        env = ProbeEnvironment({"PATH": "/usr/bin"})
        child = env.for_runtime(tmp_path, tmp_path / "bin")
        assert child.get("JAVA_HOME") == str(tmp_path)
        assert child.path_entries[0] == str(tmp_path / "bin")

    def test_from_os_prefers_process_environment(self, monkeypatch):
        monkeypatch.setenv("JVMBOOT_TEST_VALUE", "from-os")
        env = ProbeEnvironment.from_os({"JVMBOOT_TEST_VALUE": "from-dotenv", "ONLY_DOTENV": "x"})
        assert env.get("JVMBOOT_TEST_VALUE") == "from-os"
        assert env.get("ONLY_DOTENV") == "x"

    def test_which_uses_own_path(self, tmp_path):
        env = ProbeEnvironment({"PATH": str(tmp_path)})
        assert env.which("definitely-not-a-real-command") is None
