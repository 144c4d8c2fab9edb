"""Unit tests for RuntimeLocator."""

import os
from unittest.mock import AsyncMock, patch

import pytest

from jvmboot.runtime import BundleType, ProbeEnvironment, RuntimeLocator, RuntimeSpec

pytestmark = pytest.mark.skipif(os.name == "nt", reason="fake runtimes are POSIX shell scripts")


class TestRuntimeLocator:
    """Test the locate() priority chain."""

    @pytest.fixture
    def locator(self, cache_root):
        return RuntimeLocator(cache_root, probe_timeout=10)

    @pytest.mark.asyncio
    async def test_nothing_found(self, locator, empty_path):
        env = ProbeEnvironment({"PATH": empty_path})
        assert await locator.locate(RuntimeSpec(version="17"), env) is None

    @pytest.mark.asyncio
    async def test_override_is_trusted(self, locator, tmp_path, make_runtime, empty_path):
        """The override wins even when its version does not match."""
        home = make_runtime(tmp_path / "override", version="11.0.2")
        env = ProbeEnvironment({"PATH": empty_path, "JVMBOOT_JAVA_HOME": str(home)})

        candidate = await locator.locate(RuntimeSpec(version="17"), env)

        assert candidate is not None
        assert candidate.source == "override"
        assert candidate.home_path == home

    @pytest.mark.asyncio
    async def test_missing_override_falls_through(self, locator, tmp_path, empty_path):
        env = ProbeEnvironment({"PATH": empty_path, "JVMBOOT_JAVA_HOME": str(tmp_path / "nope")})
        assert await locator.locate(RuntimeSpec(version="17"), env) is None

    @pytest.mark.asyncio
    async def test_java_home_match(self, locator, tmp_path, make_runtime, empty_path):
        home = make_runtime(tmp_path / "jdk17", version="17.0.2")
        env = ProbeEnvironment({"PATH": empty_path, "JAVA_HOME": str(home)})

        candidate = await locator.locate(RuntimeSpec(version="17"), env)

        assert candidate.source == "java_home"
        assert candidate.detected_version == 17.0

    @pytest.mark.asyncio
    async def test_java_home_ignored_when_not_preferred(self, cache_root, tmp_path, make_runtime, empty_path):
        home = make_runtime(tmp_path / "jdk17", version="17.0.2")
        env = ProbeEnvironment({"PATH": empty_path, "JAVA_HOME": str(home)})
        locator = RuntimeLocator(cache_root, prefer_java_home=False)

        assert await locator.locate(RuntimeSpec(version="17"), env) is None

    @pytest.mark.asyncio
    async def test_java_home_version_mismatch_falls_through(self, locator, tmp_path, make_runtime):
        java_home = make_runtime(tmp_path / "jdk11", version="11.0.20")
        on_path = make_runtime(tmp_path / "jdk17", version="17.0.2")
        env = ProbeEnvironment({"PATH": str(on_path / "bin"), "JAVA_HOME": str(java_home)})

        candidate = await locator.locate(RuntimeSpec(version="17"), env)

        assert candidate.source == "path"
        assert candidate.home_path == on_path.resolve()

    @pytest.mark.asyncio
    async def test_path_wins_over_cache(self, locator, cache_root, tmp_path, make_runtime):
        """A matching java on PATH is returned without touching the cache."""
        make_runtime(cache_root / "jre" / "17" / "zulu17", version="17.0.8")
        on_path = make_runtime(tmp_path / "system", version="17.0.2")
        env = ProbeEnvironment({"PATH": str(on_path / "bin")})

        with patch.object(locator, "_check_cache", new_callable=AsyncMock) as check_cache:
            candidate = await locator.locate(RuntimeSpec(version="17"), env)

        assert candidate.source == "path"
        check_cache.assert_not_called()

    @pytest.mark.asyncio
    async def test_cache_hit(self, locator, cache_root, make_runtime, empty_path):
        home = make_runtime(cache_root / "jre" / "11" / "zulu11.66-ca-jre11.0.20", version="11.0.20")
        env = ProbeEnvironment({"PATH": empty_path})

        candidate = await locator.locate(RuntimeSpec(version="11"), env)

        assert candidate.source == "cache"
        assert candidate.home_path == home

    @pytest.mark.asyncio
    async def test_cache_prefers_jdk_for_jre_request(self, locator, cache_root, make_runtime, empty_path):
        make_runtime(cache_root / "jre" / "17" / "zulu17-jre", version="17.0.2")
        jdk = make_runtime(cache_root / "jdk" / "17" / "zulu17-jdk", version="17.0.2")
        env = ProbeEnvironment({"PATH": empty_path})

        candidate = await locator.locate(RuntimeSpec(version="17"), env)

        assert candidate.home_path == jdk

    @pytest.mark.asyncio
    async def test_cache_never_offers_jre_for_jdk_request(self, locator, cache_root, make_runtime, empty_path):
        make_runtime(cache_root / "jre" / "17" / "zulu17-jre", version="17.0.2")
        env = ProbeEnvironment({"PATH": empty_path})

        spec = RuntimeSpec(version="17", bundle_type=BundleType.JDK)
        assert await locator.locate(spec, env) is None

    @pytest.mark.asyncio
    async def test_ambiguous_cache_entry_skipped(self, locator, cache_root, make_runtime, empty_path):
        make_runtime(cache_root / "jdk" / "17" / "a", version="17.0.2")
        make_runtime(cache_root / "jdk" / "17" / "b", version="17.0.2")
        fallback = make_runtime(cache_root / "jre" / "17" / "zulu17", version="17.0.2")
        env = ProbeEnvironment({"PATH": empty_path})

        candidate = await locator.locate(RuntimeSpec(version="17"), env)

        assert candidate.home_path == fallback

    @pytest.mark.asyncio
    async def test_legacy_alias_matches(self, locator, cache_root, make_runtime, empty_path):
        make_runtime(cache_root / "jre" / "8" / "zulu8", version="1.8.0_372")
        env = ProbeEnvironment({"PATH": empty_path})

        candidate = await locator.locate(RuntimeSpec(version="8"), env)

        assert candidate is not None
        assert candidate.detected_version == 1.8


class TestProbeVersion:
    """Test probing a java executable."""

    @pytest.mark.asyncio
    async def test_failing_probe_returns_none(self, cache_root, tmp_path, make_runtime, empty_path):
        home = make_runtime(tmp_path / "broken", version="17.0.2", version_exit=1)
        locator = RuntimeLocator(cache_root)

        version = await locator.probe_version(home / "bin" / "java", ProbeEnvironment({"PATH": empty_path}))

        assert version is None

    @pytest.mark.asyncio
    async def test_missing_executable_returns_none(self, cache_root, tmp_path):
        locator = RuntimeLocator(cache_root)
        assert await locator.probe_version(tmp_path / "java", ProbeEnvironment({})) is None

    @pytest.mark.asyncio
    async def test_probe_does_not_touch_os_environ(self, cache_root, tmp_path, make_runtime):
        home = make_runtime(tmp_path / "jdk", version="17.0.2")
        before = dict(os.environ)

        await RuntimeLocator(cache_root).locate(
            RuntimeSpec(version="17"), ProbeEnvironment({"JAVA_HOME": str(home)})
        )

        assert dict(os.environ) == before
