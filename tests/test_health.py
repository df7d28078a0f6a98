"""Tests for check responses, cached execution and the registry."""

from __future__ import annotations

import threading

import pytest

from httphealth.health.cache import Cache
from httphealth.health.checks import FunctionCheck
from httphealth.health.models import CheckResponse, Status, critical, ok, unknown, warn
from httphealth.health.registry import CheckRegistry, RunResult, UnknownCheckError

from .conftest import CountingCheck, FakeClock


class _GatedCheck:
    """Holds every caller at a barrier, then lets call 2 finish after call 1."""

    def __init__(self) -> None:
        self.barrier = threading.Barrier(2, timeout=5)
        self.first_done = threading.Event()
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self) -> CheckResponse:
        with self._lock:
            self.calls += 1
            n = self.calls
        self.barrier.wait()
        if n == 2:
            self.first_done.wait(timeout=5)
        return ok(f"call {n}")


# ── CheckResponse ────────────────────────────────────────────────────────────


class TestCheckResponse:
    @pytest.mark.parametrize(
        ("status", "text"),
        [
            (Status.OK, "ok"),
            (Status.WARN, "warning"),
            (Status.CRITICAL, "critical"),
            (Status.UNKNOWN, "unknown"),
            (42, "critical"),
            (-1, "critical"),
        ],
    )
    def test_status_text(self, status: int, text: str) -> None:
        assert CheckResponse(status=status).status_text() == text

    def test_to_dict(self) -> None:
        resp = CheckResponse(status=Status.WARN, text="disk 91%", from_cache=True, cache_ttl=12)
        assert resp.to_dict() == {
            "text": "disk 91%",
            "status_code": 1,
            "status": "warning",
            "cache_used": True,
            "cache_ttl": 12,
        }

    def test_unrecognized_code_keeps_number(self) -> None:
        data = CheckResponse(status=7).to_dict()
        assert data["status_code"] == 7
        assert data["status"] == "critical"

    def test_predicates(self) -> None:
        assert ok().is_ok()
        assert warn().is_warn()
        assert critical().is_critical()
        assert unknown().is_unknown()
        assert not warn().is_ok()

    def test_defaults(self) -> None:
        resp = ok("fine")
        assert resp.text == "fine"
        assert resp.from_cache is False
        assert resp.cache_ttl == 0


# ── CheckEntry execution ─────────────────────────────────────────────────────


class TestCheckEntry:
    def test_uncached_runs_every_time(self, registry: CheckRegistry, cache: Cache) -> None:
        check = CountingCheck()
        entry = registry.register_check("live", check)

        for _ in range(3):
            resp = entry.run()
            assert resp.from_cache is False
            assert resp.cache_ttl == 0

        assert check.calls == 3
        assert "live" not in cache

    def test_cached_runs_once_per_window(self, registry: CheckRegistry, clock: FakeClock) -> None:
        check = CountingCheck(status=Status.WARN, text="slow")
        entry = registry.register_caching_check("slow", check, 10)

        first = entry.run()
        assert first.from_cache is False
        assert first.cache_ttl == 0

        clock.advance(4)
        second = entry.run()
        assert second.from_cache is True
        assert second.cache_ttl == 6
        assert second.status == Status.WARN
        assert second.text == "slow"
        assert check.calls == 1

    def test_cached_reruns_after_expiry(self, registry: CheckRegistry, clock: FakeClock) -> None:
        check = CountingCheck()
        entry = registry.register_caching_check("slow", check, 10)

        entry.run()
        clock.advance(10)
        resp = entry.run()

        assert resp.from_cache is False
        assert check.calls == 2

    def test_fault_becomes_unknown(self, registry: CheckRegistry) -> None:
        def boom() -> CheckResponse:
            raise RuntimeError("probe exploded")

        resp = registry.register_check("boom", boom).run()
        assert resp.status == Status.UNKNOWN
        assert "RuntimeError" in resp.text
        assert "probe exploded" in resp.text
        assert resp.from_cache is False

    def test_fault_is_not_cached(self, registry: CheckRegistry, cache: Cache) -> None:
        calls = []

        def flaky() -> CheckResponse:
            calls.append(1)
            if len(calls) == 1:
                raise ConnectionError("down")
            return ok("recovered")

        entry = registry.register_caching_check("flaky", flaky, 60)
        assert entry.run().status == Status.UNKNOWN
        assert "flaky" not in cache

        resp = entry.run()
        assert resp.is_ok()
        assert resp.text == "recovered"
        assert "flaky" in cache

    def test_wrong_return_type_becomes_unknown(self, registry: CheckRegistry) -> None:
        resp = registry.register_check("bad", lambda: "fine").run()
        assert resp.status == Status.UNKNOWN
        assert "str" in resp.text

    def test_concurrent_misses_each_run_last_set_wins(
        self, registry: CheckRegistry, cache: Cache,
    ) -> None:
        check = _GatedCheck()
        entry = registry.register_caching_check("cold", check, 60)
        results: list[CheckResponse] = []

        def request() -> None:
            resp = entry.run()
            results.append(resp)
            if resp.text == "call 1":
                check.first_done.set()

        threads = [threading.Thread(target=request) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        # both misses ran the check; neither waited on the other's result
        assert check.calls == 2
        assert sorted(r.text for r in results) == ["call 1", "call 2"]
        assert all(r.is_ok() and not r.from_cache for r in results)
        assert cache.get("cold")[0].text == "call 2"

    def test_check_cannot_leak_cache_flags(self, registry: CheckRegistry) -> None:
        lying = lambda: CheckResponse(from_cache=True, cache_ttl=500)  # noqa: E731
        resp = registry.register_check("liar", lying).run()
        assert resp.from_cache is False
        assert resp.cache_ttl == 0


# ── Registry ─────────────────────────────────────────────────────────────────


class TestCheckRegistry:
    def test_register_and_names(self, registry: CheckRegistry) -> None:
        registry.register_check("b", ok)
        registry.register_caching_check("a", ok, 30)

        assert registry.names() == ["a", "b"]
        assert len(registry) == 2
        assert "a" in registry
        assert registry.get("a").cache_ttl == 30
        assert registry.get("b").cache_ttl == 0
        assert registry.get("missing") is None

    def test_register_generic_check(self, registry: CheckRegistry) -> None:
        entry = registry.register("fn", FunctionCheck(lambda: warn("x")), cache_ttl=5)
        assert entry.cache_ttl == 5
        assert registry.run_one("fn").is_warn()

    def test_negative_ttl_rejected(self, registry: CheckRegistry) -> None:
        with pytest.raises(ValueError):
            registry.register_caching_check("neg", ok, -1)
        assert "neg" not in registry

    @pytest.mark.parametrize("ttl", [0.5, 10.0, "10", True])
    def test_non_integer_ttl_rejected(self, registry: CheckRegistry, ttl: object) -> None:
        with pytest.raises(ValueError, match="whole seconds"):
            registry.register_caching_check("frac", ok, ttl)
        assert "frac" not in registry

    def test_reregister_replaces(self, registry: CheckRegistry) -> None:
        old = CountingCheck(text="old")
        new = CountingCheck(text="new")
        registry.register_check("x", old)
        registry.register_check("x", new)

        assert registry.run_one("x").text == "new"
        assert registry.run_all().results["x"].text == "new"
        assert old.calls == 0
        assert new.calls == 2
        assert len(registry) == 1

    def test_reregister_drops_cached_result(self, registry: CheckRegistry) -> None:
        registry.register_caching_check("x", CountingCheck(text="old"), 60)
        registry.run_one("x")

        new = CountingCheck(text="new")
        registry.register_caching_check("x", new, 60)

        resp = registry.run_one("x")
        assert resp.text == "new"
        assert resp.from_cache is False
        assert new.calls == 1

    def test_run_one_unknown(self, registry: CheckRegistry) -> None:
        with pytest.raises(UnknownCheckError) as exc_info:
            registry.run_one("ghost")
        assert exc_info.value.name == "ghost"
        assert isinstance(exc_info.value, LookupError)

    def test_run_all_mixed(self, registry: CheckRegistry) -> None:
        registry.register_check("ok1", lambda: ok("fine"))
        registry.register_check("crit1", lambda: critical("broken"))

        result = registry.run_all()
        assert result.passed is False
        assert result.results["ok1"].status_text() == "ok"
        assert result.results["crit1"].status_text() == "critical"
        assert list(result.results) == ["crit1", "ok1"]

    def test_run_all_warn_fails_aggregate(self, registry: CheckRegistry) -> None:
        registry.register_check("ok1", ok)
        registry.register_check("warn1", warn)
        assert registry.run_all().passed is False

    def test_run_all_passes(self, registry: CheckRegistry) -> None:
        registry.register_check("a", ok)
        registry.register_caching_check("b", ok, 10)
        assert registry.run_all().passed is True

    def test_run_all_empty_passes(self, registry: CheckRegistry) -> None:
        result = registry.run_all()
        assert result.results == {}
        assert result.passed is True

    def test_fault_does_not_abort_siblings(self, registry: CheckRegistry) -> None:
        def boom() -> CheckResponse:
            raise ValueError("nope")

        registry.register_check("a", ok)
        registry.register_check("boom", boom)
        registry.register_check("z", ok)

        result = registry.run_all()
        assert result.results["a"].is_ok()
        assert result.results["boom"].is_unknown()
        assert result.results["z"].is_ok()
        assert result.passed is False

    def test_default_cache(self) -> None:
        registry = CheckRegistry()
        assert isinstance(registry.cache, Cache)
        assert registry.register_check("x", ok).cache is registry.cache

    def test_register_while_running(self, registry: CheckRegistry) -> None:
        errors: list[Exception] = []

        def register_many() -> None:
            try:
                for i in range(100):
                    registry.register_check(f"c{i}", ok)
            except Exception as e:
                errors.append(e)

        def run_many() -> None:
            try:
                for _ in range(50):
                    registry.run_all()
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=register_many), threading.Thread(target=run_many)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(registry) == 100


class TestRunResult:
    def test_to_dict(self) -> None:
        result = RunResult(results={"a": ok("fine")})
        assert result.to_dict() == {"a": ok("fine").to_dict()}
