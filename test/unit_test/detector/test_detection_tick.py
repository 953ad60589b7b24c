"""Detection tick semantics, exercised synchronously through ``run_once``."""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Tuple

import httpx
import pytest

from resource_detector.detector import CapabilityStateManager, Detector, get_state_manager
from resource_detector.discovery import (
    DiscoveryApiClient,
    DiscoveryApiError,
    DiscoveryCapabilityProvider,
    StaticCapabilityProvider,
)
from resource_detector.schemas import ResourceDescriptor

FOO = ResourceDescriptor(group="example.com", version="v1", kind="Foo")
BAR = ResourceDescriptor(group="example.com", version="v1", kind="Bar")
BAZ = ResourceDescriptor(group="example.com", version="v1", kind="Baz")


class _ScriptedProvider:
    """Answers from a per-tick script; ``tick`` advances externally."""

    def __init__(self, script: Dict[Tuple[str, str], List[object]]) -> None:
        self.script = script
        self.tick = 0
        self.calls: List[Tuple[str, str]] = []

    def resource_exists(self, group_version: str, kind: str) -> bool:
        self.calls.append((group_version, kind))
        answers = self.script.get((group_version, kind), [False])
        answer = answers[min(self.tick, len(answers) - 1)]
        if isinstance(answer, Exception):
            raise answer
        return bool(answer)


class _Recorder:
    def __init__(self) -> None:
        self.calls: List[ResourceDescriptor] = []
        self._lock = threading.Lock()

    def __call__(self, descriptor: ResourceDescriptor) -> None:
        with self._lock:
            self.calls.append(descriptor)


def test_fires_once_after_first_present_tick(state_manager: CapabilityStateManager) -> None:
    provider = _ScriptedProvider({("example.com/v1", "Foo"): [False, True, True]})
    detector = Detector(provider, state_manager=state_manager)
    trigger = _Recorder()
    detector.add_trigger(FOO, trigger)

    assert detector.run_once() == []
    assert trigger.calls == []

    provider.tick = 1
    assert detector.run_once() == [FOO]
    assert trigger.calls == [FOO]

    provider.tick = 2
    assert detector.run_once() == []
    assert trigger.calls == [FOO]
    assert state_manager.get_state("Foo") is True


def test_never_present_never_fires(state_manager: CapabilityStateManager) -> None:
    detector = Detector(StaticCapabilityProvider(), state_manager=state_manager)
    trigger = _Recorder()
    detector.add_triggers([FOO, BAR], trigger)

    for _ in range(3):
        detector.run_once()

    assert trigger.calls == []
    assert state_manager.fired() == set()


def test_each_descriptor_evaluated_independently(state_manager: CapabilityStateManager) -> None:
    provider = StaticCapabilityProvider([("example.com/v1", "Bar")])
    detector = Detector(provider, state_manager=state_manager)
    trigger = _Recorder()
    detector.add_triggers([FOO, BAR, BAZ], trigger)

    assert detector.run_once() == [BAR]

    provider.add("example.com/v1", "Foo")
    provider.add("example.com/v1", "Baz")
    assert sorted(d.kind for d in detector.run_once()) == ["Baz", "Foo"]
    assert sorted(d.kind for d in trigger.calls) == ["Bar", "Baz", "Foo"]


def test_trigger_receives_registered_descriptor(state_manager: CapabilityStateManager) -> None:
    provider = StaticCapabilityProvider([("v1", "ConfigMap")])
    detector = Detector(provider, state_manager=state_manager)
    descriptor = ResourceDescriptor(version="v1", kind="ConfigMap")
    trigger = _Recorder()
    detector.add_trigger(descriptor, trigger)

    detector.run_once()

    assert trigger.calls == [descriptor]
    assert provider.resource_exists(descriptor.group_version, descriptor.kind)


def test_only_latest_registration_fires(state_manager: CapabilityStateManager) -> None:
    detector = Detector(StaticCapabilityProvider([("example.com/v1", "Foo")]), state_manager=state_manager)
    first, second = _Recorder(), _Recorder()
    detector.add_trigger(FOO, first)
    detector.add_trigger(FOO, second)

    detector.run_once()

    assert first.calls == []
    assert second.calls == [FOO]


def test_add_triggers_from_map(state_manager: CapabilityStateManager) -> None:
    provider = StaticCapabilityProvider([("example.com/v1", "Foo"), ("example.com/v1", "Bar")])
    detector = Detector(provider, state_manager=state_manager)
    on_foo, on_bar = _Recorder(), _Recorder()
    detector.add_triggers_from_map({FOO: on_foo, BAR: on_bar})

    detector.run_once()

    assert on_foo.calls == [FOO]
    assert on_bar.calls == [BAR]
    assert len(detector.triggers) == 2


def test_query_errors_are_absorbed_and_reported(
    state_manager: CapabilityStateManager, caplog: pytest.LogCaptureFixture
) -> None:
    error = DiscoveryApiError("forbidden", status_code=403)
    provider = _ScriptedProvider({("example.com/v1", "Baz"): [error]})
    hook_calls: List[Tuple[ResourceDescriptor, Exception]] = []
    detector = Detector(
        provider,
        state_manager=state_manager,
        on_query_error=lambda d, e: hook_calls.append((d, e)),
    )
    trigger = _Recorder()
    detector.add_trigger(BAZ, trigger)
    caplog.set_level(logging.WARNING)

    for tick in range(3):
        provider.tick = tick
        assert detector.run_once() == []

    assert trigger.calls == []
    assert state_manager.get_state("Baz") is False
    assert hook_calls == [(BAZ, error)] * 3
    assert "Capability probe failed" in caplog.text
    assert "DiscoveryApiError" in caplog.text


def test_query_error_self_heals_on_next_tick(state_manager: CapabilityStateManager) -> None:
    provider = _ScriptedProvider({("example.com/v1", "Foo"): [RuntimeError("timeout"), True]})
    detector = Detector(provider, state_manager=state_manager)
    trigger = _Recorder()
    detector.add_trigger(FOO, trigger)

    detector.run_once()
    provider.tick = 1
    detector.run_once()

    assert trigger.calls == [FOO]


def test_failing_query_hook_does_not_escape(
    state_manager: CapabilityStateManager, caplog: pytest.LogCaptureFixture
) -> None:
    provider = _ScriptedProvider({("example.com/v1", "Baz"): [RuntimeError("down")]})

    def bad_hook(_: ResourceDescriptor, __: Exception) -> None:
        raise ValueError("hook broken")

    detector = Detector(provider, state_manager=state_manager, on_query_error=bad_hook)
    detector.add_trigger(BAZ, _Recorder())
    caplog.set_level(logging.ERROR)

    assert detector.run_once() == []
    assert "on_query_error hook failed" in caplog.text


def test_trigger_failure_propagates_by_default(state_manager: CapabilityStateManager) -> None:
    detector = Detector(StaticCapabilityProvider([("example.com/v1", "Foo")]), state_manager=state_manager)

    def boom(_: ResourceDescriptor) -> None:
        raise RuntimeError("trigger exploded")

    detector.add_trigger(FOO, boom)

    with pytest.raises(RuntimeError, match="trigger exploded"):
        detector.run_once()
    # The capability counts as fired even though its trigger failed
    assert state_manager.get_state("Foo") is True
    assert detector.run_once() == []


def test_isolated_trigger_failure_does_not_stop_tick(
    state_manager: CapabilityStateManager, caplog: pytest.LogCaptureFixture
) -> None:
    provider = StaticCapabilityProvider([("example.com/v1", "Foo"), ("example.com/v1", "Bar")])
    detector = Detector(provider, state_manager=state_manager, isolate_trigger_errors=True)

    def boom(_: ResourceDescriptor) -> None:
        raise RuntimeError("trigger exploded")

    good = _Recorder()
    detector.add_trigger(FOO, boom)
    detector.add_trigger(BAR, good)
    caplog.set_level(logging.ERROR)

    fired = detector.run_once()

    assert sorted(d.kind for d in fired) == ["Bar", "Foo"]
    assert good.calls == [BAR]
    assert "Trigger failed" in caplog.text


def test_same_kind_in_other_group_shares_fired_state(state_manager: CapabilityStateManager) -> None:
    other_foo = ResourceDescriptor(group="other.example.com", version="v2", kind="Foo")
    provider = StaticCapabilityProvider([("example.com/v1", "Foo"), ("other.example.com/v2", "Foo")])
    detector = Detector(provider, state_manager=state_manager)
    trigger = _Recorder()
    detector.add_triggers([FOO, other_foo], trigger)

    detector.run_once()

    assert len(trigger.calls) == 1


def test_detectors_sharing_state_fire_once_total(state_manager: CapabilityStateManager) -> None:
    barrier = threading.Barrier(2)

    class _RacingProvider:
        def resource_exists(self, group_version: str, kind: str) -> bool:
            # Both detectors observe "present" before either marks state
            barrier.wait(timeout=5)
            return True

    trigger = _Recorder()
    detectors = [Detector(_RacingProvider(), state_manager=state_manager) for _ in range(2)]
    for d in detectors:
        d.add_trigger(BAR, trigger)

    threads = [threading.Thread(target=d.run_once) for d in detectors]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert trigger.calls == [BAR]


def test_detectors_with_separate_state_each_fire() -> None:
    provider = StaticCapabilityProvider([("example.com/v1", "Bar")])
    trigger = _Recorder()
    for _ in range(2):
        detector = Detector(provider, state_manager=CapabilityStateManager())
        detector.add_trigger(BAR, trigger)
        detector.run_once()

    assert trigger.calls == [BAR, BAR]


def test_default_state_manager_is_process_wide() -> None:
    provider = StaticCapabilityProvider()
    assert Detector(provider).state_manager is get_state_manager()
    assert Detector(provider).state_manager is Detector(provider).state_manager


def test_capability_already_fired_elsewhere_is_skipped(state_manager: CapabilityStateManager) -> None:
    state_manager.set_state("Foo", True)
    detector = Detector(StaticCapabilityProvider([("example.com/v1", "Foo")]), state_manager=state_manager)
    trigger = _Recorder()
    detector.add_trigger(FOO, trigger)

    assert detector.run_once() == []
    assert trigger.calls == []


class _CatalogServer:
    """Discovery endpoint whose served kinds change between ticks."""

    def __init__(self) -> None:
        self.kinds: List[str] = []
        self.requests = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests += 1
        resources = [{"name": k.lower() + "s", "namespaced": True, "kind": k, "verbs": ["get"]} for k in self.kinds]
        return httpx.Response(
            200, json={"kind": "APIResourceList", "groupVersion": "example.com/v1", "resources": resources}
        )


def _discovery_provider(server: _CatalogServer, ttl_seconds: float) -> DiscoveryCapabilityProvider:
    client = DiscoveryApiClient("http://mock", client=httpx.Client(transport=httpx.MockTransport(server)))
    return DiscoveryCapabilityProvider(client, ttl_seconds=ttl_seconds)


def test_cached_absent_listing_does_not_outlive_tick(state_manager: CapabilityStateManager) -> None:
    server = _CatalogServer()
    detector = Detector(_discovery_provider(server, ttl_seconds=60), state_manager=state_manager)
    trigger = _Recorder()
    detector.add_trigger(FOO, trigger)

    assert detector.run_once() == []
    server.kinds.append("Foo")

    assert detector.run_once() == [FOO]
    assert trigger.calls == [FOO]


def test_one_listing_request_per_group_version_per_tick(state_manager: CapabilityStateManager) -> None:
    server = _CatalogServer()
    detector = Detector(_discovery_provider(server, ttl_seconds=60), state_manager=state_manager)
    detector.add_triggers([FOO, BAR, BAZ], _Recorder())

    detector.run_once()
    assert server.requests == 1

    detector.run_once()
    assert server.requests == 2
