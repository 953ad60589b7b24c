"""Background resource detector

This module implements the detection loop that periodically probes the
cluster's API surface and fires a one-time trigger the first time each
registered resource kind is found to be served. Control-plane components use
it to enable optional behavior (for example, once a CRD is installed) without
a restart.

Lifecycle:
    CREATED --start()--> RUNNING --stop()--> STOPPED

Usage (typical):
    from resource_detector import Detector, ResourceDescriptor
    from resource_detector.discovery import DiscoveryApiClient, DiscoveryCapabilityProvider

    provider = DiscoveryCapabilityProvider(DiscoveryApiClient("https://kubernetes.default.svc"))
    detector = Detector(provider)
    detector.add_trigger(
        ResourceDescriptor(group="monitoring.coreos.com", version="v1", kind="ServiceMonitor"),
        lambda d: enable_service_monitors(),
    )
    detector.start(10.0)
    ...
    detector.stop()

Guidelines:
- Triggers run synchronously on the detection thread, one at a time. Keep them
  short; a slow trigger delays the rest of the tick.
- A trigger that raises ends the detection thread and moves the detector to
  ``STOPPED``, unless the detector was built with ``isolate_trigger_errors=True``.
- Probe failures are logged and retried on the next tick; they never reach
  the caller of ``start`` or ``stop``.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Any, Callable, Iterable, List, Mapping, Optional

from ..core import monitoring
from ..discovery.base import CachingQueryProvider, CapabilityQueryProvider
from ..schemas.descriptor import ResourceDescriptor
from .channel import SubscriptionChannel
from .errors import DetectorAlreadyStartedError, DetectorStoppedError
from .registry import Trigger, TriggerRegistry
from .state import CapabilityStateManager, get_state_manager

QueryErrorHook = Callable[[ResourceDescriptor, Exception], None]


class DetectorStatus(str, Enum):
    CREATED = "created"
    RUNNING = "running"
    STOPPED = "stopped"


class Detector:
    """Periodically auto-detects capabilities and fires their triggers once.

    - Registrations live in a thread-safe :class:`TriggerRegistry`; they may be
      added before or after ``start``.
    - Fired state lives in a :class:`CapabilityStateManager`, by default the
      process-wide one, so detectors sharing it never double-fire a capability.
    - ``subscription_channel`` is a single-slot channel triggers may publish
      discovered kinds to. ``stop`` closes it once the loop has exited.
    """

    def __init__(
        self,
        provider: CapabilityQueryProvider,
        *,
        state_manager: Optional[CapabilityStateManager] = None,
        on_query_error: Optional[QueryErrorHook] = None,
        isolate_trigger_errors: bool = False,
    ) -> None:
        """Create a detector.

        Args:
            provider: Source of truth for "is this kind served?".
            state_manager: Fired-state store; defaults to the process-wide instance.
            on_query_error: Optional hook called with the descriptor and the
                exception whenever a probe fails.
            isolate_trigger_errors: If True, an exception raised by a trigger is
                logged and the loop continues with the next descriptor.
        """
        self._provider = provider
        self._state_manager = state_manager or get_state_manager()
        self._on_query_error = on_query_error
        self._isolate_trigger_errors = isolate_trigger_errors
        self._triggers = TriggerRegistry()
        self._logger = logging.getLogger(__name__)

        self.subscription_channel = SubscriptionChannel(capacity=1)

        self._lifecycle_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._status = DetectorStatus.CREATED

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add_trigger(self, descriptor: ResourceDescriptor, trigger: Trigger) -> None:
        """Run ``trigger`` the first time the kind of ``descriptor`` is found to be served."""
        self._triggers.add_trigger(descriptor, trigger)

    def add_triggers(self, descriptors: Iterable[ResourceDescriptor], trigger: Trigger) -> None:
        """Run ``trigger`` the first time each of ``descriptors`` is found to be served."""
        self._triggers.add_triggers(descriptors, trigger)

    def add_triggers_from_map(self, triggers: Mapping[ResourceDescriptor, Trigger]) -> None:
        """Run each associated trigger the first time its descriptor is found to be served."""
        self._triggers.add_triggers_from_map(triggers)

    @property
    def triggers(self) -> TriggerRegistry:
        return self._triggers

    @property
    def state_manager(self) -> CapabilityStateManager:
        return self._state_manager

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def status(self) -> DetectorStatus:
        with self._lifecycle_lock:
            return self._status

    @property
    def is_running(self) -> bool:
        return self.status is DetectorStatus.RUNNING

    def start(self, interval_seconds: float) -> None:
        """Start detecting in the background; returns immediately.

        The first tick runs right away on the detection thread, then one tick
        runs every ``interval_seconds``.

        Raises:
            ValueError: If ``interval_seconds`` is not positive.
            DetectorAlreadyStartedError: If the detector is already running.
            DetectorStoppedError: If the detector has been stopped.
        """
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        with self._lifecycle_lock:
            if self._status is DetectorStatus.RUNNING:
                raise DetectorAlreadyStartedError()
            if self._status is DetectorStatus.STOPPED:
                raise DetectorStoppedError()
            self._thread = threading.Thread(
                target=self._run,
                args=(interval_seconds,),
                name="resource-detector",
                daemon=True,
            )
            self._status = DetectorStatus.RUNNING
            self._thread.start()
        self._logger.info(
            "Resource detector started: interval=%ss triggers=%d", interval_seconds, len(self._triggers)
        )

    def stop(self) -> None:
        """Stop detecting and close the subscription channel.

        Waits for the detection thread to finish its current trigger, if any,
        before closing the channel. Calling ``stop`` on a detector that is not
        running is a no-op.
        """
        with self._lifecycle_lock:
            if self._status is not DetectorStatus.RUNNING:
                self._logger.debug("Resource detector stop ignored: status=%s", self._status.value)
                return
            self._status = DetectorStatus.STOPPED
            self._stop_event.set()
            thread = self._thread

        if thread is not None and thread is not threading.current_thread():
            thread.join()
        self.subscription_channel.close()
        self._logger.info("Resource detector stopped")

    def __enter__(self) -> "Detector":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    def _run(self, interval_seconds: float) -> None:
        try:
            self.run_once()
            while not self._stop_event.wait(interval_seconds):
                self.run_once()
        except Exception:
            self._logger.error("Resource detector loop terminated unexpectedly", exc_info=True)
            raise
        finally:
            self._mark_loop_exited()
        self._logger.debug("Resource detector loop exited")

    def _mark_loop_exited(self) -> None:
        # An abnormal exit leaves the status RUNNING; stop() already moved it otherwise
        with self._lifecycle_lock:
            if self._status is not DetectorStatus.RUNNING:
                return
            self._status = DetectorStatus.STOPPED
            self._stop_event.set()
        self.subscription_channel.close()

    def run_once(self) -> List[ResourceDescriptor]:
        """Run one detection tick over every registered descriptor.

        Cached catalog answers from earlier ticks are dropped first.
        Stops early once ``stop`` has been requested.

        Returns:
            The descriptors whose trigger fired during this tick.
        """
        if isinstance(self._provider, CachingQueryProvider):
            self._provider.invalidate()
        fired: List[ResourceDescriptor] = []
        for descriptor, trigger in self._triggers.snapshot():
            if self._stop_event.is_set():
                break
            if self._detect(descriptor, trigger):
                fired.append(descriptor)
        return fired

    def _detect(self, descriptor: ResourceDescriptor, trigger: Trigger) -> bool:
        try:
            exists = self._provider.resource_exists(descriptor.group_version, descriptor.kind)
        except Exception as exc:
            self._report_query_error(descriptor, exc)
            return False
        if not exists:
            return False
        if not self._state_manager.mark_fired(descriptor.capability_id):
            return False

        self._logger.info("Capability detected: %s", descriptor)
        monitoring.log_capability_detected(descriptor.capability_id, descriptor.group_version, descriptor.kind)
        if not self._isolate_trigger_errors:
            trigger(descriptor)
            return True
        try:
            trigger(descriptor)
        except Exception:
            self._logger.exception("Trigger failed for %s", descriptor)
        return True

    def _report_query_error(self, descriptor: ResourceDescriptor, exc: Exception) -> None:
        self._logger.warning("Capability probe failed: descriptor=%s error=%s", descriptor, type(exc).__name__)
        monitoring.log_query_failure(descriptor.group_version, descriptor.kind, exc)
        if self._on_query_error is None:
            return
        try:
            self._on_query_error(descriptor, exc)
        except Exception:
            self._logger.exception("on_query_error hook failed for %s", descriptor)
