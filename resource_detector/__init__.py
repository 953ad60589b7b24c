"""Resource detector.

This package watches a Kubernetes cluster's API surface for resource kinds
("capabilities") that may be installed at runtime, such as custom resource
definitions, and fires a one-time trigger the first time each of them is
served. Control-plane components use it to adapt once an optional resource
type appears, without a restart.

Core subpackages
----------------

- ``resource_detector.detector``:

  - The background detection loop and its lifecycle (start/stop).
  - The thread-safe trigger registry.
  - The process-wide, monotonic capability state manager.
  - The subscription channel for external observers.

- ``resource_detector.discovery``:

  - The ``CapabilityQueryProvider`` protocol.
  - An httpx client for the Kubernetes discovery endpoints and a caching
    provider built on it.

- ``resource_detector.core``:

  - Settings, logging configuration and optional Logfire monitoring.

Typical workflow
----------------

1. Build a detector with ``new_auto_detect()`` (or ``Detector(provider)``).
2. Register triggers with ``add_trigger`` / ``add_triggers`` /
   ``add_triggers_from_map``.
3. ``start(interval_seconds)``; ``stop()`` on shutdown.
"""

from .detector import Detector, DetectorStatus
from .factory import new_auto_detect
from .schemas.descriptor import ResourceDescriptor

__all__ = ["Detector", "DetectorStatus", "ResourceDescriptor", "new_auto_detect"]
