"""Trigger registry.

The registry maps a :class:`ResourceDescriptor` to the trigger that runs the
first time the described resource kind is found to be served.

The detection loop iterates over a snapshot of the registry on every tick, so
registrations may happen at any time, including while the loop is running.
"""

from __future__ import annotations

import threading
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from ..schemas.descriptor import ResourceDescriptor

Trigger = Callable[[ResourceDescriptor], None]


class TriggerRegistry:
    """
    Thread-safe mapping of resource descriptors to triggers.

    Notes:
        - ``add_trigger`` overwrites any existing trigger for the descriptor.
        - Iteration order is unspecified; each entry is evaluated independently.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._triggers: Dict[ResourceDescriptor, Trigger] = {}

    def add_trigger(self, descriptor: ResourceDescriptor, trigger: Trigger) -> None:
        """
        Register ``trigger`` for ``descriptor``.

        Args:
            descriptor: The resource kind to watch.
            trigger: Callable invoked once with ``descriptor`` when the kind is first served.

        Raises:
            TypeError: If ``trigger`` is not callable.
        """
        if not callable(trigger):
            raise TypeError(f"Trigger for {descriptor} must be callable, got {type(trigger).__name__}")
        with self._lock:
            self._triggers[descriptor] = trigger

    def add_triggers(self, descriptors: Iterable[ResourceDescriptor], trigger: Trigger) -> None:
        """Register the same ``trigger`` for every descriptor in ``descriptors``."""
        for descriptor in descriptors:
            self.add_trigger(descriptor, trigger)

    def add_triggers_from_map(self, triggers: Mapping[ResourceDescriptor, Trigger]) -> None:
        """Register each descriptor with its associated trigger."""
        for descriptor, trigger in triggers.items():
            self.add_trigger(descriptor, trigger)

    def get(self, descriptor: ResourceDescriptor) -> Optional[Trigger]:
        with self._lock:
            return self._triggers.get(descriptor)

    def snapshot(self) -> List[Tuple[ResourceDescriptor, Trigger]]:
        """Return a point-in-time copy of the registrations."""
        with self._lock:
            return list(self._triggers.items())

    def __len__(self) -> int:
        with self._lock:
            return len(self._triggers)

    def __contains__(self, descriptor: object) -> bool:
        with self._lock:
            return descriptor in self._triggers
