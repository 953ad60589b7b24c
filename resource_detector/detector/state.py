"""Capability state tracking.

The state manager records which capabilities have already fired. The flag is
monotonic: once a capability has fired it stays fired for the lifetime of the
process. One process-wide instance is shared by default so that detectors
watching overlapping capabilities never fire the same capability twice.
"""

from __future__ import annotations

import threading
from typing import Dict, Optional, Set


class CapabilityStateManager:
    """Thread-safe mapping of capability id to its fired flag.

    All reads and writes happen under one lock. :meth:`mark_fired` is the
    atomic check-and-set the detection loop relies on: exactly one caller
    observes the false -> true transition of a capability.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._states: Dict[str, bool] = {}

    def get_state(self, capability_id: str) -> bool:
        """Return whether ``capability_id`` has fired; unknown ids have not."""
        with self._lock:
            return self._states.get(capability_id, False)

    def set_state(self, capability_id: str, state: bool) -> None:
        """Set the fired flag of ``capability_id``.

        Raises:
            ValueError: If the capability already fired and ``state`` is False.
        """
        with self._lock:
            if not state and self._states.get(capability_id, False):
                raise ValueError(f"Capability '{capability_id}' already fired and cannot be reset")
            self._states[capability_id] = state

    def mark_fired(self, capability_id: str) -> bool:
        """Atomically mark ``capability_id`` as fired.

        Returns:
            True if this call performed the transition, False if the
            capability had already fired.
        """
        with self._lock:
            if self._states.get(capability_id, False):
                return False
            self._states[capability_id] = True
            return True

    def fired(self) -> Set[str]:
        """Snapshot of the capability ids that have fired."""
        with self._lock:
            return {cid for cid, state in self._states.items() if state}


_state_manager: Optional[CapabilityStateManager] = None
_state_manager_lock = threading.Lock()


def get_state_manager() -> CapabilityStateManager:
    """Return the process-wide state manager, creating it on first access."""
    global _state_manager
    if _state_manager is not None:
        return _state_manager
    with _state_manager_lock:
        # Double-check under lock
        if _state_manager is None:
            _state_manager = CapabilityStateManager()
        return _state_manager
