"""Detector facade.

- ``Detector`` – background loop firing one-time triggers for resource kinds.
- ``TriggerRegistry`` – thread-safe descriptor -> trigger mapping.
- ``CapabilityStateManager`` / ``get_state_manager`` – monotonic fired state,
  shared process-wide by default.
- ``SubscriptionChannel`` – single-slot channel of discovered kinds.
"""

from .channel import SubscriptionChannel
from .detector import Detector, DetectorStatus, QueryErrorHook
from .errors import (
    ChannelClosedError,
    DetectorAlreadyStartedError,
    DetectorError,
    DetectorStoppedError,
)
from .registry import Trigger, TriggerRegistry
from .state import CapabilityStateManager, get_state_manager

__all__ = [
    "Detector",
    "DetectorStatus",
    "QueryErrorHook",
    "SubscriptionChannel",
    "Trigger",
    "TriggerRegistry",
    "CapabilityStateManager",
    "get_state_manager",
    "DetectorError",
    "DetectorAlreadyStartedError",
    "DetectorStoppedError",
    "ChannelClosedError",
]
