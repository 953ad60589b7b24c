"""Capability query provider protocol.

Defines the single operation the detection loop needs from its environment:
whether a resource kind is currently served under a group-version.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class CapabilityQueryProvider(Protocol):
    """Protocol for capability query providers.

    Implementations answer from a live resource catalog (see
    :class:`~resource_detector.discovery.provider.DiscoveryCapabilityProvider`)
    or from memory (see
    :class:`~resource_detector.discovery.provider.StaticCapabilityProvider`).

    Examples:
        >>> provider.resource_exists("monitoring.coreos.com/v1", "ServiceMonitor")
        False
    """

    def resource_exists(self, group_version: str, kind: str) -> bool:
        """Return whether ``kind`` is currently served under ``group_version``.

        Args:
            group_version: ``<group>/<version>``, or a bare version for the core group.
            kind: The resource kind to look for.

        Returns:
            True if the kind is served, False if it is not.

        Raises:
            Exception: Implementations raise when the answer cannot be
            determined (network failures, authorization errors). Callers treat
            this as "unknown" and may retry later.
        """
        ...


@runtime_checkable
class CachingQueryProvider(Protocol):
    """Provider that caches catalog answers between calls.

    The detection loop calls :meth:`invalidate` at the start of every tick, so
    a cached answer never outlives the tick that fetched it.
    """

    def invalidate(self, group_version: Optional[str] = None) -> None:
        """Drop cached answers, for one group-version or all of them."""
        ...
