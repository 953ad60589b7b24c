"""Capability query providers.

* :class:`DiscoveryCapabilityProvider` – answers from the live Kubernetes
  discovery API, with a short-lived per group-version cache.
* :class:`StaticCapabilityProvider` – in-memory catalog for local development
  and tests.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Dict, Iterable, Optional, Set, Tuple

from ..schemas.discovery import APIResourceList
from .base import CachingQueryProvider, CapabilityQueryProvider
from .client import DiscoveryApiClient
from .errors import GroupVersionNotFoundError


class DiscoveryCapabilityProvider(CapabilityQueryProvider, CachingQueryProvider):
    """Capability query provider backed by :class:`DiscoveryApiClient`.

    - A group-version the server does not serve answers ``False``.
    - Any other discovery failure propagates to the caller.
    - Successful listings are cached for ``ttl_seconds`` so that one detection
      tick issues at most one request per group-version, however many kinds
      it probes there. Failures are never cached.
    - The detector calls :meth:`invalidate` before each tick, so ``ttl_seconds``
      only bounds reuse within a tick and across direct callers.
    """

    def __init__(self, client: DiscoveryApiClient, *, ttl_seconds: float = 5.0) -> None:
        self._client = client
        self._ttl = ttl_seconds
        self._logger = logging.getLogger(__name__)
        self._lock = threading.Lock()
        # cache: group_version -> (listing, expires_at)
        self._cache: Dict[str, Tuple[APIResourceList, float]] = {}

    def _listing(self, group_version: str) -> APIResourceList:
        now = time.monotonic()
        with self._lock:
            cached = self._cache.get(group_version)
            if cached and cached[1] > now:
                return cached[0]
        listing = self._client.get_resources(group_version)
        if self._ttl > 0:
            with self._lock:
                self._cache[group_version] = (listing, time.monotonic() + self._ttl)
        return listing

    def resource_exists(self, group_version: str, kind: str) -> bool:
        try:
            listing = self._listing(group_version)
        except GroupVersionNotFoundError:
            self._logger.debug("Group version not served: %s", group_version)
            return False
        return listing.has_kind(kind)

    def invalidate(self, group_version: Optional[str] = None) -> None:
        """Drop cached listings, for one group-version or all of them."""
        with self._lock:
            if group_version is None:
                self._cache.clear()
            else:
                self._cache.pop(group_version, None)


class StaticCapabilityProvider(CapabilityQueryProvider):
    """In-memory capability catalog.

    Useful where no API server is reachable; capabilities can be added and
    removed at runtime from any thread.

    Example:
        provider = StaticCapabilityProvider([("apps/v1", "Deployment")])
        provider.add("monitoring.coreos.com/v1", "ServiceMonitor")
    """

    def __init__(self, served: Optional[Iterable[Tuple[str, str]]] = None) -> None:
        self._lock = threading.Lock()
        self._served: Set[Tuple[str, str]] = set(served or [])

    def add(self, group_version: str, kind: str) -> None:
        with self._lock:
            self._served.add((group_version, kind))

    def remove(self, group_version: str, kind: str) -> None:
        with self._lock:
            self._served.discard((group_version, kind))

    def resource_exists(self, group_version: str, kind: str) -> bool:
        with self._lock:
            return (group_version, kind) in self._served
