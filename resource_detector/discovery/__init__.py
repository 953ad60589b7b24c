"""Capability discovery facade.

Re-exports the query provider protocol, the Kubernetes discovery client and
the concrete providers. The detector depends only on
``CapabilityQueryProvider``, so deployments can swap the source of truth
without touching the detection loop.
"""

from .base import CachingQueryProvider, CapabilityQueryProvider
from .client import DiscoveryApiClient
from .errors import DiscoveryApiError, GroupVersionNotFoundError
from .provider import DiscoveryCapabilityProvider, StaticCapabilityProvider

__all__ = [
    "CachingQueryProvider",
    "CapabilityQueryProvider",
    "DiscoveryApiClient",
    "DiscoveryApiError",
    "GroupVersionNotFoundError",
    "DiscoveryCapabilityProvider",
    "StaticCapabilityProvider",
]
