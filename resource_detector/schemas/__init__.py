"""Schema models for the resource detector.

- ``ResourceDescriptor`` – immutable (group, version, kind) key used to
  register triggers.
- Discovery DTOs – typed views of the Kubernetes discovery documents.
"""

from .base import BaseSchema
from .descriptor import ResourceDescriptor
from .discovery import (
    APIGroup,
    APIGroupList,
    APIResource,
    APIResourceList,
    APIVersions,
    GroupVersionForDiscovery,
)

__all__ = [
    "BaseSchema",
    "ResourceDescriptor",
    "APIGroup",
    "APIGroupList",
    "APIResource",
    "APIResourceList",
    "APIVersions",
    "GroupVersionForDiscovery",
]
