"""Kubernetes discovery DTOs

Overview
--------
Pydantic DTOs for the read-only discovery documents served by the Kubernetes
API server. They are permissive (unknown fields are ignored) because the
discovery schema grows over releases and only a handful of fields matter to
capability detection.

Endpoint mapping
----------------
- ``GET /api`` → ``APIVersions``
- ``GET /apis`` → ``APIGroupList``
- ``GET /api/v1`` and ``GET /apis/{group}/{version}`` → ``APIResourceList``
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import ConfigDict, Field

from .base import BaseSchema


class _DiscoverySchema(BaseSchema):
    model_config = ConfigDict(extra="ignore")


class APIResource(_DiscoverySchema):
    """A single resource served within a group-version.

    Examples:
        >>> r = APIResource.model_validate({"name": "deployments", "namespaced": True, "kind": "Deployment"})
        >>> r.is_subresource
        False
    """

    name: str = Field(description="Plural resource name, e.g. 'deployments' or 'deployments/scale'.")
    singular_name: str = Field(default="")
    namespaced: bool = Field(default=False)
    kind: str
    group: Optional[str] = Field(default=None)
    version: Optional[str] = Field(default=None)
    verbs: List[str] = Field(default_factory=list)
    short_names: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)

    @property
    def is_subresource(self) -> bool:
        return "/" in self.name


class APIResourceList(_DiscoverySchema):
    """Resources served for one group-version."""

    kind: str = Field(default="APIResourceList")
    group_version: str
    resources: List[APIResource] = Field(default_factory=list)

    def has_kind(self, kind: str) -> bool:
        """Return True if any served resource has the given kind."""
        return any(r.kind == kind for r in self.resources)


class GroupVersionForDiscovery(_DiscoverySchema):
    group_version: str
    version: str


class APIGroup(_DiscoverySchema):
    """A named API group and the versions it serves."""

    name: str
    versions: List[GroupVersionForDiscovery] = Field(default_factory=list)
    preferred_version: Optional[GroupVersionForDiscovery] = Field(default=None)


class APIGroupList(_DiscoverySchema):
    kind: str = Field(default="APIGroupList")
    groups: List[APIGroup] = Field(default_factory=list)


class APIVersions(_DiscoverySchema):
    """Versions of the legacy core group served under ``/api``."""

    kind: str = Field(default="APIVersions")
    versions: List[str] = Field(default_factory=list)
