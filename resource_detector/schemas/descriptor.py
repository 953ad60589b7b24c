"""Resource descriptor model.

A :class:`ResourceDescriptor` names a watched resource kind by its
``(group, version, kind)`` triple. It is the key of the trigger registration
table, so it is immutable and compares by value.
"""

from __future__ import annotations

from pydantic import ConfigDict, Field

from .base import BaseSchema


class ResourceDescriptor(BaseSchema):
    """Identity of a watched resource kind (a Kubernetes GroupVersionKind).

    The core API group is represented by the empty string, so
    ``ResourceDescriptor(version="v1", kind="ConfigMap")`` addresses the
    ``v1`` core resources.

    Examples:
        >>> d = ResourceDescriptor(group="monitoring.coreos.com", version="v1", kind="ServiceMonitor")
        >>> d.group_version
        'monitoring.coreos.com/v1'
        >>> ResourceDescriptor.from_api_version("v1", "ConfigMap").group
        ''
    """

    model_config = ConfigDict(frozen=True)

    group: str = Field(default="", description="API group; empty for the core group.", examples=["apps", ""])
    version: str = Field(min_length=1, description="API version within the group.", examples=["v1", "v1beta1"])
    kind: str = Field(min_length=1, description="Resource kind name.", examples=["Deployment"])

    @classmethod
    def from_api_version(cls, api_version: str, kind: str) -> "ResourceDescriptor":
        """Build a descriptor from an ``apiVersion`` string such as ``apps/v1``.

        Args:
            api_version: ``<group>/<version>`` or a bare ``<version>`` for the core group.
            kind: The resource kind.

        Returns:
            The parsed descriptor.

        Raises:
            ValueError: If ``api_version`` is empty or has more than one ``/``.
        """
        if not api_version:
            raise ValueError("api_version must not be empty")
        parts = api_version.split("/")
        if len(parts) == 1:
            return cls(group="", version=parts[0], kind=kind)
        if len(parts) == 2 and parts[0] and parts[1]:
            return cls(group=parts[0], version=parts[1], kind=kind)
        raise ValueError(f"unexpected api_version format: {api_version!r}")

    @property
    def group_version(self) -> str:
        """The ``apiVersion`` form of the group and version."""
        if not self.group:
            return self.version
        return f"{self.group}/{self.version}"

    @property
    def capability_id(self) -> str:
        """Key under which the fired state of this capability is tracked.

        Capability state is keyed by kind name only, so descriptors that share
        a kind across groups or versions also share their fired flag.
        """
        return self.kind

    def __str__(self) -> str:
        return f"{self.group_version}, Kind={self.kind}"
