"""Error types specific to the discovery layer.

Purpose:
- Provide typed exceptions thrown by `DiscoveryApiClient` and consumers of the
  Kubernetes discovery endpoints.
- Expose HTTP-oriented context (e.g., status code, error body) for diagnosis.

Usage:
- Catch `DiscoveryApiError` for general failures and inspect `status_code` or
  `details`.
- Catch `GroupVersionNotFoundError` when a group-version is not served (404).
"""

from __future__ import annotations

from typing import Any, Optional


class DiscoveryApiError(Exception):
    """Base error for discovery API failures.

    Args:
        message: Human-readable error description.
        status_code: Optional HTTP status code associated with the failure.
        details: Optional structured payload from the server (e.g., JSON body).
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class GroupVersionNotFoundError(DiscoveryApiError):
    """Raised when the API server does not serve the requested group-version."""

    def __init__(self, group_version: str, *, details: Optional[Any] = None) -> None:
        super().__init__(f"Group version not served: '{group_version}'", status_code=404, details=details)
        self.group_version = group_version
