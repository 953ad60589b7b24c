"""Kubernetes discovery API client

Overview
--------
Thin, focused HTTP client for the read-only discovery endpoints of the
Kubernetes API server. It answers one question for the detection loop: which
resource kinds does the server currently serve, per group-version. It never
reads or writes resource instances.

Endpoints
---------
- ``GET /api`` → ``APIVersions`` (versions of the legacy core group)
- ``GET /apis`` → ``APIGroupList``
- ``GET /api/{version}`` and ``GET /apis/{group}/{version}`` → ``APIResourceList``

Authentication
--------------
- Provide ``auth_token`` directly (a raw token; the ``Bearer`` prefix is added), or
- Provide a ``token_provider`` callable that returns the token on demand, or
- Provide ``token_file``; the file is re-read before every request so rotated
  service-account tokens are picked up. A missing file is not an error.

Errors
------
A 404 on a group-version listing raises ``GroupVersionNotFoundError``. Every
other non-2xx response and every transport failure raises ``DiscoveryApiError``.

Usage
-----
>>> ca = ssl.create_default_context(cafile=CA_PATH)
>>> with DiscoveryApiClient("https://kubernetes.default.svc", token_file=TOKEN_PATH, verify=ca) as client:
...     client.get_resources("apps/v1").has_kind("Deployment")
True
"""

from __future__ import annotations

import logging
import ssl
from pathlib import Path
from typing import Any, Callable, List, Optional, Union

import httpx

from ..schemas.discovery import APIGroupList, APIResourceList, APIVersions
from .errors import DiscoveryApiError, GroupVersionNotFoundError


def resources_path(group_version: str) -> str:
    """Return the discovery path listing the resources of ``group_version``."""
    if "/" in group_version:
        return f"/apis/{group_version}"
    return f"/api/{group_version}"


class DiscoveryApiClient:
    """Thin HTTP client for the Kubernetes discovery API.

    Design
    ------
    - Keeps a small, explicit surface that mirrors the discovery endpoints.
    - Returns typed DTOs for all responses.
    - Delegates token acquisition to a static value, a provider, or a file.

    The client owns the underlying ``httpx.Client`` only when it created it;
    a caller-supplied client is never closed by :meth:`close`.
    """

    def __init__(
        self,
        base_url: str,
        *,
        auth_token: Optional[str] = None,
        token_provider: Optional[Callable[[], str]] = None,
        token_file: Optional[str] = None,
        verify: Union[bool, ssl.SSLContext] = True,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        """Create a discovery client.

        Args:
            base_url: Base URL of the API server (e.g., ``https://kubernetes.default.svc``).
            auth_token: Bearer token value without the ``Bearer`` prefix.
            token_provider: Callable invoked to fetch a token before each request.
            token_file: Path of a token file read before each request.
            verify: TLS verification flag or an SSL context carrying the CA bundle.
            timeout: Default HTTP timeout for the internal client.
            client: Optional preconfigured ``httpx.Client`` to use.
        """
        self.base_url = base_url.rstrip("/")
        self.auth_token = auth_token
        self._token_provider = token_provider
        self._token_file = Path(token_file) if token_file else None
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, verify=verify, follow_redirects=True)
        self._logger = logging.getLogger(__name__)

    def __enter__(self) -> "DiscoveryApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            self._client.close()

    def _current_token(self) -> Optional[str]:
        """Resolve the token for the next request.

        Precedence: ``token_provider``, then ``auth_token``, then ``token_file``.
        A failing provider or unreadable file is logged and the request
        proceeds unauthenticated, letting the server answer 401/403.
        """
        if self._token_provider is not None:
            try:
                return self._token_provider()
            except Exception as e:
                self._logger.warning("DiscoveryApiClient token_provider failed: %s", type(e).__name__)
                return None
        if self.auth_token:
            return self.auth_token
        if self._token_file is not None:
            try:
                return self._token_file.read_text(encoding="utf-8").strip() or None
            except FileNotFoundError:
                self._logger.debug("DiscoveryApiClient token file not found: %s", self._token_file)
            except OSError as e:
                self._logger.warning("DiscoveryApiClient could not read token file %s: %s", self._token_file, e)
        return None

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self._current_token()
        if token:
            headers["Authorization"] = token if token.lower().startswith("bearer ") else f"Bearer {token}"
        return headers

    def _get(self, path: str) -> httpx.Response:
        url = f"{self.base_url}{path}"
        self._logger.debug("DiscoveryApiClient GET %s", url)
        try:
            return self._client.get(url, headers=self._headers())
        except httpx.HTTPError as e:
            raise DiscoveryApiError(f"Discovery request failed: GET {path}: {e}") from e

    @staticmethod
    def _error_details(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError:
            return resp.text

    def _get_json(self, path: str) -> Any:
        resp = self._get(path)
        if resp.is_error:
            raise DiscoveryApiError(
                f"Discovery request failed: GET {path} -> {resp.status_code}",
                status_code=resp.status_code,
                details=self._error_details(resp),
            )
        try:
            return resp.json()
        except ValueError as e:
            raise DiscoveryApiError(f"Discovery response is not JSON: GET {path}", status_code=resp.status_code) from e

    def get_api_versions(self) -> APIVersions:
        """List versions of the legacy core group (``GET /api``)."""
        return APIVersions.model_validate(self._get_json("/api"))

    def get_api_groups(self) -> APIGroupList:
        """List the named API groups (``GET /apis``)."""
        return APIGroupList.model_validate(self._get_json("/apis"))

    def get_resources(self, group_version: str) -> APIResourceList:
        """List the resources served for one group-version.

        Args:
            group_version: ``<group>/<version>``, or a bare version for the core group.

        Returns:
            The ``APIResourceList`` for the group-version.

        Raises:
            GroupVersionNotFoundError: If the server does not serve the group-version.
            DiscoveryApiError: For any other failure.
        """
        path = resources_path(group_version)
        resp = self._get(path)
        if resp.status_code == 404:
            raise GroupVersionNotFoundError(group_version, details=self._error_details(resp))
        if resp.is_error:
            raise DiscoveryApiError(
                f"Discovery request failed: GET {path} -> {resp.status_code}",
                status_code=resp.status_code,
                details=self._error_details(resp),
            )
        try:
            return APIResourceList.model_validate(resp.json())
        except ValueError as e:
            raise DiscoveryApiError(f"Invalid APIResourceList: GET {path}", status_code=resp.status_code) from e

    def server_group_versions(self) -> List[str]:
        """Return every served group-version, core group first."""
        group_versions = list(self.get_api_versions().versions)
        for group in self.get_api_groups().groups:
            group_versions.extend(v.group_version for v in group.versions)
        return group_versions

    def server_resources(self) -> List[APIResourceList]:
        """List the resources of every served group-version.

        A group-version that disappears between the group listing and its
        resource listing is skipped.
        """
        lists: List[APIResourceList] = []
        for gv in self.server_group_versions():
            try:
                lists.append(self.get_resources(gv))
            except GroupVersionNotFoundError:
                self._logger.debug("DiscoveryApiClient group version vanished during listing: %s", gv)
        return lists
