"""Detector construction from configuration.

:func:`new_auto_detect` wires the Kubernetes discovery client, the caching
capability provider and a :class:`Detector` from :class:`Settings`, so an
embedding application only registers triggers and calls ``start``.
"""

from __future__ import annotations

import logging
import ssl
from pathlib import Path
from typing import Optional, Union

import httpx

from .core import monitoring
from .core.config import Settings
from .detector import CapabilityStateManager, Detector, QueryErrorHook
from .discovery import DiscoveryApiClient, DiscoveryCapabilityProvider

logger = logging.getLogger(__name__)


def build_discovery_client(settings: Settings, *, client: Optional[httpx.Client] = None) -> DiscoveryApiClient:
    """Create a :class:`DiscoveryApiClient` from the Kubernetes API settings.

    TLS verification uses the configured CA bundle when verification is
    enabled and the bundle file exists (it only does inside a pod by default);
    otherwise the system trust store, or no verification when
    ``KUBERNETES_VERIFY_SSL`` is false.
    """
    cfg = settings.kubernetes
    return DiscoveryApiClient(
        cfg.url,
        auth_token=cfg.token,
        token_file=cfg.token_file,
        verify=_tls_verify(cfg.verify_ssl, cfg.ca_file),
        timeout=cfg.timeout,
        client=client,
    )


def _tls_verify(verify_ssl: bool, ca_file: Optional[str]) -> Union[bool, ssl.SSLContext]:
    if not verify_ssl or not ca_file:
        return verify_ssl
    if not Path(ca_file).is_file():
        logger.debug("CA bundle not found, using system trust store: %s", ca_file)
        return True
    return ssl.create_default_context(cafile=ca_file)


def new_auto_detect(
    settings: Optional[Settings] = None,
    *,
    client: Optional[httpx.Client] = None,
    state_manager: Optional[CapabilityStateManager] = None,
    on_query_error: Optional[QueryErrorHook] = None,
) -> Detector:
    """Create a ready-to-configure detector backed by the Kubernetes discovery API.

    Args:
        settings: Configuration; defaults to a fresh :class:`Settings` read from the environment.
        client: Optional preconfigured ``httpx.Client`` for the discovery client.
        state_manager: Fired-state store; defaults to the process-wide instance.
        on_query_error: Optional hook notified of failed probes.

    Returns:
        A detector in the ``CREATED`` state. Start it with
        ``detector.start(settings.detector.poll_interval)``.
    """
    settings = settings or Settings()
    monitoring.initialize_logfire()

    detector_cfg = settings.detector
    provider = DiscoveryCapabilityProvider(
        build_discovery_client(settings, client=client),
        ttl_seconds=detector_cfg.cache_ttl,
    )
    logger.debug(
        "Building resource detector: api=%s cache_ttl=%ss isolate_trigger_errors=%s",
        settings.kubernetes.url,
        detector_cfg.cache_ttl,
        detector_cfg.isolate_trigger_errors,
    )
    return Detector(
        provider,
        state_manager=state_manager,
        on_query_error=on_query_error,
        isolate_trigger_errors=detector_cfg.isolate_trigger_errors,
    )
