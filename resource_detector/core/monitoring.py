"""
Monitoring and Tracing Configuration Module.

This module provides optional integration with Pydantic Logfire for the
resource detector:
- Discovery HTTP request tracing (HTTPX instrumentation)
- Structured events for detected capabilities
- Structured events for failed capability probes, so repeated discovery
  failures surface as a degraded-health signal instead of staying silent

Logfire is disabled by default. Every helper degrades to debug logging when
Logfire is disabled, not installed, or not configured.
"""

import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)

# Logfire configuration from environment
LOGFIRE_ENABLED = os.getenv("LOGFIRE_ENABLED", "false").lower() in ("true", "1", "yes")
LOGFIRE_TOKEN = os.getenv("LOGFIRE_TOKEN", "")
LOGFIRE_PROJECT_NAME = os.getenv("LOGFIRE_PROJECT_NAME", "resource-detector")
LOGFIRE_ENVIRONMENT = os.getenv("LOGFIRE_ENVIRONMENT", "development")
LOGFIRE_SERVICE_NAME = os.getenv("LOGFIRE_SERVICE_NAME", "resource-detector")
LOGFIRE_SERVICE_VERSION = os.getenv("LOGFIRE_SERVICE_VERSION", "0.0.0")

# Feature flags
LOGFIRE_TRACE_HTTPX = os.getenv("LOGFIRE_TRACE_HTTPX", "true").lower() in ("true", "1", "yes")

_initialized = False


def initialize_logfire() -> bool:
    """
    Initialize Pydantic Logfire for monitoring and tracing.

    The initialization is conditional based on the LOGFIRE_ENABLED environment
    variable and runs at most once per process.

    Returns:
        True if Logfire is configured after the call, False otherwise.
    """
    global _initialized
    if _initialized:
        return True

    if not LOGFIRE_ENABLED:
        logger.debug("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return False

    if not LOGFIRE_TOKEN:
        logger.warning(
            "Logfire is enabled but LOGFIRE_TOKEN is not set. "
            "Monitoring will not work. Set LOGFIRE_TOKEN to enable Logfire."
        )
        return False

    try:
        import logfire

        logfire.configure(
            token=LOGFIRE_TOKEN,
            service_name=LOGFIRE_SERVICE_NAME,
            service_version=LOGFIRE_SERVICE_VERSION,
            environment=LOGFIRE_ENVIRONMENT,
        )

        if LOGFIRE_TRACE_HTTPX:
            try:
                logfire.instrument_httpx()
                logger.info("Logfire: HTTPX instrumentation enabled")
            except Exception as e:
                logger.warning("Failed to instrument HTTPX: %s", e)

        _initialized = True
        logger.info(
            "Logfire monitoring initialized: project=%s, environment=%s, service=%s",
            LOGFIRE_PROJECT_NAME,
            LOGFIRE_ENVIRONMENT,
            LOGFIRE_SERVICE_NAME,
        )
        return True

    except ImportError:
        logger.warning(
            "Logfire is enabled but 'logfire' package is not installed. "
            "Install it with: pip install logfire"
        )
    except Exception as e:
        logger.error("Failed to initialize Logfire: %s", e, exc_info=True)
    return False


def log_capability_detected(capability_id: str, group_version: str, kind: str) -> None:
    """
    Log the first detection of a capability.

    Args:
        capability_id: Key of the capability in the state tracker
        group_version: API group/version that serves the kind
        kind: The detected resource kind
    """
    if not _initialized:
        return
    try:
        import logfire

        logfire.info(
            "Capability detected",
            capability_id=capability_id,
            group_version=group_version,
            kind=kind,
        )
    except Exception:
        logger.debug("Could not log capability detection to Logfire: kind=%s", kind)


def log_query_failure(group_version: str, kind: str, error: BaseException, context: Optional[dict] = None) -> None:
    """
    Log a failed capability probe.

    Args:
        group_version: API group/version that was queried
        kind: The resource kind that was probed
        error: The exception raised by the query provider
        context: Additional context dictionary
    """
    if not _initialized:
        return
    try:
        import logfire

        logfire.warn(
            "Capability probe failed",
            group_version=group_version,
            kind=kind,
            error_type=type(error).__name__,
            **(context or {}),
        )
    except Exception:
        logger.debug("Could not log probe failure to Logfire: kind=%s", kind)
