"""
Core utilities and configuration for the resource detector.

This package provides settings, logging configuration and optional monitoring
shared by the discovery and detector layers.
"""

from resource_detector.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
