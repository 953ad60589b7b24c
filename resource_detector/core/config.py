"""
Configuration Settings.

This module defines the resource detector configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class KubernetesApiConfig(BaseModel):
    """Kubernetes API server connection configuration."""

    url: str = Field(
        default="https://kubernetes.default.svc",
        alias="KUBERNETES_API_URL",
        description="Base URL of the Kubernetes API server",
    )
    token: Optional[str] = Field(
        default=None, alias="KUBERNETES_TOKEN", description="Static bearer token for the API server (optional)"
    )
    token_file: Optional[str] = Field(
        default="/var/run/secrets/kubernetes.io/serviceaccount/token",
        alias="KUBERNETES_TOKEN_FILE",
        description="Path of a bearer token file, re-read on every request (in-cluster service account)",
    )
    ca_file: Optional[str] = Field(
        default="/var/run/secrets/kubernetes.io/serviceaccount/ca.crt",
        alias="KUBERNETES_CA_FILE",
        description="CA bundle used to verify the API server certificate",
    )
    verify_ssl: bool = Field(
        default=True, alias="KUBERNETES_VERIFY_SSL", description="Verify the API server TLS certificate"
    )
    timeout: float = Field(default=10.0, alias="KUBERNETES_TIMEOUT", description="HTTP timeout in seconds")

    model_config = {"populate_by_name": True}


class DetectorConfig(BaseModel):
    """Detection loop configuration."""

    poll_interval: float = Field(
        default=10.0,
        gt=0,
        alias="RESOURCE_DETECTOR_POLL_INTERVAL",
        description="Seconds between two detection ticks",
    )
    cache_ttl: float = Field(
        default=5.0,
        alias="RESOURCE_DETECTOR_CACHE_TTL",
        description="Seconds a discovery listing is reused across lookups (<= 0 disables caching)",
    )
    isolate_trigger_errors: bool = Field(
        default=False,
        alias="RESOURCE_DETECTOR_ISOLATE_TRIGGER_ERRORS",
        description="Log and continue when a trigger raises instead of ending the detection loop",
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Resource detector settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )

    log_level: str = Field(
        default="INFO",
        description="Resource detector logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="RESOURCE_DETECTOR_LOG_LEVEL",
    )

    # =====================================================================
    # Kubernetes API Configuration
    # =====================================================================
    kubernetes_api_url: str = Field(default="https://kubernetes.default.svc", alias="KUBERNETES_API_URL")
    kubernetes_token: Optional[str] = Field(default=None, alias="KUBERNETES_TOKEN")
    kubernetes_token_file: Optional[str] = Field(
        default="/var/run/secrets/kubernetes.io/serviceaccount/token", alias="KUBERNETES_TOKEN_FILE"
    )
    kubernetes_ca_file: Optional[str] = Field(
        default="/var/run/secrets/kubernetes.io/serviceaccount/ca.crt", alias="KUBERNETES_CA_FILE"
    )
    kubernetes_verify_ssl: bool = Field(default=True, alias="KUBERNETES_VERIFY_SSL")
    kubernetes_timeout: float = Field(default=10.0, alias="KUBERNETES_TIMEOUT")

    # =====================================================================
    # Detection Loop Configuration
    # =====================================================================
    poll_interval: float = Field(default=10.0, gt=0, alias="RESOURCE_DETECTOR_POLL_INTERVAL")
    cache_ttl: float = Field(default=5.0, alias="RESOURCE_DETECTOR_CACHE_TTL")
    isolate_trigger_errors: bool = Field(default=False, alias="RESOURCE_DETECTOR_ISOLATE_TRIGGER_ERRORS")

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def kubernetes(self) -> KubernetesApiConfig:
        """Get Kubernetes API configuration from environment variables."""
        return KubernetesApiConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def detector(self) -> DetectorConfig:
        """Get detection loop configuration from environment variables."""
        return DetectorConfig.model_validate(self.model_dump(by_alias=True))


settings = Settings()
