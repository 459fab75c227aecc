"""
Application settings using Pydantic.

Provides environment-based configuration loading with CROSSTAG_ prefix.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Kubernetes access
    kubeconfig: str | None = None
    kube_context: str | None = None
    request_timeout: int = 30

    # Offline mode: serve managed resources from memory instead of the cluster
    mock_backend: bool = False
    resources_file: str | None = None

    # Matching
    match_threshold: float = 0.30
    network_confidence: float = 0.90
    network_index_ttl_seconds: int = 1800

    # Reconciliation
    reconcile_interval_seconds: int = 300

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # json or console

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "CROSSTAG_"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
