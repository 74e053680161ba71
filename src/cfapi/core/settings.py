"""Application settings powered by :mod:`pydantic_settings`."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic.functional_validators import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralized configuration for the manifest reconciliation engine."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    default_domain_name: str = Field(
        default="apps.example.com",
        alias="DEFAULT_DOMAIN_NAME",
        min_length=1,
        description="Domain used to synthesize implicit application routes.",
    )
    root_namespace: str = Field(
        default="cf",
        alias="ROOT_NAMESPACE",
        min_length=1,
        description="Namespace holding cluster-wide resources such as domains.",
    )
    log_level: str = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging verbosity for the service.",
    )
    kubeconfig_path: Path | None = Field(
        default=None,
        alias="KUBECONFIG_PATH",
        description="Optional kubeconfig used instead of the in-cluster configuration.",
    )
    kube_api_host: str | None = Field(
        default=None,
        alias="KUBE_API_HOST",
        description="Optional Kubernetes API server URL overriding the loaded configuration.",
    )
    kube_verify_ssl: bool = Field(
        default=True,
        alias="KUBE_VERIFY_SSL",
        description="Whether TLS certificates of the API server are verified.",
    )
    request_timeout: float = Field(
        default=30.0,
        alias="REQUEST_TIMEOUT",
        ge=0,
        description="Timeout (in seconds) applied to calls against the Kubernetes API.",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("kubeconfig_path", mode="before")
    @classmethod
    def _coerce_kubeconfig_path(cls, value: str | Path | None) -> Path | None:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return Path(value).expanduser()


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()


__all__ = ["Settings", "get_settings"]
