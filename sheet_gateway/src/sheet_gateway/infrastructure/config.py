"""Configuration management for the sheet gateway."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreConfig(BaseModel):
    """Row store configuration."""

    backend: Literal["memory", "file"] = Field(default="file", description="Row store backend")
    data_dir: Path = Field(default=Path("/data"), description="Data directory for the file backend")


class GatewayConfig(BaseModel):
    """Gateway behaviour configuration."""

    default_collection: str = Field(
        default="Products", min_length=1, description="Collection used when 'sheet' is omitted"
    )
    shared_secret: str | None = Field(
        default=None, description="If set, requests must carry a matching 'token' parameter"
    )
    duplicate_ids: Literal["reject", "allow"] = Field(
        default="reject", description="Create with an explicit id that already exists"
    )
    track_changes: bool = Field(
        default=True, description="Record per-collection change times in the meta collection"
    )
    max_batch_operations: int = Field(
        default=500, ge=1, le=10000, description="Largest accepted batch"
    )


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8080, ge=1, le=65535, description="Server port")
    metrics_port: int = Field(default=8001, ge=1, le=65535, description="Prometheus metrics port")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="json", description="Log format")
    metrics_enabled: bool = Field(default=True, description="Start the Prometheus scrape server")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="sheet_gateway", description="Service name for tracing")


class Config(BaseSettings):
    """Main configuration for the sheet gateway."""

    model_config = SettingsConfigDict(
        env_prefix="SHEET_GATEWAY_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    store: StoreConfig = Field(default_factory=StoreConfig)
    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    def ensure_directories(self) -> None:
        """Ensure the data directory exists when the file backend is used."""
        if self.store.backend == "file":
            self.store.data_dir.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()
