"""Unit tests for configuration module."""

from __future__ import annotations

from pathlib import Path

import pytest

from sheet_gateway.infrastructure.config import (
    Config,
    GatewayConfig,
    ServerConfig,
    StoreConfig,
    get_config,
)


@pytest.mark.unit
class TestConfig:
    """Tests for Config class."""

    def test_default_config(self) -> None:
        """Test default configuration values."""
        config = Config()

        assert config.store.backend == "file"
        assert config.gateway.default_collection == "Products"
        assert config.gateway.shared_secret is None
        assert config.gateway.duplicate_ids == "reject"
        assert config.gateway.track_changes is True
        assert config.server.port == 8080

    def test_ensure_directories(self, temp_dir: Path) -> None:
        """File backend creates its data directory."""
        config = Config(store=StoreConfig(backend="file", data_dir=temp_dir / "data"))

        config.ensure_directories()

        assert config.store.data_dir.exists()

    def test_memory_backend_creates_nothing(self, temp_dir: Path) -> None:
        config = Config(store=StoreConfig(backend="memory", data_dir=temp_dir / "data"))
        config.ensure_directories()
        assert not (temp_dir / "data").exists()

    def test_invalid_duplicate_policy(self) -> None:
        """Test that an unknown duplicate-id policy raises validation error."""
        with pytest.raises(ValueError):
            GatewayConfig(duplicate_ids="overwrite")

    def test_invalid_batch_limit(self) -> None:
        with pytest.raises(ValueError):
            GatewayConfig(max_batch_operations=0)

    def test_invalid_port(self) -> None:
        with pytest.raises(ValueError):
            ServerConfig(port=70000)

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Nested settings are read from SHEET_GATEWAY_<SECTION>__<FIELD>."""
        monkeypatch.setenv("SHEET_GATEWAY_GATEWAY__SHARED_SECRET", "s3cret")
        monkeypatch.setenv("SHEET_GATEWAY_STORE__BACKEND", "memory")
        monkeypatch.setenv("SHEET_GATEWAY_SERVER__PORT", "9090")

        config = Config()

        assert config.gateway.shared_secret == "s3cret"
        assert config.store.backend == "memory"
        assert config.server.port == 9090

    def test_get_config_is_cached(self) -> None:
        get_config.cache_clear()
        assert get_config() is get_config()
        get_config.cache_clear()
