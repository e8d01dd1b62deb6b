"""Unit tests for server configuration settings model.

Tests verify that the Settings model correctly binds environment variables
and that the grouped configuration models expose them as expected.
"""

import pytest

from toolmesh_ai.server.core.config import (
    CORSConfig,
    GatewayConfig,
    HealthCheckConfig,
    OrchestratorConfig,
    ProviderConfig,
    Settings,
)


@pytest.fixture
def make_settings():
    def _make(**kwargs) -> Settings:
        return Settings(_env_file=None, **kwargs)

    return _make


class TestSettingsDefaults:
    """Test Settings defaults when nothing is configured."""

    def test_server_defaults(self, make_settings, monkeypatch):
        monkeypatch.delenv("TOOLMESH_SERVER_PORT", raising=False)
        settings = make_settings()
        assert settings.server_host == "0.0.0.0"
        assert settings.server_port == 8000

    def test_provider_defaults(self, make_settings, monkeypatch):
        monkeypatch.delenv("PROVIDER_API_KEY", raising=False)
        provider = make_settings().provider
        assert isinstance(provider, ProviderConfig)
        assert provider.api_key is None
        assert provider.sync_base_url == "https://fal.run"
        assert provider.queue_base_url == "https://queue.fal.run"
        assert provider.request_timeout_seconds == 120.0

    def test_orchestrator_defaults(self, make_settings):
        orchestrator = make_settings().orchestrator
        assert isinstance(orchestrator, OrchestratorConfig)
        assert orchestrator.queue_max_wait_seconds == 300.0
        assert orchestrator.queue_poll_interval_seconds == 3.0
        assert orchestrator.max_retries == 1

    def test_gateway_defaults(self, make_settings):
        gateway = make_settings().gateway
        assert isinstance(gateway, GatewayConfig)
        assert gateway.api_keys == {}
        assert gateway.require_api_key is False
        assert gateway.sse_ping_seconds == 30


class TestSettingsBinding:
    """Test Settings model environment variable binding."""

    def test_server_port_binding(self, make_settings, monkeypatch):
        """Test TOOLMESH_SERVER_PORT binding."""
        monkeypatch.setenv("TOOLMESH_SERVER_PORT", "9100")
        assert make_settings().server_port == 9100

    def test_log_level_binding(self, make_settings, monkeypatch):
        """Test TOOLMESH_LOG_LEVEL binding."""
        monkeypatch.setenv("TOOLMESH_LOG_LEVEL", "DEBUG")
        assert make_settings().log_level == "DEBUG"

    def test_provider_binding(self, make_settings, monkeypatch):
        monkeypatch.setenv("PROVIDER_API_KEY", "secret")
        monkeypatch.setenv("PROVIDER_SYNC_BASE_URL", "http://mock/sync")
        provider = make_settings().provider
        assert provider.api_key == "secret"
        assert provider.sync_base_url == "http://mock/sync"

    def test_env_names_are_case_sensitive(self, make_settings, monkeypatch):
        monkeypatch.delenv("PROVIDER_API_KEY", raising=False)
        monkeypatch.setenv("provider_api_key", "lowercase")
        assert make_settings().provider.api_key is None

    def test_json_mappings(self, make_settings, monkeypatch):
        monkeypatch.setenv("MCP_API_KEYS", '{"key-1": "alice"}')
        monkeypatch.setenv("MCP_CREDIT_BALANCES", '{"alice": 12.5}')
        gateway = make_settings().gateway
        assert gateway.api_keys == {"key-1": "alice"}
        assert gateway.credit_balances == {"alice": 12.5}

    def test_health_check_binding(self, make_settings, monkeypatch):
        monkeypatch.setenv("HEALTH_CHECK_ENABLED", "false")
        monkeypatch.setenv("HEALTH_CHECK_BATCH_SIZE", "2")
        health = make_settings().health_check
        assert isinstance(health, HealthCheckConfig)
        assert health.enabled is False
        assert health.batch_size == 2

    def test_cors_binding(self, make_settings, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", '["https://app.example"]')
        cors = make_settings().cors
        assert isinstance(cors, CORSConfig)
        assert cors.origins == ["https://app.example"]

    def test_init_values_by_field_name(self, make_settings):
        settings = make_settings(orchestrator_max_retries=3)
        assert settings.orchestrator.max_retries == 3
