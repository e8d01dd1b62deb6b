"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Engine Configuration Models
# =====================================================================


class ProviderConfig(BaseModel):
    """Inference provider configuration."""

    api_key: Optional[str] = Field(
        default=None, alias="PROVIDER_API_KEY", description="Provider API key sent as 'Authorization: Key <key>'"
    )
    sync_base_url: str = Field(
        default="https://fal.run", alias="PROVIDER_SYNC_BASE_URL", description="Base URL for synchronous invocations"
    )
    queue_base_url: str = Field(
        default="https://queue.fal.run",
        alias="PROVIDER_QUEUE_BASE_URL",
        description="Base URL for queue submission, status and result calls",
    )
    request_timeout_seconds: float = Field(
        default=120.0, alias="PROVIDER_REQUEST_TIMEOUT_SECONDS", description="Per-request HTTP timeout"
    )
    probe_timeout_seconds: float = Field(
        default=10.0, alias="PROVIDER_PROBE_TIMEOUT_SECONDS", description="HTTP timeout for health probes"
    )

    model_config = {"populate_by_name": True}


class OrchestratorConfig(BaseModel):
    """Plan generation and execution configuration."""

    reasoning_model: str = Field(
        default="anthropic:claude-sonnet-4-5",
        alias="ORCHESTRATOR_REASONING_MODEL",
        description="pydantic-ai model identifier used to generate plans",
    )
    max_tokens: int = Field(
        default=2048, alias="ORCHESTRATOR_MAX_TOKENS", description="Completion token cap for plan generation"
    )
    timeout_seconds: float = Field(
        default=30.0, alias="ORCHESTRATOR_TIMEOUT_SECONDS", description="Plan generation timeout"
    )
    queue_max_wait_seconds: float = Field(
        default=300.0, alias="ORCHESTRATOR_QUEUE_MAX_WAIT_SECONDS", description="Wait budget for one queue job"
    )
    queue_poll_interval_seconds: float = Field(
        default=3.0, alias="ORCHESTRATOR_QUEUE_POLL_INTERVAL_SECONDS", description="Delay between queue status polls"
    )
    max_retries: int = Field(
        default=1, alias="ORCHESTRATOR_MAX_RETRIES", description="Retries for transient step failures"
    )

    model_config = {"populate_by_name": True}


class HealthCheckConfig(BaseModel):
    """Periodic tool health check configuration."""

    enabled: bool = Field(default=True, alias="HEALTH_CHECK_ENABLED", description="Run periodic health probes")
    interval_seconds: float = Field(
        default=300.0, alias="HEALTH_CHECK_INTERVAL_SECONDS", description="Delay between health sweeps"
    )
    initial_delay_seconds: float = Field(
        default=30.0, alias="HEALTH_CHECK_INITIAL_DELAY_SECONDS", description="Delay before the first sweep"
    )
    batch_size: int = Field(default=5, alias="HEALTH_CHECK_BATCH_SIZE", description="Tools probed concurrently")

    model_config = {"populate_by_name": True}


class GatewayConfig(BaseModel):
    """MCP gateway configuration."""

    api_keys: Dict[str, str] = Field(
        default_factory=dict, alias="MCP_API_KEYS", description="JSON object mapping API key to user id"
    )
    require_api_key: bool = Field(
        default=False, alias="MCP_REQUIRE_API_KEY", description="Reject requests that present no API key"
    )
    credit_balances: Dict[str, float] = Field(
        default_factory=dict,
        alias="MCP_CREDIT_BALANCES",
        description="JSON object mapping user id to starting credit balance",
    )
    sse_ping_seconds: int = Field(
        default=30, alias="MCP_SSE_PING_SECONDS", description="Keep-alive ping interval on SSE sessions"
    )

    model_config = {"populate_by_name": True}


class CORSConfig(BaseModel):
    """CORS configuration."""

    origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS", description="Allowed CORS origins (use * for all)")
    allow_credentials: bool = Field(
        default=True, alias="CORS_ALLOW_CREDENTIALS", description="Allow credentials in CORS requests"
    )
    allow_methods: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_METHODS", description="Allowed HTTP methods (use * for all)"
    )
    allow_headers: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_HEADERS", description="Allowed HTTP headers (use * for all)"
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    # =====================================================================
    # Pydantic Configuration
    # =====================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # ToolMesh-AI Server Configuration
    # =====================================================================
    server_host: str = Field(
        default="0.0.0.0",
        description="ToolMesh-AI server host address to bind to",
        alias="TOOLMESH_SERVER_HOST",
    )
    server_port: int = Field(
        default=8000,
        description="ToolMesh-AI server port number",
        alias="TOOLMESH_SERVER_PORT",
    )
    log_level: str = Field(
        default="INFO",
        description="ToolMesh-AI server logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="TOOLMESH_LOG_LEVEL",
    )

    # =====================================================================
    # Provider
    # =====================================================================
    provider_api_key: Optional[str] = Field(default=None, alias="PROVIDER_API_KEY")
    provider_sync_base_url: str = Field(default="https://fal.run", alias="PROVIDER_SYNC_BASE_URL")
    provider_queue_base_url: str = Field(default="https://queue.fal.run", alias="PROVIDER_QUEUE_BASE_URL")
    provider_request_timeout_seconds: float = Field(default=120.0, alias="PROVIDER_REQUEST_TIMEOUT_SECONDS")
    provider_probe_timeout_seconds: float = Field(default=10.0, alias="PROVIDER_PROBE_TIMEOUT_SECONDS")

    # =====================================================================
    # Orchestrator
    # =====================================================================
    orchestrator_reasoning_model: str = Field(
        default="anthropic:claude-sonnet-4-5", alias="ORCHESTRATOR_REASONING_MODEL"
    )
    orchestrator_max_tokens: int = Field(default=2048, alias="ORCHESTRATOR_MAX_TOKENS")
    orchestrator_timeout_seconds: float = Field(default=30.0, alias="ORCHESTRATOR_TIMEOUT_SECONDS")
    orchestrator_queue_max_wait_seconds: float = Field(default=300.0, alias="ORCHESTRATOR_QUEUE_MAX_WAIT_SECONDS")
    orchestrator_queue_poll_interval_seconds: float = Field(
        default=3.0, alias="ORCHESTRATOR_QUEUE_POLL_INTERVAL_SECONDS"
    )
    orchestrator_max_retries: int = Field(default=1, alias="ORCHESTRATOR_MAX_RETRIES")

    # =====================================================================
    # Health Checks
    # =====================================================================
    health_check_enabled: bool = Field(default=True, alias="HEALTH_CHECK_ENABLED")
    health_check_interval_seconds: float = Field(default=300.0, alias="HEALTH_CHECK_INTERVAL_SECONDS")
    health_check_initial_delay_seconds: float = Field(default=30.0, alias="HEALTH_CHECK_INITIAL_DELAY_SECONDS")
    health_check_batch_size: int = Field(default=5, alias="HEALTH_CHECK_BATCH_SIZE")

    # =====================================================================
    # MCP Gateway
    # =====================================================================
    mcp_api_keys: Dict[str, str] = Field(default_factory=dict, alias="MCP_API_KEYS")
    mcp_require_api_key: bool = Field(default=False, alias="MCP_REQUIRE_API_KEY")
    mcp_credit_balances: Dict[str, float] = Field(default_factory=dict, alias="MCP_CREDIT_BALANCES")
    mcp_sse_ping_seconds: int = Field(default=30, alias="MCP_SSE_PING_SECONDS")

    # =====================================================================
    # CORS
    # =====================================================================
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(default=["*"], alias="CORS_ALLOW_METHODS")
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def provider(self) -> ProviderConfig:
        """Get provider configuration from environment variables."""
        return ProviderConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def orchestrator(self) -> OrchestratorConfig:
        """Get orchestrator configuration from environment variables."""
        return OrchestratorConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def health_check(self) -> HealthCheckConfig:
        """Get health check configuration from environment variables."""
        return HealthCheckConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def gateway(self) -> GatewayConfig:
        """Get MCP gateway configuration from environment variables."""
        return GatewayConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def cors(self) -> CORSConfig:
        """Get CORS configuration from environment variables."""
        return CORSConfig.model_validate(self.model_dump(by_alias=True))


settings = Settings()
