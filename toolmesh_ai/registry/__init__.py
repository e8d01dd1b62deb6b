"""Capability registry: tool definitions, input validation, pricing and health."""

from .errors import (
    IncompleteDefinitionError,
    InvalidToolIdError,
    RegistryError,
    ToolAlreadyExistsError,
    ToolNotFoundError,
)
from .health import HealthMonitor, next_health
from .models import (
    ExecutionMode,
    HealthStatus,
    PriceQuote,
    ToolCategory,
    ToolDefinition,
    ToolHealth,
    ToolParameter,
    ToolPricing,
    ToolSchema,
    UnitType,
    ValidationResult,
)
from .registry import ToolRegistry

__all__ = [
    "ExecutionMode",
    "HealthMonitor",
    "HealthStatus",
    "IncompleteDefinitionError",
    "InvalidToolIdError",
    "PriceQuote",
    "RegistryError",
    "ToolAlreadyExistsError",
    "ToolCategory",
    "ToolDefinition",
    "ToolHealth",
    "ToolNotFoundError",
    "ToolParameter",
    "ToolPricing",
    "ToolRegistry",
    "ToolSchema",
    "UnitType",
    "ValidationResult",
    "next_health",
]
