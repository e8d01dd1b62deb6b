"""Tool definition, pricing and health models.

A ``ToolDefinition`` is immutable once constructed. The registry replaces the
whole definition when a tool is re-registered with ``allow_override=True``.

``ToolHealth`` snapshots are immutable too; the health monitor produces a new
snapshot on every probe and hands it to ``ToolRegistry.record_health``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import ConfigDict, Field

from toolmesh_ai.core.schemas import WireSchema


class ExecutionMode(str, Enum):
    """How a tool is reached at the provider."""

    sync = "sync"
    queue = "queue"


class ToolCategory(str, Enum):
    image_generation = "image-generation"
    image_editing = "image-editing"
    image_processing = "image-processing"
    video_generation = "video-generation"
    video_editing = "video-editing"
    audio_generation = "audio-generation"
    audio_processing = "audio-processing"
    music_generation = "music-generation"
    generation_3d = "3d-generation"
    text_generation = "text-generation"
    vision = "vision"
    training = "training"
    utility = "utility"


class UnitType(str, Enum):
    """Metering unit for per-unit priced tools."""

    second = "second"
    minute = "minute"
    image = "image"
    step = "step"


class HealthStatus(str, Enum):
    healthy = "healthy"
    degraded = "degraded"
    down = "down"
    unknown = "unknown"


class ToolParameter(WireSchema):
    """One property of a tool input schema (JSON-Schema subset)."""

    type: str
    description: Optional[str] = None
    enum: Optional[List[Any]] = None
    default: Any = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    items: Optional[Dict[str, Any]] = None


class ToolSchema(WireSchema):
    """Flat object schema describing a tool's input parameters."""

    type: Literal["object"] = "object"
    properties: Dict[str, ToolParameter] = Field(default_factory=dict)
    required: List[str] = Field(default_factory=list)

    def to_json_schema(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class ToolPricing(WireSchema):
    """Pricing information.

    ``credits`` and ``per_unit_credits`` are expressed in platform credits;
    USD figures are provider costs before ``markup`` is applied.
    """

    base_usd_cost: float = Field(ge=0)
    per_unit_cost: Optional[float] = Field(default=None, ge=0)
    unit_type: Optional[UnitType] = None
    credits: float = Field(ge=0)
    per_unit_credits: Optional[float] = Field(default=None, ge=0)
    markup: float = Field(default=1.30, gt=0)


class ToolDefinition(WireSchema):
    """An invokable AI capability."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    category: ToolCategory
    endpoint: Optional[str] = Field(
        default=None,
        description="Provider model path, e.g. 'fal-ai/flux-2'. Defaults to the tool id.",
    )
    execution_mode: ExecutionMode = ExecutionMode.sync
    input_schema: ToolSchema
    output_description: str = ""
    output_mime_types: List[str] = Field(default_factory=list)
    pricing: ToolPricing = Field(default_factory=lambda: ToolPricing(base_usd_cost=0.0, credits=0.0))
    enabled: bool = True
    tags: List[str] = Field(default_factory=list)
    version: str = "1.0.0"

    @property
    def provider_path(self) -> str:
        return (self.endpoint or self.id).strip("/")


@dataclass(frozen=True)
class ToolHealth:
    """Advisory health snapshot of a single tool."""

    status: HealthStatus = HealthStatus.unknown
    last_checked_at: Optional[datetime] = None
    last_success_at: Optional[datetime] = None
    consecutive_failures: int = 0
    latency_ms: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "lastCheckedAt": self.last_checked_at.isoformat() if self.last_checked_at else None,
            "lastSuccessAt": self.last_success_at.isoformat() if self.last_success_at else None,
            "consecutiveFailures": self.consecutive_failures,
            "latencyMs": self.latency_ms,
        }


@dataclass(frozen=True)
class PriceQuote:
    """Computed price of one invocation."""

    usd: float
    credits: float
    metering_units: str

    def to_dict(self) -> Dict[str, Any]:
        return {"usd": self.usd, "credits": self.credits, "meteringUnits": self.metering_units}


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: List[str]
