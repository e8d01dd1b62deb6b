from __future__ import annotations

"""Capability registry.

The registry maps a tool id to its immutable ``ToolDefinition`` together with
the latest advisory ``ToolHealth`` snapshot.

Instances are independent; the HTTP server keeps one per application in its
service container, tests build their own.
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from .catalog import builtin_tools
from .errors import IncompleteDefinitionError, InvalidToolIdError, ToolAlreadyExistsError
from .models import (
    HealthStatus,
    PriceQuote,
    ToolCategory,
    ToolDefinition,
    ToolHealth,
    ValidationResult,
)
from .pricing import quote
from .validation import validate_against_schema

logger = logging.getLogger(__name__)

TOOL_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{2,100}$")

_REQUIRED_DEFINITION_FIELDS = ("name", "description", "category", "input_schema")


def _format_amount(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


class ToolRegistry:
    """
    In-memory catalog of invokable tools.

    Notes:
        - ``register`` refuses duplicates unless ``allow_override`` is set.
        - Health is written only through ``record_health``, which the
          ``HealthMonitor`` calls after each probe.
        - Health is advisory: only ``to_mcp_tools`` hides tools that are ``down``.
    """

    def __init__(self, tools: Optional[Iterable[ToolDefinition]] = None) -> None:
        self._tools: Dict[str, ToolDefinition] = {}
        self._health: Dict[str, ToolHealth] = {}
        for tool in tools or ():
            self.register(tool)

    @classmethod
    def with_builtin_tools(cls) -> "ToolRegistry":
        """Build a registry pre-loaded with the built-in catalog."""
        registry = cls(builtin_tools())
        logger.info("Tool registry initialized with %d tools", registry.size)
        return registry

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def register(self, tool: Union[ToolDefinition, Mapping[str, Any]], *, allow_override: bool = False) -> ToolDefinition:
        """
        Register a tool definition.

        Args:
            tool: A ``ToolDefinition`` or a mapping in wire format.
            allow_override: Replace an existing tool with the same id.

        Returns:
            The registered definition.

        Raises:
            InvalidToolIdError: If the id does not match ``TOOL_ID_PATTERN``.
            ToolAlreadyExistsError: If the id is taken and ``allow_override`` is false.
            IncompleteDefinitionError: If name, description, category or input schema is missing.
        """
        raw_id = tool.id if isinstance(tool, ToolDefinition) else tool.get("id")
        tool_id = raw_id if isinstance(raw_id, str) else ""

        if not TOOL_ID_PATTERN.match(tool_id):
            logger.warning("Tool registration rejected - invalid tool ID", extra={"tool_id": raw_id})
            raise InvalidToolIdError(str(raw_id))

        if tool_id in self._tools and not allow_override:
            logger.warning("Tool registration rejected - tool already exists", extra={"tool_id": tool_id})
            raise ToolAlreadyExistsError(tool_id)

        definition = self._coerce_definition(tool_id, tool)

        self._tools[tool_id] = definition
        self._health[tool_id] = ToolHealth()
        logger.info("Tool registered: %s (%s)", tool_id, definition.name)
        return definition

    @staticmethod
    def _coerce_definition(tool_id: str, tool: Union[ToolDefinition, Mapping[str, Any]]) -> ToolDefinition:
        if isinstance(tool, ToolDefinition):
            definition = tool
        else:
            missing = [
                field_name
                for field_name in _REQUIRED_DEFINITION_FIELDS
                if not tool.get(field_name) and not tool.get(_camel(field_name))
            ]
            if missing:
                logger.warning(
                    "Tool registration rejected - missing required fields",
                    extra={"tool_id": tool_id, "missing": missing},
                )
                raise IncompleteDefinitionError(tool_id, f"missing {', '.join(missing)}")
            try:
                definition = ToolDefinition.model_validate(tool)
            except ValidationError as exc:
                logger.warning(
                    "Tool registration rejected - malformed definition",
                    extra={"tool_id": tool_id, "errors": exc.error_count()},
                )
                raise IncompleteDefinitionError(tool_id, str(exc)) from exc

        if not definition.name.strip() or not definition.description.strip():
            logger.warning("Tool registration rejected - missing required fields", extra={"tool_id": tool_id})
            raise IncompleteDefinitionError(tool_id)
        return definition

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    @property
    def size(self) -> int:
        return len(self._tools)

    def __contains__(self, tool_id: object) -> bool:
        return tool_id in self._tools

    def get(self, tool_id: str) -> Optional[ToolDefinition]:
        return self._tools.get(tool_id)

    def all(self) -> List[ToolDefinition]:
        return list(self._tools.values())

    def enabled(self) -> List[ToolDefinition]:
        return [tool for tool in self._tools.values() if tool.enabled]

    def by_category(self, category: Union[ToolCategory, str]) -> List[ToolDefinition]:
        wanted = ToolCategory(category)
        return [tool for tool in self.enabled() if tool.category is wanted]

    def by_tag(self, tag: str) -> List[ToolDefinition]:
        return [tool for tool in self.enabled() if tag in tool.tags]

    def search(self, query: str) -> List[ToolDefinition]:
        """Case-insensitive match on name, description, tags and id of enabled tools."""
        q = query.lower()
        return [
            tool
            for tool in self.enabled()
            if q in tool.name.lower()
            or q in tool.description.lower()
            or any(q in tag for tag in tool.tags)
            or q in tool.id.lower()
        ]

    def categories(self) -> List[Dict[str, Any]]:
        grouped: Dict[ToolCategory, List[str]] = {}
        for tool in self.enabled():
            grouped.setdefault(tool.category, []).append(tool.id)
        return [
            {"category": category.value, "count": len(tool_ids), "tools": tool_ids}
            for category, tool_ids in grouped.items()
        ]

    def tools_for_agent(self, tool_ids: Iterable[str]) -> List[ToolDefinition]:
        """Enabled tools among ``tool_ids``, in the given order."""
        found = (self._tools.get(tool_id) for tool_id in tool_ids)
        return [tool for tool in found if tool is not None and tool.enabled]

    def validate_tool_ids(self, tool_ids: Iterable[str]) -> Dict[str, Any]:
        unknown = [tool_id for tool_id in tool_ids if tool_id not in self._tools]
        return {"valid": not unknown, "unknown_tools": unknown}

    # ------------------------------------------------------------------
    # Validation & pricing
    # ------------------------------------------------------------------
    def validate_input(self, tool_id: str, data: Mapping[str, Any]) -> ValidationResult:
        """Validate call input for ``tool_id``; never raises."""
        tool = self._tools.get(tool_id)
        if tool is None:
            return ValidationResult(valid=False, errors=[f"Unknown tool: {tool_id}"])
        if not isinstance(data, Mapping):
            return ValidationResult(valid=False, errors=["Input must be an object"])
        return validate_against_schema(tool.input_schema, data)

    def calculate_price(self, tool_id: str, params: Mapping[str, Any]) -> Optional[PriceQuote]:
        """Price one invocation of ``tool_id``; ``None`` for an unknown tool."""
        tool = self._tools.get(tool_id)
        if tool is None:
            return None
        return quote(tool.pricing, params)

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------
    def health(self, tool_id: str) -> Optional[ToolHealth]:
        return self._health.get(tool_id)

    def all_health(self) -> Dict[str, ToolHealth]:
        return dict(self._health)

    def record_health(self, tool_id: str, health: ToolHealth) -> None:
        """Store a new health snapshot. Only the health-check path calls this."""
        previous = self._health.get(tool_id)
        self._health[tool_id] = health
        if previous is not None and previous.status is not health.status:
            logger.info(
                "Tool health changed: %s %s -> %s",
                tool_id,
                previous.status.value,
                health.status.value,
                extra={"tool_id": tool_id, "consecutive_failures": health.consecutive_failures},
            )

    def is_listed(self, tool_id: str) -> bool:
        tool = self._tools.get(tool_id)
        if tool is None or not tool.enabled:
            return False
        health = self._health.get(tool_id)
        return health is None or health.status is not HealthStatus.down

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    def to_mcp_tools(self) -> List[Dict[str, Any]]:
        """Enabled, non-``down`` tools in MCP ``tools/list`` shape."""
        return [
            {
                "name": tool.id,
                "description": (
                    f"{tool.name}: {tool.description} [Category: {tool.category.value}] "
                    f"[Cost: ${_format_amount(tool.pricing.base_usd_cost)} / "
                    f"{_format_amount(tool.pricing.credits)} credits]"
                ),
                "inputSchema": tool.input_schema.to_json_schema(),
            }
            for tool in self.enabled()
            if self.is_listed(tool.id)
        ]


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)
