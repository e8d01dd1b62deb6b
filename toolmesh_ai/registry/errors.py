from __future__ import annotations

from toolmesh_ai.core.errors import ToolMeshError


class RegistryError(ToolMeshError):
    pass


class InvalidToolIdError(RegistryError):
    def __init__(self, tool_id: str) -> None:
        super().__init__(f"Invalid tool ID format: {tool_id!r}")
        self.tool_id = tool_id


class ToolAlreadyExistsError(RegistryError):
    def __init__(self, tool_id: str) -> None:
        super().__init__(f"Tool already registered: {tool_id}. Use allow_override to update.")
        self.tool_id = tool_id


class IncompleteDefinitionError(RegistryError):
    def __init__(self, tool_id: str, detail: str | None = None) -> None:
        message = f"Tool registration for '{tool_id}' requires name, description, category, and input_schema"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.tool_id = tool_id


class ToolNotFoundError(RegistryError):
    def __init__(self, tool_id: str) -> None:
        super().__init__(f"Tool not found: {tool_id}")
        self.tool_id = tool_id
