"""JSON-RPC 2.0 envelopes and error codes for the MCP dialect.

Error codes, request ids and the error and result envelopes come from
``mcp.types`` so the gateway speaks the same wire shapes as MCP clients.
``INSUFFICIENT_CREDITS`` is an application code in the implementation-defined
server error range.
"""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    ErrorData,
    JSONRPCResponse,
    RequestId,
)
from pydantic import ConfigDict, Field, field_validator

from toolmesh_ai.core.errors import ToolMeshError
from toolmesh_ai.core.schemas import BaseSchema

JSONRPC_VERSION = "2.0"

INSUFFICIENT_CREDITS = -32000

__all__ = [
    "INSUFFICIENT_CREDITS",
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "INVALID_REQUEST",
    "JSONRPC_VERSION",
    "METHOD_NOT_FOUND",
    "PARSE_ERROR",
    "JsonRpcError",
    "JsonRpcRequest",
    "error_response",
    "success_response",
]


class JsonRpcError(ToolMeshError):
    """A protocol-level failure that maps to a JSON-RPC ``error`` object.

    Args:
        code: JSON-RPC error code.
        message: Human-readable error description.
        data: Optional structured detail for the caller.
    """

    def __init__(self, code: int, message: str, data: Optional[Any] = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def to_error_data(self) -> ErrorData:
        return ErrorData(code=self.code, message=self.message, data=self.data)

    def to_dict(self) -> Dict[str, Any]:
        error = self.to_error_data()
        return error.model_dump(exclude={"data"} if error.data is None else None)


class JsonRpcRequest(BaseSchema):
    """A JSON-RPC request or notification.

    ``mcp.types`` splits these into ``JSONRPCRequest`` and
    ``JSONRPCNotification``; one model with an optional ``id`` lets the
    gateway decide how to answer after validation. ``id`` is ``None`` for
    notifications.
    """

    jsonrpc: Literal["2.0"]
    method: str = Field(min_length=1)
    id: Optional[RequestId] = None
    params: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("id", mode="before")
    @classmethod
    def _id_type(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("id must be a string, number or null")
        return value

    @property
    def is_notification(self) -> bool:
        return self.id is None


def success_response(request_id: RequestId, result: Dict[str, Any]) -> Dict[str, Any]:
    return JSONRPCResponse(jsonrpc=JSONRPC_VERSION, id=request_id, result=result).model_dump(by_alias=True)


def error_response(request_id: Optional[RequestId], error: JsonRpcError) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error.to_dict()}
