"""Protocol gateway: JSON-RPC 2.0 (MCP dialect) over SSE sessions and plain HTTP."""

from .auth import ANONYMOUS, AuthenticationError, CallerContext, StaticApiKeyResolver, authenticate
from .handler import ORCHESTRATE_TOOL, PROTOCOL_VERSION, McpHandler
from .jsonrpc import INSUFFICIENT_CREDITS, JsonRpcError, JsonRpcRequest
from .sessions import Session, SessionRegistry

__all__ = [
    "ANONYMOUS",
    "AuthenticationError",
    "CallerContext",
    "INSUFFICIENT_CREDITS",
    "JsonRpcError",
    "JsonRpcRequest",
    "McpHandler",
    "ORCHESTRATE_TOOL",
    "PROTOCOL_VERSION",
    "Session",
    "SessionRegistry",
    "StaticApiKeyResolver",
    "authenticate",
]
