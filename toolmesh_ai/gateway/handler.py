from __future__ import annotations

"""MCP request handling.

``McpHandler`` is transport agnostic: the SSE and stateless HTTP routes hand
it decoded JSON and a ``CallerContext`` and get back a JSON-RPC response
dictionary (or ``None`` for notifications).

Supported methods
-----------------

- ``initialize``: protocol version, capabilities and server info.
- ``tools/list``: enabled tools that are not ``down``, plus ``orchestrate``.
- ``tools/call``: invoke one tool, or run a workflow through ``orchestrate``.
- ``ping``: empty result.

Every failure is reported as a well-formed JSON-RPC error; nothing raised
while handling a request escapes to the transport.
"""

import asyncio
import json
from typing import Any, Dict, List, Mapping, Optional, Union

from mcp.types import (
    CallToolResult,
    Implementation,
    InitializeResult,
    ServerCapabilities,
    TextContent,
    Tool,
    ToolsCapability,
)
from pydantic import ValidationError

from toolmesh_ai import __version__
from toolmesh_ai.core.logging_config import get_logger
from toolmesh_ai.credits.errors import InsufficientCreditsError
from toolmesh_ai.credits.ledger import CreditLedger
from toolmesh_ai.execution.adapter import ExecutionAdapter
from toolmesh_ai.execution.errors import JobFailedError, JobTimeoutError
from toolmesh_ai.planning.orchestrator import Orchestrator
from toolmesh_ai.planning.templates import TemplateParameterError, template_names
from toolmesh_ai.registry.models import ToolDefinition
from toolmesh_ai.registry.registry import ToolRegistry

from .auth import ANONYMOUS, CallerContext
from .jsonrpc import (
    INSUFFICIENT_CREDITS,
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    JsonRpcError,
    JsonRpcRequest,
    RequestId,
    error_response,
    success_response,
)

logger = get_logger(__name__)

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "toolmesh-gateway"
ORCHESTRATE_TOOL = "orchestrate"

JsonRpcReply = Union[Dict[str, Any], List[Dict[str, Any]]]


def _to_text(payload: Any) -> Dict[str, Any]:
    result = CallToolResult(content=[TextContent(type="text", text=json.dumps(payload, indent=2, default=str))])
    return result.model_dump(by_alias=True, exclude_none=True)


def _request_id_of(message: Any) -> Optional[RequestId]:
    if isinstance(message, dict):
        candidate = message.get("id")
        if isinstance(candidate, (str, int)) and not isinstance(candidate, bool):
            return candidate
    return None


class McpHandler:
    """Dispatch JSON-RPC requests to the registry, adapter and orchestrator.

    Args:
        registry: Tool catalog used for discovery, validation and pricing.
        adapter: Executes direct tool calls.
        orchestrator: Runs the ``orchestrate`` meta-tool.
        ledger: Credit ledger for metered callers; metering is off when ``None``.
        jobs_url_prefix: Path under which job status/result routes are mounted.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        adapter: ExecutionAdapter,
        orchestrator: Orchestrator,
        *,
        ledger: Optional[CreditLedger] = None,
        jobs_url_prefix: str = "/api/v1/jobs",
        server_name: str = SERVER_NAME,
        server_version: str = __version__,
    ) -> None:
        self._registry = registry
        self._adapter = adapter
        self._orchestrator = orchestrator
        self._ledger = ledger
        self._jobs_url_prefix = jobs_url_prefix.rstrip("/")
        self._server_name = server_name
        self._server_version = server_version

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------
    async def handle_raw(self, body: Union[str, bytes], caller: CallerContext = ANONYMOUS) -> Optional[JsonRpcReply]:
        """Decode ``body`` and handle it; malformed JSON yields a parse error."""
        try:
            payload = json.loads(body)
        except ValueError as exc:
            return error_response(None, JsonRpcError(PARSE_ERROR, f"Parse error: {exc}"))
        return await self.handle_payload(payload, caller)

    async def handle_payload(self, payload: Any, caller: CallerContext = ANONYMOUS) -> Optional[JsonRpcReply]:
        """Handle a single message or a batch; ``None`` when nothing needs a reply."""
        if isinstance(payload, list):
            if not payload:
                return error_response(None, JsonRpcError(INVALID_REQUEST, "Invalid Request: empty batch"))
            replies = await asyncio.gather(*(self.handle_message(message, caller) for message in payload))
            answered = [reply for reply in replies if reply is not None]
            return answered or None
        return await self.handle_message(payload, caller)

    def parse_request(self, message: Any) -> JsonRpcRequest:
        """
        Validate a decoded message as a JSON-RPC request.

        Raises:
            JsonRpcError: ``INVALID_REQUEST`` if the envelope is malformed.
        """
        if not isinstance(message, dict):
            raise JsonRpcError(INVALID_REQUEST, "Invalid Request: expected a JSON object")
        try:
            return JsonRpcRequest.model_validate(message)
        except ValidationError as exc:
            fields = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
            raise JsonRpcError(
                INVALID_REQUEST, "Invalid Request: missing or malformed jsonrpc/method", {"fields": fields}
            ) from exc

    async def handle_message(self, message: Any, caller: CallerContext = ANONYMOUS) -> Optional[Dict[str, Any]]:
        try:
            request = self.parse_request(message)
        except JsonRpcError as exc:
            return error_response(_request_id_of(message), exc)

        if request.is_notification:
            logger.debug("MCP notification acknowledged", extra={"method": request.method})
            return None
        return await self.handle(request, caller)

    async def handle(self, request: JsonRpcRequest, caller: CallerContext = ANONYMOUS) -> Dict[str, Any]:
        """Handle one request and always return a JSON-RPC response."""
        try:
            result = await self._dispatch(request, caller)
        except JsonRpcError as exc:
            return error_response(request.id, exc)
        except Exception as exc:
            logger.error("MCP request handler error", extra={"method": request.method, "error": str(exc)}, exc_info=True)
            return error_response(request.id, JsonRpcError(INTERNAL_ERROR, f"Internal error: {exc}"))
        return success_response(request.id, result)

    # ------------------------------------------------------------------
    # Methods
    # ------------------------------------------------------------------
    async def _dispatch(self, request: JsonRpcRequest, caller: CallerContext) -> Any:
        method = request.method
        if method == "initialize":
            return self.initialize_result()
        if method == "tools/list":
            return {"tools": self.list_tools()}
        if method == "tools/call":
            return await self._call_tool(request.params or {}, caller)
        if method == "ping":
            return {}
        raise JsonRpcError(METHOD_NOT_FOUND, f"Method not found: {method}")

    def initialize_result(self) -> Dict[str, Any]:
        result = InitializeResult(
            protocolVersion=PROTOCOL_VERSION,
            capabilities=ServerCapabilities(tools=ToolsCapability(listChanged=False)),
            serverInfo=Implementation(name=self._server_name, version=self._server_version),
        )
        return result.model_dump(by_alias=True, exclude_none=True)

    def orchestrate_tool(self) -> Dict[str, Any]:
        names = ", ".join(template_names())
        return {
            "name": ORCHESTRATE_TOOL,
            "description": (
                "Multi-step workflow orchestrator. Give it a natural language goal and it plans & executes "
                f"a sequence of AI tools automatically. Available templates: {names}. Cost depends on tools used."
            ),
            "inputSchema": {
                "type": "object",
                "properties": {
                    "goal": {"type": "string", "description": "Natural language description of the creative goal"},
                    "template": {"type": "string", "description": f"Optional workflow template: {names}"},
                    "params": {
                        "type": "object",
                        "description": "Template parameters (if using a template); see /api/v1/orchestrate/templates",
                    },
                },
                "required": ["goal"],
            },
        }

    def list_tools(self) -> List[Dict[str, Any]]:
        entries = self._registry.to_mcp_tools()
        entries.append(self.orchestrate_tool())
        return [Tool.model_validate(entry).model_dump(by_alias=True, exclude_none=True) for entry in entries]

    def server_info(self) -> Dict[str, Any]:
        return {
            "name": self._server_name,
            "version": self._server_version,
            "protocolVersion": PROTOCOL_VERSION,
            "transports": {"sse": "/mcp/sse", "message": "/mcp/message", "http": "/mcp"},
            "tools": len(self._registry.to_mcp_tools()) + 1,
        }

    async def _call_tool(self, params: Mapping[str, Any], caller: CallerContext) -> Dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise JsonRpcError(INVALID_PARAMS, "Missing required field: name")
        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise JsonRpcError(INVALID_PARAMS, "Tool arguments must be an object")

        if name == ORCHESTRATE_TOOL:
            return await self._orchestrate(arguments, caller)

        tool = self._registry.get(name)
        if tool is None:
            raise JsonRpcError(INVALID_PARAMS, f"Unknown tool: {name}. Use tools/list to see available tools.")
        if not tool.enabled:
            raise JsonRpcError(INVALID_PARAMS, f"Tool is currently disabled: {name}")

        validation = self._registry.validate_input(name, arguments)
        if not validation.valid:
            raise JsonRpcError(
                INVALID_PARAMS,
                f"Invalid input: {'; '.join(validation.errors)}",
                {"validationErrors": validation.errors, "schema": tool.input_schema.to_json_schema()},
            )

        price = self._registry.calculate_price(name, arguments)
        credits = price.credits if price is not None else tool.pricing.credits
        tx_id = await self._reserve(caller, credits, f"tool:{name}")

        logger.info(
            "MCP tool call",
            extra={"tool_id": name, "execution_mode": tool.execution_mode.value, "credits": credits, "metered": caller.metered},
        )
        try:
            output = await self._adapter.invoke(tool, arguments)
        except JobTimeoutError as exc:
            await self._settle(tx_id, commit=True)
            return _to_text(self._processing_payload(tool, exc.job_id))
        except JobFailedError as exc:
            await self._settle(tx_id, commit=False)
            logger.error("MCP tool call failed", extra={"tool_id": name, "job_id": exc.job_id, "status": exc.status})
            raise JsonRpcError(INTERNAL_ERROR, str(exc), {"jobId": exc.job_id, "status": exc.status}) from exc
        except Exception as exc:
            await self._settle(tx_id, commit=False)
            logger.error("MCP tool call failed", extra={"tool_id": name, "error": str(exc)})
            raise JsonRpcError(INTERNAL_ERROR, f"Tool execution failed: {exc}") from exc

        await self._settle(tx_id, commit=True)
        return _to_text(output)

    def _processing_payload(self, tool: ToolDefinition, job_id: str) -> Dict[str, Any]:
        base = f"{self._jobs_url_prefix}/{job_id}"
        return {
            "status": "PROCESSING",
            "message": "Job is still processing. Use the jobs API to check status.",
            "jobId": job_id,
            "statusUrl": f"{base}?tool_id={tool.id}",
            "resultUrl": f"{base}/result?tool_id={tool.id}",
        }

    async def _orchestrate(self, arguments: Mapping[str, Any], caller: CallerContext) -> Dict[str, Any]:
        goal = arguments.get("goal")
        if not isinstance(goal, str) or not goal.strip():
            raise JsonRpcError(INVALID_PARAMS, "Missing required field: goal")
        template = arguments.get("template")
        params = arguments.get("params")

        metered = caller.metered and self._ledger is not None
        try:
            result = await self._orchestrator.run(
                goal,
                template=template if isinstance(template, str) else None,
                params=params if isinstance(params, dict) else None,
                ledger=self._ledger if metered else None,
                user_id=caller.user_id if metered else None,
            )
        except TemplateParameterError as exc:
            raise JsonRpcError(
                INVALID_PARAMS, str(exc), {"template": exc.template, "missingParameters": exc.missing}
            ) from exc
        except Exception as exc:
            logger.error("MCP orchestration failed", extra={"error": str(exc)})
            raise JsonRpcError(INTERNAL_ERROR, f"Orchestration failed: {exc}") from exc
        return _to_text(result.summary())

    # ------------------------------------------------------------------
    # Metering
    # ------------------------------------------------------------------
    async def _reserve(self, caller: CallerContext, credits: float, reason: str) -> Optional[str]:
        if not caller.metered or self._ledger is None or caller.user_id is None:
            return None
        try:
            return await self._ledger.reserve(caller.user_id, credits, reason)
        except InsufficientCreditsError as exc:
            logger.info(
                "MCP tool call rejected: insufficient credits",
                extra={"user_id": caller.user_id, "required": exc.required, "available": exc.available},
            )
            raise JsonRpcError(
                INSUFFICIENT_CREDITS, str(exc), {"required": exc.required, "available": exc.available}
            ) from exc

    async def _settle(self, tx_id: Optional[str], *, commit: bool) -> None:
        if tx_id is None or self._ledger is None:
            return
        if commit:
            await self._ledger.commit(tx_id)
        else:
            await self._ledger.rollback(tx_id)
