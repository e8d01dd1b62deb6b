"""
MCP Transport Endpoints.

Two transports share one ``McpHandler``:

- SSE: ``GET /mcp/sse`` opens a session and first emits an ``endpoint`` event
  naming the URL to post requests to. Each ``POST /mcp/message?sessionId=``
  is acknowledged with 202 and its JSON-RPC response is pushed on the stream
  as a ``message`` event.
- Stateless HTTP: ``POST /mcp`` answers in the response body.

``GET /mcp`` describes the server.
"""

import json
from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from sse_starlette.sse import EventSourceResponse

from toolmesh_ai.core.logging_config import get_logger
from toolmesh_ai.gateway.auth import AuthenticationError, CallerContext, authenticate
from toolmesh_ai.gateway.jsonrpc import INVALID_REQUEST, PARSE_ERROR
from toolmesh_ai.server.services.container import ServiceContainer
from toolmesh_ai.server.services.deps import ContainerDep

logger = get_logger(__name__)

router = APIRouter()

_REJECTED_CODES = {PARSE_ERROR, INVALID_REQUEST}


def _caller(request: Request, container: ServiceContainer) -> CallerContext:
    try:
        return authenticate(
            request.headers, container.resolver, require_key=container.config.gateway.require_api_key
        )
    except AuthenticationError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc


def _is_rejected(reply: Any) -> bool:
    return isinstance(reply, dict) and reply.get("error", {}).get("code") in _REJECTED_CODES


async def _answer_on_session(container: ServiceContainer, session_id: str, body: bytes) -> None:
    session = container.sessions.get(session_id)
    if session is None:
        return
    reply = await container.handler.handle_raw(body, session.caller)
    if reply is not None:
        container.sessions.deliver(session_id, reply)


@router.get(
    "/mcp",
    summary="MCP Server Info",
    description="Name, version, protocol version, transports and tool count of the MCP gateway.",
    response_description="Server description.",
)
async def server_info(container: ContainerDep) -> Dict[str, Any]:
    return container.handler.server_info()


@router.post(
    "/mcp",
    summary="MCP Request (stateless)",
    description="Handle one JSON-RPC request or batch and return the response in the body.",
    response_description="JSON-RPC response; 202 with no payload for notifications.",
    responses={
        400: {"description": "Unparseable or malformed JSON-RPC message"},
        401: {"description": "Missing or invalid API key"},
    },
)
async def handle_mcp_request(request: Request, container: ContainerDep) -> JSONResponse:
    caller = _caller(request, container)
    body = await request.body()
    reply = await container.handler.handle_raw(body, caller)
    if reply is None:
        return JSONResponse(status_code=status.HTTP_202_ACCEPTED, content={"accepted": True})
    if _is_rejected(reply):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=reply)
    return JSONResponse(content=reply)


@router.get(
    "/mcp/sse",
    summary="Open MCP SSE Session",
    description="Open a Server-Sent Events session carrying JSON-RPC responses.",
    response_description="An event stream starting with an `endpoint` event.",
    responses={
        200: {
            "description": "SSE stream established",
            "content": {"text/event-stream": {"example": "event: endpoint\ndata: /mcp/message?sessionId=mcp-...\n\n"}},
        },
        401: {"description": "Missing or invalid API key"},
    },
)
async def open_sse_session(request: Request, container: ContainerDep):
    """
    Open an SSE session.

    The first event is `endpoint`, whose data is the path to post requests
    to. Responses to those requests arrive as `message` events carrying the
    JSON-RPC response object.
    """
    caller = _caller(request, container)
    session = container.sessions.open(caller)

    async def event_generator():
        try:
            yield {"event": "endpoint", "data": f"/mcp/message?sessionId={session.session_id}"}
            while True:
                message = await session.queue.get()
                yield {"event": "message", "data": json.dumps(message, default=str)}
        finally:
            container.sessions.close(session.session_id)

    return EventSourceResponse(event_generator(), ping=container.config.gateway.sse_ping_seconds)


@router.post(
    "/mcp/message",
    status_code=status.HTTP_202_ACCEPTED,
    summary="Post MCP Message",
    description="Queue a JSON-RPC request for an open SSE session.",
    response_description="Acknowledgement; the response is delivered on the session stream.",
    responses={
        400: {"description": "Missing sessionId"},
        404: {"description": "Unknown or closed session"},
    },
)
async def post_session_message(
    request: Request,
    container: ContainerDep,
    background_tasks: BackgroundTasks,
    session_id: Optional[str] = Query(default=None, alias="sessionId"),
) -> Dict[str, Any]:
    if not session_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing sessionId")
    if container.sessions.get(session_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Session not found: {session_id}")

    body = await request.body()
    background_tasks.add_task(_answer_on_session, container, session_id, body)
    return {"accepted": True}
