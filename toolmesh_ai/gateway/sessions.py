"""Push-based sessions for the SSE transport.

Each session owns an ``asyncio.Queue`` of outbound JSON-RPC messages. The SSE
stream drains the queue; ``POST /mcp/message`` handlers enqueue responses.
Closing a session only stops future deliveries: work already dispatched for
it runs to completion and its result is discarded.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from toolmesh_ai.core.logging_config import get_logger

from .auth import ANONYMOUS, CallerContext

logger = get_logger(__name__)


@dataclass
class Session:
    session_id: str
    caller: CallerContext = ANONYMOUS
    queue: "asyncio.Queue[Dict[str, Any]]" = field(default_factory=asyncio.Queue)
    closed: bool = False

    def deliver(self, message: Dict[str, Any]) -> bool:
        if self.closed:
            return False
        self.queue.put_nowait(message)
        return True


class SessionRegistry:
    """In-memory map of open SSE sessions."""

    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def open(self, caller: CallerContext = ANONYMOUS) -> Session:
        session = Session(session_id=f"mcp-{uuid.uuid4().hex}", caller=caller)
        self._sessions[session.session_id] = session
        logger.info("MCP SSE connection opened", extra={"session_id": session.session_id})
        return session

    def get(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def close(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return
        session.closed = True
        logger.info("MCP SSE connection closed", extra={"session_id": session_id})

    def deliver(self, session_id: str, message: Dict[str, Any]) -> bool:
        """Queue ``message`` for the session; ``False`` if it is gone."""
        session = self._sessions.get(session_id)
        if session is None or not session.deliver(message):
            logger.debug("Dropping message for closed session", extra={"session_id": session_id})
            return False
        return True
