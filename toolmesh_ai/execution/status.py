"""Classification of provider queue status strings."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class JobPhase(str, Enum):
    completed = "completed"
    failed = "failed"
    in_progress = "in_progress"
    unknown = "unknown"


COMPLETED_STATUSES = frozenset({"COMPLETED", "OK", "SUCCESS", "SUCCEEDED", "DONE"})
FAILED_STATUSES = frozenset({"FAILED", "ERROR", "CANCELLED"})
IN_PROGRESS_STATUSES = frozenset({"IN_QUEUE", "IN_PROGRESS", "PENDING"})


def normalize_status(status: Any) -> Optional[str]:
    if status is None:
        return None
    text = str(status).strip().upper()
    return text or None


def classify_status(status: Any) -> JobPhase:
    """Map a provider status string to a ``JobPhase``; case-insensitive."""
    normalized = normalize_status(status)
    if normalized in COMPLETED_STATUSES:
        return JobPhase.completed
    if normalized in FAILED_STATUSES:
        return JobPhase.failed
    if normalized in IN_PROGRESS_STATUSES:
        return JobPhase.in_progress
    return JobPhase.unknown
