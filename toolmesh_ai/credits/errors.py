from __future__ import annotations

from toolmesh_ai.core.errors import ToolMeshError


class InsufficientCreditsError(ToolMeshError):
    """The caller's balance does not cover the requested amount.

    Args:
        required: Credits the operation needs.
        available: Credits the caller currently has.
    """

    def __init__(self, *, required: float, available: float) -> None:
        super().__init__(f"Insufficient credits. Need {required:g}, have {available:g}")
        self.required = required
        self.available = available
