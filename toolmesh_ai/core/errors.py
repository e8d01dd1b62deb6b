from __future__ import annotations


class ToolMeshError(Exception):
    """Base class for every error raised by the ToolMesh-AI engine."""
