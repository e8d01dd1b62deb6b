"""Cross-cutting utilities shared by every ToolMesh-AI subpackage."""
