"""Application-wide constants for the HTTP server."""

PROJECT_NAME = "ToolMesh-AI Server"
API_V1_STR = "/api/v1"
