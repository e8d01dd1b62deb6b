"""
ToolMesh-AI Server Package.

This package contains the web server for the ToolMesh-AI engine: the MCP
transports, REST discovery endpoints and the service container that wires
the registry, execution adapter, credit ledger and orchestrator together.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Configuration and constants.
    services: Service container and FastAPI dependencies.
    exception_handlers: Global exception handling.
"""
