"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS),
and includes all API routers. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from toolmesh_ai import __version__
from toolmesh_ai.core.logging_config import get_logger, setup_logging

from .api.v1 import health, jobs, mcp, orchestrate, tools
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .services.container import get_container

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Builds the service container and starts its background tasks (tool
    health checks, stale credit sweep) on startup; stops them on shutdown.
    """
    # Startup
    logger.info("Starting up ToolMesh-AI Server...")
    container = get_container()
    await container.start()
    if not container.client.api_key:
        logger.warning("PROVIDER_API_KEY is not set; tool calls will fail until it is configured")

    yield

    # Shutdown
    logger.info("Shutting down ToolMesh-AI Server...")
    await container.stop()


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    ToolMesh-AI Server API

    This API exposes a catalog of AI tools over the Model Context Protocol.
    It supports direct tool calls, multi-step orchestrated workflows with credit
    metering, tool discovery, and polling of long-running queue jobs.
    """,
    version=__version__,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

# Set all CORS enabled origins
cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)

setup_exception_handlers(app)

app.include_router(health.router, tags=["health"])
app.include_router(mcp.router, tags=["mcp"])
app.include_router(tools.router, prefix=f"{constant.API_V1_STR}/tools", tags=["tools"])
app.include_router(jobs.router, prefix=f"{constant.API_V1_STR}/jobs", tags=["jobs"])
app.include_router(orchestrate.router, prefix=f"{constant.API_V1_STR}/orchestrate", tags=["orchestrate"])
