"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import SSE_ENDPOINT, Settings
from .mcp_server import JsonRagMCPServer
from .resources import ResourceRegistry, build_resource, load_document
from .routes import info, mcp

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings,
    registry: ResourceRegistry,
    document: Any = None,
    *,
    source_path: Path | None = None,
) -> FastAPI:
    """Build the app around an already loaded registry.

    ``document`` defaults to the content of the first registered resource.
    """
    if document is None:
        for resource in registry:
            document = resource.content
            break

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        base_url = f"http://{settings.host}:{settings.port}"
        logger.info("%s running on %s", settings.server_name, base_url)
        logger.info("SSE endpoint available at %s%s", base_url, SSE_ENDPOINT)
        for resource in registry:
            logger.info("Serving resource: %s (%s)", resource.name, resource.uri)
        if source_path is not None:
            logger.info("Source file: %s", source_path)
        yield
        logger.info("Server shutting down...")

    app = FastAPI(title=settings.server_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.source_path = source_path
    app.state.mcp_server = JsonRagMCPServer(settings, registry, document)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # the catch-all info route must stay last
    app.include_router(mcp.router)
    app.include_router(info.router)
    return app


def build_app_from_settings(settings: Settings) -> FastAPI:
    """Load ``settings.json_file`` and build the app around it.

    Raises:
        DocumentLoadError: the document cannot be loaded.
    """
    source_path = Path(settings.json_file).expanduser().resolve()
    document = load_document(source_path)
    resource = build_resource(
        source_path,
        document,
        name=settings.resource_name,
        uri=settings.resource_uri,
    )
    return create_app(
        settings,
        ResourceRegistry([resource]),
        document,
        source_path=source_path,
    )


def app_from_env() -> FastAPI:
    """Factory for ``uvicorn --factory ragserver.app.main:app_from_env``."""
    settings = Settings()
    if not settings.json_file:
        raise RuntimeError("RAG_JSON_FILE must point at the JSON document to serve")
    return build_app_from_settings(settings)
