from __future__ import annotations

from typing import Any, Callable

import pytest
from fastapi import FastAPI

from ragserver.app.config import Settings
from ragserver.app.main import create_app
from ragserver.app.mcp_server import JsonRagMCPServer
from ragserver.app.resources import ResourceRegistry
from ragserver.app.schemas import Resource

SAMPLE_DOCUMENT: dict[str, Any] = {
    "title": "Field Guide",
    "chapters": [
        {"name": "Birds", "pages": 42, "summary": "Songbirds and raptors"},
        {"name": "Trees", "pages": 17, "summary": "Oaks, maples and pines"},
    ],
    "published": True,
    "errata": None,
}


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "server_name": "Test RAG Server",
        "mcp_protocol_version": "2025-03-26",
        "sse_keepalive_seconds": 30.0,
        "search_context_limit": 200,
    }
    values.update(overrides)
    return Settings(**values)


def make_resource(document: Any, uri: str = "rag:field_guide") -> Resource:
    return Resource(
        uri=uri,
        name="Field Guide",
        description="RAG resource for field_guide",
        content=document,
    )


@pytest.fixture
def sample_document() -> dict[str, Any]:
    return SAMPLE_DOCUMENT


@pytest.fixture
def app_factory() -> Callable[..., FastAPI]:
    def _build(document: Any = SAMPLE_DOCUMENT, **overrides: Any) -> FastAPI:
        registry = ResourceRegistry([make_resource(document)])
        return create_app(make_settings(**overrides), registry, document)

    return _build


@pytest.fixture
def server_factory() -> Callable[..., JsonRagMCPServer]:
    def _build(document: Any = SAMPLE_DOCUMENT, **overrides: Any) -> JsonRagMCPServer:
        registry = ResourceRegistry([make_resource(document)])
        return JsonRagMCPServer(make_settings(**overrides), registry, document)

    return _build
