from __future__ import annotations

from pathlib import Path

from fastapi import Request

from .config import Settings
from .mcp_server import JsonRagMCPServer
from .sse import SSESession


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_mcp_server(request: Request) -> JsonRagMCPServer:
    return request.app.state.mcp_server


def get_source_path(request: Request) -> Path | None:
    return request.app.state.source_path


def mcp_response_headers(settings: Settings) -> dict[str, str]:
    return {
        "MCP-Protocol-Version": settings.mcp_protocol_version,
        "Cache-Control": "no-cache",
    }


def open_sse_session(request: Request) -> SSESession:
    """Create a session for ``request`` and queue the handshake burst."""
    settings = get_settings(request)
    server = get_mcp_server(request)

    session = SSESession(
        settings.sse_keepalive_seconds, is_disconnected=request.is_disconnected
    )
    session.push("open", {"message": "Connection established"})
    session.push("ready", {"ready": True})
    for resource in server.registry:
        session.push("resource", resource.model_dump())
    return session
