from __future__ import annotations

from fastapi import APIRouter, Request

from ..config import SSE_ENDPOINT
from ..schemas import ResourceSummary, ServerInfo
from ..state import get_mcp_server, get_settings, get_source_path

router = APIRouter()


@router.api_route(
    "/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    response_model=ServerInfo,
    response_model_exclude_none=True,
)
async def server_info(request: Request) -> ServerInfo:
    settings = get_settings(request)
    source_path = get_source_path(request)

    summary = None
    for resource in get_mcp_server(request).registry:
        summary = ResourceSummary(
            uri=resource.uri,
            name=resource.name,
            file=str(source_path) if source_path else "",
        )
        break

    return ServerInfo(
        name=settings.server_name,
        version=settings.server_version,
        endpoint=SSE_ENDPOINT,
        resource=summary,
    )
