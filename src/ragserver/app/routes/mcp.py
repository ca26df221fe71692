from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response, StreamingResponse

from ..config import SSE_ENDPOINT
from ..mcp_server import is_jsonrpc_message
from ..state import get_mcp_server, get_settings, mcp_response_headers, open_sse_session

logger = logging.getLogger(__name__)

router = APIRouter()

STREAM_METHODS = ("GET", "POST")


async def read_request_body(request: Request) -> Any:
    """Parsed JSON body, the raw text when it is not JSON, or ``{}`` when empty."""
    raw = await request.body()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw
    if not text.strip():
        return {}
    try:
        return json.loads(text)
    except ValueError:
        return text


@router.api_route(
    SSE_ENDPOINT,
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"],
)
async def mcp_stream_endpoint(request: Request) -> Response:
    if request.method not in STREAM_METHODS:
        return PlainTextResponse(
            "Method not allowed. Use GET or POST.",
            status_code=405,
            headers={"Allow": ", ".join(STREAM_METHODS)},
        )

    settings = get_settings(request)

    if request.method == "POST":
        payload = await read_request_body(request)
        if is_jsonrpc_message(payload):
            response = get_mcp_server(request).handle_message(payload)
            if response is None:
                return PlainTextResponse("OK", headers=mcp_response_headers(settings))
            return JSONResponse(response, headers=mcp_response_headers(settings))
        logger.debug("POST body is not JSON-RPC, opening SSE stream instead")

    session = open_sse_session(request)
    logger.info("Client connected, SSE session %s opened", session.id)
    return StreamingResponse(
        session.stream(),
        media_type="text/event-stream",
        headers={
            **mcp_response_headers(settings),
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
