from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel

SSE_ENDPOINT = "/sse"


def _get_env_path() -> Path:
    env_override = os.getenv("ENV_FILE", "").strip()
    candidates: list[Path] = []

    if env_override:
        candidates.append(Path(env_override).expanduser().resolve())

    cwd_env = (Path.cwd() / ".env").resolve()
    if cwd_env not in candidates:
        candidates.append(cwd_env)

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return candidates[0]


def _load_env(*, override: bool = False) -> None:
    env_path = _get_env_path()
    if env_path.exists():
        with env_path.open(encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip()
                    if override or key not in os.environ:
                        os.environ[key] = value


_load_env()


class Settings(BaseModel):
    json_file: str = ""
    host: str = "127.0.0.1"
    port: int = 8126

    resource_name: str = ""
    resource_uri: str = ""

    server_name: str = "Generic MCP RAG Server"
    server_version: str = "1.0.0"
    mcp_protocol_version: str = "2025-03-26"

    sse_keepalive_seconds: float = 30.0
    search_context_limit: int = 200

    log_level: str = "INFO"

    def __init__(self, **data: Any):
        data.setdefault("json_file", os.getenv("RAG_JSON_FILE", ""))
        data.setdefault("host", os.getenv("RAG_HOST", "127.0.0.1"))
        data.setdefault("port", int(os.getenv("RAG_PORT", "8126")))
        data.setdefault("resource_name", os.getenv("RAG_RESOURCE_NAME", ""))
        data.setdefault("resource_uri", os.getenv("RAG_RESOURCE_URI", ""))
        data.setdefault(
            "server_name", os.getenv("RAG_SERVER_NAME", "Generic MCP RAG Server")
        )
        data.setdefault(
            "mcp_protocol_version", os.getenv("MCP_PROTOCOL_VERSION", "2025-03-26")
        )
        data.setdefault(
            "sse_keepalive_seconds", float(os.getenv("SSE_KEEPALIVE_SECONDS", "30"))
        )
        data.setdefault(
            "search_context_limit", int(os.getenv("SEARCH_CONTEXT_LIMIT", "200"))
        )
        data.setdefault("log_level", os.getenv("LOG_LEVEL", "INFO"))
        super().__init__(**data)
