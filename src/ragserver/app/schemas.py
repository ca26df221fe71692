from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class Resource(BaseModel):
    model_config = ConfigDict(frozen=True)

    uri: str
    name: str
    description: str
    content: Any = None


class ResourceDescriptor(BaseModel):
    uri: str
    name: str
    description: str
    mimeType: str = "application/json"


class ResourceSummary(BaseModel):
    uri: str
    name: str
    file: str = ""


class ServerInfo(BaseModel):
    name: str
    version: str
    endpoint: str
    resource: ResourceSummary | None = None
