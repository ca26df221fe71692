"""Read-only document store: the loaded JSON document and its resource registry."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from .schemas import Resource, ResourceDescriptor

logger = logging.getLogger(__name__)

_WORD_START_PATTERN = re.compile(r"\b\w")
_URI_UNSAFE_PATTERN = re.compile(r"[^a-z0-9]")


class DocumentLoadError(Exception):
    def __init__(self, path: Path, reason: str):
        super().__init__(reason)
        self.path = path
        self.reason = reason


class ResourceRegistry:
    """Resources keyed by uri. Populated at startup, read-only afterwards."""

    def __init__(self, resources: list[Resource] | None = None):
        self._resources: dict[str, Resource] = {}
        for resource in resources or []:
            self.register(resource)

    def register(self, resource: Resource) -> None:
        if resource.uri in self._resources:
            raise ValueError(f"Resource already registered: {resource.uri}")
        self._resources[resource.uri] = resource

    def get(self, uri: str) -> Resource | None:
        return self._resources.get(uri)

    def descriptors(self) -> list[ResourceDescriptor]:
        return [
            ResourceDescriptor(
                uri=resource.uri,
                name=resource.name,
                description=resource.description,
            )
            for resource in self._resources.values()
        ]

    def __contains__(self, uri: object) -> bool:
        return uri in self._resources

    def __iter__(self) -> Iterator[Resource]:
        return iter(list(self._resources.values()))

    def __len__(self) -> int:
        return len(self._resources)


def default_resource_name(path: Path) -> str:
    spaced = re.sub(r"[-_]", " ", path.stem)
    return _WORD_START_PATTERN.sub(lambda match: match.group(0).upper(), spaced)


def default_resource_uri(path: Path) -> str:
    return "rag:" + _URI_UNSAFE_PATTERN.sub("_", path.stem.lower())


def default_resource_description(path: Path) -> str:
    return f"RAG resource for {path.stem}"


def _reject_constant(token: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {token}")


def load_document(path: str | Path) -> Any:
    """Parse the JSON file at ``path``.

    Raises:
        DocumentLoadError: the file is missing, unreadable or not valid JSON.
    """
    source_path = Path(path).expanduser().resolve()
    if not source_path.is_file():
        raise DocumentLoadError(source_path, f"JSON file not found: {source_path}")

    logger.info("Loading JSON data from %s...", source_path)
    try:
        with source_path.open(encoding="utf-8") as f:
            document = json.load(f, parse_constant=_reject_constant)
    except (OSError, ValueError) as exc:
        raise DocumentLoadError(
            source_path, f"Could not load JSON file {source_path}: {exc}"
        ) from exc

    if isinstance(document, (dict, list)):
        logger.info(
            "JSON data loaded successfully (%d entries)", len(document)
        )
    else:
        logger.info("JSON data loaded successfully (1 item)")
    return document


def build_resource(
    path: str | Path,
    document: Any,
    *,
    name: str = "",
    uri: str = "",
) -> Resource:
    source_path = Path(path)
    return Resource(
        uri=uri or default_resource_uri(source_path),
        name=name or default_resource_name(source_path),
        description=default_resource_description(source_path),
        content=document,
    )
