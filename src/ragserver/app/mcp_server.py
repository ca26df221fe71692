from __future__ import annotations

import json
import logging
from typing import Any, Callable

from .config import Settings
from .resources import ResourceRegistry
from .search import search_document

logger = logging.getLogger(__name__)

JsonObj = dict[str, Any]

SEARCH_TOOL_NAME = "search_data"


class MCPProtocolError(Exception):
    def __init__(self, code: int, message: str, data: Any | None = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data


def _dump_text(value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False, indent=2)
    except Exception:
        return str(value)


def _to_obj(value: Any, field: str) -> JsonObj:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise MCPProtocolError(-32602, f"Field {field} must be an object")
    return value


def is_jsonrpc_message(payload: Any) -> bool:
    """True for an object carrying ``jsonrpc: "2.0"`` and a string ``method``."""
    return (
        isinstance(payload, dict)
        and payload.get("jsonrpc") == "2.0"
        and isinstance(payload.get("method"), str)
        and bool(payload["method"])
    )


def is_notification(payload: JsonObj) -> bool:
    return "id" not in payload


class JsonRagMCPServer:
    """JSON-RPC method table over one read-only resource registry.

    ``document`` is the tree searched by the ``search_data`` tool; it is the
    content of the primary resource.
    """

    def __init__(self, settings: Settings, registry: ResourceRegistry, document: Any):
        self.settings = settings
        self.registry = registry
        self.document = document

        self._method_handlers: dict[str, Callable[[JsonObj], JsonObj]] = {
            "initialize": self._handle_initialize,
            "resources/list": self._handle_resources_list,
            "resources/read": self._handle_resources_read,
            "tools/list": self._handle_tools_list,
            "tools/call": self._handle_tools_call,
        }
        self._tool_handlers: dict[str, Callable[[JsonObj], JsonObj]] = {
            SEARCH_TOOL_NAME: self._tool_search_data,
        }

    def protocol_version(self) -> str:
        return self.settings.mcp_protocol_version

    def server_name(self) -> str:
        return self.settings.server_name

    def primary_resource_name(self) -> str:
        for resource in self.registry:
            return resource.name
        return self.server_name()

    def handle_message(self, payload: Any) -> JsonObj | None:
        if not isinstance(payload, dict):
            return self._error_response(
                None, -32600, "Invalid Request: expected object payload"
            )

        request_id = payload.get("id")
        method = payload.get("method")
        params = payload.get("params")

        if payload.get("jsonrpc") != "2.0":
            return self._error_response(
                request_id, -32600, "Invalid Request: jsonrpc must be '2.0'"
            )
        if not isinstance(method, str) or not method:
            return self._error_response(
                request_id, -32600, "Invalid Request: method is required"
            )

        if is_notification(payload):
            if method == "notifications/initialized":
                logger.info("Client has completed initialization")
            else:
                logger.info("Received notification: %s", method)
            return None

        logger.info("JSON-RPC request %s (id=%s)", method, request_id)
        try:
            result = self._dispatch(method, params)
        except MCPProtocolError as exc:
            return self._error_response(request_id, exc.code, exc.message, exc.data)
        except Exception as exc:
            logger.exception("Unhandled error while processing %s", method)
            return self._error_response(
                request_id, -32603, "Internal error", {"detail": str(exc)}
            )

        return {"jsonrpc": "2.0", "id": request_id, "result": result}

    def _dispatch(self, method: str, params: Any) -> JsonObj:
        handler = self._method_handlers.get(method)
        if handler is None:
            raise MCPProtocolError(-32601, f"Method not found: {method}")
        return handler(_to_obj(params, "params"))

    def _handle_initialize(self, params: JsonObj) -> JsonObj:
        return {
            "protocolVersion": self.protocol_version(),
            "capabilities": {
                "resources": {"subscribe": False, "listChanged": False},
                "tools": {"listChanged": False},
            },
            "serverInfo": {
                "name": self.server_name(),
                "version": self.settings.server_version,
            },
        }

    def _handle_resources_list(self, params: JsonObj) -> JsonObj:
        return {
            "resources": [
                descriptor.model_dump() for descriptor in self.registry.descriptors()
            ]
        }

    def _handle_resources_read(self, params: JsonObj) -> JsonObj:
        uri = params.get("uri")
        resource = self.registry.get(uri) if isinstance(uri, str) else None
        if resource is None:
            raise MCPProtocolError(-32602, f"Resource not found: {uri}")
        return {"content": resource.content}

    def _handle_tools_list(self, params: JsonObj) -> JsonObj:
        schema = {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Search query to find information in the data",
                }
            },
            "required": ["query"],
        }
        return {
            "tools": [
                {
                    "name": SEARCH_TOOL_NAME,
                    "description": (
                        f"Search the {self.primary_resource_name()} data for information"
                    ),
                    "inputSchema": schema,
                    "parameters": schema,
                }
            ]
        }

    def _handle_tools_call(self, params: JsonObj) -> JsonObj:
        name = params.get("name")
        handler = self._tool_handlers.get(name) if isinstance(name, str) else None
        if handler is None:
            raise MCPProtocolError(-32602, f"Tool not found: {name}")
        return handler(_to_obj(params.get("arguments"), "arguments"))

    def _tool_search_data(self, args: JsonObj) -> JsonObj:
        raw_query = args.get("query")
        query = "" if raw_query is None else str(raw_query)
        logger.info('Searching data for: "%s"', query)

        matches = search_document(
            self.document, query, context_limit=self.settings.search_context_limit
        )
        if matches:
            text = f'Found {len(matches)} results for "{query}":\n\n{_dump_text(matches)}'
        else:
            text = (
                f'No results found for "{query}". '
                "Try using broader search terms or check the data structure."
            )
        return self._tool_success(text)

    def _tool_success(self, text: str) -> JsonObj:
        return {"content": [{"type": "text", "text": text}], "isError": False}

    def _error_response(
        self, request_id: Any, code: int, message: str, data: Any | None = None
    ) -> JsonObj:
        payload: JsonObj = {
            "jsonrpc": "2.0",
            "id": request_id,
            "error": {"code": code, "message": message},
        }
        if data is not None:
            payload["error"]["data"] = data
        return payload
