from __future__ import annotations

import json
from typing import Any, TypedDict

DEFAULT_CONTEXT_LIMIT = 200
ELLIPSIS = "..."


class SearchMatch(TypedDict, total=False):
    path: str
    type: str
    key: str
    value: Any
    context: str


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


def _scalar_text(value: Any) -> str:
    # JSON spelling, so booleans read "true"/"false" and None reads "null"
    if isinstance(value, str):
        return value
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        # integral floats read like integers: 1.0 -> "1", 1e16 -> "10000000000000000"
        return str(int(value))
    return json.dumps(value, ensure_ascii=False)


def _scalar_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    return type(value).__name__


def _key_context(value: Any, limit: int) -> str:
    if isinstance(value, (dict, list)):
        text = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    else:
        text = _scalar_text(value)
    return _truncate(text, limit)


def search_document(
    document: Any, query: str, *, context_limit: int = DEFAULT_CONTEXT_LIMIT
) -> list[SearchMatch]:
    """Case-insensitive substring search over every key and leaf of ``document``.

    Matches come back in depth-first traversal order: object keys in their
    stored order (each key tested before its value is descended into), array
    elements by index. A blank query matches nothing rather than everything.
    """
    if not query or not query.strip():
        return []

    needle = query.lower()
    results: list[SearchMatch] = []

    def traverse(node: Any, path: str) -> None:
        if isinstance(node, dict):
            for key, value in node.items():
                key = str(key)
                child_path = f"{path}.{key}" if path else key
                if needle in key.lower():
                    results.append(
                        {
                            "path": child_path,
                            "type": "key",
                            "key": key,
                            "value": value,
                            "context": _key_context(value, context_limit),
                        }
                    )
                traverse(value, child_path)
        elif isinstance(node, list):
            for index, item in enumerate(node):
                traverse(item, f"{path}[{index}]")
        elif isinstance(node, str):
            if needle in node.lower():
                results.append(
                    {
                        "path": path,
                        "type": "string",
                        "value": node,
                        "context": _truncate(node, context_limit),
                    }
                )
        else:
            text = _scalar_text(node)
            if needle in text.lower():
                results.append(
                    {
                        "path": path,
                        "type": _scalar_type(node),
                        "value": node,
                        "context": _truncate(text, context_limit),
                    }
                )

    traverse(document, "")
    return results
