from __future__ import annotations

import argparse
import json
import importlib
import logging
import sys
from pathlib import Path
from typing import Any

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"

if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


def _emit(payload: Any) -> None:
    sys.stdout.write(json.dumps(payload, ensure_ascii=False) + "\n")
    sys.stdout.flush()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Serve a JSON document over MCP on stdin/stdout"
    )
    parser.add_argument("json_file", help="JSON file to serve")
    parser.add_argument("-n", "--name", default="", help="Resource name")
    parser.add_argument("-u", "--uri", default="", help="Resource uri")
    args = parser.parse_args(argv)

    # stdout carries the protocol, so logs go to stderr
    logging.basicConfig(level=logging.WARNING, stream=sys.stderr)

    app_config = importlib.import_module("ragserver.app.config")
    app_resources = importlib.import_module("ragserver.app.resources")
    app_mcp = importlib.import_module("ragserver.app.mcp_server")

    try:
        document = app_resources.load_document(args.json_file)
    except app_resources.DocumentLoadError as exc:
        sys.stderr.write(f"Error: {exc.reason}\n")
        return 1

    resource = app_resources.build_resource(
        args.json_file, document, name=args.name, uri=args.uri
    )
    server = app_mcp.JsonRagMCPServer(
        app_config.Settings(),
        app_resources.ResourceRegistry([resource]),
        document,
    )

    for raw_line in sys.stdin:
        line = raw_line.strip()
        if not line:
            continue

        try:
            request = json.loads(line)
        except ValueError:
            _emit(
                {
                    "jsonrpc": "2.0",
                    "id": None,
                    "error": {"code": -32700, "message": "Parse error"},
                }
            )
            continue

        if isinstance(request, list):
            responses = []
            for item in request:
                response = server.handle_message(item)
                if response is not None:
                    responses.append(response)
            if responses:
                _emit(responses)
            continue

        response = server.handle_message(request)
        if response is not None:
            _emit(response)
    return 0


if __name__ == "__main__":
    sys.exit(main())
