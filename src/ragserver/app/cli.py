"""Command-line entry point: load a JSON file and serve it over MCP."""

from __future__ import annotations

import argparse
import logging
import sys

from .config import Settings
from .resources import DocumentLoadError


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ragserver",
        description="Generic MCP RAG Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ragserver data.json
  ragserver --file docs.json --port 8127 --name "Documentation"
  ragserver -f corpus.json -n "AI Corpus" -u "ai:corpus"
        """,
    )
    parser.add_argument("json_file", nargs="?", help="JSON file to serve")
    parser.add_argument(
        "-f",
        "--file",
        dest="file",
        help="Path to JSON file to serve (required)",
    )
    parser.add_argument(
        "-p",
        "--port",
        type=int,
        default=None,
        help="Port to run server on (default: 8126)",
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Host to bind to (default: 127.0.0.1)",
    )
    parser.add_argument(
        "-n",
        "--name",
        default=None,
        help="Human-readable name for the resource",
    )
    parser.add_argument(
        "-u",
        "--uri",
        default=None,
        help="URI identifier for the resource",
    )
    parser.add_argument(
        "-s",
        "--server-name",
        default=None,
        help="Name of the MCP server",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: INFO)",
    )
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    overrides = {
        "json_file": args.file or args.json_file,
        "port": args.port,
        "host": args.host,
        "resource_name": args.name,
        "resource_uri": args.uri,
        "server_name": args.server_name,
        "log_level": args.log_level,
    }
    return Settings(**{key: value for key, value in overrides.items() if value})


def main(argv: list[str] | None = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)
    settings = settings_from_args(args)

    setup_logging(settings.log_level)

    if not settings.json_file:
        print("Error: JSON file path is required.", file=sys.stderr)
        print("Use --help for usage information.", file=sys.stderr)
        return 1

    # deferred so --help stays fast
    import uvicorn

    from .main import build_app_from_settings

    try:
        app = build_app_from_settings(settings)
    except DocumentLoadError as exc:
        print(f"Error: {exc.reason}", file=sys.stderr)
        return 1

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
