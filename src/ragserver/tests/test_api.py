"""Info endpoint, transport-level rejections, document loading and startup glue."""

import json
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from ragserver.app import cli
from ragserver.app.config import Settings
from ragserver.app.main import build_app_from_settings
from ragserver.app.resources import (
    DocumentLoadError,
    ResourceRegistry,
    build_resource,
    default_resource_name,
    default_resource_uri,
    load_document,
)
from ragserver.app.schemas import Resource


def _write_json(tmpdir: str, name: str, payload) -> Path:
    path = Path(tmpdir) / name
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_info_endpoint_on_any_other_path():
    with tempfile.TemporaryDirectory() as tmpdir:
        source = _write_json(tmpdir, "my-data_set.json", {"a": 1})
        app = build_app_from_settings(Settings(json_file=str(source), server_name="Info"))
        with TestClient(app) as client:
            for path in ("/", "/status", "/some/nested/path"):
                resp = client.get(path)
                assert resp.status_code == 200
                assert resp.json() == {
                    "name": "Info",
                    "version": "1.0.0",
                    "endpoint": "/sse",
                    "resource": {
                        "uri": "rag:my_data_set",
                        "name": "My Data Set",
                        "file": str(source.resolve()),
                    },
                }


def test_stream_endpoint_rejects_other_methods(app_factory):
    with TestClient(app_factory()) as client:
        for method in ("PUT", "DELETE", "PATCH"):
            resp = client.request(method, "/sse")
            assert resp.status_code == 405
            assert resp.text == "Method not allowed. Use GET or POST."
            assert resp.headers["allow"] == "GET, POST"


def test_cors_header_on_jsonrpc_reply(app_factory):
    with TestClient(app_factory()) as client:
        resp = client.post(
            "/sse",
            json={"jsonrpc": "2.0", "id": 1, "method": "tools/list"},
            headers={"Origin": "http://example.com"},
        )
        assert resp.headers["access-control-allow-origin"] == "*"


def test_default_resource_naming():
    path = Path("/data/ai-corpus_v2.json")
    assert default_resource_name(path) == "Ai Corpus V2"
    assert default_resource_uri(path) == "rag:ai_corpus_v2"
    assert default_resource_uri(Path("Mixed.Case File.json")) == "rag:mixed_case_file"

    resource = build_resource(path, {"k": "v"}, name="Custom", uri="ai:corpus")
    assert resource.uri == "ai:corpus"
    assert resource.name == "Custom"
    assert resource.description == "RAG resource for ai-corpus_v2"


def test_registry_lookup_by_uri_and_duplicates():
    first = Resource(uri="rag:one", name="One", description="d", content=[1])
    second = Resource(uri="rag:two", name="Two", description="d", content={"x": 2})
    registry = ResourceRegistry([first, second])

    assert len(registry) == 2
    assert registry.get("rag:two") is second
    assert registry.get("rag:three") is None
    assert "rag:one" in registry
    assert [item.uri for item in registry] == ["rag:one", "rag:two"]

    with pytest.raises(ValueError):
        registry.register(Resource(uri="rag:one", name="Dup", description="d"))


def test_load_document_errors():
    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(DocumentLoadError) as missing:
            load_document(Path(tmpdir) / "absent.json")
        assert "JSON file not found" in missing.value.reason

        broken = Path(tmpdir) / "broken.json"
        broken.write_text("{not json", encoding="utf-8")
        with pytest.raises(DocumentLoadError):
            load_document(broken)

        for token in ("NaN", "Infinity", "-Infinity"):
            constant = Path(tmpdir) / "constant.json"
            constant.write_text(f'{{"x": {token}, "y": "hi"}}', encoding="utf-8")
            with pytest.raises(DocumentLoadError) as rejected:
                load_document(constant)
            assert "Invalid JSON constant" in rejected.value.reason

        scalar = _write_json(tmpdir, "scalar.json", "just text")
        assert load_document(scalar) == "just text"


def test_settings_explicit_values_override_environment(monkeypatch):
    monkeypatch.setenv("RAG_PORT", "9001")
    monkeypatch.setenv("RAG_SERVER_NAME", "From Env")
    assert Settings().port == 9001
    assert Settings().server_name == "From Env"
    assert Settings(port=9100).port == 9100


def test_cli_requires_json_file(monkeypatch, capsys):
    monkeypatch.delenv("RAG_JSON_FILE", raising=False)
    assert cli.main([]) == 1
    assert "JSON file path is required." in capsys.readouterr().err


def test_cli_reports_missing_file(capsys):
    with tempfile.TemporaryDirectory() as tmpdir:
        assert cli.main(["--file", str(Path(tmpdir) / "missing.json")]) == 1
    assert "JSON file not found" in capsys.readouterr().err


def test_cli_builds_settings_from_arguments():
    parser = cli.create_parser()
    args = parser.parse_args(
        ["data.json", "-p", "8200", "-n", "Docs", "-u", "docs:main", "-s", "Docs Server"]
    )
    settings = cli.settings_from_args(args)
    assert settings.json_file == "data.json"
    assert settings.port == 8200
    assert settings.resource_name == "Docs"
    assert settings.resource_uri == "docs:main"
    assert settings.server_name == "Docs Server"

    args = parser.parse_args(["positional.json", "--file", "flag.json"])
    assert cli.settings_from_args(args).json_file == "flag.json"
