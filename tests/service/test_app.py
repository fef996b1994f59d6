"""Tests for the FastAPI service mode."""

from __future__ import annotations

from typing import Mapping

import pytest

try:
    from fastapi.testclient import TestClient
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    pytest.skip("fastapi not installed", allow_module_level=True)

from bonsaigen.generator import Generator
from bonsaigen.host.base import SemanticHost
from bonsaigen.service import create_app
from bonsaigen.syntax import AccessorSyntax, BodyKind
from tests._fixtures.fake_host import FakeHost, nested, top_level


class _RecordingHostFactory:
    def __init__(self) -> None:
        self.calls: list[dict[str, str]] = []

    def __call__(self, sources: Mapping[str, str]) -> SemanticHost:
        self.calls.append(dict(sources))
        host = FakeHost()
        program = top_level("Program")
        host.add("StringLength", owner=program, expression="message => message.Length")
        host.add("Blocky", owner=program, accessors=(AccessorSyntax("get", BodyKind.BLOCK),))
        host.add("Hidden", owner=nested("Inner", program))
        return host


@pytest.fixture
def host_factory() -> _RecordingHostFactory:
    return _RecordingHostFactory()


@pytest.fixture
def client(host_factory: _RecordingHostFactory) -> TestClient:
    app = create_app(Generator, host_factory=host_factory)
    return TestClient(app)


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_generate_endpoint_returns_units_and_skips(
    client: TestClient, host_factory: _RecordingHostFactory
) -> None:
    response = client.post("/generate", json={"sources": {"Program.cs": "partial class Program {}"}})

    assert response.status_code == 200
    data = response.json()
    assert host_factory.calls == [{"Program.cs": "partial class Program {}"}]
    assert [unit["hint_name"] for unit in data["units"]] == [
        "GenerateBonsaiAttribute.g.cs",
        "Program_GenerateBonsai.g.cs",
    ]
    program = data["units"][1]
    assert program["namespace"] == "Sandbox"
    assert program["type_name"] == "Program"
    assert (
        '"Func Argument 0: string Argument 1: int Expression: message => message.Length"'
        in program["text"]
    )
    assert data["skipped"] == [
        {
            "owner": "Sandbox.Program",
            "reason": "getter is not a single expression",
            "members": ["Blocky"],
        },
        {
            "owner": "Sandbox.Program.Inner",
            "reason": "owning type is not declared directly in a namespace",
            "members": ["Hidden"],
        },
    ]
    assert len(data["fingerprint"]) == 64


def test_generate_endpoint_can_skip_bootstrap(client: TestClient) -> None:
    response = client.post("/generate", json={"sources": {}, "emit_bootstrap": False})

    assert response.status_code == 200
    assert [unit["hint_name"] for unit in response.json()["units"]] == [
        "Program_GenerateBonsai.g.cs"
    ]


def test_generate_endpoint_honours_marker(client: TestClient) -> None:
    response = client.post("/generate", json={"marker": "Other.MarkerAttribute"})

    assert response.status_code == 200
    data = response.json()
    assert [unit["hint_name"] for unit in data["units"]] == ["GenerateBonsaiAttribute.g.cs"]
    assert data["skipped"] == []


def test_host_errors_map_to_bad_request() -> None:
    def _failing(_: Mapping[str, str]) -> SemanticHost:
        raise RuntimeError("grammar unavailable")

    client = TestClient(create_app(Generator, host_factory=_failing))

    response = client.post("/generate", json={"sources": {}})

    assert response.status_code == 400
    assert response.json() == {"detail": "grammar unavailable"}
