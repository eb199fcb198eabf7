from __future__ import annotations

from typing import Optional

import pytest
from fastapi.testclient import TestClient

from lumo_api.api.service import create_app, resolve_timeout
from lumo_api.config import ServerConfig
from lumo_api.errors import (
    AnswerTimeoutError,
    BusyError,
    SessionUnavailableError,
    SubmissionError,
)
from lumo_api.models import SessionStatus


class StubOrchestrator:
    def __init__(self, answer: str = "Paris", error: Optional[Exception] = None) -> None:
        self.answer = answer
        self.error = error
        self.calls: list[tuple[str, bool, float]] = []
        self.status = SessionStatus.READY

    def acquire_and_run(self, prompt: str, web_search: bool, deadline: float) -> str:
        self.calls.append((prompt, web_search, deadline))
        if self.error:
            raise self.error
        return self.answer


def _client(orchestrator: StubOrchestrator, **server) -> TestClient:
    app = create_app(orchestrator, ServerConfig(**server), clock=lambda: 1000.0)
    return TestClient(app)


def test_prompt_returns_answer() -> None:
    orchestrator = StubOrchestrator()
    client = _client(orchestrator)

    response = client.post("/v1/prompt", json={"prompt": "Capital of France?", "webSearch": True})

    assert response.status_code == 200
    assert response.json() == {"answer": "Paris"}
    assert orchestrator.calls == [("Capital of France?", True, 1030.0)]


def test_prompt_uses_requested_timeout_and_ignores_debug() -> None:
    orchestrator = StubOrchestrator()
    client = _client(orchestrator, default_timeout=45.0)

    client.post("/v1/prompt", json={"prompt": "hi", "timeout": 90, "debug": True})
    client.post("/v1/prompt", json={"prompt": "hi", "timeout": 0})

    assert [call[2] for call in orchestrator.calls] == [1090.0, 1045.0]
    assert orchestrator.calls[0][1] is False


@pytest.mark.parametrize("prompt", ["", "x" * 4097])
def test_prompt_length_is_validated(prompt: str) -> None:
    orchestrator = StubOrchestrator()

    response = _client(orchestrator).post("/v1/prompt", json={"prompt": prompt})

    assert response.status_code == 400
    assert response.json() == {"detail": "prompt length invalid"}
    assert orchestrator.calls == []


def test_prompt_at_max_length_is_accepted() -> None:
    response = _client(StubOrchestrator()).post("/v1/prompt", json={"prompt": "x" * 4096})

    assert response.status_code == 200


def test_malformed_body_is_rejected() -> None:
    response = _client(StubOrchestrator()).post("/v1/prompt", content=b"not json")

    assert response.status_code == 422


@pytest.mark.parametrize(
    ("error", "status"),
    [
        (BusyError(), 429),
        (SubmissionError("Chat input not found"), 502),
        (AnswerTimeoutError("Timeout waiting for answer"), 504),
        (SessionUnavailableError("Browser session is not ready yet"), 503),
    ],
)
def test_errors_map_to_status_codes(error: Exception, status: int) -> None:
    response = _client(StubOrchestrator(error=error)).post("/v1/prompt", json={"prompt": "hi"})

    assert response.status_code == status
    assert response.json() == {"error": str(error)}


def test_health_reports_session_status() -> None:
    orchestrator = StubOrchestrator()
    orchestrator.status = SessionStatus.BUSY

    response = _client(orchestrator).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "busy"}


def test_resolve_timeout() -> None:
    assert resolve_timeout(None, 30.0) == 30.0
    assert resolve_timeout(-5, 30.0) == 30.0
    assert resolve_timeout(12, 30.0) == 12.0
