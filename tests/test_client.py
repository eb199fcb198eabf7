import json

import httpx
import pytest

from lumo_api.api.client import LumoAPIError, LumoClient


def _transport(status: int, body: object, seen: list) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status, json=body)

    return httpx.MockTransport(handler)


def test_prompt_posts_payload_and_returns_answer() -> None:
    seen: list[httpx.Request] = []
    client = LumoClient("http://lumo.local/", transport=_transport(200, {"answer": "42"}, seen))

    answer = client.prompt("meaning of life?", web_search=True, timeout=20)

    assert answer == "42"
    request = seen[0]
    assert request.url == "http://lumo.local/v1/prompt"
    assert json.loads(request.content) == {
        "prompt": "meaning of life?",
        "webSearch": True,
        "timeout": 20,
    }


def test_prompt_omits_timeout_when_not_given() -> None:
    seen: list[httpx.Request] = []
    client = LumoClient("http://lumo.local", transport=_transport(200, {"answer": "ok"}, seen))

    client.prompt("hi")

    assert json.loads(seen[0].content) == {"prompt": "hi", "webSearch": False}


@pytest.mark.parametrize(
    ("status", "body", "message"),
    [
        (429, {"error": "Session is busy with another prompt"}, "Session is busy with another prompt"),
        (504, {"error": "Timeout waiting for answer"}, "Timeout waiting for answer"),
        (400, {"detail": "prompt length invalid"}, "prompt length invalid"),
    ],
)
def test_error_responses_raise(status: int, body: dict, message: str) -> None:
    client = LumoClient("http://lumo.local", transport=_transport(status, body, []))

    with pytest.raises(LumoAPIError) as exc_info:
        client.prompt("hi")

    assert exc_info.value.status_code == status
    assert exc_info.value.message == message


def test_health() -> None:
    client = LumoClient("http://lumo.local", transport=_transport(200, {"status": "ready"}, []))

    assert client.health() == "ready"


def test_non_object_error_body_is_reported_verbatim() -> None:
    client = LumoClient("http://lumo.local", transport=_transport(502, ["bad", "gateway"], []))

    with pytest.raises(LumoAPIError) as exc_info:
        client.prompt("hi")

    assert exc_info.value.status_code == 502
    assert json.loads(exc_info.value.message) == ["bad", "gateway"]
