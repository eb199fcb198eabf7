"""HTTP client for callers of the lumo-api service."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from ..models import PromptResponse


class LumoAPIError(RuntimeError):
    """Raised when the service answers with an error status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class LumoClient:
    """Wrapper around the lumo-api HTTP API."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def prompt(self, text: str, *, web_search: bool = False, timeout: Optional[int] = None) -> str:
        payload: Dict[str, Any] = {"prompt": text, "webSearch": web_search}
        http_timeout = self._timeout
        if timeout is not None:
            payload["timeout"] = timeout
            http_timeout = max(self._timeout, timeout + 5.0)
        with self._client(http_timeout) as client:
            response = client.post("/v1/prompt", json=payload)
        _raise_for_error(response)
        result = PromptResponse.model_validate(response.json())
        if result.answer is None:
            raise LumoAPIError(response.status_code, result.error or "empty answer")
        return result.answer

    def health(self) -> str:
        with self._client(self._timeout) as client:
            response = client.get("/health")
        _raise_for_error(response)
        return str(response.json()["status"])

    def _client(self, timeout: float) -> httpx.Client:
        return httpx.Client(base_url=self._base_url, timeout=timeout, transport=self._transport)


def _raise_for_error(response: httpx.Response) -> None:
    if response.is_success:
        return
    try:
        data = response.json()
    except ValueError:
        raise LumoAPIError(response.status_code, response.text) from None
    if not isinstance(data, dict):
        raise LumoAPIError(response.status_code, response.text)
    message = data.get("error") or data.get("detail") or response.reason_phrase
    raise LumoAPIError(response.status_code, str(message))
