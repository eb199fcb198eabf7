"""HTTP service exposing the orchestrator."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from ..config import ServerConfig
from ..errors import (
    AnswerTimeoutError,
    BusyError,
    LumoError,
    SessionUnavailableError,
    SubmissionError,
)
from ..models import PromptRequest, PromptResponse
from ..orchestrator.runner import PromptOrchestrator

LOGGER = logging.getLogger(__name__)

ERROR_STATUS: Dict[type[LumoError], int] = {
    BusyError: 429,
    SubmissionError: 502,
    AnswerTimeoutError: 504,
    SessionUnavailableError: 503,
}


def resolve_timeout(requested: Optional[int], default: float) -> float:
    """Caller's timeout in seconds when positive, the server default otherwise."""

    if requested is not None and requested > 0:
        return float(requested)
    return default


def create_app(
    orchestrator: PromptOrchestrator,
    config: Optional[ServerConfig] = None,
    *,
    clock: Callable[[], float] = time.monotonic,
) -> FastAPI:
    config = config or ServerConfig()
    app = FastAPI(title="Lumo API")

    @app.get("/health")
    def get_health() -> Dict[str, Any]:
        return {"status": orchestrator.status.value}

    @app.post("/v1/prompt", response_model=PromptResponse, response_model_exclude_none=True)
    def prompt(payload: PromptRequest) -> Any:
        if not payload.prompt or len(payload.prompt) > config.max_prompt_length:
            raise HTTPException(status_code=400, detail="prompt length invalid")
        timeout = resolve_timeout(payload.timeout, config.default_timeout)
        try:
            answer = orchestrator.acquire_and_run(
                payload.prompt,
                payload.web_search,
                clock() + timeout,
            )
        except tuple(ERROR_STATUS) as exc:
            LOGGER.info("Prompt failed: %s", exc)
            return JSONResponse(
                status_code=_status_for(exc),
                content=PromptResponse(error=str(exc)).model_dump(exclude_none=True),
            )
        return PromptResponse(answer=answer)

    return app


def _status_for(exc: LumoError) -> int:
    for error_type, status in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status
    return 500
