"""Shared models used across lumo-api."""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class PromptRequest(BaseModel):
    """Body of ``POST /v1/prompt``."""

    model_config = ConfigDict(populate_by_name=True)

    prompt: str
    web_search: bool = Field(default=False, alias="webSearch")
    debug: bool = Field(default=False, description="Reserved; currently ignored.")
    timeout: Optional[int] = Field(
        default=None,
        description="Seconds to wait for the answer; the server default applies when unset.",
    )


class PromptResponse(BaseModel):
    """Answer or error returned for a prompt."""

    answer: Optional[str] = None
    error: Optional[str] = None


class RequestState(BaseModel):
    """Everything one in-flight prompt needs; never persisted."""

    model_config = ConfigDict(frozen=True)

    prompt: str
    web_search: bool = False
    deadline: float = Field(description="Absolute deadline on the monotonic clock.")


class SessionStatus(str, enum.Enum):
    """Lifecycle of the orchestrated browser session."""

    STARTING = "starting"
    READY = "ready"
    BUSY = "busy"
    CLOSED = "closed"


class NotificationLevel(str, enum.Enum):
    """Severity of notification events."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


class NotificationEvent(BaseModel):
    """Operator-facing event emitted during bootstrap and login."""

    type: str
    message: str
    level: NotificationLevel = NotificationLevel.INFO
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
