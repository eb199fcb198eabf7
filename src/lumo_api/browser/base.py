"""Browser driver and chat surface abstractions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional


class BrowserActionError(RuntimeError):
    """Raised when a browser or UI operation fails."""


class ChatSurface(ABC):
    """The narrow set of UI operations the orchestrator performs on the chat page.

    Implementations own the selector strategy; callers never see page elements.
    """

    @abstractmethod
    def wait_until_ready(self, timeout: float) -> None:
        """Block until the prompt input is present and editable.

        Raises :class:`BrowserActionError` when ``timeout`` seconds pass first.
        """

    @abstractmethod
    def web_search_enabled(self) -> Optional[bool]:
        """Return the web-search toggle state, or ``None`` when the control is absent."""

    @abstractmethod
    def toggle_web_search(self) -> None:
        """Click the web-search toggle once."""

    @abstractmethod
    def clear_input(self) -> None:
        """Empty the prompt input."""

    @abstractmethod
    def write_prompt(self, text: str) -> None:
        """Write ``text`` verbatim into the prompt input."""

    @abstractmethod
    def submit(self) -> None:
        """Commit the prompt currently in the input."""

    @abstractmethod
    def answer_count(self) -> int:
        """Return how many assistant messages the page currently shows."""

    @abstractmethod
    def read_answer(self, skip: int = 0) -> str:
        """Return the text of the last assistant message.

        ``""`` when the page shows no more than ``skip`` messages, i.e. the
        answer to the prompt just submitted has not appeared yet.
        """


class BrowserDriver(ABC):
    """Lifecycle of one automation engine process, context and page."""

    @abstractmethod
    def start(self) -> None:
        """Launch the automation engine."""

    @abstractmethod
    def open_context(self, storage_state: Optional[dict[str, Any]] = None) -> None:
        """Open the browsing context (with ``storage_state`` applied) and its page."""

    @abstractmethod
    def goto(self, url: str) -> None:
        """Navigate the page to ``url``."""

    @abstractmethod
    def storage_state(self) -> dict[str, Any]:
        """Export cookies and storage of the current context."""

    @abstractmethod
    def chat_surface(self) -> ChatSurface:
        """Return the chat operations bound to the current page."""

    @abstractmethod
    def stop(self) -> None:
        """Release page, context and engine. Idempotent and best-effort."""
