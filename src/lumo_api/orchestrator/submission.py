"""Write a prompt into the chat UI and commit it."""

from __future__ import annotations

import logging

from ..browser.base import BrowserActionError, ChatSurface
from ..errors import SubmissionError

LOGGER = logging.getLogger(__name__)


class PromptSubmitter:
    """Reconcile the web-search toggle, then clear, fill and submit the input."""

    def submit(self, surface: ChatSurface, prompt: str, web_search: bool) -> None:
        self._reconcile_web_search(surface, web_search)
        LOGGER.debug("Submitting prompt (%d chars): %.80r", len(prompt), prompt)
        try:
            surface.clear_input()
            surface.write_prompt(prompt)
            surface.submit()
        except BrowserActionError as exc:
            raise SubmissionError(f"Submitting the prompt failed: {exc}") from exc

    @staticmethod
    def _reconcile_web_search(surface: ChatSurface, wanted: bool) -> None:
        try:
            current = surface.web_search_enabled()
        except BrowserActionError:
            LOGGER.warning("Could not read the web-search toggle; leaving it as is", exc_info=True)
            return
        if current is None:
            LOGGER.debug("No web-search toggle on the page; skipping")
            return
        if current == wanted:
            return
        LOGGER.info("Switching web search %s", "on" if wanted else "off")
        try:
            surface.toggle_web_search()
        except BrowserActionError as exc:
            raise SubmissionError(f"Toggling web search failed: {exc}") from exc
