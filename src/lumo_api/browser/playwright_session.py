"""Playwright-powered browser driver and chat surface."""

from __future__ import annotations

import logging
from typing import Any, Optional

from playwright.sync_api import Error, Page, sync_playwright

from ..config import BrowserConfig, SelectorConfig
from .base import BrowserActionError, BrowserDriver, ChatSurface

LOGGER = logging.getLogger(__name__)


class PlaywrightChatSurface(ChatSurface):
    """Chat operations implemented with CSS selectors on a Playwright page."""

    def __init__(
        self,
        page: Page,
        selectors: Optional[SelectorConfig] = None,
        *,
        action_timeout: float = 10.0,
    ) -> None:
        self._page = page
        self._selectors = selectors or SelectorConfig()
        self._timeout = _to_timeout(action_timeout)

    def wait_until_ready(self, timeout: float) -> None:
        chat_input = self._page.locator(self._selectors.chat_input).first
        try:
            chat_input.wait_for(state="visible", timeout=_to_timeout(timeout))
            editable = chat_input.is_editable(timeout=self._timeout)
        except Error as exc:
            raise BrowserActionError(f"Chat input not found: {exc}") from exc
        if not editable:
            raise BrowserActionError("Chat input is present but not editable")

    def web_search_enabled(self) -> Optional[bool]:
        try:
            button = self._page.query_selector(self._selectors.web_search_toggle)
            if button is None:
                return None
            pressed = button.get_attribute("aria-pressed")
            if pressed is not None:
                return pressed.lower() == "true"
            classes = (button.get_attribute("class") or "").split()
        except Error as exc:
            raise BrowserActionError(str(exc)) from exc
        return self._selectors.toggle_active_class in classes

    def toggle_web_search(self) -> None:
        self._run(
            lambda: self._page.locator(self._selectors.web_search_toggle).first.click(
                timeout=self._timeout
            )
        )

    def clear_input(self) -> None:
        self._run(lambda: self._input().fill("", timeout=self._timeout))

    def write_prompt(self, text: str) -> None:
        # fill() inserts newlines literally instead of pressing Enter
        self._run(lambda: self._input().fill(text, timeout=self._timeout))

    def submit(self) -> None:
        self._run(lambda: self._input().press("Enter", timeout=self._timeout))

    def answer_count(self) -> int:
        try:
            return self._page.locator(self._selectors.answer).count()
        except Error as exc:
            raise BrowserActionError(str(exc)) from exc

    def read_answer(self, skip: int = 0) -> str:
        # all_inner_texts() does not auto-wait, so a poll never blocks past its deadline
        try:
            texts = self._page.locator(self._selectors.answer).all_inner_texts()
        except Error as exc:
            raise BrowserActionError(str(exc)) from exc
        if len(texts) <= skip:
            return ""
        return texts[-1]

    def _input(self):
        return self._page.locator(self._selectors.chat_input).first

    @staticmethod
    def _run(operation) -> None:
        try:
            operation()
        except Error as exc:
            raise BrowserActionError(str(exc)) from exc


class PlaywrightBrowserDriver(BrowserDriver):
    """Browser driver backed by Playwright's synchronous API.

    Every call must come from the thread that called :meth:`start`.
    """

    def __init__(
        self,
        config: Optional[BrowserConfig] = None,
        selectors: Optional[SelectorConfig] = None,
        *,
        headless: Optional[bool] = None,
    ) -> None:
        self._config = config or BrowserConfig()
        self._selectors = selectors or SelectorConfig()
        self._headless = self._config.headless if headless is None else headless
        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None

    def start(self) -> None:
        LOGGER.debug("Starting Playwright (headless=%s)", self._headless)
        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(
                headless=self._headless,
                args=list(self._config.launch_args),
            )
        except Error as exc:
            raise BrowserActionError(f"Chromium launch failed: {exc}") from exc

    def open_context(self, storage_state: Optional[dict[str, Any]] = None) -> None:
        if not self._browser:
            raise BrowserActionError("Browser is not started")
        context_kwargs: dict[str, Any] = {
            "viewport": {
                "width": self._config.viewport_width,
                "height": self._config.viewport_height,
            },
        }
        if self._config.user_agent:
            context_kwargs["user_agent"] = self._config.user_agent
        if storage_state is not None:
            context_kwargs["storage_state"] = storage_state
        try:
            self._context = self._browser.new_context(**context_kwargs)
            self._page = self._context.new_page()
        except Error as exc:
            raise BrowserActionError(f"Opening browser context failed: {exc}") from exc
        self._page.set_default_timeout(_to_timeout(self._config.action_timeout))

    def goto(self, url: str) -> None:
        page = self._require_page()
        LOGGER.info("Navigating to %s", url)
        try:
            page.goto(url, wait_until=self._config.wait_until)
        except Error as exc:
            raise BrowserActionError(f"Navigation to {url} failed: {exc}") from exc

    def storage_state(self) -> dict[str, Any]:
        if not self._context:
            raise BrowserActionError("Browser context is not open")
        try:
            return self._context.storage_state()
        except Error as exc:
            raise BrowserActionError(f"Exporting storage state failed: {exc}") from exc

    def chat_surface(self) -> ChatSurface:
        return PlaywrightChatSurface(
            self._require_page(),
            self._selectors,
            action_timeout=self._config.action_timeout,
        )

    def stop(self) -> None:
        LOGGER.debug("Stopping Playwright browser driver")
        steps = (
            ("page", self._page, "close"),
            ("context", self._context, "close"),
            ("browser", self._browser, "close"),
            ("playwright", self._playwright, "stop"),
        )
        for name, resource, method in steps:
            if resource is None:
                continue
            try:
                getattr(resource, method)()
            except Exception:
                LOGGER.warning("Failed to release %s during teardown", name, exc_info=True)
        self._page = None
        self._context = None
        self._browser = None
        self._playwright = None

    def _require_page(self) -> Page:
        if not self._page:
            raise BrowserActionError("Browser page is not open")
        return self._page


def _to_timeout(timeout: Optional[float]) -> Optional[int]:
    if timeout is None:
        return None
    return int(timeout * 1000)
