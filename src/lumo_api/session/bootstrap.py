"""Bring the single browser session to a ready state, and tear it down."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

from ..browser.base import BrowserActionError, BrowserDriver, ChatSurface
from ..config import SiteConfig
from ..errors import BootstrapError, CredentialStoreError
from ..models import NotificationEvent, NotificationLevel
from ..notifications.base import LoggingNotifier, Notifier
from .credentials import AuthState, CredentialStore
from .login import LoginFlow

LOGGER = logging.getLogger(__name__)


@dataclass
class LumoSession:
    """The live automation handle: driver (engine, context, page) and its chat surface."""

    driver: BrowserDriver
    surface: ChatSurface
    ready_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class SessionBootstrapper:
    """Launch the browser, authenticate it and wait for the chat UI.

    ``login_flow`` is the only path that blocks on a human. Passing ``None``
    disables it, in which case a missing auth state is fatal.
    """

    def __init__(
        self,
        site: SiteConfig,
        driver_factory: Callable[[], BrowserDriver],
        store: CredentialStore,
        *,
        login_flow: Optional[LoginFlow] = None,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self._site = site
        self._driver_factory = driver_factory
        self._store = store
        self._login_flow = login_flow
        self._notifier = notifier or LoggingNotifier()

    def bootstrap(self) -> LumoSession:
        driver = self._driver_factory()
        try:
            return self._bootstrap(driver)
        except BaseException:
            driver.stop()
            raise

    def _bootstrap(self, driver: BrowserDriver) -> LumoSession:
        try:
            driver.start()
        except BrowserActionError as exc:
            raise BootstrapError(str(exc)) from exc

        auth_state = self._restore_auth_state()
        try:
            driver.open_context(auth_state)
            driver.goto(self._site.app_url)
            surface = driver.chat_surface()
            surface.wait_until_ready(self._site.ready_timeout)
        except BrowserActionError as exc:
            raise BootstrapError(f"Chat UI did not become ready: {exc}") from exc

        session = LumoSession(driver=driver, surface=surface)
        LOGGER.info("Browser session ready at %s", self._site.app_url)
        self._notifier.notify(
            NotificationEvent(
                type="session_ready",
                message="Browser session ready",
                level=NotificationLevel.SUCCESS,
                data={"app_url": self._site.app_url},
            )
        )
        return session

    def _restore_auth_state(self) -> AuthState:
        try:
            auth_state = self._store.load()
        except CredentialStoreError as exc:
            raise BootstrapError(str(exc)) from exc
        if auth_state is not None:
            return auth_state
        if self._login_flow is None:
            raise BootstrapError(
                f"No authentication state at {self._store.path} and interactive login is "
                "disabled; run `lumo-api login` first"
            )
        auth_state = self._login_flow.run()
        # A failed save is not fatal: this session is already authenticated.
        if self._store.save(auth_state):
            self._notifier.notify(
                NotificationEvent(
                    type="auth_saved",
                    message=f"Authentication state saved to {self._store.path}",
                    level=NotificationLevel.SUCCESS,
                )
            )
        else:
            self._notifier.notify(
                NotificationEvent(
                    type="auth_save_failed",
                    message="Could not save authentication state; the next start needs a new login",
                    level=NotificationLevel.WARNING,
                    data={"path": str(self._store.path)},
                )
            )
        return auth_state


def teardown(session: Optional[LumoSession]) -> None:
    """Release the session's page, context and engine. Safe to call repeatedly."""

    if session is None:
        return
    LOGGER.info("Closing browser session")
    session.driver.stop()
