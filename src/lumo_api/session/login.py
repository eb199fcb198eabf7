"""Interactive, human-in-the-loop login used only while bootstrapping."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from rich.console import Console

from ..browser.base import BrowserActionError, BrowserDriver
from ..browser.vnc import VNCBridge, VNCConnectionInfo
from ..config import SiteConfig
from ..errors import BootstrapError
from ..models import NotificationEvent, NotificationLevel
from ..notifications.base import LoggingNotifier, Notifier
from .credentials import AuthState

LOGGER = logging.getLogger(__name__)

DEFAULT_INSTRUCTIONS = (
    "Log in to the chat application in the opened browser window, "
    "wait until the chat page is shown, then confirm here."
)


@dataclass
class LoginPrompt:
    """What the human needs to know to complete the login."""

    login_url: str
    instructions: str = DEFAULT_INSTRUCTIONS
    connection_info: Optional[VNCConnectionInfo] = None


class LoginWaiter(ABC):
    """Blocks until a human confirms the interactive login is complete."""

    def start(self) -> None:
        """Prepare the waiter (e.g. start serving a page)."""

    def stop(self) -> None:
        """Release anything :meth:`start` acquired."""

    @abstractmethod
    def wait_for_login(self, prompt: LoginPrompt, timeout: Optional[float] = None) -> bool:
        """Return ``True`` once the human confirmed, ``False`` on timeout or abort."""


class ConsoleLoginWaiter(LoginWaiter):
    """Ask the operator to press ENTER in the terminal."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self._console = console or Console()

    def wait_for_login(self, prompt: LoginPrompt, timeout: Optional[float] = None) -> bool:
        if timeout is not None:
            LOGGER.debug("Console login waiter ignores the %ss timeout", timeout)
        self._console.print(f"Login page: {prompt.login_url}", style="cyan")
        if prompt.connection_info:
            info = prompt.connection_info
            self._console.print(
                f"VNC: {info.host}:{info.port} (display {info.display})", style="cyan"
            )
        self._console.print(prompt.instructions)
        try:
            self._console.input("After you log in, press ENTER to continue...")
        except (EOFError, KeyboardInterrupt):
            return False
        return True


class LoginFlow:
    """Open the login page in a dedicated browser and capture the resulting auth state."""

    def __init__(
        self,
        site: SiteConfig,
        driver_factory: Callable[[], BrowserDriver],
        waiter: LoginWaiter,
        *,
        notifier: Optional[Notifier] = None,
        vnc: Optional[VNCBridge] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._site = site
        self._driver_factory = driver_factory
        self._waiter = waiter
        self._notifier = notifier or LoggingNotifier()
        self._vnc = vnc
        self._timeout = timeout

    def run(self) -> AuthState:
        connection_info = self._start_vnc()
        driver = self._driver_factory()
        try:
            driver.start()
            driver.open_context()
            driver.goto(self._site.login_url)
            prompt = LoginPrompt(
                login_url=self._site.login_url,
                connection_info=connection_info,
            )
            self._notifier.notify(
                NotificationEvent(
                    type="login_required",
                    message="No authentication state found; waiting for interactive login",
                    level=NotificationLevel.WARNING,
                    data={"login_url": self._site.login_url},
                )
            )
            self._waiter.start()
            try:
                confirmed = self._waiter.wait_for_login(prompt, self._timeout)
            finally:
                self._waiter.stop()
            if not confirmed:
                raise BootstrapError("Interactive login was not confirmed")
            return driver.storage_state()
        except BrowserActionError as exc:
            raise BootstrapError(f"Interactive login failed: {exc}") from exc
        finally:
            driver.stop()
            if self._vnc:
                self._vnc.stop()

    def _start_vnc(self) -> Optional[VNCConnectionInfo]:
        if not self._vnc:
            return None
        try:
            info = self._vnc.start()
        except (OSError, RuntimeError) as exc:
            self._vnc.stop()
            raise BootstrapError(f"Could not start the VNC bridge: {exc}") from exc
        if info:
            self._notifier.notify(
                NotificationEvent(
                    type="vnc_ready",
                    message="Login browser reachable over VNC",
                    level=NotificationLevel.INFO,
                    data={"host": info.host, "port": info.port, "display": info.display},
                )
            )
        return info
