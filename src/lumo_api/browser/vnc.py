"""Virtual display and VNC bridge for logging in on a machine without a screen."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from typing import Optional

from pyvirtualdisplay import Display

from ..config import BrowserConfig, LoginConfig

LOGGER = logging.getLogger(__name__)


@dataclass
class VNCConnectionInfo:
    """Details for connecting to the VNC server."""

    host: str
    port: int
    display: str


class VNCBridge:
    """Run a virtual X display plus ``x11vnc`` so a headed login browser is reachable.

    The bridge only matters while the interactive login is in progress; the
    serving session itself always runs headless.
    """

    def __init__(
        self,
        *,
        width: int = 1280,
        height: int = 720,
        host: str = "127.0.0.1",
        port: Optional[int] = None,
    ) -> None:
        self._width = width
        self._height = height
        self._host = host
        self._port = port
        self._display: Optional[Display] = None
        self._vnc_process: Optional[subprocess.Popen[str]] = None
        self._connection_info: Optional[VNCConnectionInfo] = None

    @classmethod
    def from_config(cls, login: LoginConfig, browser: BrowserConfig) -> "VNCBridge":
        return cls(
            width=browser.viewport_width,
            height=browser.viewport_height,
            host=login.vnc_host,
            port=login.vnc_port,
        )

    @property
    def connection_info(self) -> Optional[VNCConnectionInfo]:
        return self._connection_info

    def start(self) -> Optional[VNCConnectionInfo]:
        """Start the display and VNC server; ``None`` when ``x11vnc`` is unavailable."""

        if shutil.which("x11vnc") is None:
            LOGGER.warning("x11vnc not found; the login browser will not be reachable over VNC")
            return None
        LOGGER.debug("Starting virtual display %sx%s", self._width, self._height)
        self._display = Display(visible=False, size=(self._width, self._height))
        self._display.start()
        display_var = os.environ.get("DISPLAY")
        if not display_var:
            self.stop()
            raise RuntimeError("DISPLAY environment variable missing after starting virtual display")
        port = self._port or 5900 + int(display_var.lstrip(":").split(".")[0])
        LOGGER.info("Launching x11vnc on display %s port %s", display_var, port)
        self._vnc_process = subprocess.Popen(
            [
                "x11vnc",
                "-display",
                display_var,
                "-rfbport",
                str(port),
                "-forever",
                "-shared",
                "-nopw",
                "-quiet",
            ],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
        self._connection_info = VNCConnectionInfo(host=self._host, port=port, display=display_var)
        return self._connection_info

    def stop(self) -> None:
        if self._vnc_process and self._vnc_process.poll() is None:
            LOGGER.debug("Terminating x11vnc")
            self._vnc_process.terminate()
            try:
                self._vnc_process.wait(timeout=5)
            except subprocess.TimeoutExpired:  # pragma: no cover - stubborn child
                self._vnc_process.kill()
        if self._display:
            LOGGER.debug("Stopping virtual display")
            self._display.stop()
        self._display = None
        self._vnc_process = None
        self._connection_info = None
