"""HTTP page with a "Finished" button to confirm the interactive login."""

from __future__ import annotations

import html
import logging
import threading
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Optional

from .login import LoginPrompt, LoginWaiter

LOGGER = logging.getLogger(__name__)


class PortalLoginWaiter(LoginWaiter):
    """Serve a small page where the operator confirms the login is done."""

    def __init__(self, host: str = "127.0.0.1", port: int = 8765) -> None:
        self._host = host
        self._port = port
        self._server: Optional[ThreadingHTTPServer] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._prompt: Optional[LoginPrompt] = None
        self._finished = threading.Event()

    @property
    def url(self) -> str:
        return f"http://{self._host}:{self._port}/"

    def start(self) -> None:
        if self._server:
            return
        self._finished.clear()
        self._server = ThreadingHTTPServer((self._host, self._port), self._build_handler())
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()
        LOGGER.info("Login portal listening on %s", self.url)

    def stop(self) -> None:
        if self._server:
            self._server.shutdown()
            self._server.server_close()
        if self._thread:
            self._thread.join(timeout=2)
        self._server = None
        self._thread = None
        with self._lock:
            self._prompt = None

    def wait_for_login(self, prompt: LoginPrompt, timeout: Optional[float] = None) -> bool:
        with self._lock:
            self._prompt = prompt
        LOGGER.info("Confirm the login at %s", self.url)
        finished = self._finished.wait(timeout)
        with self._lock:
            self._prompt = None
        return finished

    # Internal helpers -------------------------------------------------

    def _build_handler(self) -> type[BaseHTTPRequestHandler]:
        portal = self

        class PortalHandler(BaseHTTPRequestHandler):
            def do_GET(self) -> None:  # noqa: N802 (name required by BaseHTTPRequestHandler)
                if self.path not in {"/", "/index.html"}:
                    self.send_error(HTTPStatus.NOT_FOUND)
                    return
                portal._handle_get(self)

            def do_POST(self) -> None:  # noqa: N802
                if self.path == "/finish":
                    portal._handle_finish(self)
                else:
                    self.send_error(HTTPStatus.NOT_FOUND)

            def log_message(self, format: str, *args) -> None:  # noqa: A003 - signature fixed
                return

        return PortalHandler

    def _handle_get(self, handler: BaseHTTPRequestHandler) -> None:
        with self._lock:
            prompt = self._prompt
        if not prompt:
            body = "<html><body><h1>No login currently pending.</h1></body></html>"
        else:
            body = self._render_page(prompt)
        self._send_html(handler, body)

    def _handle_finish(self, handler: BaseHTTPRequestHandler) -> None:
        with self._lock:
            pending = self._prompt is not None
        if not pending:
            handler.send_error(HTTPStatus.BAD_REQUEST, "No login pending")
            return
        self._finished.set()
        self._send_html(
            handler,
            "<html><body><h1>Thank you!</h1><p>The session is starting.</p></body></html>",
        )

    @staticmethod
    def _send_html(handler: BaseHTTPRequestHandler, body: str) -> None:
        handler.send_response(HTTPStatus.OK)
        handler.send_header("Content-Type", "text/html; charset=utf-8")
        handler.end_headers()
        handler.wfile.write(body.encode("utf-8"))

    @staticmethod
    def _render_page(prompt: LoginPrompt) -> str:
        vnc_block = ""
        info = prompt.connection_info
        if info:
            vnc_block = (
                f"<h2>VNC Connection</h2><p>Host: {html.escape(info.host)}<br/>"
                f"Port: {info.port}<br/>Display: {html.escape(info.display)}</p>"
            )
        return f"""
        <html>
          <head>
            <title>Login required</title>
          </head>
          <body>
            <h1>Login required</h1>
            <p><strong>Login page:</strong> {html.escape(prompt.login_url)}</p>
            <p><strong>Instructions:</strong> {html.escape(prompt.instructions)}</p>
            {vnc_block}
            <form action="/finish" method="post">
              <button type="submit" style="padding: 1em; font-size: 1.2em;">Finished</button>
            </form>
          </body>
        </html>
        """
