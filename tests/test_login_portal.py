import socket
import threading
import time

import httpx

from lumo_api.browser.vnc import VNCConnectionInfo
from lumo_api.session.login import LoginPrompt
from lumo_api.session.portal import PortalLoginWaiter


def _find_free_port() -> int:
    sock = socket.socket()
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


def test_portal_shows_pending_login_and_finishes():
    port = _find_free_port()
    portal = PortalLoginWaiter(host="127.0.0.1", port=port)
    portal.start()
    try:
        prompt = LoginPrompt(
            login_url="https://lumo.proton.me/login",
            connection_info=VNCConnectionInfo(host="10.0.0.5", port=5901, display=":1"),
        )
        wait_result = {}

        def waiter() -> None:
            wait_result["value"] = portal.wait_for_login(prompt, timeout=5)

        thread = threading.Thread(target=waiter)
        thread.start()
        time.sleep(0.2)
        client = httpx.Client()
        try:
            response = client.get(portal.url)
            assert response.status_code == 200
            assert "Login required" in response.text
            assert "https://lumo.proton.me/login" in response.text
            assert "10.0.0.5" in response.text

            finish_response = client.post(f"http://127.0.0.1:{port}/finish")
            assert finish_response.status_code == 200
            thread.join(timeout=2)
            assert wait_result.get("value") is True
        finally:
            client.close()
    finally:
        portal.stop()


def test_portal_without_pending_login():
    port = _find_free_port()
    portal = PortalLoginWaiter(host="127.0.0.1", port=port)
    portal.start()
    try:
        with httpx.Client() as client:
            response = client.get(f"http://127.0.0.1:{port}/")
            assert "No login currently pending" in response.text
            assert client.post(f"http://127.0.0.1:{port}/finish").status_code == 400
            assert client.get(f"http://127.0.0.1:{port}/other").status_code == 404
    finally:
        portal.stop()


def test_portal_wait_times_out():
    port = _find_free_port()
    portal = PortalLoginWaiter(host="127.0.0.1", port=port)
    portal.start()
    try:
        assert portal.wait_for_login(LoginPrompt(login_url="https://example"), timeout=0.1) is False
    finally:
        portal.stop()
