"""Persistence of the browser authentication state."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from ..errors import CredentialStoreError

LOGGER = logging.getLogger(__name__)

AuthState = dict[str, Any]


class CredentialStore:
    """Load and save the Playwright storage state to a local JSON file.

    The state is opaque here; only the browser engine interprets it. Writes go
    to a temporary sibling file that atomically replaces the target, so a
    crash mid-write never leaves a truncated state behind.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def load(self) -> Optional[AuthState]:
        """Return the stored state, or ``None`` on first run."""

        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            LOGGER.info("No authentication state at %s", self._path)
            return None
        except OSError as exc:
            raise CredentialStoreError(f"Cannot read {self._path}: {exc}") from exc
        try:
            state = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CredentialStoreError(f"{self._path} is not valid JSON: {exc}") from exc
        if not isinstance(state, dict):
            raise CredentialStoreError(f"{self._path} does not contain a JSON object")
        LOGGER.info("Loaded authentication state from %s", self._path)
        return state

    def save(self, state: AuthState) -> bool:
        """Replace the stored state; ``False`` (with a warning) when writing fails."""

        directory = self._path.parent
        tmp_name: Optional[str] = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=directory
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(state, handle)
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self._path)
        except (OSError, TypeError, ValueError):
            LOGGER.warning(
                "Failed to save authentication state to %s; the next start will need a new login",
                self._path,
                exc_info=True,
            )
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            return False
        LOGGER.info("Saved authentication state to %s", self._path)
        return True

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)
