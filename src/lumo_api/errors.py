"""Error taxonomy for the session orchestrator."""

from __future__ import annotations


class LumoError(RuntimeError):
    """Base class for errors raised by lumo-api."""


class BootstrapError(LumoError):
    """The browser session could not be brought to a ready state.

    Fatal: the server must not start serving requests.
    """


class CredentialStoreError(LumoError):
    """The stored authentication state exists but cannot be used."""


class BusyError(LumoError):
    """Another prompt is currently in flight against the session."""

    def __init__(self, message: str = "Session is busy with another prompt") -> None:
        super().__init__(message)


class SubmissionError(LumoError):
    """Writing or committing the prompt through the UI failed."""


class AnswerTimeoutError(LumoError, TimeoutError):
    """The deadline expired before the answer stabilized."""


class SessionUnavailableError(LumoError):
    """No live session: bootstrap has not run yet or shutdown already did."""
