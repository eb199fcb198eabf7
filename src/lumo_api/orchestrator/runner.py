"""Session manager serializing prompts against the single browser session."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from ..browser.base import BrowserActionError
from ..errors import AnswerTimeoutError, SessionUnavailableError, SubmissionError
from ..models import RequestState, SessionStatus
from ..session.bootstrap import LumoSession, SessionBootstrapper, teardown
from .guard import SingleFlightGuard
from .poller import StabilizationPoller
from .submission import PromptSubmitter

LOGGER = logging.getLogger(__name__)


class PromptOrchestrator:
    """Own the browser session and run prompts against it one at a time.

    Playwright's sync API is bound to the thread that started it, so bootstrap,
    every prompt and teardown run on one dedicated worker thread. Callers are
    admitted by the :class:`SingleFlightGuard` on their own thread and wait for
    the worker's result; the guard is released only once the worker is done.
    """

    def __init__(
        self,
        bootstrapper: SessionBootstrapper,
        *,
        submitter: Optional[PromptSubmitter] = None,
        poller: Optional[StabilizationPoller] = None,
        guard: Optional[SingleFlightGuard] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._bootstrapper = bootstrapper
        self._submitter = submitter or PromptSubmitter()
        self._poller = poller or StabilizationPoller(clock=clock)
        self._guard = guard or SingleFlightGuard()
        self._clock = clock
        self._worker = ThreadPoolExecutor(max_workers=1, thread_name_prefix="lumo-session")
        self._lock = threading.Lock()
        self._session: Optional[LumoSession] = None
        self._starting: Optional[Future] = None
        self._closed = False

    @property
    def status(self) -> SessionStatus:
        with self._lock:
            if self._closed:
                return SessionStatus.CLOSED
            if self._session is None:
                return SessionStatus.STARTING
        if self._guard.busy:
            return SessionStatus.BUSY
        return SessionStatus.READY

    def bootstrap(self) -> LumoSession:
        """Start the session; raises :class:`BootstrapError` when it cannot get ready."""

        with self._lock:
            if self._closed:
                raise SessionUnavailableError("Orchestrator has been shut down")
            if self._session is not None:
                return self._session
            if self._starting is None:
                self._starting = self._worker.submit(self._start_session)
            starting = self._starting
        return starting.result()

    def acquire_and_run(self, prompt: str, web_search: bool, deadline: float) -> str:
        """Submit ``prompt`` and return the stabilized answer.

        Raises :class:`BusyError` immediately when another prompt is in flight,
        :class:`SubmissionError` or :class:`AnswerTimeoutError` for per-request
        failures.
        """

        with self._guard.hold():
            session = self._require_session()
            request = RequestState(prompt=prompt, web_search=web_search, deadline=deadline)
            return self._worker.submit(self._run, session, request).result()

    def run_prompt(self, prompt: str, web_search: bool = False, timeout: float = 30.0) -> str:
        """Like :meth:`acquire_and_run` with a timeout relative to now."""

        return self.acquire_and_run(prompt, web_search, self._clock() + timeout)

    def shutdown(self) -> None:
        """Tear the session down once; later calls are no-ops."""

        with self._lock:
            if self._closed:
                return
            self._closed = True
            session = self._session
            self._session = None
        LOGGER.info("Shutting down orchestrator")
        try:
            self._worker.submit(teardown, session).result()
        finally:
            self._worker.shutdown(wait=True)

    def _start_session(self) -> LumoSession:
        # Runs on the worker; concurrent bootstrap() callers share this future.
        try:
            session = self._bootstrapper.bootstrap()
        except BaseException:
            with self._lock:
                self._starting = None
            raise
        with self._lock:
            self._starting = None
            if not self._closed:
                self._session = session
                return session
        LOGGER.info("Shut down while starting; closing the new browser session")
        teardown(session)
        raise SessionUnavailableError("Orchestrator was shut down during bootstrap")

    def _require_session(self) -> LumoSession:
        with self._lock:
            if self._closed:
                raise SessionUnavailableError("Orchestrator has been shut down")
            if self._session is None:
                raise SessionUnavailableError("Browser session is not ready yet")
            return self._session

    def _run(self, session: LumoSession, request: RequestState) -> str:
        if self._clock() >= request.deadline:
            raise AnswerTimeoutError("Deadline expired before the prompt was submitted")
        try:
            previous = session.surface.answer_count()
        except BrowserActionError as exc:
            raise SubmissionError(f"Chat page is not readable: {exc}") from exc
        self._submitter.submit(session.surface, request.prompt, request.web_search)
        answer = self._poller.wait_for_answer(session.surface, request.deadline, skip=previous)
        LOGGER.info("Answer received (%d chars)", len(answer))
        return answer
