"""Decide when a streamed answer has finished rendering."""

from __future__ import annotations

import enum
import logging
import time
from typing import Callable, Optional

from ..browser.base import BrowserActionError, ChatSurface
from ..config import PollingConfig
from ..errors import AnswerTimeoutError

LOGGER = logging.getLogger(__name__)


class PollState(str, enum.Enum):
    """States of the stabilization poller."""

    SAMPLING = "sampling"
    CONFIRMING = "confirming"
    DONE = "done"


class StabilizationPoller:
    """Sample the last answer until two samples a settling interval apart match.

    The remote UI gives no completion signal, so "finished" means: a
    non-empty, non-placeholder text that did not change across
    ``settle_interval``. The deadline is checked once at the top of every
    iteration and no sleep runs past it.
    """

    def __init__(
        self,
        config: Optional[PollingConfig] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        config = config or PollingConfig()
        self._poll_interval = config.poll_interval
        self._settle_interval = config.settle_interval
        self._placeholders = frozenset(config.placeholders)
        self._clock = clock
        self._sleep = sleep

    def wait_for_answer(self, surface: ChatSurface, deadline: float, *, skip: int = 0) -> str:
        """Return the stabilized answer, ignoring the first ``skip`` messages on the page."""

        state = PollState.SAMPLING
        baseline = ""
        while True:
            if self._clock() >= deadline:
                LOGGER.info("Deadline expired while %s", state.value)
                raise AnswerTimeoutError("Timeout waiting for answer")

            sample = self._sample(surface, skip)
            if state is PollState.SAMPLING:
                if self._is_placeholder(sample):
                    self._pause(self._poll_interval, deadline)
                    continue
                baseline = sample
                state = PollState.CONFIRMING
                self._pause(self._settle_interval, deadline)
            elif state is PollState.CONFIRMING:
                if sample == baseline:
                    state = PollState.DONE
                else:
                    LOGGER.debug("Answer still changing (%d -> %d chars)", len(baseline), len(sample))
                    state = PollState.SAMPLING
                    self._pause(self._poll_interval, deadline)

            if state is PollState.DONE:
                LOGGER.debug("Answer stabilized at %d chars", len(baseline))
                return baseline

    def _is_placeholder(self, sample: str) -> bool:
        stripped = sample.strip()
        return not stripped or stripped in self._placeholders

    @staticmethod
    def _sample(surface: ChatSurface, skip: int) -> str:
        try:
            return surface.read_answer(skip)
        except BrowserActionError as exc:
            LOGGER.debug("Answer not readable yet: %s", exc)
            return ""

    def _pause(self, interval: float, deadline: float) -> None:
        remaining = deadline - self._clock()
        if remaining <= 0:
            return
        self._sleep(min(interval, remaining))

