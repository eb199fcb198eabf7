from typing import Optional

import pytest

from lumo_api.browser.base import BrowserActionError, ChatSurface
from lumo_api.errors import SubmissionError
from lumo_api.orchestrator.submission import PromptSubmitter


class RecordingSurface(ChatSurface):
    def __init__(self, web_search: Optional[bool] = False) -> None:
        self.web_search = web_search
        self.calls: list[str] = []
        self.text = "stale text"
        self.fail_on: set[str] = set()

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise BrowserActionError(f"{name} failed")

    def wait_until_ready(self, timeout: float) -> None:
        return None

    def web_search_enabled(self) -> Optional[bool]:
        self._record("read_toggle")
        return self.web_search

    def toggle_web_search(self) -> None:
        self._record("toggle")
        assert self.web_search is not None
        self.web_search = not self.web_search

    def clear_input(self) -> None:
        self._record("clear")
        self.text = ""

    def write_prompt(self, text: str) -> None:
        self._record("write")
        self.text += text

    def submit(self) -> None:
        self._record("submit")

    def answer_count(self) -> int:
        return 0

    def read_answer(self, skip: int = 0) -> str:
        return ""


def test_submit_clears_writes_and_commits_in_order() -> None:
    surface = RecordingSurface(web_search=False)

    PromptSubmitter().submit(surface, "Hello\nworld", web_search=False)

    assert surface.calls == ["read_toggle", "clear", "write", "submit"]
    assert surface.text == "Hello\nworld"


def test_toggle_reconciliation_is_idempotent() -> None:
    surface = RecordingSurface(web_search=False)
    submitter = PromptSubmitter()

    submitter.submit(surface, "first", web_search=True)
    submitter.submit(surface, "second", web_search=True)

    assert surface.calls.count("toggle") == 1
    assert surface.web_search is True


def test_toggle_switches_off_when_not_requested() -> None:
    surface = RecordingSurface(web_search=True)

    PromptSubmitter().submit(surface, "hi", web_search=False)

    assert surface.calls.count("toggle") == 1
    assert surface.web_search is False


def test_missing_toggle_is_a_no_op() -> None:
    surface = RecordingSurface(web_search=None)

    PromptSubmitter().submit(surface, "hi", web_search=True)

    assert "toggle" not in surface.calls
    assert surface.calls[-1] == "submit"


def test_unreadable_toggle_is_treated_as_missing() -> None:
    surface = RecordingSurface(web_search=False)
    surface.fail_on.add("read_toggle")

    PromptSubmitter().submit(surface, "hi", web_search=True)

    assert "toggle" not in surface.calls
    assert surface.calls[-1] == "submit"


def test_failed_toggle_click_aborts_submission() -> None:
    surface = RecordingSurface(web_search=False)
    surface.fail_on.add("toggle")

    with pytest.raises(SubmissionError):
        PromptSubmitter().submit(surface, "hi", web_search=True)

    assert "write" not in surface.calls


@pytest.mark.parametrize("step", ["clear", "write", "submit"])
def test_failed_step_raises_submission_error(step: str) -> None:
    surface = RecordingSurface()
    surface.fail_on.add(step)

    with pytest.raises(SubmissionError) as exc_info:
        PromptSubmitter().submit(surface, "hi", web_search=False)

    assert isinstance(exc_info.value.__cause__, BrowserActionError)
    assert surface.calls[-1] == step
