from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Callable, Iterator, Sequence

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent
for extra in (TESTS_DIR, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import (  # noqa: E402
    QuizServer,
    RecordingView,
    make_payload,
    make_question,
)
from study_exam.exam.models import QuizRequest, QuizSet  # noqa: E402


@pytest.fixture(autouse=True)
def _isolated_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[None]:
    """Point the workspace at tmp and drop any STUDY_EXAM_* settings."""

    for key in list(os.environ):
        if key.startswith("STUDY_EXAM_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("STUDY_EXAM_HOME", str(tmp_path / "workspace"))
    yield
    logger = logging.getLogger("study_exam")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True


@pytest.fixture
def recording_view() -> RecordingView:
    return RecordingView()


@pytest.fixture
def quiz_server() -> QuizServer:
    return QuizServer()


@pytest.fixture
def make_quiz() -> Callable[..., QuizSet]:
    """Build a validated ``QuizSet`` from a list of correct indexes."""

    def _make(
        correct_indexes: Sequence[int] = (1, 2),
        *,
        explanation: str = "Because.",
    ) -> QuizSet:
        questions = [
            make_question(
                f"q{position + 1}",
                stem=f"Question {position + 1}?",
                choices=[f"choice {n}" for n in range(4)],
                correct_index=correct,
                explanation=explanation,
            )
            for position, correct in enumerate(correct_indexes)
        ]
        return QuizSet.model_validate(make_payload(questions))

    return _make


@pytest.fixture
def cs_request() -> QuizRequest:
    return QuizRequest(
        topic="CS", difficulty="easy", count=2, language="English"
    )


@pytest.fixture
def arabic_request() -> QuizRequest:
    return QuizRequest(
        topic="CS", difficulty="easy", count=2, language="Arabic"
    )
