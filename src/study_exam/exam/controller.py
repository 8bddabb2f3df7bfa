"""Exam session controller and supporting data structures.

The controller owns all mutable session state and drives a view through the
:mod:`study_exam.exam.view` notifications. Every command is delivered from a
single event loop; the only suspension point is the question set fetch in
:meth:`QuizSessionController.start`.

Phases::

    IDLE -> LOADING -> ACTIVE <-> ANSWER_LOCKED -> COMPLETED
               |
               +-> FAILED
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from .fetcher import EmptyOrMalformedError, FetchError, TransportError
from .models import CHOICE_COUNT, Question, QuizRequest, QuizSet
from .view import ExamView, missing_callbacks

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when the controller is built without its collaborators."""


class InvalidOperationError(RuntimeError):
    """Raised when ``start`` is called from a phase that forbids it."""


class Phase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ACTIVE = "active"
    ANSWER_LOCKED = "answer_locked"
    COMPLETED = "completed"
    FAILED = "failed"


class Fetcher(Protocol):
    async def fetch(self, request: QuizRequest) -> QuizSet: ...


@dataclass(frozen=True)
class QuestionResponse:
    """How the user handled one question; ``selected`` is None when skipped."""

    question_id: str
    stem: str
    selected: int | None
    correct_index: int
    is_correct: bool
    explanation: str = ""

    @property
    def skipped(self) -> bool:
        return self.selected is None


@dataclass(frozen=True)
class ExamSummary:
    """Final tally for a session."""

    score: int
    total: int
    answered: int
    submitted_early: bool = False

    @property
    def skipped(self) -> int:
        return max(self.total - self.answered, 0)

    @property
    def accuracy(self) -> float:
        if self.total == 0:
            return 0.0
        return self.score / self.total


@dataclass
class SessionState:
    """Mutable state of one exam session."""

    phase: Phase = Phase.IDLE
    quiz: QuizSet | None = None
    index: int = 0
    score: int = 0
    selected: int | None = None
    responses: list[QuestionResponse] = field(default_factory=list)
    submitted_early: bool = False

    @property
    def total(self) -> int:
        return len(self.quiz.questions) if self.quiz else 0

    @property
    def current(self) -> Question:
        if self.quiz is None:
            raise LookupError("no question set loaded")
        return self.quiz.questions[self.index]


class QuizSessionController:
    """Drive one exam from fetch to final score."""

    def __init__(self, view: ExamView, fetcher: Fetcher) -> None:
        missing = missing_callbacks(view)
        if missing:
            raise ConfigurationError(
                "View is missing required callbacks: " + ", ".join(missing)
            )
        if fetcher is None or not callable(getattr(fetcher, "fetch", None)):
            raise ConfigurationError("A question set fetcher is required.")
        self._view = view
        self._fetcher = fetcher
        self._state = SessionState()
        self._request: QuizRequest | None = None
        self._fetch_task: asyncio.Future[QuizSet] | None = None
        self._closed = False

    # Read-only views of the session state

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def index(self) -> int:
        return self._state.index

    @property
    def score(self) -> int:
        return self._state.score

    @property
    def total(self) -> int:
        return self._state.total

    @property
    def request(self) -> QuizRequest | None:
        return self._request

    @property
    def responses(self) -> tuple[QuestionResponse, ...]:
        return tuple(self._state.responses)

    @property
    def closed(self) -> bool:
        return self._closed

    def summary(self) -> ExamSummary:
        answered = sum(1 for r in self._state.responses if not r.skipped)
        return ExamSummary(
            score=self._state.score,
            total=self._state.total,
            answered=answered,
            submitted_early=self._state.submitted_early,
        )

    # Commands

    async def start(self, request: QuizRequest) -> None:
        """Fetch a question set for ``request`` and show the first question."""

        if self._closed:
            raise InvalidOperationError("Controller has been closed.")
        if self._state.phase not in (Phase.IDLE, Phase.FAILED):
            raise InvalidOperationError(
                f"Cannot start a session while {self._state.phase.value}."
            )

        self._request = request
        self._state = SessionState(phase=Phase.LOADING)
        logger.info(
            "Session loading",
            extra={"topic": request.topic, "count": request.count},
        )
        self._view.on_loading()

        self._fetch_task = asyncio.ensure_future(self._fetcher.fetch(request))
        try:
            quiz = await self._fetch_task
        except asyncio.CancelledError:
            if self._closed:
                logger.info("Fetch cancelled after teardown")
                return
            self._state = SessionState()
            raise
        except FetchError as exc:
            if self._closed:
                logger.info("Discarding fetch failure after teardown")
                return
            self._fail(exc)
            return
        except Exception as exc:
            if self._closed:
                logger.info("Discarding fetch failure after teardown")
                return
            logger.exception("Unexpected error while fetching question set")
            self._fail(
                TransportError(f"{type(exc).__name__}: {exc}")
            )
            return
        finally:
            self._fetch_task = None

        if self._closed:
            logger.info("Discarding question set received after teardown")
            return

        problem = _find_problem(quiz)
        if problem:
            self._fail(EmptyOrMalformedError(problem))
            return

        self._state.quiz = quiz
        self._state.index = 0
        self._state.score = 0
        logger.info(
            "Session active",
            extra={"question_count": len(quiz.questions)},
        )
        self._render(0)

    def select_answer(self, choice_index: int) -> bool:
        """Record the answer for the current question.

        Returns False (and changes nothing) unless a question is showing and
        still unanswered.
        """

        state = self._state
        if self._closed or state.phase is not Phase.ACTIVE:
            logger.debug(
                "Ignoring answer selection",
                extra={"phase": state.phase, "choice": choice_index},
            )
            return False
        if (
            isinstance(choice_index, bool)
            or not isinstance(choice_index, int)
            or not 0 <= choice_index < CHOICE_COUNT
        ):
            logger.warning(
                "Ignoring out-of-range choice", extra={"choice": choice_index}
            )
            return False

        question = state.current
        correct = question.is_correct(choice_index)
        state.selected = choice_index
        if correct:
            state.score += 1
        state.responses.append(
            QuestionResponse(
                question_id=question.id,
                stem=question.stem,
                selected=choice_index,
                correct_index=question.correct_index,
                is_correct=correct,
                explanation=question.explanation,
            )
        )
        state.phase = Phase.ANSWER_LOCKED
        logger.debug(
            "Answer recorded",
            extra={
                "index": state.index,
                "choice": choice_index,
                "correct": correct,
                "score": state.score,
            },
        )
        self._view.on_answered(
            "correct" if correct else "incorrect", question.explanation
        )
        return True

    def advance(self) -> bool:
        """Move to the next question, skipping the current one if unanswered."""

        state = self._state
        if self._closed or state.phase not in (
            Phase.ACTIVE,
            Phase.ANSWER_LOCKED,
        ):
            logger.debug("Ignoring advance", extra={"phase": state.phase})
            return False
        if state.phase is Phase.ACTIVE:
            question = state.current
            state.responses.append(
                QuestionResponse(
                    question_id=question.id,
                    stem=question.stem,
                    selected=None,
                    correct_index=question.correct_index,
                    is_correct=False,
                    explanation=question.explanation,
                )
            )
        state.index += 1
        self._render(state.index)
        return True

    def submit(self) -> bool:
        """End the exam now, keeping the current score and position."""

        state = self._state
        if self._closed or state.phase not in (
            Phase.ACTIVE,
            Phase.ANSWER_LOCKED,
        ):
            logger.debug("Ignoring submit", extra={"phase": state.phase})
            return False
        state.submitted_early = True
        self._complete()
        return True

    def close(self) -> None:
        """Tear the session down; nothing reaches the view afterwards."""

        if self._closed:
            return
        self._closed = True
        task = self._fetch_task
        if task is not None and not task.done():
            task.cancel()
        logger.debug("Controller closed", extra={"phase": self._state.phase})

    # Internal transitions

    def _render(self, index: int) -> None:
        state = self._state
        if index >= state.total:
            self._complete()
            return
        question = state.current
        state.selected = None
        state.phase = Phase.ACTIVE
        rtl = bool(self._request and self._request.is_rtl)
        self._view.on_question(
            question.stem,
            list(question.choices),
            index,
            state.total,
            rtl,
        )

    def _complete(self) -> None:
        state = self._state
        state.phase = Phase.COMPLETED
        logger.info(
            "Session completed",
            extra={
                "score": state.score,
                "total": state.total,
                "index": state.index,
                "submitted_early": state.submitted_early,
            },
        )
        self._view.on_completed(state.score, state.total)

    def _fail(self, exc: FetchError) -> None:
        self._state.phase = Phase.FAILED
        logger.warning(
            "Session failed to load",
            extra={"error": str(exc), "kind": type(exc).__name__},
        )
        self._view.on_error(exc.user_message)


def _find_problem(quiz: QuizSet | None) -> str | None:
    # Fetchers other than QuestionSetFetcher may hand back unvalidated sets.
    if quiz is None or not quiz.questions:
        return "question set is empty"
    for position, question in enumerate(quiz.questions):
        if len(question.choices) != CHOICE_COUNT:
            return (
                f"question {position} has {len(question.choices)} choices, "
                f"expected {CHOICE_COUNT}"
            )
        if not 0 <= question.correct_index < CHOICE_COUNT:
            return f"question {position} has an invalid correct index"
    return None
