"""Wire and session models for generated exams.

``QuizRequest`` is what we send to the generator, ``QuizSet`` and
``Question`` are what it sends back. All three are validated pydantic models
and frozen once built, so a ``QuizSet`` that exists is always renderable:
it has at least one question and every question has exactly four choices.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

CHOICE_COUNT = 4

# Matched against the lowercased language name or its primary ISO tag.
RTL_LANGUAGES = frozenset(
    {
        "arabic",
        "hebrew",
        "persian",
        "farsi",
        "urdu",
        "ar",
        "he",
        "iw",
        "fa",
        "ur",
    }
)


class Difficulty(str, Enum):
    """Difficulty levels understood by the generator."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Question(BaseModel):
    """One multiple-choice item."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    stem: str
    choices: tuple[str, ...]
    correct_index: int = Field(alias="correctIndex", ge=0, le=CHOICE_COUNT - 1)
    explanation: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("explanation", mode="before")
    @classmethod
    def _default_explanation(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("choices")
    @classmethod
    def _exactly_four_choices(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if len(value) != CHOICE_COUNT:
            raise ValueError(
                f"expected exactly {CHOICE_COUNT} choices, got {len(value)}"
            )
        return value

    def is_correct(self, choice_index: int) -> bool:
        return choice_index == self.correct_index


class QuizSet(BaseModel):
    """A generated question set; owned by the session that fetched it."""

    model_config = ConfigDict(frozen=True)

    topic: str = ""
    difficulty: str = ""
    questions: tuple[Question, ...]

    @field_validator("questions")
    @classmethod
    def _not_empty(cls, value: tuple[Question, ...]) -> tuple[Question, ...]:
        if not value:
            raise ValueError("question set is empty")
        return value

    def __len__(self) -> int:
        return len(self.questions)


class QuizRequest(BaseModel):
    """Session configuration sent to the generator."""

    model_config = ConfigDict(frozen=True)

    topic: str = Field(min_length=1)
    difficulty: Difficulty = Difficulty.MEDIUM
    count: int = Field(default=5, gt=0)
    language: str = Field(default="English", min_length=1)

    @field_validator("topic", "language")
    @classmethod
    def _strip(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must be a non-empty string")
        return stripped

    @property
    def is_rtl(self) -> bool:
        return is_rtl_language(self.language)

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body for the generation request."""

        return {
            "topic": self.topic,
            "difficulty": self.difficulty.value,
            "count": self.count,
            "language": self.language,
        }


def is_rtl_language(language: str) -> bool:
    """Return True when ``language`` is written right-to-left.

    Accepts names (``"Arabic"``) and locale tags (``"ar"``, ``"ar-SA"``,
    ``"fa_IR"``).
    """

    normalized = language.strip().lower()
    if normalized in RTL_LANGUAGES:
        return True
    primary = normalized.replace("_", "-").split("-", 1)[0]
    return primary in RTL_LANGUAGES
