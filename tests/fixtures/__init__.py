"""Shared testing fixtures and doubles for the study-exam test suite."""

from .fetchers import GatedFetcher, StubFetcher  # noqa: F401
from .server import (  # noqa: F401
    ENDPOINT,
    QuizServer,
    make_payload,
    make_question,
)
from .views import RecordingView  # noqa: F401

__all__ = [
    "ENDPOINT",
    "GatedFetcher",
    "QuizServer",
    "RecordingView",
    "StubFetcher",
    "make_payload",
    "make_question",
]
