"""Fake quiz generator built on ``httpx.MockTransport``.

``QuizServer`` records every request it receives and answers with a queued
body/status, so fetcher tests exercise the real httpx client stack without
opening sockets.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import httpx

ENDPOINT = "http://quiz.test/generate-quiz"


def make_question(
    qid: str = "q1",
    *,
    stem: str = "What does CPU stand for?",
    choices: Optional[Sequence[str]] = None,
    correct_index: int = 0,
    explanation: str = "Central Processing Unit.",
) -> Dict[str, Any]:
    return {
        "id": qid,
        "stem": stem,
        "choices": list(
            choices
            if choices is not None
            else ["Central Processing Unit", "Core Power Unit", "Cache", "Clock"]
        ),
        "correctIndex": correct_index,
        "explanation": explanation,
    }


def make_payload(
    questions: Sequence[Dict[str, Any]],
    *,
    topic: str = "CS",
    difficulty: str = "easy",
) -> Dict[str, Any]:
    return {
        "topic": topic,
        "difficulty": difficulty,
        "questions": list(questions),
    }


@dataclass
class QuizServer:
    """Callable MockTransport handler with canned responses."""

    body: str = ""
    status_code: int = 200
    error: Optional[Exception] = None
    requests: List[httpx.Request] = field(default_factory=list)

    def respond_json(self, payload: Any, status_code: int = 200) -> None:
        self.body = json.dumps(payload)
        self.status_code = status_code

    def respond_text(self, body: str, status_code: int = 200) -> None:
        self.body = body
        self.status_code = status_code

    def fail_with(self, error: Exception) -> None:
        self.error = error

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(
            self.status_code,
            content=self.body.encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def last_json(self) -> Dict[str, Any]:
        return json.loads(self.requests[-1].content)
