"""Fetch a generated question set from the remote quiz service."""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from .models import QuizRequest, QuizSet

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class FetchError(RuntimeError):
    """Base class for question set fetch failures."""

    user_message = "Failed to load questions. Check server."


class TransportError(FetchError):
    """The request failed or the service answered with a non-2xx status."""


class EmptyOrMalformedError(FetchError):
    """The response body was not a usable question set."""

    user_message = "No questions available."

    def __init__(self, message: str, raw_body: str = "") -> None:
        super().__init__(message)
        self.raw_body = raw_body


class QuestionSetFetcher:
    """Issue one POST per ``fetch`` call and validate the response.

    There is no retry: a failed attempt raises a :class:`FetchError` and
    the caller decides what to do next.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: float | None = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not endpoint:
            raise ValueError("endpoint must be provided")
        self.endpoint = endpoint
        self.timeout = timeout
        self._transport = transport

    async def fetch(self, request: QuizRequest) -> QuizSet:
        payload = request.to_payload()
        logger.info(
            "Requesting question set",
            extra={"endpoint": self.endpoint, "payload": payload},
        )
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self.endpoint,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.error(
                "Question service returned an error status",
                extra={"endpoint": self.endpoint, "status": status},
            )
            raise TransportError(
                f"HTTP {status} from {self.endpoint}"
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.error(
                "Question service request failed",
                extra={"endpoint": self.endpoint, "error": str(exc)},
            )
            raise TransportError(str(exc) or type(exc).__name__) from exc

        body = response.text
        quiz = parse_quiz_set(body)
        logger.info(
            "Received question set",
            extra={"topic": quiz.topic, "question_count": len(quiz)},
        )
        return quiz


def parse_quiz_set(body: str) -> QuizSet:
    """Validate a raw response body into a :class:`QuizSet`."""

    try:
        return QuizSet.model_validate_json(body)
    except ValidationError as exc:
        logger.error(
            "Rejected question set",
            extra={"errors": exc.error_count(), "body": body[:2000]},
        )
        raise EmptyOrMalformedError(
            f"Malformed or empty question set: {exc.errors()[0]['msg']}",
            raw_body=body,
        ) from exc


async def fetch_question_set(
    request: QuizRequest,
    endpoint: str,
    *,
    timeout: float | None = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> QuizSet:
    """One-shot helper around :class:`QuestionSetFetcher`."""

    fetcher = QuestionSetFetcher(endpoint, timeout=timeout, transport=transport)
    return await fetcher.fetch(request)
