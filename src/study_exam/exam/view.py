"""Notification contract between the session controller and a view.

The controller calls exactly one of these methods per state transition. A
view keeps no session data of its own beyond what the last notification
pushed to it.
"""

from __future__ import annotations

from typing import Literal, Protocol, Sequence, runtime_checkable

Verdict = Literal["correct", "incorrect"]

REQUIRED_CALLBACKS: tuple[str, ...] = (
    "on_loading",
    "on_error",
    "on_question",
    "on_answered",
    "on_completed",
)


@runtime_checkable
class ExamView(Protocol):
    def on_loading(self) -> None:
        """The question set is being fetched."""

    def on_error(self, message: str) -> None:
        """Loading failed; show ``message`` and leave nothing interactive."""

    def on_question(
        self,
        stem: str,
        choices: Sequence[str],
        index: int,
        total: int,
        rtl: bool,
    ) -> None:
        """Show question ``index`` (0-based) of ``total``.

        Clears any previous explanation and re-enables choice input. ``rtl``
        asks the view to lay text out right-to-left.
        """

    def on_answered(self, verdict: Verdict, explanation: str) -> None:
        """Show the verdict and explanation; disable choices until next."""

    def on_completed(self, score: int, total: int) -> None:
        """Show the final score and hide choices and next/submit controls."""


def missing_callbacks(view: object) -> list[str]:
    """Return the notification methods ``view`` does not provide."""

    if view is None:
        return list(REQUIRED_CALLBACKS)
    return [
        name
        for name in REQUIRED_CALLBACKS
        if not callable(getattr(view, name, None))
    ]
