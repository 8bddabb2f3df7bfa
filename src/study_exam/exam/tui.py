from __future__ import annotations

from typing import Sequence

from textual.app import App, ComposeResult
from textual.containers import Container, Vertical
from textual.widgets import Button, Static

from .controller import Fetcher, QuizSessionController
from .models import CHOICE_COUNT, QuizRequest
from .view import Verdict

CHOICE_KEYS = "ABCD"

_TEXT_WIDGETS = ("#stem", "#explanation")


class ExamApp(App):
    """Textual front-end that renders controller notifications."""

    CSS = """
#stem { padding: 1 2; text-style: bold; }
#choices Button { width: 100%; margin: 0 2; }
#explanation { padding: 1 2; }
#progress { color: $text-muted; padding: 0 2; }
#footer { height: auto; padding: 1 2; }
"""
    BINDINGS = [
        ("1", "select(0)", "A"),
        ("2", "select(1)", "B"),
        ("3", "select(2)", "C"),
        ("4", "select(3)", "D"),
        ("a", "select(0)", "A"),
        ("b", "select(1)", "B"),
        ("c", "select(2)", "C"),
        ("d", "select(3)", "D"),
        ("n", "next", "Next"),
        ("s", "submit", "Submit"),
        ("q", "quit", "Quit"),
    ]

    def __init__(self, request: QuizRequest, fetcher: Fetcher) -> None:
        super().__init__()
        self._exam_request = request
        self.controller = QuizSessionController(self, fetcher)
        self.choices_enabled = False
        self.controls_visible = False

    def compose(self) -> ComposeResult:
        yield Static("", id="stem")
        with Vertical(id="choices"):
            for position, key in enumerate(CHOICE_KEYS):
                yield Button(f"{key})", id=f"choice-{position}", disabled=True)
        yield Static("", id="explanation")
        yield Static("", id="progress")
        with Container(id="footer"):
            yield Button("Next", id="next")
            yield Button("Submit", id="submit")

    def on_mount(self) -> None:
        self.run_worker(
            self.controller.start(self._exam_request),
            name="fetch-questions",
            exclusive=True,
        )

    def on_unmount(self) -> None:
        self.controller.close()

    # ExamView notifications

    def on_loading(self) -> None:
        self._set_text("#stem", "Loading questions…")
        self._set_text("#explanation", "")
        self._show_controls(False)

    def on_error(self, message: str) -> None:
        self._set_text("#stem", "")
        self._set_text("#explanation", message)
        self._set_choices_enabled(False)
        self._show_controls(False)

    def on_question(
        self,
        stem: str,
        choices: Sequence[str],
        index: int,
        total: int,
        rtl: bool,
    ) -> None:
        self._set_text("#stem", f"Q{index + 1}: {stem}")
        self._set_text("#explanation", "")
        self._set_text("#progress", f"{index + 1}/{total}")
        for position, text in enumerate(choices):
            button = self._find(f"#choice-{position}", Button)
            if button is not None:
                button.label = f"{CHOICE_KEYS[position]}) {text}"
        self._set_alignment("right" if rtl else "left")
        self._set_choices_enabled(True)
        self._show_controls(True)

    def on_answered(self, verdict: Verdict, explanation: str) -> None:
        prefix = "Correct!" if verdict == "correct" else "Incorrect."
        self._set_text("#explanation", f"{prefix} {explanation}".strip())
        self._set_choices_enabled(False)

    def on_completed(self, score: int, total: int) -> None:
        self._set_text("#stem", "Exam Complete!")
        self._set_text("#explanation", f"Your score: {score}/{total}")
        self._set_choices_enabled(False)
        self._show_controls(False)

    # User commands

    def action_select(self, index: int) -> None:
        self.controller.select_answer(int(index))

    def action_next(self) -> None:
        self.controller.advance()

    def action_submit(self) -> None:
        self.controller.submit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = getattr(event.button, "id", "") or ""
        if bid.startswith("choice-"):
            suffix = bid.rsplit("-", 1)[-1]
            if suffix.isdigit():
                self.action_select(int(suffix))
        elif bid == "next":
            self.action_next()
        elif bid == "submit":
            self.action_submit()

    # Widget helpers; lookups fail quietly before the DOM is mounted

    def _find(self, selector: str, expect_type):
        try:
            return self.query_one(selector, expect_type)
        except Exception:
            return None

    def _set_text(self, selector: str, text: str) -> None:
        widget = self._find(selector, Static)
        if widget is not None:
            widget.update(text)

    def _set_choices_enabled(self, enabled: bool) -> None:
        self.choices_enabled = enabled
        for position in range(CHOICE_COUNT):
            button = self._find(f"#choice-{position}", Button)
            if button is not None:
                button.disabled = not enabled

    def _show_controls(self, visible: bool) -> None:
        self.controls_visible = visible
        for selector, kind in (
            ("#choices", Vertical),
            ("#next", Button),
            ("#submit", Button),
        ):
            widget = self._find(selector, kind)
            if widget is not None:
                widget.display = visible

    def _set_alignment(self, align: str) -> None:
        for selector in _TEXT_WIDGETS:
            widget = self._find(selector, Static)
            if widget is not None:
                widget.styles.text_align = align
        for position in range(CHOICE_COUNT):
            button = self._find(f"#choice-{position}", Button)
            if button is not None:
                button.styles.text_align = align
