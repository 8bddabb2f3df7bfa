"""Rich-powered console view and command loop for exam sessions.

``ConsoleExamView`` renders controller notifications with Rich and
``run_console_exam`` feeds line-based user commands back into a
:class:`~study_exam.exam.controller.QuizSessionController`. Input comes from
an injectable provider so the loop is testable without a terminal.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, Literal, Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .controller import (
    ExamSummary,
    Fetcher,
    Phase,
    QuestionResponse,
    QuizSessionController,
)
from .models import CHOICE_COUNT, QuizRequest
from .view import Verdict

InputProvider = Callable[[], str]
ExitAction = Literal["completed", "submitted", "quit", "failed"]

CHOICE_KEYS = "ABCD"


@dataclass(frozen=True)
class ExamCommand:
    """Normalized user command parsed from console input."""

    type: Literal["select", "next", "submit", "quit"]
    choice: int | None = None


@dataclass(frozen=True)
class ExamSessionResult:
    """Return value from ``run_console_exam``."""

    summary: ExamSummary
    responses: tuple[QuestionResponse, ...]
    exit_action: ExitAction


class ConsoleExamView:
    """Render exam notifications to a Rich console."""

    def __init__(self, console: Console) -> None:
        self.console = console
        self.choices_enabled = False
        self.controls_visible = False
        self.rtl = False
        self.last_error: str | None = None

    def _justify(self) -> str:
        return "right" if self.rtl else "left"

    def on_loading(self) -> None:
        self.controls_visible = False
        self.console.print(Text("Loading questions…", style="dim"))

    def on_error(self, message: str) -> None:
        self.last_error = message
        self.choices_enabled = False
        self.controls_visible = False
        self.console.print(
            Panel(message, title="Exam", border_style="red")
        )

    def on_question(
        self,
        stem: str,
        choices: Sequence[str],
        index: int,
        total: int,
        rtl: bool,
    ) -> None:
        self.rtl = rtl
        self.choices_enabled = True
        self.controls_visible = True
        header = Text.assemble(
            (f"Question {index + 1}", "bold cyan"),
            (f" / {total}", "dim"),
        )
        self.console.print()
        self.console.rule(header)
        self.console.print(
            Text(f"Q{index + 1}: {stem}", style="bold"),
            justify=self._justify(),
        )

        table = Table(show_header=False, box=box.SIMPLE, expand=True)
        table.add_column("Key", justify="center", style="cyan")
        table.add_column("Choice", justify=self._justify())
        for key, text in zip(CHOICE_KEYS, choices):
            table.add_row(key, Text(text))
        self.console.print(table)
        self.console.print(
            Text(
                "Commands: A-D or 1-4 (answer), n (next), submit, quit",
                style="dim",
            )
        )

    def on_answered(self, verdict: Verdict, explanation: str) -> None:
        self.choices_enabled = False
        if verdict == "correct":
            message, border = f"Correct! {explanation}", "green"
        else:
            message, border = f"Incorrect. {explanation}", "red"
        self.console.print(
            Panel(
                Text(message.strip(), justify=self._justify()),
                border_style=border,
            )
        )

    def on_completed(self, score: int, total: int) -> None:
        self.choices_enabled = False
        self.controls_visible = False
        self.console.print()
        self.console.rule(Text("Exam Complete!", style="bold magenta"))
        self.console.print(
            Text(f"Your score: {score}/{total}", style="bold"),
            justify=self._justify(),
        )


def parse_exam_command(raw: str | None) -> ExamCommand | None:
    """Parse raw user input into a structured command."""

    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    lowered = text.lower()
    if lowered in {"n", "next"}:
        return ExamCommand("next")
    if lowered in {"s", "submit"}:
        return ExamCommand("submit")
    if lowered in {"q", "quit", "exit"}:
        return ExamCommand("quit")
    if len(text) == 1:
        key = text.upper()
        if key in CHOICE_KEYS:
            return ExamCommand("select", CHOICE_KEYS.index(key))
        if key.isdigit() and 1 <= int(key) <= CHOICE_COUNT:
            return ExamCommand("select", int(key) - 1)
    return None


def run_console_exam(
    request: QuizRequest,
    fetcher: Fetcher,
    console: Console,
    input_provider: InputProvider,
    *,
    show_summary: bool = True,
) -> ExamSessionResult:
    """Fetch an exam for ``request`` and run it interactively."""

    view = ConsoleExamView(console)
    controller = QuizSessionController(view, fetcher)
    asyncio.run(controller.start(request))

    if controller.phase is Phase.FAILED:
        return _result(controller, "failed")

    exit_action: ExitAction = "completed"
    while controller.phase in (Phase.ACTIVE, Phase.ANSWER_LOCKED):
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Session interrupted.[/]")
            exit_action = "quit"
            break
        command = parse_exam_command(raw)
        if command is None:
            console.print("[red]Unrecognized command. Try again.[/]")
            continue
        if command.type == "quit":
            console.print("\n[bold yellow]Ending exam without a score.[/]")
            exit_action = "quit"
            break
        if command.type == "submit":
            controller.submit()
            exit_action = "submitted"
        elif command.type == "next":
            controller.advance()
        elif command.choice is not None:
            if not controller.select_answer(command.choice):
                console.print(
                    "[red]Already answered. Press n for the next question.[/]"
                )

    controller.close()
    result = _result(controller, exit_action)
    if show_summary and exit_action != "quit":
        render_summary(console, result)
    return result


def _result(
    controller: QuizSessionController, exit_action: ExitAction
) -> ExamSessionResult:
    return ExamSessionResult(
        summary=controller.summary(),
        responses=controller.responses,
        exit_action=exit_action,
    )


def render_summary(console: Console, result: ExamSessionResult) -> None:
    """Print the score overview and a per-question breakdown."""

    summary = result.summary
    overview = Table(
        show_header=False,
        box=box.MINIMAL_DOUBLE_HEAD,
        expand=False,
    )
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("Total questions", str(summary.total))
    overview.add_row("Answered", str(summary.answered))
    overview.add_row("Skipped", str(summary.skipped))
    overview.add_row("Correct", str(summary.score))
    overview.add_row("Accuracy", f"{summary.accuracy * 100:.1f}%")
    console.print(overview)

    if not result.responses:
        return
    table = Table(title="Responses", box=box.SIMPLE, expand=True)
    table.add_column("#", justify="right")
    table.add_column("Question", overflow="fold")
    table.add_column("Your answer")
    table.add_column("Correct answer")
    table.add_column("Result", justify="center")
    for number, response in enumerate(result.responses, start=1):
        yours = (
            "-" if response.selected is None else CHOICE_KEYS[response.selected]
        )
        if response.skipped:
            outcome = "skipped"
        else:
            outcome = "✅" if response.is_correct else "❌"
        table.add_row(
            str(number),
            response.stem or f"Question {number}",
            yours,
            CHOICE_KEYS[response.correct_index],
            outcome,
        )
    console.print(table)
