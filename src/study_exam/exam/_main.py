import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv
from rich.console import Console

from ..core import WorkspaceError, configure_logger, ensure_workspace
from .config import (
    CONFIG_FILENAME,
    ConfigOverrides,
    ExamConfigError,
    load_config,
    write_template,
)
from .controller import Phase
from .console import run_console_exam
from .fetcher import QuestionSetFetcher
from .models import Difficulty

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2
EXIT_QUIT = 130


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="study-exam exam",
        description="Fetch a generated exam and run it interactively.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    p.add_argument("--config", type=Path, help="Path to an exam.toml file")
    p.add_argument("--workspace", type=Path, help="Workspace root override")
    p.add_argument("--topic")
    p.add_argument(
        "--difficulty", choices=[level.value for level in Difficulty]
    )
    p.add_argument("--count", type=int)
    p.add_argument("--language")
    p.add_argument("--endpoint", help="Quiz generator URL")
    p.add_argument("--timeout", type=float, help="Request timeout in seconds")
    p.add_argument("--log-level")
    p.add_argument("--verbose", action="store_true", default=None)
    p.add_argument(
        "--tui", action="store_true", help="Use the Textual interface"
    )
    return p


def _build_init_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="study-exam init",
        description="Create the workspace and an exam.toml template.",
    )
    p.add_argument("--workspace", type=Path, help="Workspace root override")
    p.add_argument(
        "--force", action="store_true", help="Overwrite an existing config"
    )
    return p


def init_main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_init_parser().parse_args(argv)
    try:
        layout = ensure_workspace(path=args.workspace)
    except WorkspaceError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return EXIT_FAILED
    target = layout.path_for("config") / CONFIG_FILENAME
    try:
        write_template(target, overwrite=args.force)
    except ExamConfigError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return EXIT_FAILED
    print(f"Workspace ready at {layout.home}")
    print(f"Wrote exam config to {target}")
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    load_dotenv()

    overrides = ConfigOverrides(
        topic=args.topic,
        difficulty=args.difficulty,
        count=args.count,
        language=args.language,
        endpoint=args.endpoint,
        timeout_seconds=args.timeout,
        log_level=args.log_level,
        verbose=args.verbose,
    )
    try:
        loaded = load_config(
            config_path=args.config,
            overrides=overrides,
            workspace_path=args.workspace,
        )
    except ExamConfigError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return EXIT_USAGE

    config = loaded.config
    logger, log_path = configure_logger(
        "study_exam",
        log_dir=loaded.layout.path_for("logs"),
        level=config.log_level,
        verbose=config.verbose,
    )
    logger.debug(
        "exam CLI invoked",
        extra={
            "config_path": loaded.config_path,
            "endpoint": config.endpoint,
            "tui": args.tui,
        },
    )

    fetcher = QuestionSetFetcher(
        config.endpoint, timeout=config.timeout_seconds
    )
    if args.tui:
        return _run_tui(config.request, fetcher)

    console = Console()
    result = run_console_exam(
        config.request,
        fetcher,
        console,
        lambda: console.input("[bold]> [/]"),
    )
    console.print(f"[dim]Log file: {log_path}[/]")
    if result.exit_action == "failed":
        return EXIT_FAILED
    if result.exit_action == "quit":
        return EXIT_QUIT
    return EXIT_OK


def _run_tui(request, fetcher) -> int:
    # Textual is only imported when the TUI is requested.
    from .tui import ExamApp

    app = ExamApp(request, fetcher)
    app.run()
    phase = app.controller.phase
    if phase is Phase.FAILED:
        return EXIT_FAILED
    if phase is Phase.COMPLETED:
        return EXIT_OK
    return EXIT_QUIT


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
