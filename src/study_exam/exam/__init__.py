from ._main import build_arg_parser
from .config import (
    ConfigOverrides,
    ExamConfig,
    ExamConfigError,
    LoadResult,
    load_config,
)
from .console import (
    ConsoleExamView,
    ExamCommand,
    ExamSessionResult,
    parse_exam_command,
    run_console_exam,
)
from .controller import (
    ConfigurationError,
    ExamSummary,
    InvalidOperationError,
    Phase,
    QuestionResponse,
    QuizSessionController,
    SessionState,
)
from .fetcher import (
    EmptyOrMalformedError,
    FetchError,
    QuestionSetFetcher,
    TransportError,
    fetch_question_set,
)
from .models import Difficulty, Question, QuizRequest, QuizSet
from .view import ExamView, Verdict

__all__ = [
    "build_arg_parser",
    "ConfigOverrides",
    "ExamConfig",
    "ExamConfigError",
    "LoadResult",
    "load_config",
    "ConsoleExamView",
    "ExamCommand",
    "ExamSessionResult",
    "parse_exam_command",
    "run_console_exam",
    "ConfigurationError",
    "ExamSummary",
    "InvalidOperationError",
    "Phase",
    "QuestionResponse",
    "QuizSessionController",
    "SessionState",
    "EmptyOrMalformedError",
    "FetchError",
    "QuestionSetFetcher",
    "TransportError",
    "fetch_question_set",
    "Difficulty",
    "Question",
    "QuizRequest",
    "QuizSet",
    "ExamView",
    "Verdict",
]
