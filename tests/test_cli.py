import types
from pathlib import Path

import pytest

from study_exam import cli


@pytest.fixture(autouse=True)
def reset_metadata(monkeypatch):
    """Ensure metadata.version is controllable during tests."""

    def fake_version(name: str) -> str:
        assert name == "study-exam"
        return "0.0-test"

    monkeypatch.setattr(cli.metadata, "version", fake_version)
    yield


def test_version_command_handles_missing_package(monkeypatch, capsys):
    monkeypatch.setattr(
        cli.metadata,
        "version",
        lambda name: (_ for _ in ()).throw(cli.metadata.PackageNotFoundError()),
    )
    code = cli.main(["version"])
    captured = capsys.readouterr()
    assert code == 0
    assert captured.out.strip() == "unknown"


def test_no_args_prints_usage_and_returns_error(capsys):
    code = cli.main([])
    captured = capsys.readouterr()
    assert code == 2
    assert "Usage: study-exam" in captured.out
    assert "Available commands:" in captured.out


def test_help_flag_shows_usage(capsys):
    code = cli.main(["--help"])
    captured = capsys.readouterr()
    assert code == 0
    assert "Usage: study-exam" in captured.out


def test_help_command_without_target(capsys):
    code = cli.main(["help"])
    captured = capsys.readouterr()
    assert code == 0
    assert "Usage: study-exam" in captured.out


def test_list_outputs_command_table(capsys):
    code = cli.main(["list"])
    captured = capsys.readouterr()
    assert code == 0
    assert "Available commands:" in captured.out
    assert "init" in captured.out
    assert "exam" in captured.out
    assert "(TUI)" not in captured.out
    assert "use --tui for Textual" in captured.out


def test_help_known_command(capsys):
    code = cli.main(["help", "exam"])
    captured = capsys.readouterr()
    assert code == 0
    assert "exam:" in captured.out
    assert "Run `study-exam exam --help`" in captured.out


def test_help_unknown_command(capsys):
    code = cli.main(["help", "does-not-exist"])
    captured = capsys.readouterr()
    assert code == 2
    assert "Unknown command" in captured.err
    assert "Available commands:" in captured.err


@pytest.mark.parametrize("flag", ["version", "--version", "-V"])
def test_version_variants(flag, capsys):
    code = cli.main([flag])
    captured = capsys.readouterr()
    assert code == 0
    assert captured.out.strip() == "0.0-test"


def test_unknown_command_errors(capsys):
    code = cli.main(["bogus"])
    captured = capsys.readouterr()
    assert code == 2
    assert "Unknown command" in captured.err
    assert "Available commands:" in captured.err


def _stub_module(handler):
    def fake_import(module_name: str):
        assert module_name == "study_exam.exam._main"
        return types.SimpleNamespace(main=handler, init_main=handler)

    return fake_import


def test_dispatch_invokes_module_main_with_passthrough(monkeypatch):
    captured: dict[str, list[str]] = {}

    def stub_main(argv):
        captured["argv"] = list(argv)
        return 7

    monkeypatch.setattr(cli, "import_module", _stub_module(stub_main))
    code = cli.main(["exam", "--topic", "Graphs"])
    assert code == 7
    assert captured["argv"] == ["--topic", "Graphs"]


def test_dispatch_propagates_system_exit_code(monkeypatch):
    def stub_main(argv):
        raise SystemExit(5)

    monkeypatch.setattr(cli, "import_module", _stub_module(stub_main))
    assert cli.main(["exam"]) == 5


def test_dispatch_handles_system_exit_message(monkeypatch, capsys):
    def stub_main(argv):
        raise SystemExit("boom")

    monkeypatch.setattr(cli, "import_module", _stub_module(stub_main))
    code = cli.main(["init"])
    captured = capsys.readouterr()
    assert code == 1
    assert captured.err.strip() == "boom"


def test_dispatch_treats_system_exit_none_as_success(monkeypatch):
    def stub_main(argv):
        raise SystemExit()

    monkeypatch.setattr(cli, "import_module", _stub_module(stub_main))
    assert cli.main(["exam"]) == 0


def test_dispatch_normalizes_non_int_return(monkeypatch):
    def stub_main(argv):
        return "done"

    monkeypatch.setattr(cli, "import_module", _stub_module(stub_main))
    assert cli.main(["exam"]) == 0


def test_cli_runs_init_end_to_end(tmp_path: Path, capsys):
    target = tmp_path / "workspace"

    code = cli.main(["init", "--workspace", str(target)])

    captured = capsys.readouterr()
    assert code == 0
    assert "Workspace ready" in captured.out
    for entry in ("config", "logs"):
        assert (target / entry).is_dir()
    assert (target / "config" / "exam.toml").exists()


def test_cli_exam_help_exits_cleanly(capsys):
    code = cli.main(["exam", "--help"])
    captured = capsys.readouterr()
    assert code == 0
    assert "--difficulty" in captured.out
