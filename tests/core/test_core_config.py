from __future__ import annotations

import stat

import pytest

from study_exam.core import config as core_config


def test_load_toml_parses_tables(tmp_path):
    path = tmp_path / "settings.toml"
    path.write_text('[exam]\ntopic = "CS"\ncount = 3\n', encoding="utf-8")

    assert core_config.load_toml(path) == {"exam": {"topic": "CS", "count": 3}}


def test_load_toml_errors(tmp_path):
    with pytest.raises(core_config.TomlConfigError, match="not found"):
        core_config.load_toml(tmp_path / "missing.toml")

    broken = tmp_path / "broken.toml"
    broken.write_text("[exam\n", encoding="utf-8")
    with pytest.raises(core_config.TomlConfigError, match="Invalid TOML"):
        core_config.load_toml(broken)


def test_merge_defaults_overrides_nested_values():
    defaults = {"exam": {"topic": "CS", "count": 5}, "flag": False}

    merged = core_config.merge_defaults(
        defaults, {"exam": {"count": 2}, "flag": True}
    )

    assert merged == {"exam": {"topic": "CS", "count": 2}, "flag": True}
    assert defaults["exam"]["count"] == 5


def test_merge_defaults_rejects_unknown_and_mistyped_keys():
    defaults = {"exam": {"topic": "CS"}}

    with pytest.raises(core_config.TomlConfigError, match="'exam.subject'"):
        core_config.merge_defaults(defaults, {"exam": {"subject": "x"}})
    with pytest.raises(core_config.TomlConfigError, match="'server'"):
        core_config.merge_defaults(defaults, {"server": {}})
    with pytest.raises(core_config.TomlConfigError, match="Expected table"):
        core_config.merge_defaults(defaults, {"exam": "CS"})


def test_write_toml_template(tmp_path):
    target = tmp_path / "nested" / "exam.toml"

    written = core_config.write_toml_template(target, template="[exam]\n")

    assert written == target
    assert target.read_text(encoding="utf-8") == "[exam]\n"
    assert stat.S_IMODE(target.stat().st_mode) == 0o600

    with pytest.raises(core_config.TomlConfigError, match="already exists"):
        core_config.write_toml_template(target, template="[other]\n")

    core_config.write_toml_template(target, template="[other]\n", overwrite=True)
    assert target.read_text(encoding="utf-8") == "[other]\n"
