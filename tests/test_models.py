"""Tests for agent metadata, configuration and error formatting."""

import pytest

from cace.agents import AGENTS, Agent, agent_ids, parse_agent
from cace.config import ConversionConfig, load_config
from cace.errors import ERROR_SUGGESTIONS, CaceError, CaceException, ErrorCode, format_error


# --- Agents ---


def test_agent_ids():
    assert agent_ids() == ["claude", "windsurf", "cursor", "gemini", "codex", "opencode", "universal"]
    assert set(AGENTS) == set(Agent)


def test_parse_agent():
    assert parse_agent("Claude ") == Agent.CLAUDE
    assert parse_agent(Agent.CODEX) == Agent.CODEX
    assert parse_agent("vim") is None
    assert parse_agent(None) is None


def test_agent_path_patterns():
    assert AGENTS[Agent.CLAUDE].matches_path(".claude/skills/review/SKILL.md")
    assert AGENTS[Agent.CURSOR].matches_path("repo\\.cursor\\rules\\style.mdc")
    assert not AGENTS[Agent.WINDSURF].matches_path(".claude/commands/x.md")


# --- Config ---


def test_config_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CACE_CONFIG", raising=False)
    config = load_config()
    assert config == ConversionConfig()


def test_config_from_yaml(tmp_path, monkeypatch):
    monkeypatch.delenv("CACE_STRICT", raising=False)
    path = tmp_path / "cace.yaml"
    path.write_text("include_comments: true\nlog_level: debug\ntarget_versions:\n  cursor: 1.7\n")
    config = load_config(path)
    assert config.include_comments
    assert config.log_level == "DEBUG"
    assert config.target_version_for("cursor") == "1.7"
    assert config.target_version_for("claude") is None


def test_config_env_overrides(tmp_path, monkeypatch):
    path = tmp_path / "cace.yaml"
    path.write_text("strict: false\n")
    monkeypatch.setenv("CACE_STRICT", "yes")
    monkeypatch.setenv("CACE_INFER_CAPABILITIES", "0")
    monkeypatch.setenv("CACE_LOG_LEVEL", "info")
    config = load_config(path)
    assert config.strict
    assert not config.infer_capabilities
    assert config.log_level == "INFO"


def test_config_rejects_non_mapping(tmp_path):
    path = tmp_path / "cace.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ValueError):
        load_config(path)


# --- Errors ---


def test_every_error_code_has_a_suggestion():
    assert set(ERROR_SUGGESTIONS) == set(ErrorCode)
    error = CaceError(ErrorCode.FILE_NOT_FOUND, "missing.md not found")
    assert error.suggestion == ERROR_SUGGESTIONS[ErrorCode.FILE_NOT_FOUND]


def test_format_error_plain():
    error = CaceError(ErrorCode.PARSE_FAILED, "Bad input", details="line 3", context={"file": "a.md"})
    text = format_error(error, markup=False)
    assert text.splitlines() == [
        "Error [PARSE_FAILED]: Bad input",
        "  Details: line 3",
        f"  Suggestion: {ERROR_SUGGESTIONS[ErrorCode.PARSE_FAILED]}",
        '  Context: {"file": "a.md"}',
    ]


def test_format_error_markup():
    text = format_error(CaceError(ErrorCode.RENDER_FAILED, "oops", suggestion="retry"))
    assert text.startswith("[red]Error [RENDER_FAILED]: oops[/]")
    assert "[yellow]  Suggestion: retry[/]" in text


def test_exception_carries_error():
    error = CaceError(ErrorCode.UNKNOWN_AGENT, "Unknown agent: vim")
    exc = CaceException(error)
    assert exc.error is error
    assert str(exc) == "[UNKNOWN_AGENT] Unknown agent: vim"
