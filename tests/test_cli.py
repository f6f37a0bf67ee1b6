"""Tests for the cace command line."""

import json

import pytest
from click.testing import CliRunner

from cace import __version__
from cace.cli import cli

MY_SKILL = """---
name: my-skill
description: A helpful skill
user-invocable: true
---

Do something useful.
"""


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def skill_file(tmp_path):
    path = tmp_path / "my-skill.md"
    path.write_text(MY_SKILL)
    return path


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


# --- Convert ---


def test_convert_prints_output(runner, skill_file):
    result = runner.invoke(cli, ["convert", str(skill_file), "--to", "windsurf"])
    assert result.exit_code == 0, result.output
    assert "description: A helpful skill" in result.output
    assert "auto_execution_mode: 1" in result.output


def test_convert_writes_agent_layout(runner, skill_file, tmp_path):
    out_dir = tmp_path / "project"
    out_dir.mkdir()
    result = runner.invoke(cli, ["convert", str(skill_file), "--to", "cursor", "-o", str(out_dir)])
    assert result.exit_code == 0, result.output
    written = out_dir / ".cursor" / "skills" / "my-skill" / "SKILL.md"
    assert written.is_file()
    assert "A helpful skill" in written.read_text()


def test_convert_json(runner, skill_file):
    result = runner.invoke(cli, ["convert", str(skill_file), "--to", "windsurf", "--json"])
    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["success"] is True
    assert payload["filename"] == "my-skill.md"
    assert payload["fidelity_score"] == 100
    assert payload["losses"] == []


def test_convert_missing_file(runner, tmp_path):
    result = runner.invoke(cli, ["convert", str(tmp_path / "missing.md"), "--to", "cursor"])
    assert result.exit_code == 1
    assert "FILE_NOT_FOUND" in result.output


def test_convert_undetectable_source(runner, tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("Just some text")
    result = runner.invoke(cli, ["convert", str(path), "--to", "cursor"])
    assert result.exit_code == 1
    assert "UNKNOWN_AGENT" in result.output


def test_convert_rejects_unknown_agent(runner, skill_file):
    result = runner.invoke(cli, ["convert", str(skill_file), "--to", "vim"])
    assert result.exit_code == 2


def test_missing_config_file(runner, skill_file, tmp_path):
    result = runner.invoke(
        cli, ["--config", str(tmp_path / "nope.yaml"), "convert", str(skill_file), "--to", "cursor"]
    )
    assert result.exit_code == 1
    assert "FILE_NOT_FOUND" in result.output


# --- Diff / Round trip ---


def test_diff_identical(runner, skill_file):
    result = runner.invoke(cli, ["diff", str(skill_file), str(skill_file)])
    assert result.exit_code == 0
    assert "Semantically identical." in result.output


def test_diff_json(runner, skill_file, tmp_path):
    other = tmp_path / "other.md"
    other.write_text(MY_SKILL.replace("A helpful skill", "A different skill"))
    result = runner.invoke(cli, ["diff", str(skill_file), str(other), "--json"])
    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["identical"] is False
    assert payload["changed_aspects"] == ["intent.summary", "intent.purpose"]
    assert payload["overall_severity"] == "info"


def test_roundtrip_json(runner, skill_file):
    result = runner.invoke(cli, ["roundtrip", str(skill_file), "--via", "windsurf", "--json"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["source_agent"] == "claude"
    assert payload["drift_detected"] is False
    assert payload["combined_fidelity"] == 100


def test_roundtrip_text(runner, skill_file):
    result = runner.invoke(cli, ["roundtrip", str(skill_file), "--via", "windsurf"])
    assert result.exit_code == 0
    assert "No semantic drift." in result.output


# --- Validate ---


def test_validate_valid_file(runner, skill_file):
    result = runner.invoke(cli, ["validate", str(skill_file), "--json"])
    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["valid"] is True
    assert payload["agent"] == "claude"
    assert payload["component_type"] == "skill"


def test_validate_invalid_file(runner, tmp_path):
    path = tmp_path / "deploy.md"
    path.write_text("---\ndescription: Deploy\nauto_execution_mode: 9\n---\n\nDeploy.\n")
    result = runner.invoke(cli, ["validate", str(path), "--agent", "windsurf", "--type", "workflow"])
    assert result.exit_code == 1
    assert "INVALID_AUTO_EXECUTION_MODE" in result.output


def test_validate_strict(runner, skill_file):
    result = runner.invoke(cli, ["validate", str(skill_file), "--strict"])
    assert result.exit_code == 1
    assert "SHORT_BODY" in result.output


# --- Export / Import ---


def test_export_then_import(runner, skill_file, tmp_path):
    spec_file = tmp_path / "spec.json"
    result = runner.invoke(cli, ["export", str(skill_file), "-o", str(spec_file)])
    assert result.exit_code == 0, result.output
    assert json.loads(spec_file.read_text())["id"] == "my-skill"

    out_dir = tmp_path / "out"
    out_dir.mkdir()
    result = runner.invoke(cli, ["import", str(spec_file), "--to", "gemini", "-o", str(out_dir)])
    assert result.exit_code == 0, result.output
    assert (out_dir / ".gemini" / "skills" / "my-skill" / "SKILL.md").is_file()


def test_import_invalid_json(runner, tmp_path):
    path = tmp_path / "spec.json"
    path.write_text('{"id": "x"}')
    result = runner.invoke(cli, ["import", str(path), "--to", "claude"])
    assert result.exit_code == 1
    assert "SCHEMA_INVALID" in result.output


# --- Detect / Matrix / Version ---


def test_detect(runner, skill_file):
    result = runner.invoke(cli, ["detect", str(skill_file)])
    assert result.exit_code == 0
    assert "Claude Code" in result.output
    assert "my-skill" in result.output


def test_matrix_json(runner):
    result = runner.invoke(cli, ["matrix", "--json"])
    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["claude"]["claude"] == 100
    assert set(payload) == {"claude", "windsurf", "cursor", "gemini", "codex", "opencode", "universal"}


def test_version_list(runner):
    result = runner.invoke(cli, ["version", "list", "claude"])
    assert result.exit_code == 0
    assert "1.5" in result.output
    assert "Migration paths:" in result.output


def test_version_guide(runner):
    result = runner.invoke(cli, ["version", "guide", "cursor", "0.34", "1.7"])
    assert result.exit_code == 0
    assert "Migration Guide: 0.34 to 1.7" in result.output
    assert "Complexity: low" in result.output


def test_version_guide_markdown(runner):
    result = runner.invoke(cli, ["version", "guide", "claude", "1.0", "2.0", "--markdown"])
    assert result.exit_code == 0
    assert result.output.startswith("# Migration Guide: 1.0 to 2.0")


def test_version_guide_unknown_version(runner):
    result = runner.invoke(cli, ["version", "guide", "cursor", "0.1", "1.7"])
    assert result.exit_code == 1
    assert "VALIDATION_FAILED" in result.output


def test_version_detect(runner, tmp_path):
    rules = tmp_path / ".cursorrules"
    rules.write_text("Be helpful.")
    result = runner.invoke(cli, ["version", "detect", str(rules)])
    assert result.exit_code == 0
    assert "Detected version: 0.34" in result.output


# --- Batch ---


def test_batch_convert_writes_each_file(runner, skill_file, tmp_path):
    other = tmp_path / "review.md"
    other.write_text(MY_SKILL.replace("my-skill", "review"))
    out_dir = tmp_path / "project"
    result = runner.invoke(
        cli, ["batch-convert", str(skill_file), str(other), "--to", "cursor", "-o", str(out_dir)]
    )
    assert result.exit_code == 0, result.output
    assert (out_dir / ".cursor" / "skills" / "my-skill" / "SKILL.md").is_file()
    assert (out_dir / ".cursor" / "skills" / "review" / "SKILL.md").is_file()
    assert "2 succeeded, 0 failed" in result.output


def test_batch_convert_dry_run_writes_nothing(runner, skill_file, tmp_path):
    out_dir = tmp_path / "project"
    result = runner.invoke(
        cli, ["batch-convert", str(skill_file), "--to", "cursor", "-o", str(out_dir), "--dry-run", "--json"]
    )
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["dry_run"] is True
    assert payload["succeeded"] == 1
    assert payload["results"][0]["target"].endswith("SKILL.md")
    assert not out_dir.exists()


def test_batch_convert_reports_failures(runner, skill_file, tmp_path):
    result = runner.invoke(
        cli,
        ["batch-convert", str(skill_file), str(tmp_path / "missing.md"), "--to", "cursor",
         "-o", str(tmp_path / "out"), "--json"],
    )
    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["succeeded"] == 1
    assert payload["failed"] == 1
    failure = [r for r in payload["results"] if not r["success"]][0]
    assert failure["source"].endswith("missing.md")


def test_batch_validate_all_valid(runner, skill_file):
    result = runner.invoke(cli, ["batch-validate", str(skill_file), "--json"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload == {"valid": 1, "invalid": 0, "results": payload["results"]}
    assert payload["results"][0]["agent"] == "claude"


def test_batch_validate_flags_unreadable_file(runner, skill_file, tmp_path):
    result = runner.invoke(cli, ["batch-validate", str(skill_file), str(tmp_path / "missing.md")])
    assert result.exit_code == 1
    assert "1 valid, 1 invalid" in result.output


# --- Agents / Inspect ---


def test_agents_json(runner):
    result = runner.invoke(cli, ["agents", "--json"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert [a["id"] for a in payload] == ["claude", "windsurf", "cursor", "gemini", "codex", "opencode", "universal"]
    claude = payload[0]
    assert claude["name"] == "Claude Code"
    assert "skill" in claude["component_types"]
    assert claude["current_version"]


def test_agents_table(runner):
    result = runner.invoke(cli, ["agents"])
    assert result.exit_code == 0
    assert "Windsurf (Cascade)" in result.output


def test_inspect_json(runner, skill_file):
    result = runner.invoke(cli, ["inspect", str(skill_file), "--json"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["spec"]["id"] == "my-skill"
    analysis = payload["analysis"]
    assert analysis["word_count"] == 3
    assert analysis["has_arguments"] is False
    assert "filesystem" in analysis["needs"]
    assert analysis["compatibility"]["claude"] == 100
    assert analysis["compatibility"]["universal"] == 95


def test_inspect_detects_arguments(runner, tmp_path):
    path = tmp_path / "fix.md"
    path.write_text(MY_SKILL.replace("Do something useful.", "Fix issue $ARGUMENTS in the repo."))
    result = runner.invoke(cli, ["inspect", str(path), "--json"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["analysis"]["has_arguments"] is True


def test_inspect_table(runner, skill_file):
    result = runner.invoke(cli, ["inspect", str(skill_file)])
    assert result.exit_code == 0, result.output
    assert "my-skill" in result.output
    assert "Compatibility" in result.output
