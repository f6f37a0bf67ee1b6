"""Tests for the transform pipeline, round trips and capability mappings."""

from cace.agents import Agent
from cace.diff import DiffSeverity
from cace.errors import ErrorCode
from cace.transformation import TransformOptions, round_trip, transform
from cace.transformation.capability_mapper import (
    StrategyType,
    compatibility_score,
    describe_strategy,
    get_compatibility_matrix,
    get_mapping,
    get_mappings,
)

MY_SKILL = """---
name: my-skill
description: A helpful skill
user-invocable: true
---

Do something useful.
"""

FORKED_COMMAND = """---
name: deploy
description: Deploy the service
disable-model-invocation: true
context: fork
allowed-tools: Bash
---

Run the deploy script for $ARGUMENTS.
"""


# --- Transform Tests ---


def test_transform_claude_to_windsurf():
    result = transform(MY_SKILL, TransformOptions(target_agent=Agent.WINDSURF))
    assert result.success
    assert result.filename == "my-skill.md"
    assert result.directory == ".windsurf/workflows"
    assert result.output.startswith("---\ndescription: A helpful skill\n")
    assert result.fidelity_score == 100
    assert result.spec.id == "my-skill"


def test_transform_reports_losses_as_warnings():
    result = transform(
        FORKED_COMMAND,
        TransformOptions(target_agent=Agent.WINDSURF, source_agent=Agent.CLAUDE),
    )
    assert result.success
    assert any(w.startswith("[LOSS:execution]") for w in result.warnings)
    assert any(w.startswith("[TOOL_RESTRICTION_LOST]") for w in result.warnings)
    assert "<user-provided arguments>" in result.output


def test_transform_unknown_source():
    result = transform("Just some text", TransformOptions(target_agent=Agent.CLAUDE))
    assert not result.success
    assert result.error_code == ErrorCode.UNKNOWN_AGENT
    assert result.output is None


def test_transform_parse_failure():
    result = transform(
        "---\nname: [unclosed\n---\nBody",
        TransformOptions(target_agent=Agent.CURSOR, source_agent=Agent.CLAUDE),
    )
    assert not result.success
    assert result.error_code == ErrorCode.INVALID_FRONTMATTER


def test_transform_with_comments():
    result = transform(
        MY_SKILL,
        TransformOptions(target_agent=Agent.CURSOR, source_file="my-skill.md", include_comments=True),
    )
    assert "<!-- Converted from claude to Cursor -->" in result.output
    assert "<!-- Original: my-skill.md -->" in result.output



def test_transform_forwards_source_version():
    content = "---\nname: review\ndescription: Review code\nagent: ops\n---\n\nReview the diff.\n"
    result = transform(
        content,
        TransformOptions(target_agent=Agent.CLAUDE, source_version="1.0", target_version="1.5"),
    )
    assert result.success
    assert "model: sonnet" in result.output
    assert result.spec.source_agent.version == "1.0"


def test_transform_cross_agent_target_version():
    content = "---\ndescription: Review\nsubtask: true\nagent: reviewer\n---\n\nReview $ARGUMENTS.\n"
    result = transform(
        content,
        TransformOptions(
            target_agent=Agent.CLAUDE,
            source_file=".opencode/commands/review.md",
            source_version="1.0",
            target_version="1.0",
        ),
    )
    assert result.success
    assert any(
        w.startswith("[VERSION_ADAPTATION]") and "'agent'" in w for w in result.warnings
    )


# --- Round Trip Tests ---


def test_round_trip_preserves_core_fields():
    result = round_trip(MY_SKILL, Agent.WINDSURF)
    assert result.success
    assert result.source_agent == Agent.CLAUDE
    assert result.diff.identical
    assert not result.drift_detected
    assert result.combined_fidelity >= 90
    assert result.final.id == "my-skill"


def test_round_trip_reports_drift():
    result = round_trip(FORKED_COMMAND, Agent.WINDSURF, source=Agent.CLAUDE)
    assert result.success
    assert result.drift_detected
    assert "execution.context" in result.diff.changed_aspects
    assert result.diff.overall_severity >= DiffSeverity.WARNING
    assert any(w.startswith("[ROUND_TRIP_DRIFT]") for w in result.warnings)
    assert result.combined_fidelity < 100


def test_round_trip_outputs():
    result = round_trip(MY_SKILL, Agent.CURSOR)
    assert result.intermediate_output is not None
    assert result.final_output.startswith("---\nname: my-skill\n")
    assert result.forward_fidelity is not None
    assert result.backward_fidelity is not None


def test_round_trip_unknown_source():
    result = round_trip("Just some text", Agent.CLAUDE)
    assert not result.success
    assert result.error_code == ErrorCode.UNKNOWN_AGENT


# --- Capability Mapping Tests ---


def test_get_mapping():
    mapping = get_mapping(Agent.CLAUDE, Agent.OPENCODE, "context: fork")
    assert mapping.strategy.type == StrategyType.TRANSFORM
    assert get_mapping(Agent.CLAUDE, Agent.OPENCODE, "missing") is None


def test_mappings_are_directional():
    assert get_mappings(Agent.CLAUDE, Agent.WINDSURF)
    assert all(m.source_agent == Agent.CLAUDE for m in get_mappings(Agent.CLAUDE, Agent.WINDSURF))


def test_describe_strategy():
    direct = get_mapping(Agent.CLAUDE, Agent.CODEX, "argument-hint")
    assert describe_strategy(direct.strategy) == "Direct mapping to argument_hint"
    unsupported = get_mapping(Agent.CLAUDE, Agent.CURSOR, "agent")
    assert describe_strategy(unsupported.strategy).startswith("Unsupported: ")


def test_compatibility_scores():
    # transform 2 + unsupported 15 + fallback 5 + transform 2
    assert compatibility_score(Agent.CLAUDE, Agent.WINDSURF) == 76
    assert compatibility_score(Agent.CLAUDE, Agent.CLAUDE) == 100
    assert compatibility_score(Agent.CURSOR, Agent.UNIVERSAL) == 95


def test_compatibility_matrix_is_complete():
    matrix = get_compatibility_matrix()
    assert set(matrix) == set(Agent)
    for source, row in matrix.items():
        assert set(row) == set(Agent)
        assert row[source] == 100
        assert all(0 <= score <= 100 for score in row.values())
