"""Tests for the per-agent renderers and conversion reports."""

import pytest

from cace.agents import Agent
from cace.diff import diff_specs
from cace.errors import ErrorCode
from cace.ir.models import (
    ActivationMode,
    AgentOverride,
    CapabilitySet,
    ComponentSpec,
    ComponentType,
    ExecutionContext,
    ExecutionModel,
    InvocationModel,
    SemanticIntent,
    TriggerSpec,
    TriggerType,
    ActivationModel,
)
from cace.parsing import ParserOptions, parse_component
from cace.parsing.frontmatter import split_frontmatter
from cace.rendering import RenderOptions, get_renderer, registered_renderers, render_component
from cace.rendering.report import (
    ConversionLoss,
    ConversionWarning,
    LossCategory,
    LossSeverity,
    calculate_fidelity,
)

MY_SKILL = """---
name: my-skill
description: A helpful skill
user-invocable: true
---

Do something useful.
"""

# (content, source path) pairs that each dialect should reproduce unchanged
SAME_AGENT_FIXTURES = {
    Agent.CLAUDE: (
        "---\nname: deploy\ndescription: Deploy the service\ndisable-model-invocation: true\n"
        "argument-hint: <env>\nallowed-tools: Bash, Read\ncontext: fork\nmodel: sonnet\n"
        "agent: ops\n---\n\nRun the deploy script for $ARGUMENTS.\n",
        ".claude/commands/deploy.md",
    ),
    Agent.WINDSURF: (
        "---\ndescription: Run the test suite\nauto_execution_mode: 3\ntags:\n- testing\n---\n\n"
        "Run pytest and summarise failures.\n",
        ".windsurf/workflows/run-tests.md",
    ),
    Agent.CURSOR: (
        "# Fix Lint\n\n## Objective\n\nFix every lint error in the project.\n\n"
        "## When to Use\n\nAfter a failing CI lint job.\n",
        ".cursor/commands/fix-lint.md",
    ),
    Agent.GEMINI: (
        "---\nname: search\ndescription: Search docs\ntemperature: 0.3\ngoogle_search: true\n---\n\n"
        "Look it up.\n",
        ".gemini/skills/search/SKILL.md",
    ),
    Agent.CODEX: (
        "---\nname: cleanup\ndescription: Clean up\nsandbox_mode: danger-full-access\n"
        "approval_policy: on-request\n---\n\nClean the workspace.\n",
        ".codex/skills/cleanup/SKILL.md",
    ),
    Agent.OPENCODE: (
        "---\ndescription: Review\nsubtask: true\nagent: reviewer\n---\n\nReview $ARGUMENTS.\n",
        ".opencode/commands/review.md",
    ),
    Agent.UNIVERSAL: (
        "# Project\n\nInstructions for assistants.\n\n## Setup\n\nInstall with pip.\n",
        "AGENTS.md",
    ),
}


def _parse(content: str, agent: Agent | None = None, source_file: str | None = None) -> ComponentSpec:
    result = parse_component(content, agent, ParserOptions(source_file=source_file))
    assert result.success, result.errors
    return result.spec


def _make_spec(**overrides) -> ComponentSpec:
    defaults = dict(
        id="helper",
        component_type=ComponentType.SKILL,
        intent=SemanticIntent(summary="Help out", purpose="Help out"),
        category=["general"],
        body="Answer the question.",
    )
    defaults.update(overrides)
    return ComponentSpec(**defaults)


# --- Registry Tests ---


def test_every_agent_has_a_renderer():
    assert set(registered_renderers()) == set(Agent)


def test_render_rejects_empty_id():
    result = render_component(_make_spec(id=""), Agent.CLAUDE)
    assert not result.success
    assert result.error_code == ErrorCode.RENDER_FAILED


# --- Same-Agent Identity Tests ---


@pytest.mark.parametrize("agent", list(SAME_AGENT_FIXTURES))
def test_same_agent_render_is_identity(agent):
    content, path = SAME_AGENT_FIXTURES[agent]
    original = _parse(content, agent, path)
    rendered = render_component(original, agent)
    assert rendered.success
    assert rendered.report.losses == []
    reparsed = _parse(rendered.content, agent, rendered.path)
    assert diff_specs(original, reparsed).identical


# --- Target Path Tests ---


def test_target_paths_for_skill():
    spec = _parse(MY_SKILL)
    paths = {agent: render_component(spec, agent).path for agent in Agent}
    assert paths == {
        Agent.CLAUDE: ".claude/skills/my-skill/SKILL.md",
        Agent.WINDSURF: ".windsurf/workflows/my-skill.md",
        Agent.CURSOR: ".cursor/skills/my-skill/SKILL.md",
        Agent.GEMINI: ".gemini/skills/my-skill/SKILL.md",
        Agent.CODEX: ".codex/skills/my-skill/SKILL.md",
        Agent.OPENCODE: ".opencode/skills/my-skill/SKILL.md",
        Agent.UNIVERSAL: "AGENTS.md",
    }


def test_rule_and_command_paths():
    rule = _make_spec(component_type=ComponentType.RULE)
    command = _make_spec(component_type=ComponentType.COMMAND)
    assert get_renderer(Agent.CURSOR).target_path(rule) == ".cursor/rules/helper.mdc"
    assert get_renderer(Agent.CLAUDE).target_path(command) == ".claude/commands/helper.md"
    assert get_renderer(Agent.GEMINI).target_path(_make_spec(component_type=ComponentType.WORKFLOW)) == (
        ".gemini/commands/helper.md"
    )


# --- Loss Reporting Tests ---


def test_compatible_render_has_no_losses():
    result = render_component(_parse(MY_SKILL), Agent.WINDSURF)
    assert result.report.losses == []
    assert result.report.fidelity_score >= 80


@pytest.mark.parametrize("agent", [Agent.WINDSURF, Agent.CURSOR, Agent.GEMINI, Agent.CODEX])
def test_fork_context_is_reported(agent):
    baseline = render_component(_make_spec(), agent).report.fidelity_score
    spec = _make_spec(execution=ExecutionModel(context=ExecutionContext.FORK))
    report = render_component(spec, agent).report
    losses = [
        loss for loss in report.losses
        if loss.category in (LossCategory.EXECUTION, LossCategory.CAPABILITY)
        and loss.severity >= LossSeverity.WARNING
    ]
    assert losses
    assert report.fidelity_score < baseline


def test_report_refs_and_summary():
    report = render_component(_parse(MY_SKILL), Agent.CURSOR).report
    assert report.source.agent == Agent.CLAUDE
    assert report.target.agent == Agent.CURSOR
    assert report.target.component_type == "skill"
    assert "fidelity" in report.summary()


def test_universal_reports_dropped_structure():
    report = render_component(_parse(MY_SKILL), Agent.UNIVERSAL).report
    categories = {loss.category for loss in report.losses}
    assert {LossCategory.CONTENT, LossCategory.ACTIVATION, LossCategory.INVOCATION} <= categories
    assert report.fidelity_score == 65


# --- Fidelity Tests ---


def test_calculate_fidelity_deductions():
    losses = [ConversionLoss(LossCategory.EXECUTION, LossSeverity.CRITICAL, "x", "f")]
    warnings = [ConversionWarning("W", "w")]
    assert calculate_fidelity(100, losses, warnings) == 77
    assert calculate_fidelity(90, [], [], cross_agent_penalty=5) == 85


def test_calculate_fidelity_clamps():
    losses = [ConversionLoss(LossCategory.CONTENT, LossSeverity.CRITICAL, "x", "f")] * 10
    assert calculate_fidelity(100, losses, []) == 0


def test_fidelity_is_monotonic_in_losses():
    small = [ConversionLoss(LossCategory.CONTENT, LossSeverity.INFO, "a", "f")]
    large = small + [ConversionLoss(LossCategory.EXECUTION, LossSeverity.WARNING, "b", "g")]
    assert calculate_fidelity(100, small, []) >= calculate_fidelity(100, large, [])


def test_loss_severity_ordering():
    assert LossSeverity.INFO < LossSeverity.WARNING < LossSeverity.CRITICAL
    assert max([LossSeverity.WARNING, LossSeverity.CRITICAL, LossSeverity.INFO]) == LossSeverity.CRITICAL


def test_cross_agent_penalties():
    spec = _parse(MY_SKILL)
    assert render_component(spec, Agent.GEMINI).report.fidelity_score == 85
    assert render_component(spec, Agent.CODEX).report.fidelity_score == 95


# --- Options Tests ---


def test_provenance_comment_follows_frontmatter():
    result = render_component(_parse(MY_SKILL, source_file="skills/my.md"), Agent.CLAUDE,
                              RenderOptions(include_comments=True))
    assert result.content.startswith("---\n")
    assert "<!-- Converted from claude to Claude Code -->" in result.content
    assert "<!-- Original: skills/my.md -->" in result.content


def test_agent_overrides_are_applied():
    spec = _make_spec(
        agent_overrides={
            Agent.CLAUDE: AgentOverride(
                frontmatter_overrides={"model": "opus"},
                body_prefix="IMPORTANT:",
            )
        }
    )
    fm, body = split_frontmatter(render_component(spec, Agent.CLAUDE).content)
    assert fm["model"] == "opus"
    assert body.startswith("IMPORTANT:")
    fm, body = split_frontmatter(render_component(spec, Agent.WINDSURF).content)
    assert "model" not in fm
    assert not body.startswith("IMPORTANT:")


def test_validate_output_reports_errors_as_warnings():
    spec = _make_spec(intent=SemanticIntent(summary="", purpose=""))
    report = render_component(spec, Agent.WINDSURF, RenderOptions(validate_output=True)).report
    assert any(w.code == "VALIDATION_ERROR" for w in report.warnings)


def test_target_version_adapts_output():
    spec = _make_spec(execution=ExecutionModel(sub_agent="reviewer"))
    result = render_component(
        spec, Agent.CLAUDE, RenderOptions(source_version="1.0", target_version="1.5")
    )
    fm, _ = split_frontmatter(result.content)
    assert fm["model"] == "sonnet"
    assert any(w.code == "VERSION_ADAPTATION" for w in result.report.warnings)


# --- Dialect-Specific Tests ---


def test_claude_manual_and_fork():
    spec = _make_spec(
        activation=ActivationModel(mode=ActivationMode.MANUAL),
        execution=ExecutionModel(context=ExecutionContext.FORK, allowed_tools=["Read"]),
    )
    fm, _ = split_frontmatter(render_component(spec, Agent.CLAUDE).content)
    assert fm["disable-model-invocation"] is True
    assert fm["context"] == "fork"
    assert fm["allowed-tools"] == ["Read"]


def test_windsurf_rewrites_claude_body_syntax():
    spec = _make_spec(body="Deploy $ARGUMENTS after !`git status` is clean.")
    _, body = split_frontmatter(render_component(spec, Agent.WINDSURF).content)
    assert "<user-provided arguments>" in body
    assert "(run: `git status`)" in body


def test_windsurf_auto_execution_mode():
    spec = _make_spec(activation=ActivationModel(mode=ActivationMode.CONTEXTUAL))
    fm, _ = split_frontmatter(render_component(spec, Agent.WINDSURF).content)
    assert fm["auto_execution_mode"] == 2


def test_cursor_wraps_command_body():
    spec = _make_spec(
        id="deploy-app",
        component_type=ComponentType.COMMAND,
        activation=ActivationModel(mode=ActivationMode.MANUAL),
        invocation=InvocationModel(argument_hint="<env>"),
        execution=ExecutionModel(allowed_tools=["Bash", "Read"]),
        body="Run the deploy script.",
    )
    result = render_component(spec, Agent.CURSOR)
    _, body = split_frontmatter(result.content)
    assert body.startswith("# Deploy App")
    assert "## Objective" in body
    assert "Provide: <env>" in body
    assert "- Be able to run shell commands" in body
    assert "- Be able to read files" in body
    assert any(w.code == "NO_STRUCTURED_ARGS" for w in result.report.warnings)


def test_cursor_rule_activation():
    always = _make_spec(component_type=ComponentType.RULE, activation=ActivationModel(mode=ActivationMode.AUTO))
    fm, _ = split_frontmatter(render_component(always, Agent.CURSOR).content)
    assert fm["alwaysApply"] is True

    globbed = _make_spec(
        component_type=ComponentType.RULE,
        activation=ActivationModel(
            mode=ActivationMode.CONTEXTUAL,
            triggers=[
                TriggerSpec(type=TriggerType.GLOB, pattern="*.ts"),
                TriggerSpec(type=TriggerType.GLOB, pattern="*.tsx"),
            ],
        ),
    )
    fm, _ = split_frontmatter(render_component(globbed, Agent.CURSOR).content)
    assert fm["globs"] == ["*.ts", "*.tsx"]


def test_gemini_manual_becomes_slash_command():
    spec = _make_spec(activation=ActivationModel(mode=ActivationMode.MANUAL))
    fm, _ = split_frontmatter(render_component(spec, Agent.GEMINI).content)
    assert fm["slash_command"] == "helper"


def test_gemini_reports_mcp_servers():
    spec = _make_spec(capabilities=CapabilitySet(needs_mcp=["github"]))
    report = render_component(spec, Agent.GEMINI).report
    assert any(loss.source_field == "capabilities.needs_mcp" for loss in report.losses)


def test_codex_dangerous_requests_approval():
    spec = _parse(SAME_AGENT_FIXTURES[Agent.CLAUDE][0], Agent.CLAUDE, ".claude/commands/deploy.md")
    result = render_component(spec, Agent.CODEX)
    fm, _ = split_frontmatter(result.content)
    assert fm["approval_policy"] == "on-request"
    assert fm["slash_command"] == "deploy"
    assert fm["argument_hint"] == "<env>"
    assert any(w.code == "SAFETY_APPROVAL" for w in result.report.warnings)


def test_codex_mcp_stub():
    spec = _make_spec(capabilities=CapabilitySet(needs_mcp=["github"]))
    result = render_component(spec, Agent.CODEX)
    fm, _ = split_frontmatter(result.content)
    assert fm["mcp_servers"] == {"github": {}}
    assert any(w.code == "MCP_SERVER_STUB" for w in result.report.warnings)


def test_opencode_fork_becomes_subtask():
    spec = _make_spec(
        component_type=ComponentType.COMMAND,
        activation=ActivationModel(mode=ActivationMode.MANUAL),
        execution=ExecutionModel(context=ExecutionContext.FORK, sub_agent="reviewer"),
    )
    result = render_component(spec, Agent.OPENCODE)
    fm, _ = split_frontmatter(result.content)
    assert fm["subtask"] is True
    assert fm["agent"] == "reviewer"
    assert result.report.losses == []


def test_universal_has_no_frontmatter():
    result = render_component(_parse(MY_SKILL), Agent.UNIVERSAL)
    assert result.content == "Do something useful.\n"


# --- Claude Memory Tests ---

CLAUDE_MD = "# Acme API\n\nSee @README.md for an overview.\n\n## Commands\n\nRun tests with pytest.\n"


def test_claude_md_renders_unchanged():
    original = _parse(CLAUDE_MD, Agent.CLAUDE, "CLAUDE.md")
    result = render_component(original, Agent.CLAUDE)
    assert result.path == "CLAUDE.md"
    assert result.content == CLAUDE_MD
    assert result.report.losses == []
    assert "1 @path import(s)" in result.report.preserved_semantics
    reparsed = _parse(result.content, Agent.CLAUDE, result.path)
    assert diff_specs(original, reparsed).identical
    assert reparsed.imports == original.imports


def test_claude_local_md_keeps_filename():
    spec = _parse("Use my local database.", Agent.CLAUDE, "CLAUDE.local.md")
    assert render_component(spec, Agent.CLAUDE).path == "CLAUDE.local.md"


def test_agents_md_to_claude_md():
    spec = _parse(SAME_AGENT_FIXTURES[Agent.UNIVERSAL][0], Agent.UNIVERSAL, "AGENTS.md")
    result = render_component(spec, Agent.CLAUDE)
    assert result.path == "CLAUDE.md"
    assert not result.content.startswith("---")
    assert [loss.source_field for loss in result.report.losses] == ["intent.summary"]
    assert result.report.fidelity_score == 95


def test_memory_to_claude_reports_invocation():
    spec = _make_spec(
        component_type=ComponentType.MEMORY,
        invocation=InvocationModel(slash_command="helper"),
    )
    report = render_component(spec, Agent.CLAUDE).report
    assert LossCategory.INVOCATION in {loss.category for loss in report.losses}
    assert LossCategory.ACTIVATION in {loss.category for loss in report.losses}
