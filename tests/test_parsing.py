"""Tests for agent detection and the per-agent parsers."""

from cace.agents import Agent
from cace.errors import ErrorCode
from cace.ir.models import (
    ActivationMode,
    ComponentType,
    ExecutionContext,
    SafetyLevel,
    TriggerType,
)
from cace.parsing import ParserOptions, detect_agent, get_parser, parse_component, registered_agents
from cace.parsing.frontmatter import FrontmatterError, dump_frontmatter, split_frontmatter
from cace.parsing.inference import (
    extract_imports,
    extract_section,
    id_from_path,
    infer_capabilities,
    infer_category,
    infer_safety,
    parse_sections,
    string_list,
)

CLAUDE_SKILL = """---
name: my-skill
description: A helpful skill
user-invocable: true
---

Do something useful.
"""

CLAUDE_COMMAND = """---
name: deploy
description: Deploy the service
disable-model-invocation: true
argument-hint: <environment>
allowed-tools: Bash, Read
context: fork
model: sonnet
agent: ops
---

Run the deploy script for $ARGUMENTS.
"""

WINDSURF_WORKFLOW = """---
description: Run the test suite
auto_execution_mode: 3
tags:
  - testing
---

Run pytest and summarise failures.
"""

CURSOR_COMMAND = """# Fix Lint

## Objective

Fix every lint error in the project.

## When to Use

After a failing CI lint job.

## Requirements

- Be able to run shell commands
"""

CURSOR_RULE = """---
description: Python style
globs: "**/*.py"
---

Use type hints everywhere.
"""

AGENTS_MD = """# Project

Instructions for assistants working on this repository.

## Setup

Install with pip.

## Code Style

Use black.
"""

CLAUDE_MD = """# Acme API

See @README.md for an overview and @docs/architecture.md for the design.
Questions go to dev@acme.io.

## Commands

- Run tests with `pytest`
- Personal settings: @~/.claude/acme.md

```
@decorator
```
"""


def _parse(content, agent=None, source_file=None, **options):
    return parse_component(content, agent, ParserOptions(source_file=source_file, **options))


# --- Frontmatter Tests ---


def test_split_frontmatter():
    fm, body = split_frontmatter("---\nname: x\n---\n\nHello\n\n")
    assert fm == {"name": "x"}
    assert body == "Hello"


def test_split_without_frontmatter():
    fm, body = split_frontmatter("# Title\n\nText")
    assert fm == {}
    assert body == "# Title\n\nText"


def test_split_empty_frontmatter():
    assert split_frontmatter("---\n---\nBody") == ({}, "Body")


def test_split_rejects_non_mapping():
    try:
        split_frontmatter("---\n- a\n- b\n---\nBody")
    except FrontmatterError as e:
        assert "mapping" in str(e)
    else:
        raise AssertionError("expected FrontmatterError")


def test_dump_frontmatter_keeps_order_and_comment():
    text = dump_frontmatter({"name": "x", "description": "y"}, "Body", "<!-- c -->")
    assert text == "---\nname: x\ndescription: y\n---\n<!-- c -->\n\nBody\n"


def test_dump_without_frontmatter():
    assert dump_frontmatter({}, "Body") == "Body\n"


# --- Inference Tests ---


def test_infer_capabilities_from_body_and_tools():
    caps = infer_capabilities("Fetch the API and commit the result", ["Bash"])
    assert caps.needs_network
    assert caps.needs_git
    assert caps.needs_shell
    assert caps.needs_filesystem


def test_infer_code_search_from_body():
    assert not infer_capabilities("Write a poem.").needs_code_search
    assert infer_capabilities("Find the failing test.").needs_code_search
    assert infer_capabilities("Use grep_search on the repo.").needs_code_search
    assert infer_capabilities("Write a poem.", ["Grep"]).needs_code_search


def test_infer_safety_levels():
    caps = infer_capabilities("")
    assert infer_safety("Delete the build directory", caps) == SafetyLevel.DANGEROUS
    assert infer_safety("Update the changelog", caps) == SafetyLevel.SENSITIVE
    assert infer_safety("Summarise the file", caps) == SafetyLevel.SAFE


def test_infer_category_defaults_to_general():
    assert infer_category("Write a poem") == ["general"]
    assert infer_category("Add tests", "Debug failures") == ["testing", "debugging"]


def test_string_list_normalises_inputs():
    assert string_list("Read, Grep") == ["Read", "Grep"]
    assert string_list(["Read"]) == ["Read"]
    assert string_list(None) == []


def test_id_from_path():
    assert id_from_path(".claude/skills/review/SKILL.md") == "review"
    assert id_from_path(".cursor/rules/style.mdc") == "style"
    assert id_from_path("notes/other.md", ".claude/") is None


def test_extract_section_and_sections():
    assert extract_section(CURSOR_COMMAND, "Objective") == "Fix every lint error in the project."
    titles = [s.title for s in parse_sections(AGENTS_MD)]
    assert titles == ["Project", "Setup", "Code Style"]


# --- Detection Tests ---


def test_all_agents_registered():
    assert set(registered_agents()) == set(Agent)


def test_detect_from_path():
    assert detect_agent("", ".claude/skills/x/SKILL.md") == Agent.CLAUDE
    assert detect_agent("", ".windsurf/workflows/x.md") == Agent.WINDSURF
    assert detect_agent("", ".cursor/rules/x.mdc") == Agent.CURSOR
    assert detect_agent("", "project/AGENTS.md") == Agent.UNIVERSAL
    assert detect_agent("", "GEMINI.md") == Agent.GEMINI
    assert detect_agent("", ".codex/skills/x/SKILL.md") == Agent.CODEX
    assert detect_agent("", ".opencode/commands/x.md") == Agent.OPENCODE


def test_detect_from_content():
    assert detect_agent(CLAUDE_SKILL) == Agent.CLAUDE
    assert detect_agent(WINDSURF_WORKFLOW) == Agent.WINDSURF
    assert detect_agent(CURSOR_COMMAND) == Agent.CURSOR
    assert detect_agent("---\nsandbox_mode: read-only\n---\nText") == Agent.CODEX
    assert detect_agent("---\ntemperature: 0.2\n---\nText") == Agent.GEMINI


def test_detect_unknown():
    assert detect_agent("Just some text") is None


def test_parse_unknown_agent_fails():
    result = _parse("Just some text")
    assert not result.success
    assert result.error_code == ErrorCode.UNKNOWN_AGENT


# --- Parser Contract Tests ---


def test_parse_empty_content():
    result = get_parser(Agent.CLAUDE).parse("   \n")
    assert not result.success
    assert result.error_code == ErrorCode.PARSE_FAILED


def test_parse_malformed_yaml():
    result = _parse("---\nname: [unclosed\n---\nBody", Agent.CLAUDE)
    assert not result.success
    assert result.error_code == ErrorCode.INVALID_FRONTMATTER


def test_parse_bad_field_type():
    result = _parse("---\ndescription: x\nauto_execution_mode: lots\n---\nBody", Agent.WINDSURF)
    assert not result.success
    assert result.error_code == ErrorCode.PARSE_FAILED


# --- Claude Tests ---


def test_claude_minimal_skill():
    result = _parse(CLAUDE_SKILL)
    assert result.success
    spec = result.spec
    assert spec.id == "my-skill"
    assert spec.intent.summary == "A helpful skill"
    assert spec.invocation.user_invocable is True
    assert spec.component_type == ComponentType.SKILL
    assert spec.activation.mode == ActivationMode.SUGGESTED
    assert spec.source_agent_id == Agent.CLAUDE


def test_claude_command_fields():
    result = _parse(CLAUDE_COMMAND, source_file=".claude/commands/deploy.md")
    spec = result.spec
    assert spec.component_type == ComponentType.COMMAND
    assert spec.activation.mode == ActivationMode.MANUAL
    assert spec.activation.requires_confirmation is True
    assert spec.invocation.argument_hint == "<environment>"
    assert spec.execution.allowed_tools == ["Bash", "Read"]
    assert spec.execution.context == ExecutionContext.FORK
    assert spec.execution.preferred_model == "sonnet"
    assert spec.execution.sub_agent == "ops"
    assert spec.capabilities.needs_shell
    assert spec.activation.safety_level == SafetyLevel.DANGEROUS
    assert any("fork" in w for w in result.warnings)


def test_claude_id_from_path_when_name_missing():
    result = _parse("---\ndescription: x\n---\nBody", Agent.CLAUDE, ".claude/skills/lint/SKILL.md")
    assert result.spec.id == "lint"


def test_claude_version_detected_from_fields():
    assert _parse(CLAUDE_SKILL).spec.source_agent.version == "1.0"
    assert _parse(CLAUDE_COMMAND).spec.source_agent.version == "1.5"


def test_source_version_option_wins():
    result = _parse(CLAUDE_SKILL, source_version="2.0")
    assert result.spec.source_agent.version == "2.0"


def test_infer_capabilities_can_be_disabled():
    result = _parse(CLAUDE_COMMAND, infer_capabilities=False)
    assert not result.spec.capabilities.needs_shell


# --- Windsurf Tests ---


def test_windsurf_workflow():
    result = _parse(WINDSURF_WORKFLOW, source_file=".windsurf/workflows/run-tests.md")
    spec = result.spec
    assert spec.id == "run-tests"
    assert spec.component_type == ComponentType.WORKFLOW
    assert spec.activation.mode == ActivationMode.AUTO
    assert spec.category == ["testing"]
    assert result.warnings


def test_windsurf_auto_execution_levels():
    parser = get_parser(Agent.WINDSURF)
    modes = []
    for level in (0, 1, 2, 3):
        spec = parser.parse(
            f"---\ndescription: x\nauto_execution_mode: {level}\n---\nBody",
            ParserOptions(source_file=".windsurf/workflows/x.md"),
        ).spec
        modes.append(spec.activation.mode)
    assert modes == [
        ActivationMode.MANUAL,
        ActivationMode.SUGGESTED,
        ActivationMode.CONTEXTUAL,
        ActivationMode.AUTO,
    ]


def test_windsurf_rule_from_path():
    result = _parse(WINDSURF_WORKFLOW, source_file=".windsurf/rules/style.md")
    assert result.spec.component_type == ComponentType.RULE


# --- Cursor Tests ---


def test_cursor_command_sections():
    result = _parse(CURSOR_COMMAND, source_file=".cursor/commands/fix-lint.md")
    spec = result.spec
    assert spec.id == "fix-lint"
    assert spec.component_type == ComponentType.COMMAND
    assert spec.activation.mode == ActivationMode.MANUAL
    assert spec.intent.summary == "Fix every lint error in the project."
    assert spec.intent.when_to_use == "After a failing CI lint job."


def test_cursor_command_id_from_title():
    result = _parse(CURSOR_COMMAND, Agent.CURSOR)
    assert result.spec.id == "fix-lint"


def test_cursor_rule_globs():
    result = _parse(CURSOR_RULE, Agent.CURSOR, ".cursor/rules/python.mdc")
    spec = result.spec
    assert spec.component_type == ComponentType.RULE
    assert spec.activation.mode == ActivationMode.CONTEXTUAL
    assert spec.activation.triggers[0].type == TriggerType.GLOB
    assert spec.activation.glob_patterns == ["**/*.py"]
    assert spec.source_agent.version == "1.7"


def test_cursor_always_apply_rule():
    content = "---\ndescription: Always\nalwaysApply: true\n---\nBe concise."
    spec = _parse(content, Agent.CURSOR, ".cursor/rules/always.mdc").spec
    assert spec.activation.mode == ActivationMode.AUTO


def test_cursorrules_file():
    spec = _parse("Be helpful.", Agent.CURSOR, ".cursorrules").spec
    assert spec.id == "cursorrules"
    assert spec.component_type == ComponentType.RULE


# --- Gemini / Codex / OpenCode Tests ---


def test_gemini_skill_extra_settings():
    content = "---\nname: search\ndescription: Search docs\ntemperature: 0.3\ngoogle_search: true\n---\nLook it up."
    spec = _parse(content, Agent.GEMINI, ".gemini/skills/search/SKILL.md").spec
    assert spec.component_type == ComponentType.SKILL
    assert spec.capabilities.needs_network
    assert spec.metadata.extra == {"temperature": 0.3, "google_search": True}


def test_gemini_memory_file():
    spec = _parse("# Notes\n\nUse tabs.", Agent.GEMINI, "GEMINI.md").spec
    assert spec.component_type == ComponentType.MEMORY
    assert spec.activation.mode == ActivationMode.AUTO
    assert spec.sections[0].title == "Notes"


def test_codex_sandbox_sets_safety():
    content = (
        "---\nname: cleanup\ndescription: Clean up\nsandbox_mode: danger-full-access\n"
        "approval_policy: on-request\n---\nClean the workspace."
    )
    spec = _parse(content, Agent.CODEX).spec
    assert spec.activation.safety_level == SafetyLevel.DANGEROUS
    assert spec.execution.context == ExecutionContext.ISOLATED
    assert spec.activation.requires_confirmation is True


def test_codex_unknown_sandbox_warns():
    result = _parse("---\nname: x\nsandbox_mode: open\n---\nBody", Agent.CODEX)
    assert result.success
    assert any("sandbox_mode" in w for w in result.warnings)


def test_codex_mcp_servers():
    content = "---\nname: gh\nmcp_servers:\n  github: {}\n---\nUse GitHub."
    spec = _parse(content, Agent.CODEX).spec
    assert spec.capabilities.needs_mcp == ["github"]


def test_opencode_command_subtask():
    content = "---\ndescription: Review\nsubtask: true\nagent: reviewer\n---\nReview $ARGUMENTS."
    spec = _parse(content, Agent.OPENCODE, ".opencode/commands/review.md").spec
    assert spec.component_type == ComponentType.COMMAND
    assert spec.activation.mode == ActivationMode.MANUAL
    assert spec.execution.context == ExecutionContext.FORK
    assert spec.execution.sub_agent == "reviewer"
    assert spec.invocation.slash_command == "review"


def test_opencode_agent_mode():
    spec = _parse("---\ndescription: Helper\nmode: subagent\n---\nHelp.", Agent.OPENCODE).spec
    assert spec.component_type == ComponentType.AGENT
    assert spec.metadata.extra == {"mode": "subagent"}


# --- Universal Tests ---


def test_agents_md():
    result = _parse(AGENTS_MD, source_file="AGENTS.md")
    spec = result.spec
    assert spec.id == "agents-md"
    assert spec.component_type == ComponentType.MEMORY
    assert spec.activation.mode == ActivationMode.AUTO
    assert spec.intent.summary == "Instructions for assistants working on this repository."
    assert len(spec.sections) == 3


def test_agents_md_detected_by_sections():
    assert detect_agent(AGENTS_MD) == Agent.UNIVERSAL


# --- Claude Memory Tests ---


def test_claude_md_memory():
    result = _parse(CLAUDE_MD, source_file="CLAUDE.md")
    assert result.success
    spec = result.spec
    assert spec.source_agent_id == Agent.CLAUDE
    assert spec.id == "claude-md"
    assert spec.component_type == ComponentType.MEMORY
    assert spec.activation.mode == ActivationMode.AUTO
    assert spec.invocation.user_invocable is False
    assert spec.intent.summary == "Acme API"
    assert [s.title for s in spec.sections] == ["Acme API", "Commands"]
    assert spec.metadata.extra == {"scope": "project"}


def test_claude_md_imports():
    spec = _parse(CLAUDE_MD, source_file="CLAUDE.md").spec
    assert [(i.path, i.type) for i in spec.imports] == [
        ("README.md", "file"),
        ("docs/architecture.md", "file"),
        ("~/.claude/acme.md", "file"),
    ]


def test_extract_imports_skips_duplicates_and_packages():
    imports = extract_imports("Read @notes.md twice: @notes.md. Install @types/node.")
    assert [i.path for i in imports] == ["notes.md"]


def test_claude_local_md_scope():
    spec = _parse("Use my local database.", source_file="project/CLAUDE.local.md").spec
    assert spec.id == "claude-local"
    assert spec.metadata.extra == {"scope": "local"}
    assert spec.intent.summary == "Use my local database."


def test_detect_claude_md():
    assert detect_agent("", "CLAUDE.md") == Agent.CLAUDE
    assert detect_agent("", "app/CLAUDE.local.md") == Agent.CLAUDE
    assert detect_agent("# CLAUDE.md\n\nProject notes.") == Agent.CLAUDE


def test_claude_md_header_without_path():
    spec = _parse("# CLAUDE.md\n\nProject notes.", Agent.CLAUDE).spec
    assert spec.component_type == ComponentType.MEMORY
    assert spec.intent.summary == "CLAUDE.md"
