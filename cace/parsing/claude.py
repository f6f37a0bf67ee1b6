"""Parser for Claude Code skills, commands, rules and CLAUDE.md memory.

Frontmatter vocabulary:
- name, description, argument-hint, version
- disable-model-invocation, user-invocable
- allowed-tools (list or comma-separated string), model, context, agent

CLAUDE.md and CLAUDE.local.md are plain markdown memory files; their
``@path`` imports and heading sections are kept on the spec.
"""

from __future__ import annotations

import re

from cace.agents import Agent
from cace.ir.models import (
    ActivationMode,
    ActivationModel,
    ComponentMetadata,
    ComponentSpec,
    ComponentType,
    ExecutionContext,
    ExecutionModel,
    InvocationModel,
    SafetyLevel,
    SemanticIntent,
    parse_version,
)
from cace.parsing.base import BaseParser, ParserOptions
from cace.parsing.inference import (
    MEMORY_CATEGORIES,
    extract_imports,
    first_paragraph,
    infer_category,
    infer_safety,
    id_from_path,
    parse_sections,
    string_list,
)

CLAUDE_MARKER_FIELDS = ("name", "disable-model-invocation", "user-invocable", "allowed-tools")
CLAUDE_MEMORY_FILES = ("CLAUDE.md", "CLAUDE.local.md")
CLAUDE_MEMORY_PURPOSE = "Provide project context and instructions to Claude Code"

_MEMORY_HEADER_RE = re.compile(r"^#\s*CLAUDE\b", re.MULTILINE)

_CONTEXTS = {
    "fork": ExecutionContext.FORK,
    "isolated": ExecutionContext.ISOLATED,
}


class ClaudeParser(BaseParser):
    agent = Agent.CLAUDE

    def can_parse(self, content: str, filename: str | None = None) -> bool:
        if self.path_contains(filename, ".claude/skills/", ".claude/commands/", ".claude/rules/"):
            return True
        if is_memory_file(filename) or _MEMORY_HEADER_RE.search(content):
            return True
        fm = self.frontmatter_of(content)
        return any(key in fm for key in CLAUDE_MARKER_FIELDS)

    def _build(self, fm: dict, body: str, options: ParserOptions, warnings: list[str]) -> ComponentSpec:
        source = options.source_file
        headed = not fm and not self.path_contains(source, ".claude/") and _MEMORY_HEADER_RE.search(body)
        if is_memory_file(source) or headed:
            return self._build_memory(fm, body, options)
        component_id = str(
            fm.get("name")
            or id_from_path(source, ".claude/skills/", ".claude/commands/", ".claude/rules/")
            or "unknown-skill"
        )

        if self.path_contains(source, ".claude/commands/"):
            component_type = ComponentType.COMMAND
        elif self.path_contains(source, ".claude/rules/"):
            component_type = ComponentType.RULE
        else:
            component_type = ComponentType.SKILL

        description = fm.get("description")
        description = str(description) if description is not None else None
        allowed_tools = string_list(fm.get("allowed-tools"))
        disabled = fm.get("disable-model-invocation")
        context = str(fm.get("context") or "main")

        capabilities = self.capabilities_for(body, allowed_tools, options)
        summary = description or f"Claude skill: {component_id}"

        spec = ComponentSpec(
            id=component_id,
            component_type=component_type,
            version=parse_version(fm.get("version")),
            category=infer_category(description, body),
            intent=SemanticIntent(
                summary=summary,
                purpose=description or summary,
                when_to_use=description,
            ),
            activation=ActivationModel(
                mode=ActivationMode.MANUAL if disabled else ActivationMode.SUGGESTED,
                safety_level=infer_safety(body, capabilities),
                requires_confirmation=bool(disabled) if disabled is not None else None,
            ),
            invocation=InvocationModel(
                user_invocable=fm.get("user-invocable") is not False,
                slash_command=component_id,
                argument_hint=_optional_str(fm.get("argument-hint")),
            ),
            execution=ExecutionModel(
                context=_CONTEXTS.get(context, ExecutionContext.MAIN),
                allowed_tools=allowed_tools,
                preferred_model=_optional_str(fm.get("model")),
                sub_agent=_optional_str(fm.get("agent")),
            ),
            body=body,
            capabilities=capabilities,
            metadata=ComponentMetadata(original_format=f"claude-{component_type.value}"),
        )

        if context == "fork":
            warnings.append('Claude "fork" context has no direct equivalent in other agents')
        if spec.execution.sub_agent:
            warnings.append(f'Sub-agent "{spec.execution.sub_agent}" is Claude-specific')
        return spec

    def _build_memory(self, fm: dict, body: str, options: ParserOptions) -> ComponentSpec:
        local = (options.source_file or "").replace("\\", "/").endswith("CLAUDE.local.md")
        sections = parse_sections(body)
        description = fm.get("description")
        summary = str(description) if description is not None else memory_summary(body)

        return ComponentSpec(
            id="claude-local" if local else "claude-md",
            component_type=ComponentType.MEMORY,
            category=list(MEMORY_CATEGORIES),
            intent=SemanticIntent(
                summary=summary,
                purpose=CLAUDE_MEMORY_PURPOSE,
                category=list(MEMORY_CATEGORIES),
            ),
            activation=ActivationModel(mode=ActivationMode.AUTO, safety_level=SafetyLevel.SAFE),
            invocation=InvocationModel(user_invocable=False),
            body=body,
            capabilities=self.capabilities_for(body, None, options),
            metadata=ComponentMetadata(
                original_format="claude-memory",
                extra={"scope": "local" if local else "project"},
            ),
            sections=sections,
            imports=extract_imports(body),
        )


def is_memory_file(path: str | None) -> bool:
    return bool(path) and path.replace("\\", "/").endswith(CLAUDE_MEMORY_FILES)


def memory_summary(body: str) -> str:
    """First heading, else first paragraph, of a memory body."""
    sections = parse_sections(body)
    if sections:
        return sections[0].title
    return first_paragraph(body) or "Claude Code project context"


def _optional_str(value) -> str | None:
    return str(value) if value is not None else None
