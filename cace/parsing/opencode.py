"""Parser for OpenCode skills, commands and agents.

The directory decides the component type (``.opencode/skills``,
``.opencode/commands``, ``.opencode/agents``). ``subtask: true`` marks a
forked execution context; ``agent`` delegates to a named sub-agent.
"""

from __future__ import annotations

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
    SemanticIntent,
    parse_version,
)
from cace.parsing.base import BaseParser, ParserOptions
from cace.parsing.inference import first_paragraph, id_from_path, infer_category, infer_safety

OPENCODE_AGENT_MODES = ("primary", "subagent", "all")


class OpenCodeParser(BaseParser):
    agent = Agent.OPENCODE

    def can_parse(self, content: str, filename: str | None = None) -> bool:
        if self.path_contains(filename, ".opencode/"):
            return True
        fm = self.frontmatter_of(content)
        return "subtask" in fm or fm.get("mode") in OPENCODE_AGENT_MODES

    def _component_type(self, fm: dict, source: str | None) -> ComponentType:
        if self.path_contains(source, "/agents/", "/agent/"):
            return ComponentType.AGENT
        if self.path_contains(source, "/commands/", "/command/"):
            return ComponentType.COMMAND
        if self.path_contains(source, "/skills/", "/skill/"):
            return ComponentType.SKILL
        return ComponentType.AGENT if fm.get("mode") in OPENCODE_AGENT_MODES else ComponentType.COMMAND

    def _build(self, fm: dict, body: str, options: ParserOptions, warnings: list[str]) -> ComponentSpec:
        source = options.source_file
        component_type = self._component_type(fm, source)
        component_id = str(
            fm.get("name") or id_from_path(source, ".opencode/") or f"unknown-{component_type.value}"
        )
        capabilities = self.capabilities_for(body, None, options)

        description = fm.get("description")
        summary = (
            str(description) if description is not None
            else first_paragraph(body) or f"OpenCode {component_type.value}: {component_id}"
        )
        is_command = component_type == ComponentType.COMMAND

        extra = {}
        if fm.get("mode") is not None:
            extra["mode"] = fm["mode"]

        return ComponentSpec(
            id=component_id,
            component_type=component_type,
            version=parse_version(fm.get("version")),
            category=infer_category(summary, body),
            intent=SemanticIntent(summary=summary, purpose=summary),
            activation=ActivationModel(
                mode=ActivationMode.MANUAL if is_command else ActivationMode.SUGGESTED,
                safety_level=infer_safety(body, capabilities),
            ),
            invocation=InvocationModel(
                user_invocable=True,
                slash_command=component_id if is_command else None,
            ),
            execution=ExecutionModel(
                context=ExecutionContext.FORK if fm.get("subtask") else ExecutionContext.MAIN,
                preferred_model=str(fm["model"]) if fm.get("model") else None,
                sub_agent=str(fm["agent"]) if fm.get("agent") else None,
            ),
            body=body,
            capabilities=capabilities,
            metadata=ComponentMetadata(
                original_format=f"opencode-{component_type.value}",
                extra=extra,
            ),
        )
