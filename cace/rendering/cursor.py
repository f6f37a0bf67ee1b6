"""Renderer for Cursor commands, rules and skills.

Commands whose body is not already structured markdown are wrapped in the
Cursor command layout (``# Title``, ``## Objective``, ``## When to Use``,
``## Arguments``, ``## Requirements``). Rules become ``.mdc`` files with
``globs``/``alwaysApply`` frontmatter.
"""

from __future__ import annotations

import re

from cace.agents import Agent
from cace.ir.models import (
    ActivationMode,
    ComponentSpec,
    ComponentType,
    ExecutionContext,
    format_version,
)
from cace.parsing.inference import title_case
from cace.rendering.base import BaseRenderer, RenderContext
from cace.rendering.report import LossCategory, LossSeverity

# Tool names rendered as plain-language requirements
TOOL_PROSE = {
    "Bash": "run shell commands",
    "Read": "read files",
    "Write": "write files",
    "Edit": "edit files",
    "Glob": "find files by pattern",
    "Grep": "search file contents",
    "WebFetch": "fetch web pages",
    "WebSearch": "search the web",
    "Task": "delegate sub-tasks",
}

_TITLE_RE = re.compile(r"^#\s+\S", re.MULTILINE)


def tool_prose(tool: str) -> str:
    base = tool.split("(", 1)[0].strip()
    return TOOL_PROSE.get(base, f"use the {tool} tool")


class CursorRenderer(BaseRenderer):
    agent = Agent.CURSOR

    def target_component_type(self, spec: ComponentSpec) -> ComponentType:
        if spec.component_type in (ComponentType.SKILL, ComponentType.RULE):
            return spec.component_type
        if spec.component_type == ComponentType.MEMORY:
            return ComponentType.RULE
        return ComponentType.COMMAND

    def get_target_directory(self, spec: ComponentSpec) -> str:
        target = self.target_component_type(spec)
        if target == ComponentType.SKILL:
            return ".cursor/skills"
        if target == ComponentType.RULE:
            return ".cursor/rules"
        return ".cursor/commands"

    def get_target_filename(self, spec: ComponentSpec) -> str:
        target = self.target_component_type(spec)
        if target == ComponentType.SKILL:
            return f"{spec.id}/SKILL.md"
        if target == ComponentType.RULE:
            return f"{spec.id}.mdc"
        return f"{spec.id}.md"

    def _render(self, spec: ComponentSpec, ctx: RenderContext) -> tuple[dict, str]:
        target = self.target_component_type(spec)
        fm: dict = {"description": spec.intent.summary}
        if spec.category:
            fm["tags"] = list(spec.category)
            ctx.keep("Category tags")

        if target == ComponentType.RULE:
            self._rule_activation(spec, fm, ctx)
        else:
            expected = ActivationMode.SUGGESTED if target == ComponentType.SKILL else ActivationMode.MANUAL
            if spec.activation.mode != expected:
                ctx.loss(
                    LossCategory.ACTIVATION,
                    LossSeverity.WARNING,
                    f"Cursor {target.value}s are {expected.value}; "
                    f"'{spec.activation.mode.value}' activation is lost",
                    "activation.mode",
                )
            else:
                ctx.keep(f"{expected.value.capitalize()} activation")
            if spec.activation.triggers:
                ctx.loss(
                    LossCategory.ACTIVATION,
                    LossSeverity.WARNING,
                    f"{len(spec.activation.triggers)} activation trigger(s) cannot be expressed",
                    "activation.triggers",
                    "Convert to a Cursor rule with globs",
                )

        self._execution_losses(spec, ctx)

        if spec.invocation.argument_hint or spec.invocation.arguments:
            ctx.warn(
                "NO_STRUCTURED_ARGS",
                "Cursor commands have no structured argument system; arguments are described in prose",
                "invocation.arguments",
            )
        if not spec.version.is_default:
            fm["version"] = format_version(spec.version)

        if target == ComponentType.COMMAND and not _TITLE_RE.search(spec.body):
            body = self._command_body(spec)
            ctx.keep("Body wrapped in Cursor command layout")
        else:
            body = spec.body
            self._note_purpose(spec, ctx)
        return fm, body

    def _rule_activation(self, spec: ComponentSpec, fm: dict, ctx: RenderContext) -> None:
        mode = spec.activation.mode
        globs = spec.activation.glob_patterns
        if globs:
            fm["globs"] = globs if len(globs) > 1 else globs[0]
            ctx.keep("File pattern activation via globs")
        if mode == ActivationMode.AUTO and not globs:
            fm["alwaysApply"] = True
            ctx.keep("Always-applied rule")
        elif mode in (ActivationMode.MANUAL, ActivationMode.HOOKED) or (mode == ActivationMode.AUTO and globs):
            ctx.loss(
                LossCategory.ACTIVATION,
                LossSeverity.WARNING,
                f"'{mode.value}' activation has no Cursor rule equivalent",
                "activation.mode",
            )
        elif mode == ActivationMode.CONTEXTUAL and not globs:
            ctx.loss(
                LossCategory.ACTIVATION,
                LossSeverity.WARNING,
                "Contextual activation without glob patterns cannot be expressed",
                "activation.triggers",
            )

    def _execution_losses(self, spec: ComponentSpec, ctx: RenderContext) -> None:
        execution = spec.execution
        if execution.context != ExecutionContext.MAIN:
            ctx.loss(
                LossCategory.EXECUTION,
                LossSeverity.WARNING,
                f"'{execution.context.value}' execution context is not supported in Cursor",
                "execution.context",
            )
        if execution.sub_agent:
            ctx.loss(
                LossCategory.EXECUTION,
                LossSeverity.WARNING,
                f"Sub-agent '{execution.sub_agent}' assignment is not supported in Cursor",
                "execution.sub_agent",
            )
        if execution.allowed_tools:
            ctx.loss(
                LossCategory.CAPABILITY,
                LossSeverity.WARNING,
                "Tool restrictions cannot be enforced; tools are listed as requirements",
                "execution.allowed_tools",
            )
        if execution.preferred_model:
            ctx.loss(
                LossCategory.EXECUTION,
                LossSeverity.INFO,
                f"Preferred model '{execution.preferred_model}' is not configurable",
                "execution.preferred_model",
            )
        if not spec.invocation.user_invocable:
            ctx.loss(
                LossCategory.INVOCATION,
                LossSeverity.INFO,
                "Cursor components are always user-invocable",
                "invocation.user_invocable",
            )
        self._note_restricted_tools(spec, ctx)

    def _command_body(self, spec: ComponentSpec) -> str:
        parts = [f"# {title_case(spec.id)}", "", "## Objective", "", spec.intent.purpose]

        when = spec.intent.when_to_use
        if when and when != spec.intent.purpose:
            parts += ["", "## When to Use", "", when]

        if spec.invocation.argument_hint or spec.invocation.arguments:
            parts += ["", "## Arguments", ""]
            if spec.invocation.argument_hint:
                parts.append(f"Provide: {spec.invocation.argument_hint}")
            for arg in spec.invocation.arguments:
                required = "required" if arg.required else "optional"
                parts.append(f"- `{arg.name}` ({required}): {arg.description}".rstrip(": "))

        parts += ["", "## Requirements", ""]
        if spec.execution.allowed_tools:
            parts += [f"- Be able to {tool_prose(tool)}" for tool in spec.execution.allowed_tools]
            parts.append("")
        parts.append(spec.body)
        return "\n".join(parts).strip()
