"""Renderer for Windsurf (Cascade) workflows and rules.

Windsurf has no tool restrictions, execution contexts or argument syntax.
Claude-style ``$ARGUMENTS`` placeholders and ``!`cmd``` shell injections in
the body are rewritten to prose.
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
from cace.rendering.base import BaseRenderer, RenderContext
from cace.rendering.report import LossCategory, LossSeverity

AUTO_EXECUTION_MODES = {
    ActivationMode.MANUAL: 0,
    ActivationMode.SUGGESTED: 1,
    ActivationMode.CONTEXTUAL: 2,
    ActivationMode.AUTO: 3,
    ActivationMode.HOOKED: 0,
}

_SHELL_INJECTION_RE = re.compile(r"!`([^`]+)`")


def transform_body(body: str) -> tuple[str, list[str]]:
    """Rewrite Claude-only body syntax; returns the body and what changed."""
    changes = []
    if "$ARGUMENTS" in body:
        body = body.replace("$ARGUMENTS", "<user-provided arguments>")
        changes.append("$ARGUMENTS placeholder converted to prose")
    if _SHELL_INJECTION_RE.search(body):
        body = _SHELL_INJECTION_RE.sub(r"(run: `\1`)", body)
        changes.append("Shell injections converted to run instructions")
    return body, changes


class WindsurfRenderer(BaseRenderer):
    agent = Agent.WINDSURF

    def target_component_type(self, spec: ComponentSpec) -> ComponentType:
        return ComponentType.RULE if spec.component_type == ComponentType.RULE else ComponentType.WORKFLOW

    def get_target_directory(self, spec: ComponentSpec) -> str:
        if self.target_component_type(spec) == ComponentType.RULE:
            return ".windsurf/rules"
        return ".windsurf/workflows"

    def get_target_filename(self, spec: ComponentSpec) -> str:
        return f"{spec.id}.md"

    def _render(self, spec: ComponentSpec, ctx: RenderContext) -> tuple[dict, str]:
        fm: dict = {"description": spec.intent.summary}
        ctx.keep("Description")

        mode = spec.activation.mode
        level = AUTO_EXECUTION_MODES[mode]
        if level > 0:
            fm["auto_execution_mode"] = level
        if mode == ActivationMode.HOOKED:
            ctx.loss(
                LossCategory.ACTIVATION,
                LossSeverity.WARNING,
                "Hook-driven activation is not supported; rendered as manual",
                "activation.mode",
            )
        else:
            ctx.keep(f"Activation mode ({mode.value} -> auto_execution_mode {level})")
        if spec.activation.triggers:
            ctx.loss(
                LossCategory.ACTIVATION,
                LossSeverity.WARNING,
                f"{len(spec.activation.triggers)} activation trigger(s) cannot be expressed",
                "activation.triggers",
            )

        if spec.category:
            fm["tags"] = list(spec.category)
            ctx.keep("Category tags")

        execution = spec.execution
        if execution.context != ExecutionContext.MAIN:
            ctx.loss(
                LossCategory.EXECUTION,
                LossSeverity.WARNING,
                f"'{execution.context.value}' execution context has no Windsurf equivalent",
                "execution.context",
                "Run the workflow in a separate Cascade session for isolation",
            )
        if execution.sub_agent:
            ctx.loss(
                LossCategory.EXECUTION,
                LossSeverity.WARNING,
                f"Sub-agent '{execution.sub_agent}' cannot be delegated to",
                "execution.sub_agent",
            )
        if execution.preferred_model:
            ctx.loss(
                LossCategory.EXECUTION,
                LossSeverity.INFO,
                f"Preferred model '{execution.preferred_model}' is not configurable per workflow",
                "execution.preferred_model",
            )
        if execution.allowed_tools:
            ctx.warn(
                "TOOL_RESTRICTION_LOST",
                "Tool restrictions cannot be enforced in Windsurf",
                "execution.allowed_tools",
            )
        self._note_restricted_tools(spec, ctx)

        if spec.invocation.argument_hint:
            ctx.warn(
                "ARGUMENT_HINT_DEGRADED",
                f"Argument hint '{spec.invocation.argument_hint}' becomes a prose placeholder",
                "invocation.argument_hint",
            )
        self._note_arguments(spec, ctx)
        if not spec.invocation.user_invocable:
            ctx.loss(
                LossCategory.INVOCATION,
                LossSeverity.INFO,
                "Windsurf workflows are always user-invocable",
                "invocation.user_invocable",
            )

        if not spec.version.is_default:
            fm["version"] = format_version(spec.version)

        body, changes = transform_body(spec.body)
        for change in changes:
            ctx.keep(change)

        self._note_purpose(spec, ctx)
        return fm, body
