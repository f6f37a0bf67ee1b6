"""Renderer for OpenCode skills, commands and agents."""

from __future__ import annotations

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

_DIRECTORIES = {
    ComponentType.SKILL: ".opencode/skills",
    ComponentType.COMMAND: ".opencode/commands",
    ComponentType.AGENT: ".opencode/agents",
}


class OpenCodeRenderer(BaseRenderer):
    agent = Agent.OPENCODE
    base_fidelity = 95

    def target_component_type(self, spec: ComponentSpec) -> ComponentType:
        if spec.component_type in _DIRECTORIES:
            return spec.component_type
        if spec.component_type == ComponentType.WORKFLOW:
            return ComponentType.COMMAND
        return ComponentType.SKILL

    def get_target_directory(self, spec: ComponentSpec) -> str:
        return _DIRECTORIES[self.target_component_type(spec)]

    def get_target_filename(self, spec: ComponentSpec) -> str:
        if self.target_component_type(spec) == ComponentType.SKILL:
            return f"{spec.id}/SKILL.md"
        return f"{spec.id}.md"

    def _render(self, spec: ComponentSpec, ctx: RenderContext) -> tuple[dict, str]:
        target = self.target_component_type(spec)
        fm: dict = {"description": spec.intent.summary}
        if target == ComponentType.SKILL:
            fm["name"] = spec.id
        ctx.keep("Description")

        expected = ActivationMode.MANUAL if target == ComponentType.COMMAND else ActivationMode.SUGGESTED
        if spec.activation.mode != expected:
            ctx.loss(
                LossCategory.ACTIVATION,
                LossSeverity.WARNING,
                f"OpenCode {target.value}s are {expected.value}; "
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
            )

        execution = spec.execution
        if execution.sub_agent:
            fm["agent"] = execution.sub_agent
            ctx.keep("Sub-agent delegation")
        if execution.context == ExecutionContext.FORK:
            fm["subtask"] = True
            ctx.keep("Forked execution as subtask")
        elif execution.context == ExecutionContext.ISOLATED:
            ctx.loss(
                LossCategory.EXECUTION,
                LossSeverity.WARNING,
                "Isolated execution is not supported; run as a subtask instead",
                "execution.context",
            )
        if execution.preferred_model:
            fm["model"] = execution.preferred_model
            ctx.keep("Preferred model")
        if execution.allowed_tools:
            ctx.loss(
                LossCategory.CAPABILITY,
                LossSeverity.WARNING,
                "Per-component tool restrictions are configured on agents, not here",
                "execution.allowed_tools",
                "Define an OpenCode agent with the allowed tools and reference it",
            )
        self._note_restricted_tools(spec, ctx)

        if spec.source_agent_id == Agent.OPENCODE and "mode" in spec.metadata.extra:
            fm["mode"] = spec.metadata.extra["mode"]

        if spec.invocation.argument_hint:
            ctx.loss(
                LossCategory.INVOCATION,
                LossSeverity.INFO,
                "Argument hints are not supported; use $ARGUMENTS in the body",
                "invocation.argument_hint",
            )
        self._note_arguments(spec, ctx)
        if not spec.invocation.user_invocable:
            ctx.loss(
                LossCategory.INVOCATION,
                LossSeverity.INFO,
                "OpenCode components are always user-invocable",
                "invocation.user_invocable",
            )

        if not spec.version.is_default:
            fm["version"] = format_version(spec.version)

        self._note_purpose(spec, ctx)
        self._note_category(spec, ctx)
        return fm, spec.body
