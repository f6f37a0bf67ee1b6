"""Renderer for Claude Code skills, commands, rules and CLAUDE.md memory."""

from __future__ import annotations

from cace.agents import Agent
from cace.ir.models import (
    ActivationMode,
    ComponentSpec,
    ComponentType,
    ExecutionContext,
    format_version,
)
from cace.parsing.claude import memory_summary
from cace.parsing.inference import MEMORY_CATEGORIES
from cace.rendering.base import BaseRenderer, RenderContext
from cace.rendering.report import LossCategory, LossSeverity


class ClaudeRenderer(BaseRenderer):
    agent = Agent.CLAUDE

    def target_component_type(self, spec: ComponentSpec) -> ComponentType:
        if spec.component_type in (ComponentType.COMMAND, ComponentType.RULE, ComponentType.MEMORY):
            return spec.component_type
        return ComponentType.SKILL

    def get_target_directory(self, spec: ComponentSpec) -> str:
        target = self.target_component_type(spec)
        if target == ComponentType.MEMORY:
            return "."
        if target == ComponentType.COMMAND:
            return ".claude/commands"
        if target == ComponentType.RULE:
            return ".claude/rules"
        return ".claude/skills"

    def get_target_filename(self, spec: ComponentSpec) -> str:
        target = self.target_component_type(spec)
        if target == ComponentType.MEMORY:
            return "CLAUDE.local.md" if spec.metadata.extra.get("scope") == "local" else "CLAUDE.md"
        if target == ComponentType.SKILL:
            return f"{spec.id}/SKILL.md"
        return f"{spec.id}.md"

    def _render(self, spec: ComponentSpec, ctx: RenderContext) -> tuple[dict, str]:
        if spec.component_type == ComponentType.MEMORY:
            return self._render_memory(spec, ctx)

        fm: dict = {"name": spec.id, "description": spec.intent.summary}
        activation = spec.activation

        if activation.mode == ActivationMode.MANUAL:
            fm["disable-model-invocation"] = True
            ctx.keep("Manual activation mode")
        elif activation.mode == ActivationMode.SUGGESTED:
            ctx.keep("Suggested activation mode")
        else:
            ctx.loss(
                LossCategory.ACTIVATION,
                LossSeverity.WARNING,
                f"Activation mode '{activation.mode.value}' has no Claude equivalent; "
                "rendered as model-invoked",
                "activation.mode",
            )
        if activation.triggers:
            ctx.loss(
                LossCategory.ACTIVATION,
                LossSeverity.WARNING,
                f"{len(activation.triggers)} activation trigger(s) cannot be expressed",
                "activation.triggers",
                "Describe when to apply this skill in its description",
            )

        fm["user-invocable"] = spec.invocation.user_invocable
        if spec.invocation.argument_hint:
            fm["argument-hint"] = spec.invocation.argument_hint
            ctx.keep("Argument hint")
        self._note_arguments(spec, ctx)

        execution = spec.execution
        if execution.context != ExecutionContext.MAIN:
            fm["context"] = execution.context.value
            ctx.keep(f"{execution.context.value.capitalize()} execution context")
        if execution.allowed_tools:
            fm["allowed-tools"] = list(execution.allowed_tools)
            ctx.keep("Tool restrictions")
        if execution.preferred_model:
            fm["model"] = execution.preferred_model
            ctx.keep("Preferred model")
        if execution.sub_agent:
            fm["agent"] = execution.sub_agent
            ctx.keep("Sub-agent assignment")
        self._note_restricted_tools(spec, ctx)

        if not spec.version.is_default:
            fm["version"] = format_version(spec.version)

        self._note_purpose(spec, ctx)
        self._note_category(spec, ctx)
        return fm, spec.body

    def _render_memory(self, spec: ComponentSpec, ctx: RenderContext) -> tuple[dict, str]:
        """CLAUDE.md is plain markdown; only the body and its imports survive."""
        ctx.keep("Instruction body")
        if spec.imports:
            ctx.keep(f"{len(spec.imports)} @path import(s)")

        self._note_always_on(spec, ctx, "CLAUDE.md")
        if spec.intent.summary != memory_summary(spec.body):
            ctx.loss(
                LossCategory.METADATA,
                LossSeverity.INFO,
                "Description is not stored in CLAUDE.md",
                "intent.summary",
                "Start the body with a heading that names the project",
            )
        if set(spec.category) != set(MEMORY_CATEGORIES):
            ctx.loss(
                LossCategory.METADATA,
                LossSeverity.INFO,
                f"Category tags {spec.category} cannot be stored",
                "category",
            )
        return {}, spec.body
