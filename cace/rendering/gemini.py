"""Renderer for Gemini CLI skills, commands and GEMINI.md memory."""

from __future__ import annotations

from cace.agents import Agent
from cace.ir.models import (
    ActivationMode,
    ComponentSpec,
    ComponentType,
    ExecutionContext,
    TriggerType,
    format_version,
)
from cace.rendering.base import BaseRenderer, RenderContext
from cace.rendering.report import LossCategory, LossSeverity

# Gemini settings passed through from a Gemini source
PASSTHROUGH_FIELDS = ("temperature", "max_tokens", "include_directories")

CODEX_ONLY_FIELDS = ("approval_policy", "sandbox_mode", "web_search")


class GeminiRenderer(BaseRenderer):
    agent = Agent.GEMINI
    base_fidelity = 90

    def cross_agent_penalty(self, source: Agent | None) -> int:
        return 0 if source in (None, Agent.GEMINI) else 5

    def target_component_type(self, spec: ComponentSpec) -> ComponentType:
        if spec.component_type in (ComponentType.SKILL, ComponentType.COMMAND, ComponentType.MEMORY):
            return spec.component_type
        if spec.component_type == ComponentType.WORKFLOW:
            return ComponentType.COMMAND
        return ComponentType.SKILL

    def get_target_directory(self, spec: ComponentSpec) -> str:
        target = self.target_component_type(spec)
        if target == ComponentType.MEMORY:
            return "."
        if target == ComponentType.COMMAND:
            return ".gemini/commands"
        return ".gemini/skills"

    def get_target_filename(self, spec: ComponentSpec) -> str:
        target = self.target_component_type(spec)
        if target == ComponentType.MEMORY:
            return "GEMINI.md"
        if target == ComponentType.COMMAND:
            return f"{spec.id}.md"
        return f"{spec.id}/SKILL.md"

    def _render(self, spec: ComponentSpec, ctx: RenderContext) -> tuple[dict, str]:
        target = self.target_component_type(spec)
        extra = spec.metadata.extra if spec.source_agent_id == Agent.GEMINI else {}
        fm: dict = {"name": spec.id, "description": spec.intent.summary}
        ctx.keep("Name and description")

        self._activation(spec, target, fm, ctx)

        execution = spec.execution
        if execution.preferred_model:
            fm["model"] = execution.preferred_model
            ctx.keep("Preferred model")
        if execution.allowed_tools:
            fm["tools"] = list(execution.allowed_tools)
            ctx.keep("Tool list")
        for key in PASSTHROUGH_FIELDS:
            if key in extra:
                fm[key] = extra[key]

        capabilities = spec.capabilities
        if extra.get("code_execution") or capabilities.needs_shell:
            fm["code_execution"] = True
            ctx.keep("Shell access as code_execution")
        if extra.get("google_search") or capabilities.needs_network:
            fm["google_search"] = True
            ctx.keep("Network access as google_search")
        if capabilities.needs_mcp:
            ctx.loss(
                LossCategory.CAPABILITY,
                LossSeverity.WARNING,
                f"MCP servers {capabilities.needs_mcp} must be configured in settings.json",
                "capabilities.needs_mcp",
                "Add the servers to .gemini/settings.json under mcpServers",
            )

        if execution.context != ExecutionContext.MAIN:
            ctx.loss(
                LossCategory.EXECUTION,
                LossSeverity.WARNING,
                f"'{execution.context.value}' execution context is not supported by Gemini CLI",
                "execution.context",
            )
        if execution.sub_agent:
            ctx.loss(
                LossCategory.EXECUTION,
                LossSeverity.WARNING,
                f"Sub-agent '{execution.sub_agent}' cannot be delegated to",
                "execution.sub_agent",
            )
        self._note_restricted_tools(spec, ctx)

        if spec.invocation.argument_hint:
            ctx.loss(
                LossCategory.INVOCATION,
                LossSeverity.INFO,
                "Argument hints are not supported; use {{args}} in the prompt body",
                "invocation.argument_hint",
            )
        self._note_arguments(spec, ctx)
        if not spec.invocation.user_invocable:
            ctx.loss(
                LossCategory.INVOCATION,
                LossSeverity.INFO,
                "Gemini components are always user-invocable",
                "invocation.user_invocable",
            )

        if spec.source_agent_id == Agent.CODEX:
            for key in CODEX_ONLY_FIELDS:
                if key in spec.metadata.extra:
                    ctx.loss(
                        LossCategory.EXECUTION,
                        LossSeverity.INFO,
                        f"Codex setting '{key}' has no Gemini equivalent",
                        f"metadata.extra.{key}",
                    )

        if not spec.version.is_default:
            fm["version"] = format_version(spec.version)

        self._note_purpose(spec, ctx)
        self._note_category(spec, ctx)
        return fm, spec.body

    def _activation(self, spec: ComponentSpec, target: ComponentType, fm: dict, ctx: RenderContext) -> None:
        activation = spec.activation
        mode = activation.mode
        globs = activation.glob_patterns
        if globs:
            fm["globs"] = globs
            ctx.keep("File pattern triggers")
        other_triggers = [t for t in activation.triggers if t.type != TriggerType.GLOB]
        if other_triggers:
            ctx.loss(
                LossCategory.ACTIVATION,
                LossSeverity.WARNING,
                f"{len(other_triggers)} non-glob trigger(s) cannot be expressed",
                "activation.triggers",
            )

        slash_command = spec.invocation.slash_command
        if mode == ActivationMode.MANUAL:
            fm["slash_command"] = slash_command or spec.id
            ctx.keep("Manual activation via slash_command")
        elif mode == ActivationMode.CONTEXTUAL:
            if slash_command:
                fm["slash_command"] = slash_command
            if not globs:
                ctx.loss(
                    LossCategory.ACTIVATION,
                    LossSeverity.WARNING,
                    "Contextual activation without glob patterns cannot be expressed",
                    "activation.mode",
                )
        elif mode == ActivationMode.AUTO and target == ComponentType.MEMORY:
            ctx.keep("Always-on memory")
        elif mode in (ActivationMode.AUTO, ActivationMode.HOOKED):
            ctx.loss(
                LossCategory.ACTIVATION,
                LossSeverity.WARNING,
                f"'{mode.value}' activation is not supported; rendered as suggested",
                "activation.mode",
                "Move always-on instructions into GEMINI.md",
            )
        else:
            ctx.keep("Suggested activation")
