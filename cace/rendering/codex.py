"""Renderer for OpenAI Codex skills, prompts, rules and memory.

Codex expresses safety through ``sandbox_mode`` and ``approval_policy``.
Settings read from a Codex source are written back unchanged; an isolated
execution context becomes the ``danger-full-access`` sandbox.
"""

from __future__ import annotations

from cace.agents import Agent
from cace.ir.models import (
    ActivationMode,
    ComponentSpec,
    ComponentType,
    ExecutionContext,
    SafetyLevel,
    TriggerType,
    format_version,
)
from cace.rendering.base import BaseRenderer, RenderContext
from cace.rendering.report import LossCategory, LossSeverity

GEMINI_ONLY_FIELDS = ("temperature", "max_tokens", "include_directories", "code_execution", "google_search")

_DIRECTORIES = {
    ComponentType.SKILL: ".codex/skills",
    ComponentType.COMMAND: ".codex/commands",
    ComponentType.RULE: ".codex/rules",
    ComponentType.MEMORY: ".codex/memory",
}


class CodexRenderer(BaseRenderer):
    agent = Agent.CODEX
    base_fidelity = 95

    def cross_agent_penalty(self, source: Agent | None) -> int:
        return 0 if source in (None, Agent.CLAUDE, Agent.CODEX) else 5

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
        extra = spec.metadata.extra if spec.source_agent_id == Agent.CODEX else {}
        fm: dict = {"name": spec.id, "description": spec.intent.summary}
        ctx.keep("Name and description")

        self._activation(spec, target, fm, ctx)
        self._sandbox(spec, extra, fm, ctx)

        if spec.invocation.argument_hint:
            fm["argument_hint"] = spec.invocation.argument_hint
            ctx.keep("Argument hint")
        self._note_arguments(spec, ctx)
        if not spec.invocation.user_invocable:
            ctx.loss(
                LossCategory.INVOCATION,
                LossSeverity.INFO,
                "Codex components are always user-invocable",
                "invocation.user_invocable",
            )

        execution = spec.execution
        if execution.preferred_model:
            fm["model"] = execution.preferred_model
            ctx.keep("Preferred model")
        if execution.allowed_tools:
            fm["tools"] = list(execution.allowed_tools)
            ctx.keep("Tool list")
        if execution.context == ExecutionContext.FORK:
            ctx.loss(
                LossCategory.EXECUTION,
                LossSeverity.WARNING,
                "Forked execution context is not supported by Codex",
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

        if "web_search" in extra:
            fm["web_search"] = extra["web_search"]
        if "mcp_servers" in extra:
            fm["mcp_servers"] = extra["mcp_servers"]
        elif spec.capabilities.needs_mcp:
            fm["mcp_servers"] = {name: {} for name in spec.capabilities.needs_mcp}
            ctx.warn(
                "MCP_SERVER_STUB",
                "MCP servers were added without command or url; complete them in config.toml",
                "capabilities.needs_mcp",
            )
        if spec.capabilities.needs_mcp:
            ctx.keep("MCP server references")

        if spec.source_agent_id == Agent.GEMINI:
            for key in GEMINI_ONLY_FIELDS:
                if key in spec.metadata.extra:
                    ctx.loss(
                        LossCategory.EXECUTION,
                        LossSeverity.INFO,
                        f"Gemini setting '{key}' has no Codex equivalent",
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
        if any(t.type != TriggerType.GLOB for t in activation.triggers):
            ctx.loss(
                LossCategory.ACTIVATION,
                LossSeverity.WARNING,
                "Keyword, context and hook triggers cannot be expressed",
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
        elif mode == ActivationMode.AUTO:
            if target != ComponentType.MEMORY:
                fm["alwaysApply"] = True
            ctx.keep("Always-applied activation")
        elif mode == ActivationMode.HOOKED:
            ctx.loss(
                LossCategory.ACTIVATION,
                LossSeverity.WARNING,
                "Hook-driven activation is not supported; rendered as suggested",
                "activation.mode",
            )
        else:
            ctx.keep("Suggested activation")

    def _sandbox(self, spec: ComponentSpec, extra: dict, fm: dict, ctx: RenderContext) -> None:
        safety = spec.activation.safety_level
        if "sandbox_mode" in extra:
            fm["sandbox_mode"] = extra["sandbox_mode"]
        elif spec.execution.context == ExecutionContext.ISOLATED:
            fm["sandbox_mode"] = "danger-full-access"
            ctx.keep("Isolated execution as danger-full-access sandbox")
            if safety != SafetyLevel.DANGEROUS:
                ctx.loss(
                    LossCategory.EXECUTION,
                    LossSeverity.WARNING,
                    "Isolated execution requires a full-access sandbox; safety becomes dangerous",
                    "activation.safety_level",
                )

        if "approval_policy" in extra:
            fm["approval_policy"] = extra["approval_policy"]
            ctx.keep("Approval policy")
        elif safety == SafetyLevel.DANGEROUS:
            fm["approval_policy"] = "on-request"
            ctx.warn(
                "SAFETY_APPROVAL",
                "Dangerous component: approval_policy set to on-request",
                "activation.safety_level",
            )
        else:
            ctx.keep(f"Safety level ({safety.value})")
