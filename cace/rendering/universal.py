"""Renderer for AGENTS.md.

AGENTS.md has no frontmatter; the body is written as-is and every
structured field is reported as lost.
"""

from __future__ import annotations

from cace.agents import Agent
from cace.ir.models import ComponentSpec, ComponentType
from cace.rendering.base import BaseRenderer, RenderContext
from cace.rendering.report import LossCategory, LossSeverity


class UniversalRenderer(BaseRenderer):
    agent = Agent.UNIVERSAL
    supports_frontmatter = False

    def target_component_type(self, spec: ComponentSpec) -> ComponentType:
        return ComponentType.MEMORY

    def get_target_directory(self, spec: ComponentSpec) -> str:
        return "."

    def get_target_filename(self, spec: ComponentSpec) -> str:
        return "AGENTS.md"

    def _emit(self, frontmatter: dict, body: str, comment: str | None) -> str:
        text = body.strip()
        if comment:
            text = f"{comment}\n\n{text}"
        return text + "\n"

    def _render(self, spec: ComponentSpec, ctx: RenderContext) -> tuple[dict, str]:
        ctx.keep("Instruction body")
        if spec.source_agent_id == Agent.UNIVERSAL:
            return {}, spec.body

        if spec.component_type != ComponentType.MEMORY:
            ctx.loss(
                LossCategory.CONTENT,
                LossSeverity.WARNING,
                f"{spec.component_type.value.capitalize()} '{spec.id}' becomes always-on project instructions",
                "component_type",
                "Keep invocable components in agent-specific directories",
            )
        self._note_always_on(spec, ctx, "AGENTS.md")
        ctx.loss(
            LossCategory.METADATA,
            LossSeverity.INFO,
            f"Name '{spec.id}' and description are not stored in AGENTS.md",
            "intent.summary",
            "Start the body with a short paragraph describing the component",
        )
        return {}, spec.body
