"""Renderer registry.

Populated once at import time with one renderer per agent.
``register_renderer`` is for startup-time extension only.
"""

from __future__ import annotations

from cace.agents import Agent
from cace.errors import ErrorCode
from cace.ir.models import ComponentSpec
from cace.rendering.base import BaseRenderer, RenderOptions, RenderResult
from cace.rendering.claude import ClaudeRenderer
from cace.rendering.codex import CodexRenderer
from cace.rendering.cursor import CursorRenderer
from cace.rendering.gemini import GeminiRenderer
from cace.rendering.opencode import OpenCodeRenderer
from cace.rendering.report import ConversionReport, calculate_fidelity
from cace.rendering.universal import UniversalRenderer
from cace.rendering.windsurf import WindsurfRenderer

_RENDERERS: dict[Agent, BaseRenderer] = {}


def register_renderer(renderer: BaseRenderer) -> None:
    _RENDERERS[renderer.agent] = renderer


for _renderer in (
    ClaudeRenderer(),
    WindsurfRenderer(),
    CursorRenderer(),
    UniversalRenderer(),
    OpenCodeRenderer(),
    GeminiRenderer(),
    CodexRenderer(),
):
    register_renderer(_renderer)


def get_renderer(agent: Agent) -> BaseRenderer | None:
    return _RENDERERS.get(agent)


def registered_renderers() -> list[Agent]:
    return list(_RENDERERS)


def render_component(
    spec: ComponentSpec, agent: Agent, options: RenderOptions | None = None
) -> RenderResult:
    renderer = get_renderer(agent)
    if renderer is None:
        return RenderResult(
            False,
            errors=[f"No renderer registered for agent: {agent}"],
            error_code=ErrorCode.UNSUPPORTED_CONVERSION,
        )
    return renderer.render(spec, options)


__all__ = [
    "BaseRenderer",
    "ConversionReport",
    "RenderOptions",
    "RenderResult",
    "calculate_fidelity",
    "get_renderer",
    "register_renderer",
    "registered_renderers",
    "render_component",
]
