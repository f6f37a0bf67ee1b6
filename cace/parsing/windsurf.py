"""Parser for Windsurf (Cascade) workflows and rules.

Windsurf frontmatter carries only ``description``, ``auto_execution_mode``,
``tags`` and ``version``; the id comes from the file name.
"""

from __future__ import annotations

from cace.agents import Agent
from cace.ir.models import (
    ActivationMode,
    ActivationModel,
    ComponentMetadata,
    ComponentSpec,
    ComponentType,
    InvocationModel,
    SemanticIntent,
    parse_version,
)
from cace.parsing.base import BaseParser, ParserOptions
from cace.parsing.inference import id_from_path, infer_category, infer_safety, string_list


def activation_from_auto_execution(mode) -> ActivationMode:
    """0 or absent is manual, 1 suggested, 2 contextual, 3 and above auto."""
    if mode is None:
        return ActivationMode.MANUAL
    level = int(mode)
    if level <= 0:
        return ActivationMode.MANUAL
    if level == 1:
        return ActivationMode.SUGGESTED
    if level == 2:
        return ActivationMode.CONTEXTUAL
    return ActivationMode.AUTO


class WindsurfParser(BaseParser):
    agent = Agent.WINDSURF

    def can_parse(self, content: str, filename: str | None = None) -> bool:
        if self.path_contains(filename, ".windsurf/workflows/", ".windsurf/rules/"):
            return True
        fm = self.frontmatter_of(content)
        return "description" in fm and "auto_execution_mode" in fm

    def _build(self, fm: dict, body: str, options: ParserOptions, warnings: list[str]) -> ComponentSpec:
        source = options.source_file
        is_rule = self.path_contains(source, "/rules/")
        component_type = ComponentType.RULE if is_rule else ComponentType.WORKFLOW
        component_id = id_from_path(source, ".windsurf/") or f"unknown-{component_type.value}"

        description = fm.get("description")
        description = str(description) if description is not None else None
        raw_mode = fm.get("auto_execution_mode")
        mode = activation_from_auto_execution(raw_mode)
        tags = string_list(fm.get("tags"))
        capabilities = self.capabilities_for(body, None, options)
        summary = description or f"Windsurf {component_type.value}: {component_id}"

        spec = ComponentSpec(
            id=component_id,
            component_type=component_type,
            version=parse_version(fm.get("version")),
            category=tags or infer_category(description, body),
            intent=SemanticIntent(
                summary=summary,
                purpose=description or summary,
                when_to_use=description,
            ),
            activation=ActivationModel(
                mode=mode,
                safety_level=infer_safety(body, capabilities),
                requires_confirmation=mode == ActivationMode.MANUAL,
            ),
            invocation=InvocationModel(user_invocable=True, slash_command=component_id),
            body=body,
            capabilities=capabilities,
            metadata=ComponentMetadata(
                original_format=f"windsurf-{component_type.value}",
                tags=tags,
            ),
        )

        if raw_mode is not None and int(raw_mode) > 0:
            warnings.append(
                f"auto_execution_mode={raw_mode} may not have direct equivalents in other agents"
            )
        return spec
