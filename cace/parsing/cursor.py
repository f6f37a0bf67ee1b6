"""Parser for Cursor commands, rules and skills.

Cursor commands are plain markdown: a ``# Title`` followed by sections such
as ``## Objective``, ``## When to Use`` and ``## Requirements``. Frontmatter
is optional (title, description, tags, version, globs, alwaysApply).
"""

from __future__ import annotations

import re

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
from cace.parsing.inference import (
    extract_section,
    first_heading,
    id_from_path,
    infer_category,
    infer_safety,
    slugify,
    string_list,
)

NO_STRUCTURED_ARGS = "Cursor commands have no structured argument system - arguments are free-form"


class CursorParser(BaseParser):
    agent = Agent.CURSOR

    def can_parse(self, content: str, filename: str | None = None) -> bool:
        if self.path_contains(filename, ".cursor/commands/"):
            return True
        has_title = re.search(r"^#\s+.+", content, re.MULTILINE) is not None
        has_section = re.search(r"^##\s+(Objective|Requirements)", content, re.MULTILINE | re.IGNORECASE)
        return has_title and has_section is not None

    def _component_type(self, fm: dict, source: str | None) -> ComponentType:
        if self.path_contains(source, ".cursor/skills/"):
            return ComponentType.SKILL
        if self.path_contains(source, ".cursor/commands/"):
            return ComponentType.COMMAND
        if (source and source.endswith((".mdc", ".cursorrules"))) or "globs" in fm or "alwaysApply" in fm:
            return ComponentType.RULE
        return ComponentType.COMMAND

    def _build(self, fm: dict, body: str, options: ParserOptions, warnings: list[str]) -> ComponentSpec:
        source = options.source_file
        component_type = self._component_type(fm, source)

        title = str(fm.get("title") or first_heading(body) or "Unknown Command")
        component_id = id_from_path(source, ".cursor/") or slugify(title) or "unknown-command"
        if source and source.endswith(".cursorrules"):
            component_id = "cursorrules"

        objective = extract_section(body, "Objective")
        description = fm.get("description")
        summary = str(description) if description is not None else (objective or title)
        tags = string_list(fm.get("tags"))
        capabilities = self.capabilities_for(body, None, options)

        globs = self.glob_triggers(fm.get("globs"))
        if component_type == ComponentType.RULE:
            if globs:
                mode = ActivationMode.CONTEXTUAL
            elif fm.get("alwaysApply"):
                mode = ActivationMode.AUTO
            else:
                mode = ActivationMode.SUGGESTED
        elif component_type == ComponentType.SKILL:
            mode = ActivationMode.SUGGESTED
        else:
            mode = ActivationMode.MANUAL

        spec = ComponentSpec(
            id=component_id,
            component_type=component_type,
            version=parse_version(fm.get("version")),
            category=tags or infer_category(summary, body),
            intent=SemanticIntent(
                summary=summary,
                purpose=objective or summary,
                when_to_use=extract_section(body, "When to Use"),
            ),
            activation=ActivationModel(
                mode=mode,
                safety_level=infer_safety(body, capabilities),
                triggers=globs,
                requires_confirmation=mode == ActivationMode.MANUAL,
            ),
            invocation=InvocationModel(
                user_invocable=True,
                slash_command=None if component_type == ComponentType.RULE else component_id,
            ),
            body=body,
            capabilities=capabilities,
            metadata=ComponentMetadata(
                original_format=f"cursor-{component_type.value}",
                tags=tags,
            ),
        )

        if component_type == ComponentType.COMMAND:
            warnings.append(NO_STRUCTURED_ARGS)
        return spec
