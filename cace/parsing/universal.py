"""Parser for AGENTS.md, the cross-agent project instruction file.

AGENTS.md is plain markdown with no frontmatter vocabulary. It always
becomes an always-on ``memory`` component whose sections are kept in
``ComponentSpec.sections``.
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
    SafetyLevel,
    SemanticIntent,
)
from cace.parsing.base import BaseParser, ParserOptions
from cace.parsing.inference import MEMORY_CATEGORIES, first_paragraph, parse_sections

UNIVERSAL_ID = "agents-md"
UNIVERSAL_PURPOSE = "Provide project context and instructions to AI coding assistants"


class UniversalParser(BaseParser):
    agent = Agent.UNIVERSAL

    def can_parse(self, content: str, filename: str | None = None) -> bool:
        if filename and filename.replace("\\", "/").endswith("AGENTS.md"):
            return True
        if re.search(r"^#\s+AGENTS\.md", content, re.MULTILINE):
            return True
        has_setup = re.search(r"^##\s+Setup", content, re.MULTILINE | re.IGNORECASE)
        has_style = re.search(r"^##\s+Code Style", content, re.MULTILINE | re.IGNORECASE)
        return bool(has_setup and has_style)

    def _build(self, fm: dict, body: str, options: ParserOptions, warnings: list[str]) -> ComponentSpec:
        sections = parse_sections(body)
        summary = first_paragraph(body)
        if not summary:
            titles = [s.title for s in sections[:3]]
            summary = (
                "Project instructions: " + ", ".join(titles) if titles else "Project instructions"
            )
        if fm:
            warnings.append("AGENTS.md frontmatter is ignored")

        return ComponentSpec(
            id=UNIVERSAL_ID,
            component_type=ComponentType.MEMORY,
            category=list(MEMORY_CATEGORIES),
            intent=SemanticIntent(
                summary=summary,
                purpose=UNIVERSAL_PURPOSE,
                category=list(MEMORY_CATEGORIES),
            ),
            activation=ActivationModel(mode=ActivationMode.AUTO, safety_level=SafetyLevel.SAFE),
            invocation=InvocationModel(user_invocable=False),
            body=body,
            capabilities=self.capabilities_for(body, None, options),
            metadata=ComponentMetadata(original_format="agents-md"),
            sections=sections,
        )
