"""Parser for Gemini CLI skills, commands and GEMINI.md memory files."""

from __future__ import annotations

from cace.agents import Agent
from cace.ir.models import (
    ActivationMode,
    ActivationModel,
    ComponentMetadata,
    ComponentSpec,
    ComponentType,
    ExecutionModel,
    InvocationModel,
    SafetyLevel,
    SemanticIntent,
    parse_version,
)
from cace.parsing.base import BaseParser, ParserOptions
from cace.parsing.inference import (
    first_paragraph,
    id_from_path,
    infer_category,
    infer_safety,
    parse_sections,
    string_list,
)

GEMINI_MARKER_FIELDS = ("code_execution", "google_search", "temperature", "include_directories")

# Frontmatter settings kept in metadata.extra so a Gemini re-render can restore them
GEMINI_EXTRA_FIELDS = (
    "temperature", "max_tokens", "include_directories", "code_execution", "google_search",
)


class GeminiParser(BaseParser):
    agent = Agent.GEMINI

    def can_parse(self, content: str, filename: str | None = None) -> bool:
        if self.path_contains(filename, ".gemini/", "GEMINI.md"):
            return True
        fm = self.frontmatter_of(content)
        return any(key in fm for key in GEMINI_MARKER_FIELDS)

    def _component_type(self, fm: dict, source: str | None) -> ComponentType:
        if source and source.replace("\\", "/").endswith("GEMINI.md"):
            return ComponentType.MEMORY
        default = ComponentType.COMMAND if fm.get("slash_command") else ComponentType.SKILL
        return self.component_type_from_path(source, default)

    def _build(self, fm: dict, body: str, options: ParserOptions, warnings: list[str]) -> ComponentSpec:
        source = options.source_file
        component_type = self._component_type(fm, source)
        fallback_id = "gemini-config" if component_type == ComponentType.MEMORY else "unnamed"
        component_id = str(fm.get("name") or id_from_path(source, ".gemini/") or fallback_id)

        tools = string_list(fm.get("tools"))
        code_execution = bool(fm.get("code_execution"))
        google_search = bool(fm.get("google_search"))
        slash_command = fm.get("slash_command")
        globs = self.glob_triggers(fm.get("globs"))

        capabilities = self.capabilities_for(body, tools, options)
        safety = infer_safety(body, capabilities)
        if code_execution and safety == SafetyLevel.SAFE:
            safety = SafetyLevel.SENSITIVE
        capabilities.needs_shell = capabilities.needs_shell or code_execution
        capabilities.needs_network = capabilities.needs_network or google_search

        if component_type == ComponentType.MEMORY:
            mode = ActivationMode.AUTO
        elif globs:
            mode = ActivationMode.CONTEXTUAL
        elif slash_command:
            mode = ActivationMode.MANUAL
        else:
            mode = ActivationMode.SUGGESTED

        description = fm.get("description")
        summary = (
            str(description) if description is not None
            else first_paragraph(body) or f"Gemini {component_type.value}: {component_id}"
        )

        return ComponentSpec(
            id=component_id,
            component_type=component_type,
            version=parse_version(fm.get("version")),
            category=infer_category(summary, body),
            intent=SemanticIntent(summary=summary, purpose=summary),
            activation=ActivationModel(mode=mode, safety_level=safety, triggers=globs),
            invocation=InvocationModel(
                user_invocable=True,
                slash_command=str(slash_command) if slash_command else None,
            ),
            execution=ExecutionModel(
                allowed_tools=tools,
                preferred_model=str(fm["model"]) if fm.get("model") else None,
            ),
            body=body,
            capabilities=capabilities,
            metadata=ComponentMetadata(
                original_format=f"gemini-{component_type.value}",
                extra={key: fm[key] for key in GEMINI_EXTRA_FIELDS if key in fm},
            ),
            sections=parse_sections(body) if component_type == ComponentType.MEMORY else [],
        )
