"""Parser contract shared by every dialect.

A parser turns one source document into a ``ComponentSpec``. ``parse`` never
raises for bad input: malformed YAML, empty content and type errors in
frontmatter values all come back as a failed ``ParseResult``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone

from cace.agents import Agent
from cace.errors import ErrorCode
from cace.ir.models import (
    AgentDescriptor,
    CapabilitySet,
    ComponentSpec,
    ComponentType,
    TriggerSpec,
    TriggerType,
)
from cace.parsing.frontmatter import FrontmatterError, safe_frontmatter, split_frontmatter
from cace.parsing.inference import infer_capabilities, string_list

logger = logging.getLogger(__name__)


@dataclass
class ParserOptions:
    source_file: str | None = None
    infer_capabilities: bool = True
    source_version: str | None = None  # Overrides version detection
    validate_on_parse: bool = False
    strict: bool = False


@dataclass
class ParseResult:
    success: bool
    spec: ComponentSpec | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    error_code: ErrorCode | None = None


class BaseParser(ABC):
    """Base class for dialect parsers.

    Subclasses set ``agent`` and implement ``can_parse`` and ``_build``.
    ``_build`` receives the loaded frontmatter and body and may raise
    ``ValueError`` or ``TypeError``; both become parse failures.
    """

    agent: Agent

    @abstractmethod
    def can_parse(self, content: str, filename: str | None = None) -> bool:
        ...

    @abstractmethod
    def _build(
        self, frontmatter: dict, body: str, options: ParserOptions, warnings: list[str]
    ) -> ComponentSpec:
        ...

    def parse(self, content: str, options: ParserOptions | None = None) -> ParseResult:
        options = options or ParserOptions()
        if not content or not content.strip():
            return ParseResult(
                False,
                errors=["Content is empty. Please provide valid component content."],
                error_code=ErrorCode.PARSE_FAILED,
            )

        try:
            frontmatter, body = split_frontmatter(content)
        except FrontmatterError as e:
            logger.debug("%s: frontmatter rejected: %s", self.agent, e)
            return ParseResult(False, errors=[str(e)], error_code=ErrorCode.INVALID_FRONTMATTER)

        warnings: list[str] = []
        try:
            spec = self._build(frontmatter, body, options, warnings)
        except (TypeError, ValueError, AttributeError) as e:
            logger.debug("%s: parse failed: %s", self.agent, e)
            return ParseResult(
                False,
                errors=[f"Failed to parse {self.agent} component: {e}"],
                error_code=ErrorCode.PARSE_FAILED,
            )

        version = options.source_version or self.detect_version(content, options.source_file).version
        spec.source_agent = AgentDescriptor(
            id=self.agent,
            version=version,
            detected_at=datetime.now(timezone.utc).isoformat(),
        )
        spec.metadata.source_file = options.source_file
        spec.metadata.updated_at = spec.source_agent.detected_at

        if options.validate_on_parse:
            from cace.validation import validate

            validation = validate(
                content, self.agent, spec.component_type.value, strict=options.strict
            )
            warnings.extend(f"[Validation] {issue.message}" for issue in validation.issues)

        logger.debug("%s: parsed %s '%s'", self.agent, spec.component_type.value, spec.id)
        return ParseResult(True, spec=spec, warnings=warnings)

    def detect_version(self, content: str, file_path: str | None = None):
        """Detect which catalog version of this dialect ``content`` targets."""
        from cace.versioning.detector import detect_version

        return detect_version(self.agent, content, file_path)

    # --- Helpers for subclasses ---

    @staticmethod
    def frontmatter_of(content: str) -> dict:
        return safe_frontmatter(content)

    @staticmethod
    def glob_triggers(value) -> list[TriggerSpec]:
        return [TriggerSpec(type=TriggerType.GLOB, pattern=g) for g in string_list(value)]

    @staticmethod
    def path_contains(filename: str | None, *markers: str) -> bool:
        if not filename:
            return False
        normalized = filename.replace("\\", "/")
        return any(m in normalized for m in markers)

    @staticmethod
    def component_type_from_path(
        filename: str | None, default: ComponentType
    ) -> ComponentType:
        """Map conventional directory names to component types."""
        if not filename:
            return default
        normalized = filename.replace("\\", "/")
        for marker, component_type in (
            ("/skills/", ComponentType.SKILL),
            ("/commands/", ComponentType.COMMAND),
            ("/rules/", ComponentType.RULE),
            ("/workflows/", ComponentType.WORKFLOW),
            ("/agents/", ComponentType.AGENT),
            ("/memory/", ComponentType.MEMORY),
        ):
            if marker in normalized:
                return component_type
        if normalized.upper().endswith("SKILL.MD"):
            return ComponentType.SKILL
        return default

    @staticmethod
    def capabilities_for(body: str, tools: list[str] | None, options: ParserOptions) -> CapabilitySet:
        if not options.infer_capabilities:
            return CapabilitySet()
        return infer_capabilities(body, tools)
