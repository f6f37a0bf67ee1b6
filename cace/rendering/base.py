"""Renderer contract shared by every dialect.

A renderer is a pure function from a ``ComponentSpec`` to dialect text plus
a ``ConversionReport``. Subclasses implement ``_render`` which returns the
frontmatter mapping and body; the base class applies agent overrides,
provenance comments, version adaptation, output validation and scoring.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from cace.agents import AGENTS, Agent
from cace.errors import ErrorCode
from cace.ir.models import ActivationMode, ComponentSpec, ComponentType, ExecutionContext
from cace.parsing.frontmatter import dump_frontmatter
from cace.parsing.inference import infer_category
from cace.rendering.report import (
    ComponentRef,
    ConversionLoss,
    ConversionReport,
    ConversionWarning,
    LossCategory,
    LossSeverity,
    calculate_fidelity,
)

logger = logging.getLogger(__name__)


@dataclass
class RenderOptions:
    include_comments: bool = False
    target_version: str | None = None
    source_version: str | None = None
    validate_output: bool = False
    strict: bool = False


@dataclass
class RenderResult:
    success: bool
    content: str | None = None
    filename: str | None = None
    directory: str | None = None
    errors: list[str] = field(default_factory=list)
    report: ConversionReport | None = None
    error_code: ErrorCode | None = None

    @property
    def path(self) -> str | None:
        if self.filename is None:
            return None
        if not self.directory or self.directory == ".":
            return self.filename
        return f"{self.directory}/{self.filename}"


@dataclass
class RenderContext:
    """Bookkeeping collected while one spec is rendered."""

    losses: list[ConversionLoss] = field(default_factory=list)
    warnings: list[ConversionWarning] = field(default_factory=list)
    preserved: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    def loss(
        self,
        category: LossCategory,
        severity: LossSeverity,
        description: str,
        source_field: str,
        recommendation: str | None = None,
    ) -> None:
        self.losses.append(
            ConversionLoss(category, severity, description, source_field, recommendation)
        )
        if recommendation and recommendation not in self.suggestions:
            self.suggestions.append(recommendation)

    def warn(self, code: str, message: str, field_path: str | None = None) -> None:
        self.warnings.append(ConversionWarning(code, message, field_path))

    def keep(self, semantic: str) -> None:
        self.preserved.append(semantic)


class BaseRenderer(ABC):
    """Base class for dialect renderers."""

    agent: Agent
    base_fidelity = 100
    supports_frontmatter = True

    @abstractmethod
    def _render(self, spec: ComponentSpec, ctx: RenderContext) -> tuple[dict, str]:
        """Return (frontmatter, body) for the target dialect."""

    @abstractmethod
    def get_target_filename(self, spec: ComponentSpec) -> str:
        ...

    @abstractmethod
    def get_target_directory(self, spec: ComponentSpec) -> str:
        ...

    def target_component_type(self, spec: ComponentSpec) -> ComponentType:
        return spec.component_type

    def cross_agent_penalty(self, source: Agent | None) -> int:
        return 0

    def target_path(self, spec: ComponentSpec) -> str:
        directory = self.get_target_directory(spec)
        filename = self.get_target_filename(spec)
        return filename if directory in ("", ".") else f"{directory}/{filename}"

    def render(self, spec: ComponentSpec, options: RenderOptions | None = None) -> RenderResult:
        options = options or RenderOptions()
        started = time.perf_counter()

        if not spec.id:
            return RenderResult(
                False, errors=["Component id must not be empty"], error_code=ErrorCode.RENDER_FAILED
            )

        prepared = self._prepare(spec)
        ctx = RenderContext()
        try:
            frontmatter, body = self._render(prepared, ctx)
        except (TypeError, ValueError) as e:
            logger.debug("%s: render failed for '%s': %s", self.agent, spec.id, e)
            return RenderResult(
                False,
                errors=[f"Failed to render {spec.id} for {self.agent}: {e}"],
                error_code=ErrorCode.RENDER_FAILED,
            )

        override = spec.override_for(self.agent)
        if override and override.frontmatter_overrides and self.supports_frontmatter:
            frontmatter.update(override.frontmatter_overrides)
            ctx.keep("Agent-specific frontmatter overrides")

        comment = self._provenance_comment(spec) if options.include_comments else None
        content = self._emit(frontmatter, body, comment)
        content = self._adapt_version(content, spec, options, ctx)

        if options.validate_output:
            self._validate_output(content, prepared, options, ctx)

        report = ConversionReport(
            source=ComponentRef(
                agent=spec.source_agent_id or self.agent,
                component_type=spec.component_type.value,
                id=spec.id,
            ),
            target=ComponentRef(
                agent=self.agent,
                component_type=self.target_component_type(spec).value,
                id=spec.id,
            ),
            preserved_semantics=ctx.preserved,
            losses=ctx.losses,
            warnings=ctx.warnings,
            suggestions=ctx.suggestions,
            fidelity_score=calculate_fidelity(
                self.base_fidelity,
                ctx.losses,
                ctx.warnings,
                self.cross_agent_penalty(spec.source_agent_id),
            ),
            duration_ms=(time.perf_counter() - started) * 1000,
        )
        logger.debug("%s: rendered '%s' (%s)", self.agent, spec.id, report.summary())
        return RenderResult(
            True,
            content=content,
            filename=self.get_target_filename(spec),
            directory=self.get_target_directory(spec),
            report=report,
        )

    # --- Pipeline steps ---

    def _prepare(self, spec: ComponentSpec) -> ComponentSpec:
        """Copy the spec and apply this agent's body and capability overrides."""
        prepared = spec.copy()
        override = spec.override_for(self.agent)
        if not override:
            return prepared
        if override.capability_overrides:
            prepared.capabilities = prepared.capabilities.with_overrides(override.capability_overrides)
        if override.body_prefix:
            prepared.body = f"{override.body_prefix}\n\n{prepared.body}"
        if override.body_suffix:
            prepared.body = f"{prepared.body}\n\n{override.body_suffix}"
        return prepared

    def _emit(self, frontmatter: dict, body: str, comment: str | None) -> str:
        return dump_frontmatter(frontmatter, body, comment)

    def _provenance_comment(self, spec: ComponentSpec) -> str:
        source = spec.source_agent_id or "unknown"
        original = spec.metadata.source_file or "unknown"
        return (
            f"<!-- Converted from {source} to {AGENTS[self.agent].display_name} -->\n"
            f"<!-- Original: {original} -->"
        )

    def _adapt_version(
        self, content: str, spec: ComponentSpec, options: RenderOptions, ctx: RenderContext
    ) -> str:
        if not (options.source_version or options.target_version):
            return content

        from cace.versioning.adapter import adapt_version
        from cace.versioning.catalog import get_default_target_version

        target_version = options.target_version or get_default_target_version(self.agent)
        source_version = options.source_version
        if source_version is None and spec.source_agent_id == self.agent:
            source_version = spec.source_agent.version
        elif source_version is None:
            # Cross-agent output is always emitted in the current format
            source_version = get_default_target_version(self.agent)
        if not source_version or source_version == target_version:
            return content

        result = adapt_version(self.agent, content, source_version, target_version)
        for message in result.warnings:
            ctx.warn("VERSION_ADAPTATION", message, "body")
        if result.transformations:
            ctx.keep(f"Version-adapted content ({source_version} -> {target_version})")
        return result.content

    def _validate_output(
        self, content: str, spec: ComponentSpec, options: RenderOptions, ctx: RenderContext
    ) -> None:
        from cace.validation import validate

        result = validate(
            content,
            self.agent,
            self.target_component_type(spec).value,
            strict=options.strict,
            version=options.target_version,
        )
        for issue in result.errors:
            ctx.warn("VALIDATION_ERROR", issue.message, issue.path)

    # --- Shared loss checks ---

    def _note_purpose(self, spec: ComponentSpec, ctx: RenderContext) -> None:
        if spec.intent.purpose and spec.intent.purpose != spec.intent.summary:
            ctx.loss(
                LossCategory.CONTENT,
                LossSeverity.INFO,
                "Purpose text has no separate field; only the summary is kept",
                "intent.purpose",
            )

    def _note_category(self, spec: ComponentSpec, ctx: RenderContext) -> None:
        # Same-dialect parsers re-derive the category from the same text
        if spec.source_agent_id == self.agent:
            return
        if set(spec.category) != set(infer_category(spec.intent.summary, spec.body)):
            ctx.loss(
                LossCategory.METADATA,
                LossSeverity.INFO,
                f"Category tags {spec.category} cannot be stored",
                "category",
            )

    def _note_restricted_tools(self, spec: ComponentSpec, ctx: RenderContext) -> None:
        if spec.execution.restricted_tools:
            ctx.loss(
                LossCategory.CAPABILITY,
                LossSeverity.INFO,
                "Restricted tool list is not supported",
                "execution.restricted_tools",
            )

    def _note_arguments(self, spec: ComponentSpec, ctx: RenderContext) -> None:
        if spec.invocation.arguments:
            ctx.loss(
                LossCategory.INVOCATION,
                LossSeverity.INFO,
                f"{len(spec.invocation.arguments)} structured argument(s) flattened",
                "invocation.arguments",
                "Describe expected arguments in the instruction body",
            )

    def _note_always_on(self, spec: ComponentSpec, ctx: RenderContext, file_name: str) -> None:
        """Losses for structure an always-loaded memory file cannot hold."""
        if spec.activation.mode != ActivationMode.AUTO or spec.activation.triggers:
            ctx.loss(
                LossCategory.ACTIVATION,
                LossSeverity.WARNING,
                f"'{spec.activation.mode.value}' activation is lost; {file_name} is always applied",
                "activation.mode",
            )

        invocation = spec.invocation
        if invocation.slash_command or invocation.argument_hint or invocation.arguments:
            ctx.loss(
                LossCategory.INVOCATION,
                LossSeverity.WARNING,
                "Slash command and arguments cannot be expressed",
                "invocation",
            )

        execution = spec.execution
        if (
            execution.context != ExecutionContext.MAIN
            or execution.allowed_tools
            or execution.restricted_tools
            or execution.preferred_model
            or execution.sub_agent
        ):
            ctx.loss(
                LossCategory.EXECUTION,
                LossSeverity.WARNING,
                "Execution settings are dropped",
                "execution",
            )
