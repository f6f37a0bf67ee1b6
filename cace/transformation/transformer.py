"""Detect -> parse -> render pipeline and round-trip measurement.

``transform`` never raises for bad input; failures come back as a
``TransformResult`` with ``success=False`` and an ``ErrorCode``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from cace.agents import Agent
from cace.diff import SemanticDiff, combined_fidelity, diff_specs
from cace.errors import ErrorCode
from cace.ir.models import ComponentSpec
from cace.parsing import ParserOptions, detect_agent, get_parser, parse_component
from cace.rendering import RenderOptions, get_renderer, render_component
from cace.rendering.base import RenderResult
from cace.rendering.report import ConversionReport, LossSeverity

logger = logging.getLogger(__name__)


@dataclass
class TransformOptions:
    target_agent: Agent
    source_agent: Agent | None = None
    source_file: str | None = None
    include_comments: bool = False
    target_version: str | None = None
    source_version: str | None = None
    validate_output: bool = False
    infer_capabilities: bool = True
    strict: bool = False


@dataclass
class TransformResult:
    success: bool
    output: str | None = None
    spec: ComponentSpec | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    fidelity_score: int | None = None
    filename: str | None = None
    directory: str | None = None
    report: ConversionReport | None = None
    error_code: ErrorCode | None = None


def report_warnings(report: ConversionReport | None) -> list[str]:
    """Flatten a report into ``[code] message`` and ``[LOSS:cat] desc`` strings."""
    if report is None:
        return []
    messages = [str(w) for w in report.warnings]
    messages += [str(loss) for loss in report.losses if loss.severity >= LossSeverity.WARNING]
    return messages


def transform(content: str, options: TransformOptions) -> TransformResult:
    """Parse ``content`` in its source dialect and render it for the target."""
    parse_result = parse_component(
        content,
        options.source_agent,
        ParserOptions(
            source_file=options.source_file,
            infer_capabilities=options.infer_capabilities,
            source_version=options.source_version,
            strict=options.strict,
        ),
    )
    if not parse_result.success or parse_result.spec is None:
        return TransformResult(
            False,
            errors=parse_result.errors,
            warnings=parse_result.warnings,
            error_code=parse_result.error_code or ErrorCode.PARSE_FAILED,
        )

    warnings = list(parse_result.warnings)
    render_result = transform_spec(
        parse_result.spec,
        options.target_agent,
        RenderOptions(
            include_comments=options.include_comments,
            target_version=options.target_version,
            source_version=(
                options.source_version
                if parse_result.spec.source_agent_id == options.target_agent
                else None
            ),
            validate_output=options.validate_output,
            strict=options.strict,
        ),
    )
    if not render_result.success:
        return TransformResult(
            False,
            spec=parse_result.spec,
            errors=render_result.errors,
            warnings=warnings,
            error_code=render_result.error_code or ErrorCode.RENDER_FAILED,
        )

    warnings += report_warnings(render_result.report)
    logger.debug(
        "Transformed '%s' %s -> %s", parse_result.spec.id,
        parse_result.spec.source_agent_id, options.target_agent,
    )
    return TransformResult(
        True,
        output=render_result.content,
        spec=parse_result.spec,
        warnings=warnings,
        fidelity_score=render_result.report.fidelity_score if render_result.report else None,
        filename=render_result.filename,
        directory=render_result.directory,
        report=render_result.report,
    )


def transform_spec(
    spec: ComponentSpec, target_agent: Agent, options: RenderOptions | None = None
) -> RenderResult:
    return render_component(spec, target_agent, options)


# --- Round trip ---


@dataclass
class RoundTripResult:
    success: bool
    source_agent: Agent | None = None
    via_agent: Agent | None = None
    original: ComponentSpec | None = None
    final: ComponentSpec | None = None
    intermediate_output: str | None = None
    final_output: str | None = None
    forward_fidelity: int | None = None
    backward_fidelity: int | None = None
    combined_fidelity: int | None = None
    diff: SemanticDiff | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    error_code: ErrorCode | None = None

    @property
    def drift_detected(self) -> bool:
        return self.diff is not None and not self.diff.identical


def _render_and_reparse(
    spec: ComponentSpec, target: Agent
) -> tuple[RenderResult, ComponentSpec | None, list[str], list[str]]:
    """Render ``spec`` for ``target`` and parse the output back."""
    rendered = render_component(spec, target)
    if not rendered.success:
        return rendered, None, rendered.errors, []
    renderer = get_renderer(target)
    parsed = parse_component(
        rendered.content, target, ParserOptions(source_file=renderer.target_path(spec))
    )
    warnings = report_warnings(rendered.report) + parsed.warnings
    return rendered, parsed.spec if parsed.success else None, parsed.errors, warnings


def round_trip(
    content: str,
    via: Agent,
    source: Agent | None = None,
    source_file: str | None = None,
) -> RoundTripResult:
    """Convert source -> via -> source and diff the result against the original."""
    source = source or detect_agent(content, source_file)
    if source is None:
        return RoundTripResult(
            False,
            via_agent=via,
            errors=["Could not detect source agent. Please specify it explicitly."],
            error_code=ErrorCode.UNKNOWN_AGENT,
        )
    if get_parser(via) is None or get_renderer(via) is None:
        return RoundTripResult(
            False,
            source_agent=source,
            via_agent=via,
            errors=[f"No parser/renderer pair registered for agent: {via}"],
            error_code=ErrorCode.UNSUPPORTED_CONVERSION,
        )

    parsed = parse_component(content, source, ParserOptions(source_file=source_file))
    if not parsed.success:
        return RoundTripResult(
            False, source_agent=source, via_agent=via,
            errors=parsed.errors, warnings=parsed.warnings, error_code=parsed.error_code,
        )
    original = parsed.spec
    result = RoundTripResult(True, source_agent=source, via_agent=via, original=original)
    result.warnings.extend(parsed.warnings)

    forward, intermediate, errors, warnings = _render_and_reparse(original, via)
    result.warnings.extend(warnings)
    if intermediate is None:
        result.success = False
        result.errors = errors
        result.error_code = forward.error_code or ErrorCode.PARSE_FAILED
        return result

    backward, final, errors, warnings = _render_and_reparse(intermediate, source)
    result.warnings.extend(warnings)
    if final is None:
        result.success = False
        result.errors = errors
        result.error_code = backward.error_code or ErrorCode.PARSE_FAILED
        return result

    result.final = final
    result.intermediate_output = forward.content
    result.final_output = backward.content
    result.forward_fidelity = forward.report.fidelity_score
    result.backward_fidelity = backward.report.fidelity_score
    result.combined_fidelity = combined_fidelity(result.forward_fidelity, result.backward_fidelity)
    result.diff = diff_specs(original, final)
    if result.drift_detected:
        result.warnings.append(
            f"[{ErrorCode.ROUND_TRIP_DRIFT.value}] {result.diff.summary()}"
        )
    logger.debug(
        "Round trip %s -> %s -> %s: combined fidelity %s, %s",
        source, via, source, result.combined_fidelity, result.diff.summary(),
    )
    return result
