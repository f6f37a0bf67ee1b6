"""CACE CLI: convert, diff, round-trip and validate agent configuration files."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from cace import __version__
from cace.agents import AGENTS, Agent, agent_ids, parse_agent
from cace.config import ConversionConfig, load_config
from cace.errors import CaceError, CaceException, ErrorCode, format_error

console = Console()
err_console = Console(stderr=True)

AGENT_CHOICE = click.Choice(agent_ids(), case_sensitive=False)

_SEVERITY_STYLES = {
    "critical": "red",
    "error": "red",
    "warning": "yellow",
    "info": "dim",
    "none": "green",
}


class CaceGroup(click.Group):
    """Click group that turns a ``CaceException`` into a formatted error and exit 1."""

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except CaceException as e:
            err_console.print(format_error(e.error))
            ctx.exit(1)


def _setup_logging(level: str) -> None:
    logger = logging.getLogger("cace")
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=err_console, show_path=False))


def _fail(code: ErrorCode, message: str, details: str = "", **context) -> CaceException:
    return CaceException(CaceError(code, message, details, context=context))


def _agent(value: str | None) -> Agent | None:
    return parse_agent(value) if value else None


def _read_file(path: str) -> str:
    file_path = Path(path)
    if not file_path.is_file():
        raise _fail(ErrorCode.FILE_NOT_FOUND, f"File not found: {path}", path=path)
    try:
        return file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise _fail(ErrorCode.FILE_READ_ERROR, f"Could not read {path}", str(e)) from e


def _write_file(path: Path, content: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise _fail(ErrorCode.FILE_WRITE_ERROR, f"Could not write {path}", str(e)) from e


def _output_path(output: str, directory: str | None, filename: str) -> Path:
    """An existing directory (or a path ending in '/') receives the agent layout."""
    target = Path(output)
    if output.endswith(("/", "\\")) or target.is_dir():
        return target / (directory or ".") / filename
    return target


def _parse_file(path: str, agent: Agent | None, config: ConversionConfig):
    from cace.parsing import ParserOptions, parse_component

    content = _read_file(path)
    result = parse_component(
        content,
        agent,
        ParserOptions(
            source_file=path,
            infer_capabilities=config.infer_capabilities,
            validate_on_parse=config.validate_on_parse,
            strict=config.strict,
        ),
    )
    if not result.success:
        raise _fail(
            result.error_code or ErrorCode.PARSE_FAILED,
            f"Failed to parse {path}",
            "; ".join(result.errors),
        )
    for warning in result.warnings:
        err_console.print(f"  [yellow]![/] {escape(warning)}")
    return result.spec


def _print_report(report) -> None:
    if report is None:
        return
    score = report.fidelity_score
    colour = "green" if score >= 90 else "yellow" if score >= 70 else "red"
    err_console.print(
        f"  {escape(str(report.source.agent))} -> {escape(str(report.target.agent))}: "
        f"fidelity [{colour}]{score}%[/]"
    )
    if report.losses:
        table = Table(title=f"Losses ({len(report.losses)})")
        table.add_column("Severity")
        table.add_column("Category", style="cyan")
        table.add_column("Description")
        for loss in report.losses:
            style = _SEVERITY_STYLES[loss.severity.value]
            table.add_row(
                f"[{style}]{loss.severity.value}[/]", loss.category.value, escape(loss.description)
            )
        err_console.print(table)
    for warning in report.warnings:
        err_console.print(f"  [yellow]![/] {escape(str(warning))}")
    for suggestion in report.suggestions:
        err_console.print(f"  [dim]Suggestion:[/] {escape(suggestion)}")


def _emit_rendered(content: str, result, output: str | None, as_json: bool) -> None:
    """Write or print a successful render or transform result."""
    written = None
    if output:
        written = _output_path(output, result.directory, result.filename)
        _write_file(written, content)

    if as_json:
        report = result.report
        payload = {
            "success": True,
            "filename": result.filename,
            "directory": result.directory,
            "written_to": str(written) if written else None,
            "fidelity_score": report.fidelity_score if report else None,
            "losses": [str(loss) for loss in report.losses] if report else [],
            "warnings": [str(w) for w in report.warnings] if report else [],
            "output": None if written else content,
        }
        click.echo(json.dumps(payload, indent=2))
        return

    if written:
        console.print(f"[green]Written to:[/] {escape(str(written))}")
    else:
        click.echo(content, nl=False)
    _print_report(result.report)


@click.group(cls=CaceGroup)
@click.version_option(version=__version__, prog_name="cace")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--config", "config_path", default=None, help="Path to a .cace.yaml config file")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: str | None):
    """CACE: Cross-Agent Compatibility Engine.

    Convert skills, commands, workflows, rules and memory files between
    AI coding agents, and report what each conversion preserves or loses.
    """
    try:
        config = load_config(config_path)
    except FileNotFoundError as e:
        raise _fail(ErrorCode.FILE_NOT_FOUND, f"Config file not found: {config_path}", str(e)) from e
    except (OSError, yaml.YAMLError, ValueError) as e:
        raise _fail(ErrorCode.FILE_READ_ERROR, "Could not load configuration", str(e)) from e
    if verbose:
        config.log_level = "DEBUG"
    _setup_logging(config.log_level)
    ctx.obj = config


# ── Convert ──────────────────────────────────────────────────────────


@cli.command()
@click.argument("source")
@click.option("--to", "target", required=True, type=AGENT_CHOICE, help="Target agent")
@click.option("--from", "source_agent", default=None, type=AGENT_CHOICE, help="Source agent (default: detect)")
@click.option("--output", "-o", default=None, help="Output file, or directory for the agent layout")
@click.option("--target-version", default=None, help="Target agent format version")
@click.option("--comments/--no-comments", default=None, help="Add provenance comments")
@click.option("--validate", "validate_output", is_flag=True, help="Validate the rendered output")
@click.option("--strict", is_flag=True, help="Treat validation warnings as errors")
@click.option("--json", "as_json", is_flag=True, help="Print a JSON result")
@click.pass_obj
def convert(
    config: ConversionConfig,
    source: str,
    target: str,
    source_agent: str | None,
    output: str | None,
    target_version: str | None,
    comments: bool | None,
    validate_output: bool,
    strict: bool,
    as_json: bool,
):
    """Convert SOURCE into the dialect of the target agent."""
    result = _transform_file(
        config,
        source,
        _agent(target),
        _agent(source_agent),
        comments=comments,
        target_version=target_version,
        validate_output=validate_output,
        strict=strict,
    )
    _emit_rendered(result.output, result, output, as_json)


def _transform_file(
    config: ConversionConfig,
    source: str,
    target_agent: Agent,
    source_agent: Agent | None,
    comments: bool | None = None,
    target_version: str | None = None,
    validate_output: bool = False,
    strict: bool = False,
):
    from cace.transformation import TransformOptions, transform

    result = transform(
        _read_file(source),
        TransformOptions(
            target_agent=target_agent,
            source_agent=source_agent,
            source_file=source,
            include_comments=config.include_comments if comments is None else comments,
            target_version=target_version or config.target_version_for(target_agent.value),
            validate_output=validate_output or config.validate_output,
            infer_capabilities=config.infer_capabilities,
            strict=strict or config.strict,
        ),
    )
    if not result.success:
        raise _fail(
            result.error_code or ErrorCode.RENDER_FAILED,
            f"Conversion of {source} to {target_agent} failed",
            "; ".join(result.errors),
        )
    return result


@cli.command(name="batch-convert")
@click.argument("sources", nargs=-1, required=True)
@click.option("--to", "target", required=True, type=AGENT_CHOICE, help="Target agent")
@click.option("--from", "source_agent", default=None, type=AGENT_CHOICE, help="Source agent (default: detect)")
@click.option("--output-dir", "-o", default=".", show_default=True, help="Root of the target agent layout")
@click.option("--dry-run", is_flag=True, help="Report target paths without writing files")
@click.option("--comments/--no-comments", default=None, help="Add provenance comments")
@click.option("--json", "as_json", is_flag=True, help="Print a JSON result")
@click.pass_obj
def batch_convert(
    config: ConversionConfig,
    sources: tuple[str, ...],
    target: str,
    source_agent: str | None,
    output_dir: str,
    dry_run: bool,
    comments: bool | None,
    as_json: bool,
):
    """Convert every SOURCE and write each into the target agent's layout."""
    target_agent = _agent(target)
    results = []
    for source in sources:
        try:
            result = _transform_file(config, source, target_agent, _agent(source_agent), comments=comments)
            written = Path(output_dir) / (result.directory or ".") / result.filename
            if not dry_run:
                _write_file(written, result.output)
        except CaceException as e:
            results.append({"source": source, "success": False, "error": e.error.message,
                            "details": e.error.details})
            if not as_json:
                console.print(f"  [red]x[/] {escape(source)}: {escape(e.error.message)}")
            continue

        results.append({"source": source, "success": True, "target": str(written),
                        "fidelity_score": result.fidelity_score})
        if not as_json:
            action = "Would write" if dry_run else "Written"
            console.print(
                f"  [green]v[/] {escape(source)} -> {escape(str(written))} "
                f"[dim]({action}, fidelity {result.fidelity_score}%)[/]"
            )

    failed = sum(1 for r in results if not r["success"])
    if as_json:
        click.echo(json.dumps({
            "target_agent": target_agent.value,
            "dry_run": dry_run,
            "succeeded": len(results) - failed,
            "failed": failed,
            "results": results,
        }, indent=2))
    else:
        console.print(
            f"\n[bold blue]Batch conversion complete:[/] {len(results) - failed} succeeded, {failed} failed"
        )
    if failed:
        raise click.exceptions.Exit(1)


# ── Diff ─────────────────────────────────────────────────────────────


@cli.command()
@click.argument("file_a")
@click.argument("file_b")
@click.option("--from-a", default=None, type=AGENT_CHOICE, help="Agent of FILE_A (default: detect)")
@click.option("--from-b", default=None, type=AGENT_CHOICE, help="Agent of FILE_B (default: detect)")
@click.option("--json", "as_json", is_flag=True, help="Print a JSON result")
@click.pass_obj
def diff(config: ConversionConfig, file_a: str, file_b: str, from_a: str | None, from_b: str | None, as_json: bool):
    """Compare the semantics of two component files, across dialects if needed."""
    from cace.diff import diff_specs

    result = diff_specs(
        _parse_file(file_a, _agent(from_a), config),
        _parse_file(file_b, _agent(from_b), config),
    )

    if as_json:
        click.echo(json.dumps({
            "identical": result.identical,
            "overall_severity": result.overall_severity.value,
            "changed_aspects": result.changed_aspects,
            "preserved_aspects": result.preserved_aspects,
            "diffs": [
                {"aspect": d.aspect, "severity": d.severity.value, "description": str(d)}
                for d in result.diffs
            ],
        }, indent=2))
        return

    if result.identical:
        console.print("[green]Semantically identical.[/]")
        return

    table = Table(title=escape(result.summary()))
    table.add_column("Aspect", style="cyan")
    table.add_column("Severity")
    table.add_column("Change")
    for entry in result.diffs:
        style = _SEVERITY_STYLES[entry.severity.value]
        table.add_row(entry.aspect, f"[{style}]{entry.severity.value}[/]", escape(str(entry)))
    console.print(table)


# ── Round trip ───────────────────────────────────────────────────────


@cli.command()
@click.argument("source")
@click.option("--via", required=True, type=AGENT_CHOICE, help="Intermediate agent")
@click.option("--from", "source_agent", default=None, type=AGENT_CHOICE, help="Source agent (default: detect)")
@click.option("--json", "as_json", is_flag=True, help="Print a JSON result")
def roundtrip(source: str, via: str, source_agent: str | None, as_json: bool):
    """Convert SOURCE to another agent and back, then report semantic drift."""
    from cace.transformation import round_trip

    result = round_trip(_read_file(source), _agent(via), _agent(source_agent), source_file=source)
    if not result.success:
        raise _fail(
            result.error_code or ErrorCode.PARSE_FAILED,
            f"Round trip of {source} via {via} failed",
            "; ".join(result.errors),
        )

    if as_json:
        click.echo(json.dumps({
            "source_agent": result.source_agent.value,
            "via_agent": result.via_agent.value,
            "forward_fidelity": result.forward_fidelity,
            "backward_fidelity": result.backward_fidelity,
            "combined_fidelity": result.combined_fidelity,
            "drift_detected": result.drift_detected,
            "changed_aspects": result.diff.changed_aspects,
            "warnings": result.warnings,
        }, indent=2))
        return

    path = f"{result.source_agent} -> {result.via_agent} -> {result.source_agent}"
    console.print(Panel(
        f"Forward fidelity:  {result.forward_fidelity}%\n"
        f"Backward fidelity: {result.backward_fidelity}%\n"
        f"Combined fidelity: {result.combined_fidelity}%",
        title=f"Round trip {path}",
    ))
    if result.drift_detected:
        console.print(f"[yellow]Drift:[/] {escape(result.diff.summary())}")
        for entry in result.diff.diffs:
            console.print(f"  [yellow]![/] {escape(str(entry))}")
    else:
        console.print("[green]No semantic drift.[/]")


# ── Validate ─────────────────────────────────────────────────────────


@cli.command()
@click.argument("path")
@click.option("--agent", "agent_name", default=None, type=AGENT_CHOICE, help="Agent dialect (default: detect)")
@click.option("--type", "component_type", default=None, help="Component type (default: from parsing)")
@click.option("--version", "version", default=None, help="Agent format version to validate against")
@click.option("--strict", is_flag=True, help="Treat warnings as errors")
@click.option("--json", "as_json", is_flag=True, help="Print a JSON result")
@click.pass_obj
def validate(
    config: ConversionConfig,
    path: str,
    agent_name: str | None,
    component_type: str | None,
    version: str | None,
    strict: bool,
    as_json: bool,
):
    """Validate an agent file against its dialect's structural rules."""
    agent, result = _validate_file(config, path, _agent(agent_name), component_type, strict, version)

    if as_json:
        click.echo(json.dumps(_validation_payload(path, agent, result), indent=2))
    else:
        console.print(f"\n[bold blue]CACE[/] Validating: {escape(path)} ({agent} {result.component_type})\n")
        for issue in result.issues:
            style = _SEVERITY_STYLES[issue.severity.value]
            console.print(f"  [{style}]{issue.severity.value}[/] {escape(issue.code)}: {escape(issue.message)}")
            if issue.suggestion:
                console.print(f"       [dim]{escape(issue.suggestion)}[/]")
        status = "[green]Valid![/]" if result.valid else "[red]Invalid[/]"
        console.print(f"\n{status} {escape(result.summary())}")

    if not result.valid:
        raise click.exceptions.Exit(1)


def _validate_file(
    config: ConversionConfig,
    path: str,
    agent: Agent | None,
    component_type: str | None,
    strict: bool,
    version: str | None = None,
):
    from cace.parsing import detect_agent
    from cace.validation import validate as validate_content

    content = _read_file(path)
    agent = agent or detect_agent(content, path)
    if agent is None:
        raise _fail(ErrorCode.UNKNOWN_AGENT, f"Could not detect the agent for {path}")
    if component_type is None:
        component_type = _parse_file(path, agent, config).component_type.value
    result = validate_content(content, agent, component_type, strict=strict or config.strict, version=version)
    return agent, result


def _validation_payload(path: str, agent: Agent, result) -> dict:
    return {
        "path": path,
        "valid": result.valid,
        "agent": agent.value,
        "component_type": result.component_type,
        "version": result.version,
        "issues": [
            {"severity": i.severity.value, "code": i.code, "message": i.message, "path": i.path}
            for i in result.issues
        ],
    }


@cli.command(name="batch-validate")
@click.argument("paths", nargs=-1, required=True)
@click.option("--agent", "agent_name", default=None, type=AGENT_CHOICE, help="Agent dialect (default: detect)")
@click.option("--strict", is_flag=True, help="Treat warnings as errors")
@click.option("--json", "as_json", is_flag=True, help="Print a JSON result")
@click.pass_obj
def batch_validate(
    config: ConversionConfig, paths: tuple[str, ...], agent_name: str | None, strict: bool, as_json: bool
):
    """Validate every PATH; exit 1 if any file is invalid or unreadable."""
    entries = []
    for path in paths:
        try:
            agent, result = _validate_file(config, path, _agent(agent_name), None, strict)
        except CaceException as e:
            entries.append({"path": path, "valid": False, "error": e.error.message,
                            "details": e.error.details})
            if not as_json:
                console.print(f"  [red]x[/] {escape(path)}: {escape(e.error.message)}")
            continue
        entries.append(_validation_payload(path, agent, result))
        if not as_json:
            mark = "[green]v[/]" if result.valid else "[red]x[/]"
            console.print(f"  {mark} {escape(path)} ({agent} {result.component_type}): {escape(result.summary())}")
            for issue in result.errors:
                console.print(f"      [red]{escape(issue.code)}[/]: {escape(issue.message)}")

    invalid = sum(1 for e in entries if not e["valid"])
    if as_json:
        click.echo(json.dumps({"valid": len(entries) - invalid, "invalid": invalid, "results": entries}, indent=2))
    else:
        console.print(f"\n[bold blue]Batch validation complete:[/] {len(entries) - invalid} valid, {invalid} invalid")
    if invalid:
        raise click.exceptions.Exit(1)


# ── Export / Import ──────────────────────────────────────────────────


@cli.command(name="export")
@click.argument("source")
@click.option("--from", "source_agent", default=None, type=AGENT_CHOICE, help="Source agent (default: detect)")
@click.option("--output", "-o", default=None, help="Write the JSON to this file")
@click.pass_obj
def export_cmd(config: ConversionConfig, source: str, source_agent: str | None, output: str | None):
    """Export SOURCE as ComponentSpec JSON."""
    from cace.ir.serialization import export_json

    text = export_json(_parse_file(source, _agent(source_agent), config))
    if output:
        _write_file(Path(output), text + "\n")
        console.print(f"[green]Written to:[/] {escape(output)}")
    else:
        click.echo(text)


@cli.command(name="import")
@click.argument("json_file")
@click.option("--to", "target", required=True, type=AGENT_CHOICE, help="Target agent")
@click.option("--output", "-o", default=None, help="Output file, or directory for the agent layout")
@click.option("--target-version", default=None, help="Target agent format version")
@click.option("--json", "as_json", is_flag=True, help="Print a JSON result")
@click.pass_obj
def import_cmd(
    config: ConversionConfig,
    json_file: str,
    target: str,
    output: str | None,
    target_version: str | None,
    as_json: bool,
):
    """Render a ComponentSpec JSON file for the target agent."""
    from cace.ir.serialization import import_json
    from cace.rendering import RenderOptions, render_component

    imported = import_json(_read_file(json_file))
    if not imported.success:
        raise _fail(
            imported.error_code or ErrorCode.SCHEMA_INVALID,
            f"Invalid ComponentSpec JSON in {json_file}",
            "; ".join(imported.errors),
        )
    target_agent = _agent(target)
    result = render_component(
        imported.spec,
        target_agent,
        RenderOptions(
            include_comments=config.include_comments,
            target_version=target_version or config.target_version_for(target_agent.value),
            validate_output=config.validate_output,
            strict=config.strict,
        ),
    )
    if not result.success:
        raise _fail(
            result.error_code or ErrorCode.RENDER_FAILED,
            f"Could not render {imported.spec.id} for {target_agent}",
            "; ".join(result.errors),
        )
    _emit_rendered(result.content, result, output, as_json)


# ── Detect ───────────────────────────────────────────────────────────


@cli.command()
@click.argument("path")
@click.pass_obj
def detect(config: ConversionConfig, path: str):
    """Detect which agent and component type a file belongs to."""
    from cace.versioning import detect_version
    from cace.versioning.detector import confidence_label

    spec = _parse_file(path, None, config)
    agent = spec.source_agent_id
    version = detect_version(agent, _read_file(path), path)

    table = Table(show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Agent", AGENTS[agent].display_name)
    table.add_row("Component type", spec.component_type.value)
    table.add_row("Id", escape(spec.id))
    table.add_row("Activation", spec.activation.mode.value)
    table.add_row("Version", f"{version.version} ({confidence_label(version.confidence)} confidence)")
    console.print(table)


# ── Agents ───────────────────────────────────────────────────────────


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print a JSON result")
def agents(as_json: bool):
    """List the supported agents and their configuration conventions."""
    from cace.versioning import get_default_target_version

    if as_json:
        click.echo(json.dumps([
            {
                "id": info.agent.value,
                "name": info.display_name,
                "component_types": info.component_types,
                "project_location": info.project_location,
                "user_location": info.user_location,
                "current_version": get_default_target_version(info.agent),
            }
            for info in AGENTS.values()
        ], indent=2))
        return

    table = Table(title="Supported Agents")
    table.add_column("Id", style="cyan")
    table.add_column("Name")
    table.add_column("Components")
    table.add_column("Project location", style="dim")
    table.add_column("Version", justify="right")
    for info in AGENTS.values():
        table.add_row(
            info.agent.value,
            info.display_name,
            ", ".join(info.component_types),
            info.project_location,
            get_default_target_version(info.agent),
        )
    console.print(table)


# ── Inspect ──────────────────────────────────────────────────────────


def _analyze(spec) -> dict:
    from cace.transformation.capability_mapper import compatibility_score

    caps = spec.capabilities
    source = spec.source_agent_id
    return {
        "word_count": len(spec.body.split()),
        "line_count": len(spec.body.splitlines()),
        "has_arguments": bool(spec.invocation.arguments) or "$ARGUMENTS" in spec.body,
        "needs": sorted(
            name[len("needs_"):] for name, value in vars(caps).items()
            if name.startswith("needs_") and value is True
        ),
        "provides": sorted(
            name[len("provides_"):] for name, value in vars(caps).items()
            if name.startswith("provides_") and value is True
        ),
        "mcp_servers": list(caps.needs_mcp),
        "compatibility": {
            agent.value: compatibility_score(source, agent) for agent in Agent if source is not None
        },
    }


@cli.command()
@click.argument("path")
@click.option("--from", "source_agent", default=None, type=AGENT_CHOICE, help="Source agent (default: detect)")
@click.option("--json", "as_json", is_flag=True, help="Print a JSON result")
@click.pass_obj
def inspect(config: ConversionConfig, path: str, source_agent: str | None, as_json: bool):
    """Parse PATH and show its canonical form with a content analysis."""
    from cace.ir.serialization import spec_to_dict

    spec = _parse_file(path, _agent(source_agent), config)
    analysis = _analyze(spec)

    if as_json:
        click.echo(json.dumps({"spec": spec_to_dict(spec), "analysis": analysis}, indent=2))
        return

    console.print(Panel(
        f"[bold]{escape(spec.id)}[/] ({spec.component_type.value})\n{escape(spec.intent.summary)}",
        title=f"Inspecting {escape(path)}",
    ))

    table = Table(show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Source agent", str(spec.source_agent_id or "-"))
    table.add_row("Activation", spec.activation.mode.value)
    table.add_row("Execution", spec.execution.context.value)
    table.add_row("Allowed tools", escape(", ".join(spec.execution.allowed_tools)) or "-")
    table.add_row("Categories", escape(", ".join(spec.category)) or "-")
    table.add_row("Words / lines", f"{analysis['word_count']} / {analysis['line_count']}")
    table.add_row("Arguments", "yes" if analysis["has_arguments"] else "no")
    table.add_row("Needs", ", ".join(analysis["needs"]) or "-")
    table.add_row("Provides", ", ".join(analysis["provides"]) or "-")
    if spec.sections:
        table.add_row("Sections", escape(", ".join(s.title for s in spec.sections)))
    if spec.imports:
        table.add_row("Imports", escape(", ".join(i.path for i in spec.imports)))
    console.print(table)

    if analysis["compatibility"]:
        console.print("\n[bold]Compatibility:[/]")
        for target, score in analysis["compatibility"].items():
            colour = "green" if score >= 90 else "yellow" if score >= 70 else "red"
            console.print(f"  {target}: [{colour}]{score}[/]")


# ── Matrix ───────────────────────────────────────────────────────────


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print a JSON result")
def matrix(as_json: bool):
    """Show the expected compatibility score for every agent pair."""
    from cace.transformation.capability_mapper import get_compatibility_matrix

    scores = get_compatibility_matrix()
    if as_json:
        click.echo(json.dumps(
            {s.value: {t.value: score for t, score in row.items()} for s, row in scores.items()},
            indent=2,
        ))
        return

    table = Table(title="Compatibility Matrix (source -> target)")
    table.add_column("Source", style="cyan")
    for agent in scores:
        table.add_column(agent.value, justify="right")
    for source, row in scores.items():
        cells = []
        for score in row.values():
            colour = "green" if score >= 90 else "yellow" if score >= 70 else "red"
            cells.append(f"[{colour}]{score}[/]")
        table.add_row(source.value, *cells)
    console.print(table)


# ── Version ──────────────────────────────────────────────────────────


@cli.group()
def version():
    """Inspect agent format versions and migrations."""


@version.command(name="detect")
@click.argument("path")
@click.option("--agent", "agent_name", default=None, type=AGENT_CHOICE, help="Agent dialect (default: detect)")
def version_detect(path: str, agent_name: str | None):
    """Detect the format version of an agent file."""
    from cace.parsing import detect_agent
    from cace.versioning import detect_version
    from cace.versioning.migration_guide import get_version_detection_summary

    content = _read_file(path)
    agent = _agent(agent_name) or detect_agent(content, path)
    if agent is None:
        raise _fail(ErrorCode.UNKNOWN_AGENT, f"Could not detect the agent for {path}")
    result = detect_version(agent, content, path)
    console.print(f"\n[bold blue]CACE[/] {AGENTS[agent].display_name}: {escape(path)}\n")
    console.print(escape(get_version_detection_summary(result)))


@version.command(name="list")
@click.argument("agent_name", type=AGENT_CHOICE)
def version_list(agent_name: str):
    """List known format versions and migration paths for an agent."""
    from cace.versioning import get_agent_versions
    from cace.versioning.migration_guide import get_available_migration_paths

    agent = _agent(agent_name)
    table = Table(title=f"{AGENTS[agent].display_name} versions")
    table.add_column("Version", style="cyan")
    table.add_column("Released")
    table.add_column("Current", justify="center")
    table.add_column("Features")
    for entry in get_agent_versions(agent):
        current = "[green]Y[/]" if entry.is_current else ""
        table.add_row(
            entry.version, entry.release_date or "-", current, escape(", ".join(entry.features_introduced))
        )
    console.print(table)

    paths = get_available_migration_paths(agent)
    if paths:
        console.print("\n[bold]Migration paths:[/]")
        for p in paths:
            console.print(f"  {p['from']} -> {p['to']}: {p['breaking_changes']} breaking change(s)")


@version.command(name="guide")
@click.argument("agent_name", type=AGENT_CHOICE)
@click.argument("from_version")
@click.argument("to_version")
@click.option("--markdown", is_flag=True, help="Print the guide as Markdown")
def version_guide(agent_name: str, from_version: str, to_version: str, markdown: bool):
    """Print the migration guide from FROM_VERSION to TO_VERSION."""
    from cace.versioning.migration_guide import (
        analyze_migration_path,
        format_migration_guide_cli,
        format_migration_guide_markdown,
        generate_migration_guide,
    )

    agent = _agent(agent_name)
    guide = generate_migration_guide(agent, from_version, to_version)
    if guide is None:
        raise _fail(
            ErrorCode.VALIDATION_FAILED,
            f"Unknown {agent} version: {from_version} or {to_version}",
        )
    if markdown:
        click.echo(format_migration_guide_markdown(guide))
        return
    click.echo(format_migration_guide_cli(guide))
    analysis = analyze_migration_path(agent, from_version, to_version)
    console.print(
        f"Complexity: [bold]{analysis.complexity}[/] ({escape(analysis.estimated_effort)})"
    )


def main():
    cli(prog_name="cace")


if __name__ == "__main__":
    main()
