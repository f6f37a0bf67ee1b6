"""JSON export/import of ComponentSpecs.

Export is lossless: ``spec_from_dict(spec_to_dict(spec))`` rebuilds an equal
spec. Import accepts any object carrying at least ``id`` and ``body``; the
remaining fields are defaulted and the result is re-validated against the
schema before a spec is returned.
"""

from __future__ import annotations

import copy
import json
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from cace.agents import Agent
from cace.errors import ErrorCode
from cace.ir.models import (
    ActivationMode,
    ActivationModel,
    AgentDescriptor,
    AgentOverride,
    ArgumentSpec,
    CapabilitySet,
    ComponentMetadata,
    ComponentSpec,
    ComponentType,
    ExecutionContext,
    ExecutionModel,
    InvocationModel,
    MemoryImport,
    MemorySection,
    SafetyLevel,
    SemanticIntent,
    SemanticVersion,
    TriggerSpec,
    TriggerType,
)
from cace.ir.schema_validator import validate_schema


@dataclass
class ImportResult:
    success: bool
    spec: ComponentSpec | None = None
    errors: list[str] = field(default_factory=list)
    error_code: ErrorCode | None = None


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {_plain(k): _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def spec_to_dict(spec: ComponentSpec) -> dict[str, Any]:
    """Serialize to a plain, JSON-compatible dict."""
    return _plain(asdict(spec))


def spec_from_dict(data: dict[str, Any]) -> ComponentSpec:
    """Rebuild a spec from ``spec_to_dict`` output.

    Raises:
        KeyError / ValueError: on missing required keys or bad enum values.
        Callers importing untrusted data should use ``import_json``.
    """
    intent = data["intent"]
    activation = data.get("activation") or {}
    invocation = data.get("invocation") or {}
    execution = data.get("execution") or {}
    version = data.get("version") or {}
    metadata = data.get("metadata") or {}
    source = data.get("source_agent")

    return ComponentSpec(
        id=data["id"],
        component_type=ComponentType(data["component_type"]),
        intent=SemanticIntent(
            summary=intent["summary"],
            purpose=intent["purpose"],
            when_to_use=intent.get("when_to_use"),
            category=list(intent.get("category") or []),
            examples=list(intent.get("examples") or []),
        ),
        activation=ActivationModel(
            mode=ActivationMode(activation.get("mode", "suggested")),
            safety_level=SafetyLevel(activation.get("safety_level", "safe")),
            triggers=[
                TriggerSpec(
                    type=TriggerType(t["type"]),
                    pattern=t.get("pattern"),
                    keywords=list(t.get("keywords") or []),
                    hook_name=t.get("hook_name"),
                )
                for t in activation.get("triggers") or []
            ],
            requires_confirmation=activation.get("requires_confirmation"),
        ),
        invocation=InvocationModel(
            user_invocable=invocation.get("user_invocable", True),
            slash_command=invocation.get("slash_command"),
            argument_hint=invocation.get("argument_hint"),
            arguments=[ArgumentSpec(**a) for a in invocation.get("arguments") or []],
        ),
        execution=ExecutionModel(
            context=ExecutionContext(execution.get("context", "main")),
            allowed_tools=list(execution.get("allowed_tools") or []),
            restricted_tools=list(execution.get("restricted_tools") or []),
            preferred_model=execution.get("preferred_model"),
            sub_agent=execution.get("sub_agent"),
        ),
        body=data.get("body", ""),
        version=SemanticVersion(
            major=version.get("major", 1),
            minor=version.get("minor", 0),
            patch=version.get("patch", 0),
            prerelease=version.get("prerelease"),
        ),
        source_agent=AgentDescriptor(
            id=Agent(source["id"]),
            version=source.get("version"),
            detected_at=source.get("detected_at", ""),
        ) if source else None,
        category=list(data.get("category") or []),
        capabilities=CapabilitySet().with_overrides(data.get("capabilities") or {}),
        agent_overrides={
            Agent(agent_id): AgentOverride(
                frontmatter_overrides=dict(o.get("frontmatter_overrides") or {}),
                body_prefix=o.get("body_prefix"),
                body_suffix=o.get("body_suffix"),
                capability_overrides=dict(o.get("capability_overrides") or {}),
            )
            for agent_id, o in (data.get("agent_overrides") or {}).items()
        },
        metadata=ComponentMetadata(**metadata),
        sections=[MemorySection(**s) for s in data.get("sections") or []],
        imports=[MemoryImport(**i) for i in data.get("imports") or []],
    )


def export_json(spec: ComponentSpec, indent: int = 2) -> str:
    return json.dumps(spec_to_dict(spec), indent=indent)


def _with_defaults(data: dict[str, Any]) -> dict[str, Any]:
    """Fill every structural field a partial import leaves out."""
    skeleton = spec_to_dict(
        ComponentSpec(
            id=data["id"],
            component_type=ComponentType.SKILL,
            intent=SemanticIntent(summary=data["id"], purpose=data["id"]),
        )
    )
    merged = copy.deepcopy(skeleton)
    for key, value in data.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def import_json(text: str) -> ImportResult:
    """Parse, default and schema-check a JSON document. Never raises."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        return ImportResult(False, errors=[f"Invalid JSON: {e}"], error_code=ErrorCode.PARSE_FAILED)

    if not isinstance(data, dict):
        return ImportResult(
            False,
            errors=[f"Expected a JSON object, got {type(data).__name__}"],
            error_code=ErrorCode.SCHEMA_INVALID,
        )

    missing = [key for key in ("id", "body") if key not in data]
    if missing:
        return ImportResult(
            False,
            errors=[f"Missing required field: {key}" for key in missing],
            error_code=ErrorCode.SCHEMA_INVALID,
        )
    if not isinstance(data["id"], str):
        return ImportResult(False, errors=["/.id: expected type 'string'"],
                            error_code=ErrorCode.SCHEMA_INVALID)

    merged = _with_defaults(data)
    issues = validate_schema(merged)
    if issues:
        return ImportResult(False, errors=issues, error_code=ErrorCode.SCHEMA_INVALID)

    try:
        spec = spec_from_dict(merged)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        return ImportResult(False, errors=[f"Invalid spec: {e}"], error_code=ErrorCode.SCHEMA_INVALID)
    return ImportResult(True, spec=spec)
