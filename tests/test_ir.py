"""Tests for the ComponentSpec IR, its schema and JSON serialization."""

import json

from cace.agents import Agent
from cace.errors import ErrorCode
from cace.ir.models import (
    ActivationMode,
    ActivationModel,
    AgentOverride,
    CapabilitySet,
    ComponentSpec,
    ComponentType,
    SemanticIntent,
    SemanticVersion,
    TriggerSpec,
    TriggerType,
    format_version,
    parse_version,
)
from cace.ir.schema import get_schema
from cace.ir.schema_validator import validate_schema
from cace.ir.serialization import export_json, import_json, spec_from_dict, spec_to_dict


def _make_spec(**overrides) -> ComponentSpec:
    defaults = dict(
        id="code-review",
        component_type=ComponentType.SKILL,
        intent=SemanticIntent(summary="Review code", purpose="Review code for quality issues"),
        body="Review the changed files and report issues.",
    )
    defaults.update(overrides)
    return ComponentSpec(**defaults)


# --- Version Tests ---


def test_parse_version_full():
    v = parse_version("2.3.4-beta.1")
    assert (v.major, v.minor, v.patch, v.prerelease) == (2, 3, 4, "beta.1")
    assert format_version(v) == "2.3.4-beta.1"


def test_parse_version_falls_back_to_default():
    for text in (None, "", "v2", "1.2", "latest"):
        assert parse_version(text).is_default


def test_format_version_without_prerelease():
    assert str(SemanticVersion(1, 4, 0)) == "1.4.0"


# --- Model Tests ---


def test_spec_defaults():
    spec = _make_spec()
    assert spec.activation.mode == ActivationMode.SUGGESTED
    assert spec.invocation.user_invocable is True
    assert spec.capabilities.needs_filesystem is True
    assert spec.capabilities.needs_code_search is True
    assert spec.source_agent_id is None


def test_glob_patterns_only_returns_globs():
    activation = ActivationModel(
        triggers=[
            TriggerSpec(type=TriggerType.GLOB, pattern="**/*.py"),
            TriggerSpec(type=TriggerType.KEYWORD, keywords=["review"]),
        ]
    )
    assert activation.glob_patterns == ["**/*.py"]


def test_capability_overrides_ignore_unknown_keys():
    caps = CapabilitySet().with_overrides({"needs_shell": True, "needs_mcp": ["github"], "bogus": True})
    assert caps.needs_shell is True
    assert caps.needs_mcp == ["github"]
    assert not hasattr(caps, "bogus")
    assert "needs_shell" in caps.enabled()


def test_copy_is_deep():
    spec = _make_spec(category=["testing"])
    clone = spec.copy()
    clone.category.append("debugging")
    assert spec.category == ["testing"]


def test_override_for():
    spec = _make_spec(agent_overrides={Agent.CURSOR: AgentOverride(body_prefix="Note")})
    assert spec.override_for(Agent.CURSOR).body_prefix == "Note"
    assert spec.override_for(Agent.CLAUDE) is None


# --- Schema Tests ---


def test_schema_shape():
    schema = get_schema()
    assert schema["title"] == "ComponentSpec"
    assert "id" in schema["required"]


def test_serialized_spec_passes_schema():
    assert validate_schema(spec_to_dict(_make_spec())) == []


def test_schema_rejects_bad_enum():
    data = spec_to_dict(_make_spec())
    data["activation"]["mode"] = "sometimes"
    issues = validate_schema(data)
    assert any("activation.mode" in i for i in issues)


def test_schema_rejects_empty_id():
    data = spec_to_dict(_make_spec())
    data["id"] = ""
    assert any("too short" in i for i in validate_schema(data))


def test_schema_rejects_bool_as_integer():
    data = spec_to_dict(_make_spec())
    data["version"]["major"] = True
    assert validate_schema(data)


# --- Serialization Tests ---


def test_export_import_preserves_spec():
    spec = _make_spec(
        category=["testing"],
        agent_overrides={Agent.CLAUDE: AgentOverride(frontmatter_overrides={"model": "opus"})},
    )
    result = import_json(export_json(spec))
    assert result.success
    assert result.spec == spec


def test_spec_to_dict_uses_plain_values():
    data = spec_to_dict(_make_spec(agent_overrides={Agent.CURSOR: AgentOverride()}))
    assert data["component_type"] == "skill"
    assert "cursor" in data["agent_overrides"]
    json.dumps(data)


def test_spec_from_dict_round_trip():
    spec = _make_spec()
    assert spec_from_dict(spec_to_dict(spec)) == spec


def test_import_minimal_document():
    result = import_json(json.dumps({"id": "quick", "body": "Do it."}))
    assert result.success
    assert result.spec.id == "quick"
    assert result.spec.component_type == ComponentType.SKILL
    assert result.spec.intent.summary == "quick"


def test_import_partial_nested_object():
    result = import_json(json.dumps({"id": "quick", "body": "x", "activation": {"mode": "manual"}}))
    assert result.success
    assert result.spec.activation.mode == ActivationMode.MANUAL


def test_import_invalid_json():
    result = import_json("{not json")
    assert not result.success
    assert result.error_code == ErrorCode.PARSE_FAILED


def test_import_missing_required_fields():
    result = import_json(json.dumps({"summary": "nothing"}))
    assert not result.success
    assert result.error_code == ErrorCode.SCHEMA_INVALID
    assert "Missing required field: id" in result.errors


def test_import_rejects_non_object():
    result = import_json("[1, 2]")
    assert result.error_code == ErrorCode.SCHEMA_INVALID


def test_import_rejects_bad_component_type():
    result = import_json(json.dumps({"id": "x", "body": "y", "component_type": "plugin"}))
    assert not result.success
    assert result.error_code == ErrorCode.SCHEMA_INVALID


def test_import_rejects_null_body():
    result = import_json(json.dumps({"id": "x", "body": None}))
    assert not result.success
    assert result.error_code == ErrorCode.SCHEMA_INVALID
    assert any(".body" in e for e in result.errors)


def test_import_rejects_null_required_object():
    result = import_json(json.dumps({"id": "x", "body": "y", "intent": None}))
    assert not result.success
    assert result.error_code == ErrorCode.SCHEMA_INVALID


def test_import_rejects_null_agent_override():
    result = import_json(json.dumps({"id": "x", "body": "y", "agent_overrides": {"claude": None}}))
    assert not result.success
    assert result.error_code == ErrorCode.SCHEMA_INVALID
    assert any(".agent_overrides.claude" in e for e in result.errors)


def test_import_agent_override():
    data = {"id": "x", "body": "y", "agent_overrides": {"cursor": {"body_prefix": "Note"}}}
    result = import_json(json.dumps(data))
    assert result.success
    assert result.spec.override_for(Agent.CURSOR).body_prefix == "Note"


def test_import_rejects_unknown_override_agent():
    data = {"id": "x", "body": "y", "agent_overrides": {"copilot": {}}}
    result = import_json(json.dumps(data))
    assert not result.success
    assert result.error_code == ErrorCode.SCHEMA_INVALID
