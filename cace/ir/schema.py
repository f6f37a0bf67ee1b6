"""JSON Schema for the serialized ComponentSpec.

This is the structural definition used to re-validate imported JSON before
it is handed to a renderer. Tools can export it and use it with any JSON
Schema validator.
"""

from cace import IR_VERSION

_STRING_LIST = {"type": "array", "items": {"type": "string"}}

COMPONENT_SPEC_SCHEMA: dict = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$id": f"https://cace.dev/schema/component-spec/v{IR_VERSION}",
    "title": "ComponentSpec",
    "description": "Agent-independent representation of one agent configuration artifact.",
    "type": "object",
    "required": ["id", "component_type", "intent", "activation", "invocation",
                 "execution", "body", "version", "capabilities"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        # --- Version ---
        "version": {
            "type": "object",
            "required": ["major", "minor", "patch"],
            "properties": {
                "major": {"type": "integer", "minimum": 0},
                "minor": {"type": "integer", "minimum": 0},
                "patch": {"type": "integer", "minimum": 0},
                "prerelease": {"type": "string"},
            },
        },
        "source_agent": {
            "type": "object",
            "required": ["id"],
            "properties": {
                "id": {
                    "type": "string",
                    "enum": ["claude", "windsurf", "cursor", "gemini", "codex",
                             "opencode", "universal"],
                },
                "version": {"type": "string"},
                "detected_at": {"type": "string"},
            },
        },
        # --- Classification ---
        "component_type": {
            "type": "string",
            "enum": ["skill", "workflow", "command", "rule", "hook", "memory",
                     "agent", "config"],
        },
        "category": _STRING_LIST,
        "intent": {
            "type": "object",
            "required": ["summary", "purpose"],
            "properties": {
                "summary": {"type": "string"},
                "purpose": {"type": "string"},
                "when_to_use": {"type": "string"},
                "category": _STRING_LIST,
                "examples": _STRING_LIST,
            },
        },
        # --- Behaviour ---
        "activation": {
            "type": "object",
            "required": ["mode", "safety_level"],
            "properties": {
                "mode": {
                    "type": "string",
                    "enum": ["manual", "suggested", "auto", "contextual", "hooked"],
                },
                "safety_level": {
                    "type": "string",
                    "enum": ["safe", "sensitive", "dangerous"],
                },
                "requires_confirmation": {"type": "boolean"},
                "triggers": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "required": ["type"],
                        "properties": {
                            "type": {
                                "type": "string",
                                "enum": ["glob", "keyword", "context", "hook"],
                            },
                            "pattern": {"type": "string"},
                            "keywords": _STRING_LIST,
                            "hook_name": {"type": "string"},
                        },
                    },
                },
            },
        },
        "invocation": {
            "type": "object",
            "required": ["user_invocable"],
            "properties": {
                "user_invocable": {"type": "boolean"},
                "slash_command": {"type": "string"},
                "argument_hint": {"type": "string"},
                "arguments": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "required": ["name"],
                        "properties": {
                            "name": {"type": "string", "minLength": 1},
                            "description": {"type": "string"},
                            "required": {"type": "boolean"},
                            "default_value": {"type": "string"},
                            "type": {
                                "type": "string",
                                "enum": ["string", "number", "boolean", "file", "directory"],
                            },
                        },
                    },
                },
            },
        },
        "execution": {
            "type": "object",
            "required": ["context"],
            "properties": {
                "context": {"type": "string", "enum": ["main", "fork", "isolated"]},
                "allowed_tools": _STRING_LIST,
                "restricted_tools": _STRING_LIST,
                "preferred_model": {"type": "string"},
                "sub_agent": {"type": "string"},
            },
        },
        # --- Content ---
        "body": {"type": "string"},
        "sections": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["title", "content"],
                "properties": {
                    "title": {"type": "string"},
                    "content": {"type": "string"},
                    "level": {"type": "integer", "minimum": 1},
                },
            },
        },
        "imports": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["path"],
                "properties": {
                    "path": {"type": "string", "minLength": 1},
                    "type": {"type": "string", "enum": ["file", "url"]},
                },
            },
        },
        # --- Requirements ---
        "capabilities": {
            "type": "object",
            "required": [
                "needs_shell", "needs_filesystem", "needs_network", "needs_git",
                "needs_code_search", "needs_browser", "provides_analysis",
                "provides_code_generation", "provides_refactoring",
                "provides_documentation",
            ],
            "properties": {
                "needs_shell": {"type": "boolean"},
                "needs_filesystem": {"type": "boolean"},
                "needs_network": {"type": "boolean"},
                "needs_git": {"type": "boolean"},
                "needs_code_search": {"type": "boolean"},
                "needs_browser": {"type": "boolean"},
                "needs_mcp": _STRING_LIST,
                "provides_analysis": {"type": "boolean"},
                "provides_code_generation": {"type": "boolean"},
                "provides_refactoring": {"type": "boolean"},
                "provides_documentation": {"type": "boolean"},
            },
        },
        "agent_overrides": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "properties": {
                    "frontmatter_overrides": {"type": "object"},
                    "body_prefix": {"type": "string"},
                    "body_suffix": {"type": "string"},
                    "capability_overrides": {"type": "object"},
                },
            },
        },
        "metadata": {
            "type": "object",
            "properties": {
                "source_file": {"type": "string"},
                "original_format": {"type": "string"},
                "created_at": {"type": "string"},
                "updated_at": {"type": "string"},
                "author": {"type": "string"},
                "license": {"type": "string"},
                "tags": _STRING_LIST,
                "extra": {"type": "object"},
            },
        },
    },
}


def get_schema() -> dict:
    """Return the JSON Schema for serialized ComponentSpecs."""
    return COMPONENT_SPEC_SCHEMA
