"""Parser for OpenAI Codex skills, prompts and rules.

Codex frontmatter expresses safety through ``sandbox_mode`` and
``approval_policy``; when either is present it overrides body inference.
"""

from __future__ import annotations

from cace.agents import Agent
from cace.ir.models import (
    ActivationMode,
    ActivationModel,
    ComponentMetadata,
    ComponentSpec,
    ComponentType,
    ExecutionContext,
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

CODEX_MARKER_FIELDS = ("approval_policy", "sandbox_mode", "mcp_servers", "web_search")
CODEX_EXTRA_FIELDS = ("approval_policy", "sandbox_mode", "web_search", "mcp_servers")

APPROVAL_POLICIES = ("untrusted", "on-failure", "on-request", "never")
SANDBOX_MODES = ("read-only", "workspace-write", "danger-full-access")


def safety_from_sandbox(sandbox_mode: str | None, approval_policy: str | None) -> SafetyLevel | None:
    """Safety implied by explicit Codex settings, or None when neither is set."""
    if sandbox_mode == "danger-full-access" or approval_policy == "never":
        return SafetyLevel.DANGEROUS
    if sandbox_mode == "workspace-write":
        return SafetyLevel.SENSITIVE
    if sandbox_mode == "read-only":
        return SafetyLevel.SAFE
    return None


class CodexParser(BaseParser):
    agent = Agent.CODEX

    def can_parse(self, content: str, filename: str | None = None) -> bool:
        if self.path_contains(filename, ".codex/", "CODEX.md"):
            return True
        fm = self.frontmatter_of(content)
        return any(key in fm for key in CODEX_MARKER_FIELDS)

    def _component_type(self, fm: dict, source: str | None) -> ComponentType:
        if source and source.replace("\\", "/").endswith("CODEX.md"):
            return ComponentType.MEMORY
        if fm.get("slash_command") or fm.get("argument_hint"):
            default = ComponentType.COMMAND
        elif "globs" in fm or "alwaysApply" in fm:
            default = ComponentType.RULE
        else:
            default = ComponentType.SKILL
        return self.component_type_from_path(source, default)

    def _build(self, fm: dict, body: str, options: ParserOptions, warnings: list[str]) -> ComponentSpec:
        source = options.source_file
        component_type = self._component_type(fm, source)
        fallback_id = "codex-config" if component_type == ComponentType.MEMORY else "unnamed"
        component_id = str(fm.get("name") or id_from_path(source, ".codex/") or fallback_id)

        sandbox_mode = fm.get("sandbox_mode")
        approval_policy = fm.get("approval_policy")
        if sandbox_mode is not None and sandbox_mode not in SANDBOX_MODES:
            warnings.append(f"Unknown sandbox_mode '{sandbox_mode}'")
        if approval_policy is not None and approval_policy not in APPROVAL_POLICIES:
            warnings.append(f"Unknown approval_policy '{approval_policy}'")

        tools = string_list(fm.get("tools"))
        mcp_servers = fm.get("mcp_servers") or {}
        capabilities = self.capabilities_for(body, tools, options)
        capabilities.needs_network = capabilities.needs_network or fm.get("web_search") == "live"
        capabilities.needs_mcp = sorted(mcp_servers) if isinstance(mcp_servers, dict) else string_list(mcp_servers)
        safety = safety_from_sandbox(sandbox_mode, approval_policy) or infer_safety(body, capabilities)

        globs = self.glob_triggers(fm.get("globs"))
        if component_type == ComponentType.MEMORY:
            mode = ActivationMode.AUTO
        elif globs:
            mode = ActivationMode.CONTEXTUAL
        elif fm.get("alwaysApply"):
            mode = ActivationMode.AUTO
        elif fm.get("slash_command"):
            mode = ActivationMode.MANUAL
        else:
            mode = ActivationMode.SUGGESTED

        description = fm.get("description")
        summary = (
            str(description) if description is not None
            else first_paragraph(body) or f"Codex {component_type.value}: {component_id}"
        )

        return ComponentSpec(
            id=component_id,
            component_type=component_type,
            version=parse_version(fm.get("version")),
            category=infer_category(summary, body),
            intent=SemanticIntent(summary=summary, purpose=summary),
            activation=ActivationModel(
                mode=mode,
                safety_level=safety,
                triggers=globs,
                requires_confirmation=approval_policy in ("untrusted", "on-request") or None,
            ),
            invocation=InvocationModel(
                user_invocable=True,
                slash_command=str(fm["slash_command"]) if fm.get("slash_command") else None,
                argument_hint=str(fm["argument_hint"]) if fm.get("argument_hint") else None,
            ),
            execution=ExecutionModel(
                context=(
                    ExecutionContext.ISOLATED if sandbox_mode == "danger-full-access"
                    else ExecutionContext.MAIN
                ),
                allowed_tools=tools,
                preferred_model=str(fm["model"]) if fm.get("model") else None,
            ),
            body=body,
            capabilities=capabilities,
            metadata=ComponentMetadata(
                original_format=f"codex-{component_type.value}",
                extra={key: fm[key] for key in CODEX_EXTRA_FIELDS if key in fm},
            ),
            sections=parse_sections(body) if component_type == ComponentType.MEMORY else [],
        )
