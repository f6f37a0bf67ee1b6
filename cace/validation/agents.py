"""Per-agent structural validators."""

from __future__ import annotations

import re

from cace.agents import Agent
from cace.ir.models import ComponentType
from cace.parsing.codex import APPROVAL_POLICIES, SANDBOX_MODES
from cace.parsing.opencode import OPENCODE_AGENT_MODES
from cace.validation.validator import BaseValidator, Severity, ValidationResult, register_validator

CLAUDE_CONTEXTS = ("main", "fork", "isolated")
_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9-]{0,63}$")


class ClaudeValidator(BaseValidator):
    agent = Agent.CLAUDE
    component_types = (
        ComponentType.SKILL, ComponentType.COMMAND, ComponentType.RULE, ComponentType.MEMORY,
    )

    def _check(self, fm: dict, body: str, component_type: ComponentType, result: ValidationResult) -> None:
        if component_type == ComponentType.MEMORY:
            self._check_memory(fm, body, result)
            return
        if component_type == ComponentType.SKILL:
            self._require(fm, "name", result)
        name = fm.get("name")
        if name and not _NAME_RE.match(str(name)):
            result.add(
                Severity.WARNING,
                "INVALID_NAME",
                f'Name "{name}" should be lowercase letters, digits and hyphens (max 64)',
                "name",
            )
        if not fm.get("description"):
            result.add(
                Severity.WARNING,
                "MISSING_DESCRIPTION",
                'Add a "description" so the model knows when to use this component',
                "description",
            )
        self._one_of(fm, "context", CLAUDE_CONTEXTS, result, "INVALID_CONTEXT")
        self._string_list(fm, "allowed-tools", result, "INVALID_ALLOWED_TOOLS")
        if fm.get("disable-model-invocation") is True and fm.get("user-invocable") is False:
            result.add(
                Severity.WARNING,
                "UNREACHABLE",
                "Neither the model nor the user can invoke this component",
            )
        self._short_body(body, result)

    def _check_memory(self, fm: dict, body: str, result: ValidationResult) -> None:
        if fm:
            result.add(
                Severity.WARNING,
                "FRONTMATTER_IGNORED",
                "CLAUDE.md frontmatter is ignored; use .claude/rules/ for path-scoped rules",
            )
        for match in re.finditer(r"(?<![\w@`])@(\S+)", body):
            if match.group(1).startswith(("/", "../")):
                result.add(
                    Severity.INFO,
                    "IMPORT_OUTSIDE_PROJECT",
                    f"Import @{match.group(1)} points outside the project directory",
                    "body",
                )
        self._short_body(body, result)


class WindsurfValidator(BaseValidator):
    agent = Agent.WINDSURF
    component_types = (ComponentType.WORKFLOW, ComponentType.RULE)

    def _check(self, fm: dict, body: str, component_type: ComponentType, result: ValidationResult) -> None:
        self._require(fm, "description", result)
        mode = fm.get("auto_execution_mode")
        if mode is not None and (isinstance(mode, bool) or not isinstance(mode, int) or not 0 <= mode <= 3):
            result.add(
                Severity.ERROR,
                "INVALID_AUTO_EXECUTION_MODE",
                f"auto_execution_mode must be an integer from 0 to 3, got {mode!r}",
                "auto_execution_mode",
            )
        self._string_list(fm, "tags", result, "INVALID_TAGS")
        if "$ARGUMENTS" in body:
            result.add(
                Severity.INFO,
                "UNRESOLVED_PLACEHOLDER",
                "Windsurf does not substitute $ARGUMENTS",
                "body",
            )
        self._short_body(body, result)


class CursorValidator(BaseValidator):
    agent = Agent.CURSOR
    component_types = (ComponentType.COMMAND, ComponentType.RULE, ComponentType.SKILL)

    def _check(self, fm: dict, body: str, component_type: ComponentType, result: ValidationResult) -> None:
        if component_type == ComponentType.RULE:
            self._string_list(fm, "globs", result, "INVALID_GLOBS")
            if "alwaysApply" in fm and not isinstance(fm["alwaysApply"], bool):
                result.add(
                    Severity.ERROR, "INVALID_ALWAYS_APPLY", "alwaysApply must be a boolean", "alwaysApply"
                )
            if not any(fm.get(k) for k in ("description", "globs", "alwaysApply")):
                result.add(
                    Severity.WARNING,
                    "RULE_ACTIVATION",
                    "Rule has no description, globs or alwaysApply; it only applies when referenced",
                )
        elif not re.search(r"^#\s+\S", body, re.MULTILINE):
            result.add(Severity.INFO, "MISSING_TITLE", "Cursor commands usually start with a # title")
        self._short_body(body, result)


class GeminiValidator(BaseValidator):
    agent = Agent.GEMINI
    component_types = (ComponentType.SKILL, ComponentType.COMMAND, ComponentType.MEMORY)

    def _check(self, fm: dict, body: str, component_type: ComponentType, result: ValidationResult) -> None:
        if component_type != ComponentType.MEMORY:
            self._require(fm, "name", result)
            self._require(fm, "description", result)
        temperature = fm.get("temperature")
        if temperature is not None and (
            isinstance(temperature, bool)
            or not isinstance(temperature, (int, float))
            or not 0.0 <= temperature <= 2.0
        ):
            result.add(
                Severity.ERROR,
                "INVALID_TEMPERATURE",
                f"Temperature {temperature!r} is out of valid range (0.0-2.0)",
                "temperature",
            )
        for flag in ("code_execution", "google_search"):
            if flag in fm and not isinstance(fm[flag], bool):
                result.add(Severity.ERROR, f"INVALID_{flag.upper()}", f"{flag} must be a boolean", flag)
        self._string_list(fm, "tools", result, "INVALID_TOOLS")
        self._short_body(body, result)


class CodexValidator(BaseValidator):
    agent = Agent.CODEX
    component_types = (
        ComponentType.SKILL, ComponentType.COMMAND, ComponentType.RULE, ComponentType.MEMORY,
    )

    def _check(self, fm: dict, body: str, component_type: ComponentType, result: ValidationResult) -> None:
        if component_type != ComponentType.MEMORY:
            self._require(fm, "name", result)
            self._require(fm, "description", result)
        self._one_of(fm, "approval_policy", APPROVAL_POLICIES, result, "INVALID_APPROVAL_POLICY")
        self._one_of(fm, "sandbox_mode", SANDBOX_MODES, result, "INVALID_SANDBOX_MODE")
        if fm.get("sandbox_mode") == "danger-full-access" and fm.get("approval_policy") == "never":
            result.add(
                Severity.WARNING,
                "UNSAFE_SANDBOX",
                "Full filesystem access without approval prompts",
                "sandbox_mode",
            )
        self._string_list(fm, "tools", result, "INVALID_TOOLS")
        self._short_body(body, result)


class OpenCodeValidator(BaseValidator):
    agent = Agent.OPENCODE
    component_types = (ComponentType.SKILL, ComponentType.COMMAND, ComponentType.AGENT)

    def _check(self, fm: dict, body: str, component_type: ComponentType, result: ValidationResult) -> None:
        self._require(fm, "description", result)
        if component_type == ComponentType.SKILL:
            self._require(fm, "name", result)
        self._one_of(fm, "mode", OPENCODE_AGENT_MODES, result, "INVALID_MODE")
        if "subtask" in fm and not isinstance(fm["subtask"], bool):
            result.add(Severity.ERROR, "INVALID_SUBTASK", "subtask must be a boolean", "subtask")
        if (
            component_type == ComponentType.COMMAND
            and re.search(r"\barguments?\b", body, re.IGNORECASE)
            and not re.search(r"\$ARGUMENTS|\$\d", body)
        ):
            result.add(
                Severity.WARNING,
                "NO_ARGUMENTS_PLACEHOLDER",
                "Command mentions arguments but has no $ARGUMENTS or $1 placeholder",
                "body",
                "Add $ARGUMENTS to use command arguments",
            )
        self._short_body(body, result)


class UniversalValidator(BaseValidator):
    agent = Agent.UNIVERSAL
    component_types = (ComponentType.MEMORY,)

    def _check(self, fm: dict, body: str, component_type: ComponentType, result: ValidationResult) -> None:
        if fm:
            result.add(Severity.WARNING, "FRONTMATTER_IGNORED", "AGENTS.md frontmatter is ignored by agents")
        if not re.search(r"^#{1,3}\s+\S", body, re.MULTILINE):
            result.add(Severity.INFO, "NO_SECTIONS", "Use ## headings to organise project instructions")
        self._short_body(body, result)


for _validator in (
    ClaudeValidator(),
    WindsurfValidator(),
    CursorValidator(),
    GeminiValidator(),
    CodexValidator(),
    OpenCodeValidator(),
    UniversalValidator(),
):
    register_validator(_validator)
