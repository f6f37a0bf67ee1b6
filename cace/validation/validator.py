"""Structural validation of rendered agent files.

Each agent has one ``BaseValidator`` registered for the component types it
understands. Validators check frontmatter shape, required fields and value
enums; they never parse into the IR. ``strict`` promotes warnings to errors.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

from cace.agents import Agent
from cace.ir.models import ComponentType
from cace.parsing.frontmatter import FrontmatterError, split_frontmatter
from cace.versioning.catalog import get_agent_versions, get_default_target_version, get_version

logger = logging.getLogger(__name__)

SHORT_BODY_LENGTH = 50


class Severity(Enum):
    ERROR = "error"  # Output will not load
    WARNING = "warning"  # Loads, but may misbehave
    INFO = "info"  # Suggestion


@dataclass
class ValidationIssue:
    severity: Severity
    code: str
    message: str
    path: str = ""
    suggestion: str = ""

    def __str__(self) -> str:
        location = f" ({self.path})" if self.path else ""
        return f"[{self.severity.value}] {self.code}: {self.message}{location}"


@dataclass
class ValidationResult:
    agent: Agent | None
    component_type: str
    version: str | None = None
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.WARNING]

    @property
    def info(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.INFO]

    def add(
        self, severity: Severity, code: str, message: str, path: str = "", suggestion: str = ""
    ) -> None:
        self.issues.append(ValidationIssue(severity, code, message, path, suggestion))

    def summary(self) -> str:
        status = "PASS" if self.valid else "FAIL"
        return (
            f"[{status}] {len(self.errors)} error(s), {len(self.warnings)} warning(s), "
            f"{len(self.info)} info"
        )


class BaseValidator(ABC):
    """Shared frontmatter splitting, leading-comment and version checks."""

    agent: Agent
    component_types: tuple[ComponentType, ...] = ()

    def supports(self, component_type: ComponentType) -> bool:
        return component_type in self.component_types

    def validate(
        self,
        content: str,
        component_type: ComponentType,
        strict: bool = False,
        version: str | None = None,
    ) -> ValidationResult:
        version = version or get_default_target_version(self.agent)
        result = ValidationResult(self.agent, component_type.value, version)

        try:
            fm, body = split_frontmatter(content)
        except FrontmatterError as e:
            result.add(Severity.ERROR, "PARSE_ERROR", f"Failed to parse content: {e}")
            return result

        if body.lstrip().startswith("<!--"):
            result.add(
                Severity.ERROR,
                "LEADING_COMMENT",
                "Body content must not start with a comment",
                "body",
                "Remove comments between --- and the start of the body content.",
            )
        if get_version(self.agent, version) is None:
            result.add(
                Severity.WARNING,
                "UNKNOWN_VERSION",
                f"Version '{version}' is not in the {self.agent} catalog",
            )
        else:
            self._check_version_fields(fm, version, result)

        self._check(fm, body, component_type, result)

        if strict:
            for issue in result.issues:
                if issue.severity == Severity.WARNING:
                    issue.severity = Severity.ERROR
        logger.debug("Validated %s %s: %s", self.agent, component_type.value, result.summary())
        return result

    def _check_version_fields(self, fm: dict, version: str, result: ValidationResult) -> None:
        entries = get_agent_versions(self.agent)
        names = [e.version for e in entries]
        for entry in entries[names.index(version) + 1 :]:
            for name in entry.fields_introduced:
                if name in fm:
                    result.add(
                        Severity.WARNING,
                        "FIELD_NOT_IN_VERSION",
                        f"'{name}' requires {self.agent} {entry.version} or later",
                        name,
                    )

    @abstractmethod
    def _check(
        self, fm: dict, body: str, component_type: ComponentType, result: ValidationResult
    ) -> None:
        ...

    # --- Shared checks ---

    @staticmethod
    def _require(fm: dict, name: str, result: ValidationResult, code: str = "") -> None:
        if not fm.get(name):
            result.add(
                Severity.ERROR,
                code or f"MISSING_{name.upper()}",
                f'Frontmatter must have a "{name}" field',
                name,
            )

    @staticmethod
    def _one_of(fm: dict, name: str, allowed: tuple, result: ValidationResult, code: str) -> None:
        if name in fm and fm[name] not in allowed:
            result.add(
                Severity.ERROR,
                code,
                f'Invalid {name} "{fm[name]}". Must be one of: {", ".join(map(str, allowed))}',
                name,
            )

    @staticmethod
    def _short_body(body: str, result: ValidationResult) -> None:
        if len(body.strip()) < SHORT_BODY_LENGTH:
            result.add(
                Severity.WARNING,
                "SHORT_BODY",
                "Body is very short. Consider adding more detailed instructions.",
                "body",
            )

    @staticmethod
    def _string_list(fm: dict, name: str, result: ValidationResult, code: str) -> None:
        value = fm.get(name)
        if value is None or isinstance(value, str):
            return
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            result.add(Severity.ERROR, code, f"{name} must be a string or a list of strings", name)


# --- Registry ---

_VALIDATORS: dict[Agent, BaseValidator] = {}


def register_validator(validator: BaseValidator) -> None:
    _VALIDATORS[validator.agent] = validator


def get_validator(agent: Agent) -> BaseValidator | None:
    return _VALIDATORS.get(agent)


def validate(
    content: str,
    agent: Agent,
    component_type: ComponentType | str,
    strict: bool = False,
    version: str | None = None,
) -> ValidationResult:
    """Validate ``content`` as ``agent``'s dialect for ``component_type``."""
    type_name = component_type.value if isinstance(component_type, ComponentType) else str(component_type)
    validator = get_validator(agent)
    try:
        resolved = ComponentType(type_name)
    except ValueError:
        resolved = None

    if validator is None or resolved is None or not validator.supports(resolved):
        result = ValidationResult(agent, type_name, version)
        result.add(
            Severity.ERROR,
            "VALIDATOR_NOT_FOUND",
            f"No validator for {agent} {type_name}",
        )
        return result
    return validator.validate(content, resolved, strict=strict, version=version)
