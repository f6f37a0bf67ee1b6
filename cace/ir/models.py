"""IR data models for the agent-independent ComponentSpec.

Parsers build these from agent-specific frontmatter and markdown; renderers
read them to emit a target dialect. No agent-specific raw frontmatter is
stored here except through ``ComponentMetadata.extra``, which holds typed
dialect settings (model temperature, sandbox mode, ...) that have no
first-class IR field.
"""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass, field
from enum import Enum

from cace.agents import Agent


class ComponentType(Enum):
    SKILL = "skill"
    WORKFLOW = "workflow"
    COMMAND = "command"
    RULE = "rule"
    HOOK = "hook"
    MEMORY = "memory"
    AGENT = "agent"
    CONFIG = "config"


class ActivationMode(Enum):
    MANUAL = "manual"
    SUGGESTED = "suggested"
    AUTO = "auto"
    CONTEXTUAL = "contextual"
    HOOKED = "hooked"


class SafetyLevel(Enum):
    SAFE = "safe"
    SENSITIVE = "sensitive"
    DANGEROUS = "dangerous"


class TriggerType(Enum):
    GLOB = "glob"
    KEYWORD = "keyword"
    CONTEXT = "context"
    HOOK = "hook"


class ExecutionContext(Enum):
    MAIN = "main"
    FORK = "fork"
    ISOLATED = "isolated"


# --- Versions ---

_VERSION_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)(?:-(.+))?$")


@dataclass
class SemanticVersion:
    major: int = 1
    minor: int = 0
    patch: int = 0
    prerelease: str | None = None

    def __str__(self) -> str:
        return format_version(self)

    @property
    def is_default(self) -> bool:
        return (self.major, self.minor, self.patch, self.prerelease) == (1, 0, 0, None)


def parse_version(text: object) -> SemanticVersion:
    """Parse ``MAJOR.MINOR.PATCH[-pre]``; anything else falls back to 1.0.0."""
    match = _VERSION_RE.match(str(text).strip()) if text is not None else None
    if not match:
        return SemanticVersion()
    return SemanticVersion(
        major=int(match.group(1)),
        minor=int(match.group(2)),
        patch=int(match.group(3)),
        prerelease=match.group(4),
    )


def format_version(version: SemanticVersion) -> str:
    base = f"{version.major}.{version.minor}.{version.patch}"
    return f"{base}-{version.prerelease}" if version.prerelease else base


# --- Nested models ---


@dataclass
class AgentDescriptor:
    """Which agent a spec was parsed from."""

    id: Agent
    version: str | None = None  # Named catalog version, e.g. "wave-8"
    detected_at: str = ""


@dataclass
class TriggerSpec:
    type: TriggerType
    pattern: str | None = None
    keywords: list[str] = field(default_factory=list)
    hook_name: str | None = None


@dataclass
class ActivationModel:
    mode: ActivationMode = ActivationMode.SUGGESTED
    safety_level: SafetyLevel = SafetyLevel.SAFE
    triggers: list[TriggerSpec] = field(default_factory=list)
    requires_confirmation: bool | None = None

    @property
    def glob_patterns(self) -> list[str]:
        return [t.pattern for t in self.triggers if t.type == TriggerType.GLOB and t.pattern]


@dataclass
class ArgumentSpec:
    name: str
    description: str = ""
    required: bool = False
    default_value: str | None = None
    type: str = "string"  # string | number | boolean | file | directory


@dataclass
class InvocationModel:
    user_invocable: bool = True
    slash_command: str | None = None
    argument_hint: str | None = None
    arguments: list[ArgumentSpec] = field(default_factory=list)


@dataclass
class ExecutionModel:
    context: ExecutionContext = ExecutionContext.MAIN
    allowed_tools: list[str] = field(default_factory=list)
    restricted_tools: list[str] = field(default_factory=list)
    preferred_model: str | None = None
    sub_agent: str | None = None


CAPABILITY_FLAGS: tuple[str, ...] = (
    "needs_shell",
    "needs_filesystem",
    "needs_network",
    "needs_git",
    "needs_code_search",
    "needs_browser",
    "provides_analysis",
    "provides_code_generation",
    "provides_refactoring",
    "provides_documentation",
)


@dataclass
class CapabilitySet:
    """What a component needs from, and provides to, its host agent.

    Always fully populated: every flag has a concrete boolean value.
    """

    needs_shell: bool = False
    needs_filesystem: bool = True
    needs_network: bool = False
    needs_git: bool = False
    needs_code_search: bool = True
    needs_browser: bool = False
    needs_mcp: list[str] = field(default_factory=list)  # MCP server names
    provides_analysis: bool = False
    provides_code_generation: bool = False
    provides_refactoring: bool = False
    provides_documentation: bool = False

    def with_overrides(self, overrides: dict) -> CapabilitySet:
        """Return a copy with known flags replaced; unknown keys are ignored."""
        updated = copy.deepcopy(self)
        for key, value in overrides.items():
            if key in CAPABILITY_FLAGS:
                setattr(updated, key, bool(value))
            elif key == "needs_mcp":
                updated.needs_mcp = list(value or [])
        return updated

    def enabled(self) -> list[str]:
        return [name for name in CAPABILITY_FLAGS if getattr(self, name)]


@dataclass
class SemanticIntent:
    summary: str
    purpose: str
    when_to_use: str | None = None
    category: list[str] = field(default_factory=list)
    examples: list[str] = field(default_factory=list)


@dataclass
class ComponentMetadata:
    """Free provenance fields. Never compared by the diff engine."""

    source_file: str | None = None
    original_format: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    author: str | None = None
    license: str | None = None
    tags: list[str] = field(default_factory=list)
    extra: dict = field(default_factory=dict)  # Dialect settings without an IR field


@dataclass
class AgentOverride:
    """Adjustments applied only when rendering to one specific agent."""

    frontmatter_overrides: dict = field(default_factory=dict)
    body_prefix: str | None = None
    body_suffix: str | None = None
    capability_overrides: dict = field(default_factory=dict)


@dataclass
class MemorySection:
    title: str
    content: str
    level: int = 1


@dataclass
class MemoryImport:
    """An ``@path`` reference pulled into a memory file."""

    path: str
    type: str = "file"  # file | url


# --- The canonical IR ---


@dataclass
class ComponentSpec:
    """One configuration artifact in agent-independent form."""

    id: str
    component_type: ComponentType
    intent: SemanticIntent
    activation: ActivationModel = field(default_factory=ActivationModel)
    invocation: InvocationModel = field(default_factory=InvocationModel)
    execution: ExecutionModel = field(default_factory=ExecutionModel)
    body: str = ""
    version: SemanticVersion = field(default_factory=SemanticVersion)
    source_agent: AgentDescriptor | None = None
    category: list[str] = field(default_factory=list)
    capabilities: CapabilitySet = field(default_factory=CapabilitySet)
    agent_overrides: dict[Agent, AgentOverride] = field(default_factory=dict)
    metadata: ComponentMetadata = field(default_factory=ComponentMetadata)
    sections: list[MemorySection] = field(default_factory=list)  # Memory files only
    imports: list[MemoryImport] = field(default_factory=list)  # Memory files only

    @property
    def source_agent_id(self) -> Agent | None:
        return self.source_agent.id if self.source_agent else None

    def override_for(self, agent: Agent) -> AgentOverride | None:
        return self.agent_overrides.get(agent)

    def copy(self) -> ComponentSpec:
        return copy.deepcopy(self)
