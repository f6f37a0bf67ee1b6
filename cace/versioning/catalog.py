"""Static version catalog for every agent.

``VersionCatalog`` holds the ordered version entries, features and breaking
changes per agent. The module-level functions operate on ``DEFAULT_CATALOG``
unless another catalog is passed in.
"""

from __future__ import annotations

from cace.agents import Agent
from cace.versioning.models import (
    BreakingChange,
    BreakingChangeType,
    DetectionMarker,
    FeatureFlag,
    FieldOperation,
    MarkerType,
    OperationKind,
    VersionEntry,
)


class VersionCatalog:
    """Ordered per-agent version data. Entry order is version order."""

    def __init__(
        self,
        versions: dict[Agent, list[VersionEntry]],
        features: dict[Agent, list[FeatureFlag]],
        breaking_changes: dict[Agent, list[BreakingChange]],
    ):
        self._versions = versions
        self._features = features
        self._breaking_changes = breaking_changes

    def versions(self, agent: Agent) -> list[VersionEntry]:
        return list(self._versions.get(agent, []))

    def features(self, agent: Agent) -> list[FeatureFlag]:
        return list(self._features.get(agent, []))

    def breaking_changes(self, agent: Agent) -> list[BreakingChange]:
        return list(self._breaking_changes.get(agent, []))

    def index_of(self, agent: Agent, version: str) -> int:
        for i, entry in enumerate(self._versions.get(agent, [])):
            if entry.version == version:
                return i
        return -1


def _present(field_name: str, weight: int, definitive: bool = False) -> DetectionMarker:
    return DetectionMarker(MarkerType.FIELD_PRESENT, weight, field=field_name, definitive=definitive)


def _absent(field_name: str, weight: int) -> DetectionMarker:
    return DetectionMarker(MarkerType.FIELD_ABSENT, weight, field=field_name)


def _path(pattern: str, weight: int) -> DetectionMarker:
    return DetectionMarker(MarkerType.FILE_PATTERN, weight, pattern=pattern, definitive=True)


# --- Claude Code ---

CLAUDE_FEATURES = [
    FeatureFlag("claude-skills", "Skills", "Reusable skill definitions in .claude/skills/", "1.0"),
    FeatureFlag("claude-commands", "Commands", "Custom slash commands in .claude/commands/", "1.0"),
    FeatureFlag("claude-fork-context", "Fork Context", "Fork execution context for isolated runs", "1.0"),
    FeatureFlag("claude-allowed-tools", "Allowed Tools", "Tool restriction list in frontmatter", "1.0"),
    FeatureFlag("claude-memory-imports", "Memory Imports", "@import syntax in CLAUDE.md files", "1.0"),
    FeatureFlag("claude-hooks", "Hooks", "Lifecycle hooks for tool events", "1.5"),
    FeatureFlag("claude-subagents", "Sub-agents", "Agent field for delegating to specialized sub-agents", "1.5"),
    FeatureFlag("claude-model-selection", "Model Selection", "Model field for specifying preferred model", "1.5"),
    FeatureFlag("claude-rules", "Rules", "Path-specific rules in .claude/rules/", "2.0"),
    FeatureFlag("claude-background-agents", "Background Agents", "Background agent execution", "2.0"),
]

CLAUDE_BREAKING_CHANGES = [
    BreakingChange(
        id="claude-hooks-format",
        type=BreakingChangeType.FORMAT_CHANGED,
        version="1.5",
        description="Hooks configuration moved to settings.json",
        affected="hooks",
        migration="Move hook definitions to .claude/settings.json hooks array",
    ),
    BreakingChange(
        id="claude-agent-model",
        type=BreakingChangeType.BEHAVIOR_CHANGED,
        version="1.5",
        description="Sub-agent delegation selects a model explicitly",
        affected="model",
        migration='Add "model: sonnet" to components that set "agent"',
        auto_migratable=True,
        operations=[
            FieldOperation(OperationKind.ADD, "model", default="sonnet", requires="agent"),
        ],
    ),
    BreakingChange(
        id="claude-rules-location",
        type=BreakingChangeType.LOCATION_CHANGED,
        version="2.0",
        description="Rules moved from inline CLAUDE.md to .claude/rules/ directory",
        affected="rules",
        migration="Extract rules from CLAUDE.md into separate .md files in .claude/rules/",
    ),
]

CLAUDE_VERSIONS = [
    VersionEntry(
        Agent.CLAUDE, "1.0", "2025-02-01",
        features_introduced=[
            "claude-skills", "claude-commands", "claude-fork-context",
            "claude-allowed-tools", "claude-memory-imports",
        ],
        detection_markers=[_absent("agent", 3), _absent("model", 2)],
    ),
    VersionEntry(
        Agent.CLAUDE, "1.5", "2025-06-01",
        features_introduced=["claude-hooks", "claude-subagents", "claude-model-selection"],
        breaking_changes=["claude-hooks-format", "claude-agent-model"],
        detection_markers=[_present("agent", 5), _present("model", 3)],
        fields_introduced=["agent", "model"],
    ),
    VersionEntry(
        Agent.CLAUDE, "2.0", "2025-12-01", is_current=True,
        features_introduced=["claude-rules", "claude-background-agents"],
        breaking_changes=["claude-rules-location"],
        detection_markers=[_path(r"\.claude/rules/.*\.md$", 10)],
    ),
]

# --- Windsurf ---

WINDSURF_FEATURES = [
    FeatureFlag("windsurf-workflows", "Workflows", "Workflow definitions in .windsurf/workflows/", "wave-1"),
    FeatureFlag("windsurf-rules", "Rules", "Rule definitions in .windsurf/rules/", "wave-1"),
    FeatureFlag("windsurf-auto-execution", "Auto Execution Mode",
                "auto_execution_mode field for activation control", "wave-8"),
    FeatureFlag("windsurf-agent-skills", "Agent Skills", "Agent Skills support for Cascade", "wave-10"),
    FeatureFlag("windsurf-parallel-sessions", "Parallel Sessions",
                "Multi-agent parallel sessions with Git worktrees", "wave-13"),
]

WINDSURF_BREAKING_CHANGES = [
    BreakingChange(
        id="windsurf-skills-location",
        type=BreakingChangeType.LOCATION_CHANGED,
        version="wave-10",
        description="Skills moved to .windsurf/skills/ directory structure",
        affected="skills",
        migration="Move skill files to .windsurf/skills/<name>/SKILL.md format",
    ),
]

WINDSURF_VERSIONS = [
    VersionEntry(
        Agent.WINDSURF, "wave-1", "2024-11-01", is_supported=False,
        features_introduced=["windsurf-workflows", "windsurf-rules"],
        detection_markers=[_absent("auto_execution_mode", 3)],
    ),
    VersionEntry(
        Agent.WINDSURF, "wave-8", "2025-03-01",
        features_introduced=["windsurf-auto-execution"],
        detection_markers=[_present("auto_execution_mode", 5)],
        fields_introduced=["auto_execution_mode"],
    ),
    VersionEntry(
        Agent.WINDSURF, "wave-10", "2025-06-01",
        features_introduced=["windsurf-agent-skills"],
        breaking_changes=["windsurf-skills-location"],
        detection_markers=[_path(r"\.windsurf/skills/.*\.md$", 8)],
    ),
    VersionEntry(
        Agent.WINDSURF, "wave-13", "2025-12-01", is_current=True,
        features_introduced=["windsurf-parallel-sessions"],
    ),
]

# --- Cursor ---

CURSOR_FEATURES = [
    FeatureFlag("cursor-cursorrules", ".cursorrules", "Repository-level AI rules in .cursorrules file",
                "0.34", deprecated_in="1.7"),
    FeatureFlag("cursor-background-agents", "Background Agents", "Autonomous background agent execution", "0.50"),
    FeatureFlag("cursor-commands", "Custom Commands", "Custom slash commands in .cursor/commands/", "1.6"),
    FeatureFlag("cursor-mdc-rules", "MDC Rules", "Rules in .cursor/rules/*.mdc format", "1.7"),
    FeatureFlag("cursor-hooks", "Hooks", "Custom scripts for agent behavior control", "1.7"),
    FeatureFlag("cursor-debug-mode", "Debug Mode", "Human-in-the-loop debugging workflow", "2.2"),
]

CURSOR_BREAKING_CHANGES = [
    BreakingChange(
        id="cursor-rules-migration",
        type=BreakingChangeType.LOCATION_CHANGED,
        version="1.7",
        description=".cursorrules deprecated in favor of .cursor/rules/*.mdc",
        affected=".cursorrules",
        migration="Move .cursorrules content to .cursor/rules/default.mdc",
        auto_migratable=True,
        operations=[
            FieldOperation(OperationKind.ADD, "description",
                           default="Migrated from .cursorrules", only_if_empty=True),
            FieldOperation(OperationKind.ADD, "globs", default=["**/*"], only_if_empty=True),
        ],
    ),
    BreakingChange(
        id="cursor-mdc-format",
        type=BreakingChangeType.FORMAT_CHANGED,
        version="1.7",
        description="Rules now use .mdc format with frontmatter",
        affected="rules",
        migration="Add YAML frontmatter to rule files and rename to .mdc",
        auto_migratable=True,
        operations=[
            FieldOperation(OperationKind.ADD, "description", default="Rule",
                           default_from="title", unless=["globs", "description"]),
        ],
    ),
]

CURSOR_VERSIONS = [
    VersionEntry(
        Agent.CURSOR, "0.34", "2024-04-01", is_supported=False,
        features_introduced=["cursor-cursorrules"],
        detection_markers=[_path(r"(^|/)\.cursorrules$", 8)],
    ),
    VersionEntry(
        Agent.CURSOR, "0.50", "2025-01-01",
        features_introduced=["cursor-background-agents"],
    ),
    VersionEntry(
        Agent.CURSOR, "1.6", "2025-06-01",
        features_introduced=["cursor-commands"],
        detection_markers=[_path(r"\.cursor/commands/.*\.md$", 8)],
    ),
    VersionEntry(
        Agent.CURSOR, "1.7", "2025-08-01",
        features_introduced=["cursor-mdc-rules", "cursor-hooks"],
        features_deprecated=["cursor-cursorrules"],
        breaking_changes=["cursor-rules-migration", "cursor-mdc-format"],
        detection_markers=[
            _path(r"\.cursor/rules/.*\.mdc$", 10),
            _present("globs", 4),
            _present("alwaysApply", 4),
        ],
        fields_introduced=["globs", "alwaysApply"],
    ),
    VersionEntry(
        Agent.CURSOR, "2.2", "2025-11-01",
        features_introduced=["cursor-debug-mode"],
    ),
    VersionEntry(Agent.CURSOR, "2.3", "2025-12-22", is_current=True),
]

# Single-revision agents

_SINGLE_VERSION = {
    agent: [VersionEntry(agent, "1.0", is_current=True)]
    for agent in (Agent.GEMINI, Agent.CODEX, Agent.OPENCODE, Agent.UNIVERSAL)
}

DEFAULT_CATALOG = VersionCatalog(
    versions={
        Agent.CLAUDE: CLAUDE_VERSIONS,
        Agent.WINDSURF: WINDSURF_VERSIONS,
        Agent.CURSOR: CURSOR_VERSIONS,
        **_SINGLE_VERSION,
    },
    features={
        Agent.CLAUDE: CLAUDE_FEATURES,
        Agent.WINDSURF: WINDSURF_FEATURES,
        Agent.CURSOR: CURSOR_FEATURES,
    },
    breaking_changes={
        Agent.CLAUDE: CLAUDE_BREAKING_CHANGES,
        Agent.WINDSURF: WINDSURF_BREAKING_CHANGES,
        Agent.CURSOR: CURSOR_BREAKING_CHANGES,
    },
)


# --- Catalog access ---


def get_agent_versions(agent: Agent, catalog: VersionCatalog | None = None) -> list[VersionEntry]:
    return (catalog or DEFAULT_CATALOG).versions(agent)


def get_current_version(agent: Agent, catalog: VersionCatalog | None = None) -> VersionEntry | None:
    for entry in get_agent_versions(agent, catalog):
        if entry.is_current:
            return entry
    return None


def get_version(
    agent: Agent, version: str, catalog: VersionCatalog | None = None
) -> VersionEntry | None:
    for entry in get_agent_versions(agent, catalog):
        if entry.version == version:
            return entry
    return None


def get_agent_features(agent: Agent, catalog: VersionCatalog | None = None) -> list[FeatureFlag]:
    return (catalog or DEFAULT_CATALOG).features(agent)


def get_feature(
    agent: Agent, feature_id: str, catalog: VersionCatalog | None = None
) -> FeatureFlag | None:
    for feature in get_agent_features(agent, catalog):
        if feature.id == feature_id:
            return feature
    return None


def is_feature_available(
    agent: Agent, feature_id: str, version: str, catalog: VersionCatalog | None = None
) -> bool:
    """True when ``version`` is at or after the feature's introduction and before its removal."""
    catalog = catalog or DEFAULT_CATALOG
    feature = get_feature(agent, feature_id, catalog)
    if feature is None:
        return False
    introduced = catalog.index_of(agent, feature.introduced_in)
    target = catalog.index_of(agent, version)
    if introduced == -1 or target == -1 or target < introduced:
        return False
    if feature.removed_in:
        removed = catalog.index_of(agent, feature.removed_in)
        if removed != -1 and target >= removed:
            return False
    return True


def get_breaking_changes(agent: Agent, catalog: VersionCatalog | None = None) -> list[BreakingChange]:
    return (catalog or DEFAULT_CATALOG).breaking_changes(agent)


def compare_versions(agent: Agent, v1: str, v2: str, catalog: VersionCatalog | None = None) -> int:
    """-1, 0 or 1 by catalog position. Unknown versions compare equal."""
    catalog = catalog or DEFAULT_CATALOG
    i1 = catalog.index_of(agent, v1)
    i2 = catalog.index_of(agent, v2)
    if i1 == -1 or i2 == -1:
        return 0
    return (i1 > i2) - (i1 < i2)


def get_breaking_changes_between(
    agent: Agent, from_version: str, to_version: str, catalog: VersionCatalog | None = None
) -> list[BreakingChange]:
    """Breaking changes in versions after the lower bound, up to and including the upper.

    Works in either direction; ``from == to`` always yields an empty list.
    """
    catalog = catalog or DEFAULT_CATALOG
    i_from = catalog.index_of(agent, from_version)
    i_to = catalog.index_of(agent, to_version)
    if i_from == -1 or i_to == -1:
        return []
    entries = catalog.versions(agent)[min(i_from, i_to) + 1 : max(i_from, i_to) + 1]
    ids = [change_id for entry in entries for change_id in entry.breaking_changes]
    return [change for change in catalog.breaking_changes(agent) if change.id in ids]


def get_default_target_version(agent: Agent, catalog: VersionCatalog | None = None) -> str:
    current = get_current_version(agent, catalog)
    return current.version if current else "1.0"


def get_version_summary(agent: Agent, catalog: VersionCatalog | None = None) -> dict:
    current = get_current_version(agent, catalog)
    return {
        "agent": agent.value,
        "versions": [
            {"version": v.version, "is_current": v.is_current, "is_supported": v.is_supported}
            for v in get_agent_versions(agent, catalog)
        ],
        "current_version": current.version if current else None,
        "total_features": len(get_agent_features(agent, catalog)),
        "total_breaking_changes": len(get_breaking_changes(agent, catalog)),
    }
