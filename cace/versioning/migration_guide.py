"""Human-readable upgrade guidance built from the version catalog."""

from __future__ import annotations

from dataclasses import dataclass

from cace.agents import Agent
from cace.versioning.catalog import (
    VersionCatalog,
    get_agent_versions,
    get_breaking_changes_between,
    get_version,
)
from cace.versioning.detector import get_version_detection_summary
from cace.versioning.models import (
    BreakingChange,
    BreakingChangeType,
    MigrationGuide,
    MigrationGuideStep,
)

_STEP_TITLES = {
    BreakingChangeType.FIELD_RENAMED: "Rename field",
    BreakingChangeType.FIELD_REMOVED: "Remove field",
    BreakingChangeType.FIELD_ADDED_REQUIRED: "Add required field",
    BreakingChangeType.FORMAT_CHANGED: "Update format",
    BreakingChangeType.LOCATION_CHANGED: "Move files",
    BreakingChangeType.BEHAVIOR_CHANGED: "Update behavior",
    BreakingChangeType.SYNTAX_CHANGED: "Update syntax",
}

# Before/after snippets keyed by breaking-change id
_EXAMPLES: dict[str, tuple[str, str]] = {
    "cursor-rules-migration": (
        "# File: .cursorrules\n\nYou are a helpful assistant...",
        "# File: .cursor/rules/default.mdc\n\n---\ndescription: Migrated from .cursorrules\n"
        'globs:\n  - "**/*"\n---\n\nYou are a helpful assistant...',
    ),
    "cursor-mdc-format": (
        "# File: .cursor/rules/my-rule.md\n\nRule content without frontmatter...",
        "# File: .cursor/rules/my-rule.mdc\n\n---\ndescription: My rule\n"
        'globs:\n  - "**/*.ts"\n---\n\nRule content with frontmatter...',
    ),
    "claude-rules-location": (
        "# File: CLAUDE.md\n\n## Rules\n\n- Always use TypeScript\n- Follow clean code principles",
        "# File: .claude/rules/typescript.md\n\nAlways use TypeScript\n\n"
        "# File: .claude/rules/clean-code.md\n\nFollow clean code principles",
    ),
    "claude-hooks-format": (
        "# File: CLAUDE.md (inline hooks)\n\n<!-- hooks defined inline -->",
        '# File: .claude/settings.json\n\n{\n  "hooks": [\n    {\n'
        '      "event": "PostToolUse",\n      "command": "./format.sh"\n    }\n  ]\n}',
    ),
    "claude-agent-model": (
        "---\nname: reviewer\nagent: code-reviewer\n---",
        "---\nname: reviewer\nagent: code-reviewer\nmodel: sonnet\n---",
    ),
    "windsurf-skills-location": (
        "# File: .windsurf/workflows/my-skill.md\n\n---\ndescription: My skill\n---\n\nSkill content...",
        "# File: .windsurf/skills/my-skill/SKILL.md\n\n---\ndescription: My skill\n---\n\nSkill content...",
    ),
}

_AGENT_NOTES = {
    Agent.CURSOR: [
        "Cursor version upgrades may require IDE restart for full effect.",
        "Check .cursorrules is removed after migration to avoid conflicts.",
    ],
    Agent.CLAUDE: [
        "Claude Code will auto-detect version from file structure.",
        "Test skills in isolation after migration.",
    ],
    Agent.WINDSURF: ["Windsurf may require reload to pick up new skill locations."],
}

_AGENT_LINKS = {
    Agent.CLAUDE: [
        "https://github.com/anthropics/claude-code/blob/main/CHANGELOG.md",
        "https://docs.anthropic.com/claude-code",
    ],
    Agent.CURSOR: ["https://cursor.com/changelog", "https://docs.cursor.com"],
    Agent.WINDSURF: ["https://windsurf.com/changelog", "https://docs.windsurf.com"],
}


def step_title(change: BreakingChange) -> str:
    return f"{_STEP_TITLES.get(change.type, 'Update')}: {change.affected}"


def step_description(change: BreakingChange) -> str:
    note = (
        "*This change can be automatically migrated.*"
        if change.auto_migratable
        else "*This change requires manual migration.*"
    )
    return f"{change.description}\n\n**Migration:** {change.migration}\n\n{note}"


def _notes(agent: Agent, changes: list[BreakingChange]) -> list[str]:
    auto = sum(1 for c in changes if c.auto_migratable)
    manual = len(changes) - auto
    notes = []
    if auto:
        notes.append(f"{auto} change(s) can be automatically migrated using `cace convert --target-version`.")
    if manual:
        notes.append(f"{manual} change(s) require manual intervention.")
    return notes + _AGENT_NOTES.get(agent, [])


def generate_migration_guide(
    agent: Agent, from_version: str, to_version: str, catalog: VersionCatalog | None = None
) -> MigrationGuide | None:
    """Build a guide, or None when either version is not in the catalog."""
    if get_version(agent, from_version, catalog) is None or get_version(agent, to_version, catalog) is None:
        return None

    title = f"Migration Guide: {from_version} to {to_version}"
    changes = get_breaking_changes_between(agent, from_version, to_version, catalog)
    if not changes:
        return MigrationGuide(
            agent=agent,
            from_version=from_version,
            to_version=to_version,
            title=title,
            overview=(
                f"No breaking changes between {from_version} and {to_version}. "
                "Direct upgrade is safe."
            ),
            notes=["This is a non-breaking upgrade. No manual changes required."],
        )

    steps = []
    for i, change in enumerate(changes, start=1):
        before, after = _EXAMPLES.get(change.id, (None, None))
        steps.append(
            MigrationGuideStep(
                step=i,
                title=step_title(change),
                description=step_description(change),
                before=before,
                after=after,
                auto_migratable=change.auto_migratable,
            )
        )
    return MigrationGuide(
        agent=agent,
        from_version=from_version,
        to_version=to_version,
        title=title,
        overview=(
            f"This guide covers {len(changes)} breaking change(s) when upgrading "
            f"from {from_version} to {to_version}."
        ),
        steps=steps,
        notes=_notes(agent, changes),
        links=list(_AGENT_LINKS.get(agent, [])),
    )


# --- Formatting ---


def format_migration_guide_markdown(guide: MigrationGuide) -> str:
    lines = [
        f"# {guide.title}",
        "",
        f"**Agent:** {guide.agent.value}",
        f"**From:** {guide.from_version}",
        f"**To:** {guide.to_version}",
        "",
        "## Overview",
        "",
        guide.overview,
        "",
    ]
    if guide.steps:
        lines += ["## Migration Steps", ""]
        for step in guide.steps:
            lines += [f"### Step {step.step}: {step.title}", "", step.description, ""]
            if step.before:
                lines += ["**Before:**", "", "```", step.before, "```", ""]
            if step.after:
                lines += ["**After:**", "", "```", step.after, "```", ""]
    if guide.notes:
        lines += ["## Notes", ""]
        lines += [f"- {note}" for note in guide.notes]
        lines.append("")
    if guide.links:
        lines += ["## Related Links", ""]
        lines += [f"- {link}" for link in guide.links]
        lines.append("")
    return "\n".join(lines)


def format_migration_guide_cli(guide: MigrationGuide) -> str:
    lines = [
        "",
        guide.title,
        "=" * len(guide.title),
        "",
        f"Agent: {guide.agent.value}",
        f"From:  {guide.from_version}",
        f"To:    {guide.to_version}",
        "",
        guide.overview,
        "",
    ]
    if guide.steps:
        lines += ["Migration Steps:", ""]
        for step in guide.steps:
            icon = "!" if step.is_breaking else "-"
            lines.append(f"  {icon} Step {step.step}: {step.title}")
            lines.append(f"    {step.description.splitlines()[0]}")
        lines.append("")
    if guide.notes:
        lines.append("Notes:")
        lines += [f"  - {note}" for note in guide.notes]
        lines.append("")
    return "\n".join(lines)


# --- Path analysis ---


@dataclass
class MigrationAnalysis:
    breaking_changes: int
    auto_migratable: int
    manual_steps: int
    complexity: str  # low | medium | high
    estimated_effort: str


def analyze_migration_path(
    agent: Agent, from_version: str, to_version: str, catalog: VersionCatalog | None = None
) -> MigrationAnalysis:
    changes = get_breaking_changes_between(agent, from_version, to_version, catalog)
    auto = sum(1 for c in changes if c.auto_migratable)
    manual = len(changes) - auto

    if not changes:
        complexity, effort = "low", "Minimal - no breaking changes"
    elif manual == 0:
        complexity, effort = "low", "Quick - all changes auto-migratable"
    elif manual <= 2:
        complexity, effort = "medium", "Moderate - some manual steps required"
    else:
        complexity, effort = "high", "Significant - multiple manual changes needed"
    return MigrationAnalysis(len(changes), auto, manual, complexity, effort)


def get_available_migration_paths(
    agent: Agent, catalog: VersionCatalog | None = None
) -> list[dict]:
    """Every forward (from, to) pair with its breaking-change count."""
    names = [entry.version for entry in get_agent_versions(agent, catalog)]
    return [
        {
            "from": source,
            "to": target,
            "breaking_changes": len(get_breaking_changes_between(agent, source, target, catalog)),
        }
        for i, source in enumerate(names)
        for target in names[i + 1 :]
    ]


def get_recommended_upgrade_path(
    agent: Agent, from_version: str, to_version: str, catalog: VersionCatalog | None = None
) -> list[str]:
    """Versions to step through, inclusive; empty unless ``from`` precedes ``to``."""
    names = [entry.version for entry in get_agent_versions(agent, catalog)]
    if from_version not in names or to_version not in names:
        return []
    start, end = names.index(from_version), names.index(to_version)
    if start >= end:
        return []
    return names[start : end + 1]


__all__ = [
    "MigrationAnalysis",
    "analyze_migration_path",
    "format_migration_guide_cli",
    "format_migration_guide_markdown",
    "generate_migration_guide",
    "get_available_migration_paths",
    "get_recommended_upgrade_path",
    "get_version_detection_summary",
]
