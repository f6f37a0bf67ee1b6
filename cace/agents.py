"""Agent identifiers and per-agent metadata.

The set of agents is closed: every parser, renderer, validator and version
catalog is keyed by a member of ``Agent``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum


class Agent(Enum):
    CLAUDE = "claude"
    WINDSURF = "windsurf"
    CURSOR = "cursor"
    GEMINI = "gemini"
    CODEX = "codex"
    OPENCODE = "opencode"
    UNIVERSAL = "universal"  # AGENTS.md

    def __str__(self) -> str:
        return self.value


@dataclass
class AgentInfo:
    """Static description of one agent's configuration conventions."""

    agent: Agent
    display_name: str
    component_types: list[str] = field(default_factory=list)
    project_location: str = "."
    user_location: str = "~"
    file_patterns: list[str] = field(default_factory=list)

    def matches_path(self, path: str) -> bool:
        normalized = path.replace("\\", "/")
        return any(re.search(p, normalized) for p in self.file_patterns)


AGENTS: dict[Agent, AgentInfo] = {
    Agent.CLAUDE: AgentInfo(
        agent=Agent.CLAUDE,
        display_name="Claude Code",
        component_types=["skill", "command", "hook", "memory", "rule", "agent", "config"],
        project_location=".claude/skills",
        user_location="~/.claude/skills",
        file_patterns=[
            r"\.claude/skills/.*/SKILL\.md$",
            r"\.claude/commands/.*\.md$",
            r"\.claude/rules/.*\.md$",
            r"CLAUDE(\.local)?\.md$",
        ],
    ),
    Agent.WINDSURF: AgentInfo(
        agent=Agent.WINDSURF,
        display_name="Windsurf (Cascade)",
        component_types=["skill", "workflow", "rule", "memory", "config"],
        project_location=".windsurf/workflows",
        user_location="~/.windsurf/workflows",
        file_patterns=[
            r"\.windsurf/workflows/.*\.md$",
            r"\.windsurf/rules/.*\.md$",
            r"\.windsurf/skills/.*/SKILL\.md$",
        ],
    ),
    Agent.CURSOR: AgentInfo(
        agent=Agent.CURSOR,
        display_name="Cursor",
        component_types=["command", "skill", "rule", "memory", "config"],
        project_location=".cursor/commands",
        user_location="~/.cursor/commands",
        file_patterns=[
            r"\.cursor/commands/.*\.md$",
            r"\.cursor/skills/.*/SKILL\.md$",
            r"\.cursor/rules/.*\.mdc?$",
            r"\.cursorrules$",
        ],
    ),
    Agent.GEMINI: AgentInfo(
        agent=Agent.GEMINI,
        display_name="Gemini CLI",
        component_types=["skill", "command", "memory", "config"],
        project_location=".gemini",
        user_location="~/.gemini",
        file_patterns=[r"GEMINI\.md$", r"\.gemini/.*\.md$"],
    ),
    Agent.CODEX: AgentInfo(
        agent=Agent.CODEX,
        display_name="OpenAI Codex",
        component_types=["skill", "command", "rule", "memory"],
        project_location=".codex",
        user_location="~/.codex",
        file_patterns=[r"\.codex/.*\.md$", r"CODEX\.md$"],
    ),
    Agent.OPENCODE: AgentInfo(
        agent=Agent.OPENCODE,
        display_name="OpenCode",
        component_types=["skill", "command", "agent", "memory", "config"],
        project_location=".opencode",
        user_location="~/.config/opencode",
        file_patterns=[
            r"\.opencode/skills/.*\.md$",
            r"\.opencode/commands/.*\.md$",
            r"\.opencode/agents/.*\.md$",
        ],
    ),
    Agent.UNIVERSAL: AgentInfo(
        agent=Agent.UNIVERSAL,
        display_name="Universal (AGENTS.md)",
        component_types=["memory"],
        project_location=".",
        user_location="~",
        file_patterns=[r"AGENTS\.md$"],
    ),
}


def parse_agent(value: str | Agent | None) -> Agent | None:
    """Resolve a user-supplied agent id. Returns None for unknown ids."""
    if value is None or isinstance(value, Agent):
        return value
    try:
        return Agent(value.strip().lower())
    except ValueError:
        return None


def agent_ids() -> list[str]:
    return [a.value for a in Agent]
