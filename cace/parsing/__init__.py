"""Parser registry and agent auto-detection.

The registry maps each ``Agent`` to one parser instance and is populated at
import time. ``register_parser`` exists for startup-time extension only; it
must not be called while other threads are looking parsers up.

Detection is an ordered list of ``(predicate, agent)`` pairs: file-path
conventions are always checked before content heuristics, and content
heuristics run in parser registration order.
"""

from __future__ import annotations

import logging
from typing import Callable

from cace.agents import Agent
from cace.errors import ErrorCode
from cace.parsing.base import BaseParser, ParseResult, ParserOptions
from cace.parsing.claude import ClaudeParser
from cace.parsing.codex import CodexParser
from cace.parsing.cursor import CursorParser
from cace.parsing.gemini import GeminiParser
from cace.parsing.opencode import OpenCodeParser
from cace.parsing.universal import UniversalParser
from cace.parsing.windsurf import WindsurfParser

logger = logging.getLogger(__name__)

_PARSERS: dict[Agent, BaseParser] = {}


def register_parser(parser: BaseParser) -> None:
    _PARSERS[parser.agent] = parser


for _parser in (
    ClaudeParser(),
    WindsurfParser(),
    CursorParser(),
    UniversalParser(),
    OpenCodeParser(),
    GeminiParser(),
    CodexParser(),
):
    register_parser(_parser)


def _normalized(path: str) -> str:
    return path.replace("\\", "/")


PATH_RULES: list[tuple[Callable[[str], bool], Agent]] = [
    (lambda p: ".claude/" in p, Agent.CLAUDE),
    (lambda p: ".windsurf/" in p, Agent.WINDSURF),
    (lambda p: ".cursor/" in p or p.endswith(".cursorrules"), Agent.CURSOR),
    (lambda p: ".opencode/" in p, Agent.OPENCODE),
    (lambda p: ".gemini/" in p, Agent.GEMINI),
    (lambda p: ".codex/" in p, Agent.CODEX),
    (lambda p: p.endswith("AGENTS.md"), Agent.UNIVERSAL),
    (lambda p: p.endswith("GEMINI.md"), Agent.GEMINI),
    (lambda p: p.endswith("CODEX.md"), Agent.CODEX),
    (lambda p: p.endswith(("CLAUDE.md", "CLAUDE.local.md")), Agent.CLAUDE),
]


def get_parser(agent: Agent) -> BaseParser | None:
    return _PARSERS.get(agent)


def registered_agents() -> list[Agent]:
    return list(_PARSERS)


def detect_agent(content: str, filename: str | None = None) -> Agent | None:
    """Return the first agent whose path rule or ``can_parse`` matches."""
    if filename:
        path = _normalized(filename)
        for predicate, agent in PATH_RULES:
            if predicate(path):
                logger.debug("Detected %s from path %s", agent, filename)
                return agent

    for agent, parser in _PARSERS.items():
        if parser.can_parse(content, filename):
            logger.debug("Detected %s from content", agent)
            return agent
    return None


def parse_component(
    content: str,
    agent: Agent | None = None,
    options: ParserOptions | None = None,
) -> ParseResult:
    """Detect (when ``agent`` is None) and parse in one call."""
    options = options or ParserOptions()
    agent = agent or detect_agent(content, options.source_file)
    if agent is None:
        return ParseResult(
            False,
            errors=["Could not detect source agent. Please specify it explicitly."],
            error_code=ErrorCode.UNKNOWN_AGENT,
        )
    parser = get_parser(agent)
    if parser is None:
        return ParseResult(
            False,
            errors=[f"No parser registered for agent: {agent}"],
            error_code=ErrorCode.UNSUPPORTED_CONVERSION,
        )
    return parser.parse(content, options)


__all__ = [
    "BaseParser",
    "ParseResult",
    "ParserOptions",
    "detect_agent",
    "get_parser",
    "parse_component",
    "register_parser",
    "registered_agents",
]
