"""Field-level mapping strategies between agent pairs.

Each ``CapabilityMapping`` records how one source-dialect field travels to
a target dialect: copied directly, transformed, replaced by a fallback,
or unsupported. The compatibility matrix is derived from these entries.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from cace.agents import Agent


class StrategyType(Enum):
    DIRECT = "direct"
    TRANSFORM = "transform"
    FALLBACK = "fallback"
    UNSUPPORTED = "unsupported"


# Matrix deductions per strategy type
STRATEGY_PENALTIES = {
    StrategyType.UNSUPPORTED: 15,
    StrategyType.FALLBACK: 5,
    StrategyType.TRANSFORM: 2,
    StrategyType.DIRECT: 0,
}


@dataclass
class MappingStrategy:
    type: StrategyType
    description: str = ""
    target_field: str | None = None
    fallback_value: object = None


@dataclass
class CapabilityMapping:
    source_agent: Agent
    target_agent: Agent
    source_field: str
    strategy: MappingStrategy


def _direct(source: Agent, target: Agent, field_name: str, target_field: str) -> CapabilityMapping:
    return CapabilityMapping(
        source, target, field_name, MappingStrategy(StrategyType.DIRECT, target_field=target_field)
    )


def _transform(source: Agent, target: Agent, field_name: str, description: str) -> CapabilityMapping:
    return CapabilityMapping(
        source, target, field_name, MappingStrategy(StrategyType.TRANSFORM, description)
    )


def _fallback(
    source: Agent, target: Agent, field_name: str, warning: str, value: object = None
) -> CapabilityMapping:
    return CapabilityMapping(
        source, target, field_name,
        MappingStrategy(StrategyType.FALLBACK, warning, fallback_value=value),
    )


def _unsupported(source: Agent, target: Agent, field_name: str, loss: str) -> CapabilityMapping:
    return CapabilityMapping(
        source, target, field_name, MappingStrategy(StrategyType.UNSUPPORTED, loss)
    )


_C, _W, _CU = Agent.CLAUDE, Agent.WINDSURF, Agent.CURSOR
_G, _X, _O = Agent.GEMINI, Agent.CODEX, Agent.OPENCODE

_MAPPINGS: list[CapabilityMapping] = [
    # Claude -> Windsurf
    _transform(_C, _W, "disable-model-invocation",
               "Maps disable-model-invocation: true to auto_execution_mode: 0"),
    _unsupported(_C, _W, "context: fork", "Claude fork context has no Windsurf equivalent"),
    _fallback(_C, _W, "allowed-tools", "Tool restrictions cannot be enforced in Windsurf"),
    _transform(_C, _W, "$ARGUMENTS", "Converts $ARGUMENTS placeholder to prose instruction"),
    # Claude -> Cursor
    _fallback(_C, _CU, "disable-model-invocation", "Cursor commands are always manual", True),
    _unsupported(_C, _CU, "context: fork", "Claude fork context not supported in Cursor"),
    _unsupported(_C, _CU, "agent", "Sub-agent assignment not supported in Cursor"),
    # Claude -> Gemini
    _transform(_C, _G, "disable-model-invocation", "Maps manual invocation to slash_command"),
    _transform(_C, _G, "allowed-tools", "Maps allowed-tools to the tools list"),
    _unsupported(_C, _G, "context: fork", "Claude fork context not supported in Gemini CLI"),
    _unsupported(_C, _G, "agent", "Sub-agent assignment not supported in Gemini CLI"),
    # Claude -> Codex
    _transform(_C, _X, "context: isolated", "Maps isolated context to sandbox_mode: danger-full-access"),
    _unsupported(_C, _X, "context: fork", "Claude fork context not supported in Codex"),
    _direct(_C, _X, "argument-hint", "argument_hint"),
    # Claude -> OpenCode
    _transform(_C, _O, "context: fork", "Maps fork context to subtask: true"),
    _direct(_C, _O, "agent", "agent"),
    _fallback(_C, _O, "allowed-tools", "Tool restrictions belong to OpenCode agent definitions"),
    # Windsurf -> Claude
    _transform(_W, _C, "auto_execution_mode", "Maps auto_execution_mode to disable-model-invocation"),
    _transform(_W, _C, "tool_references", "Infers allowed-tools from tool references in body"),
    # Windsurf -> Cursor
    _fallback(_W, _CU, "auto_execution_mode",
              "Cursor commands are always manual - auto_execution_mode ignored"),
    _transform(_W, _CU, "tool_references", "Converts tool references to prose instructions"),
    # Cursor -> Claude / Windsurf
    _direct(_CU, _C, "markdown_structure", "body"),
    _direct(_CU, _W, "markdown_structure", "body"),
    # Gemini -> others
    _fallback(_G, _C, "temperature", "Sampling temperature has no Claude equivalent"),
    _transform(_G, _C, "code_execution", "Maps code_execution to shell capability"),
    _fallback(_G, _X, "temperature", "Sampling temperature has no Codex equivalent"),
    # Codex -> others
    _transform(_X, _C, "sandbox_mode", "Maps sandbox_mode to safety level and execution context"),
    _fallback(_X, _C, "approval_policy", "Approval policy is not expressible in Claude"),
    _unsupported(_X, _W, "sandbox_mode", "Windsurf has no sandbox configuration"),
    _fallback(_X, _G, "approval_policy", "Gemini CLI has no approval policy field"),
    # OpenCode -> others
    _transform(_O, _C, "subtask", "Maps subtask: true to context: fork"),
    _direct(_O, _C, "agent", "agent"),
    _unsupported(_O, _W, "subtask", "Windsurf workflows cannot run as subtasks"),
]


def get_mappings(source_agent: Agent, target_agent: Agent) -> list[CapabilityMapping]:
    return [
        m for m in _MAPPINGS if m.source_agent == source_agent and m.target_agent == target_agent
    ]


def get_mapping(
    source_agent: Agent, target_agent: Agent, source_field: str
) -> CapabilityMapping | None:
    for mapping in get_mappings(source_agent, target_agent):
        if mapping.source_field == source_field:
            return mapping
    return None


def add_mapping(mapping: CapabilityMapping) -> None:
    """Register an extra mapping. Startup-time use only."""
    _MAPPINGS.append(mapping)


def describe_strategy(strategy: MappingStrategy) -> str:
    if strategy.type == StrategyType.DIRECT:
        return f"Direct mapping to {strategy.target_field}"
    if strategy.type == StrategyType.TRANSFORM:
        return strategy.description
    if strategy.type == StrategyType.FALLBACK:
        return f"Fallback: {strategy.description}"
    return f"Unsupported: {strategy.description}"


def compatibility_score(source: Agent, target: Agent) -> int:
    if source == target:
        return 100
    if Agent.UNIVERSAL in (source, target):
        return 95
    score = 100 - sum(STRATEGY_PENALTIES[m.strategy.type] for m in get_mappings(source, target))
    return max(0, score)


def get_compatibility_matrix() -> dict[Agent, dict[Agent, int]]:
    agents = list(Agent)
    return {source: {target: compatibility_score(source, target) for target in agents} for source in agents}
