"""Semantic diff between two ComponentSpecs.

Specs are compared aspect by aspect over a fixed, ordered aspect list.
Value identity is not the criterion: lists compare as sets, an empty list
equals an absent one, and bodies are compared after trailing whitespace is
normalised. Each aspect that differs yields an ``AspectDiff`` whose
severity comes from ``ASPECT_SEVERITY``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from cace.ir.models import ComponentSpec, format_version


class DiffSeverity(Enum):
    NONE = "none"
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _DIFF_ORDER.index(self)

    def __lt__(self, other: DiffSeverity) -> bool:
        if not isinstance(other, DiffSeverity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: DiffSeverity) -> bool:
        if not isinstance(other, DiffSeverity):
            return NotImplemented
        return self.rank <= other.rank


_DIFF_ORDER = [DiffSeverity.NONE, DiffSeverity.INFO, DiffSeverity.WARNING, DiffSeverity.CRITICAL]


def normalize_body(text: str) -> str:
    lines = [line.rstrip() for line in (text or "").replace("\r\n", "\n").split("\n")]
    return "\n".join(lines).strip("\n")


def _text(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _set(values) -> frozenset:
    return frozenset(values or ())


def _triggers(spec: ComponentSpec) -> frozenset:
    return frozenset(
        (t.type.value, t.pattern, tuple(sorted(t.keywords)), t.hook_name)
        for t in spec.activation.triggers
    )


def _capabilities(spec: ComponentSpec) -> tuple[frozenset, frozenset]:
    caps = spec.capabilities
    return frozenset(caps.enabled()), frozenset(caps.needs_mcp)


# Ordered aspect table: (name, severity, normalised-value extractor)
ASPECTS: list[tuple[str, DiffSeverity, Callable[[ComponentSpec], object]]] = [
    ("identity", DiffSeverity.WARNING, lambda s: (s.id, format_version(s.version))),
    ("componentType", DiffSeverity.CRITICAL, lambda s: s.component_type.value),
    ("category", DiffSeverity.INFO, lambda s: _set(s.category)),
    ("intent.summary", DiffSeverity.INFO, lambda s: _text(s.intent.summary)),
    ("intent.purpose", DiffSeverity.INFO, lambda s: _text(s.intent.purpose)),
    ("activation.mode", DiffSeverity.CRITICAL, lambda s: s.activation.mode.value),
    ("activation.safetyLevel", DiffSeverity.WARNING, lambda s: s.activation.safety_level.value),
    ("activation.triggers", DiffSeverity.WARNING, _triggers),
    ("invocation.slashCommand", DiffSeverity.INFO, lambda s: _text(s.invocation.slash_command)),
    ("invocation.argumentHint", DiffSeverity.INFO, lambda s: _text(s.invocation.argument_hint)),
    ("invocation.userInvocable", DiffSeverity.WARNING, lambda s: bool(s.invocation.user_invocable)),
    ("execution.context", DiffSeverity.WARNING, lambda s: s.execution.context.value),
    ("execution.allowedTools", DiffSeverity.WARNING, lambda s: _set(s.execution.allowed_tools)),
    ("execution.preferredModel", DiffSeverity.INFO, lambda s: _text(s.execution.preferred_model)),
    ("execution.subAgent", DiffSeverity.WARNING, lambda s: _text(s.execution.sub_agent)),
    ("capabilities", DiffSeverity.INFO, _capabilities),
    ("body", DiffSeverity.WARNING, lambda s: normalize_body(s.body)),
]

ASPECT_NAMES = [name for name, _, _ in ASPECTS]
ASPECT_SEVERITY = {name: severity for name, severity, _ in ASPECTS}


def _display(value: object) -> object:
    """Make a normalised value readable (sets become sorted lists)."""
    if isinstance(value, frozenset):
        return sorted(_display(v) for v in value)
    if isinstance(value, tuple):
        return [_display(v) for v in value]
    return value


@dataclass
class AspectDiff:
    aspect: str
    severity: DiffSeverity
    before: object
    after: object

    def __str__(self) -> str:
        return f"[{self.severity.value}] {self.aspect}: {self.before!r} -> {self.after!r}"


@dataclass
class SemanticDiff:
    identical: bool
    overall_severity: DiffSeverity = DiffSeverity.NONE
    changed_aspects: list[str] = field(default_factory=list)
    preserved_aspects: list[str] = field(default_factory=list)
    diffs: list[AspectDiff] = field(default_factory=list)

    def summary(self) -> str:
        if self.identical:
            return f"Identical ({len(self.preserved_aspects)} aspects preserved)"
        return (
            f"{len(self.changed_aspects)} aspect(s) changed "
            f"[{self.overall_severity.value}]: {', '.join(self.changed_aspects)}"
        )


def diff_specs(a: ComponentSpec, b: ComponentSpec) -> SemanticDiff:
    """Compare two specs over every aspect in ``ASPECTS``."""
    diffs = []
    changed = []
    preserved = []
    for name, severity, extract in ASPECTS:
        before, after = extract(a), extract(b)
        if before == after:
            preserved.append(name)
            continue
        changed.append(name)
        diffs.append(AspectDiff(name, severity, _display(before), _display(after)))

    overall = max((d.severity for d in diffs), default=DiffSeverity.NONE, key=lambda s: s.rank)
    return SemanticDiff(
        identical=not diffs,
        overall_severity=overall,
        changed_aspects=changed,
        preserved_aspects=preserved,
        diffs=diffs,
    )


def combined_fidelity(score1: float, score2: float) -> int:
    """Combine two stage fidelities as if they were independent.

    ``score1 * score2 / 100`` rounded half up. A heuristic kept for compatibility,
    not a measured probability.
    """
    s1 = min(max(score1, 0), 100)
    s2 = min(max(score2, 0), 100)
    return math.floor(s1 * s2 / 100 + 0.5)


def format_diff(diff: SemanticDiff) -> str:
    lines = [diff.summary()]
    for entry in diff.diffs:
        lines.append(f"  {entry}")
    return "\n".join(lines)
