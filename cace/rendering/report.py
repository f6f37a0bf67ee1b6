"""Conversion reports and fidelity scoring.

Every render produces a ``ConversionReport`` listing what survived
(``preserved_semantics``), what could not be expressed (``losses``) and
what was mapped with caveats (``warnings``). The fidelity score is a pure
function of those lists, so repeated runs are reproducible.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from cace.agents import Agent

LOSS_PENALTIES = {"critical": 20, "warning": 10, "info": 5}
WARNING_PENALTY = 3


class LossSeverity(Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _LOSS_ORDER.index(self)

    def __lt__(self, other: LossSeverity) -> bool:
        if not isinstance(other, LossSeverity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: LossSeverity) -> bool:
        if not isinstance(other, LossSeverity):
            return NotImplemented
        return self.rank <= other.rank


_LOSS_ORDER = [LossSeverity.INFO, LossSeverity.WARNING, LossSeverity.CRITICAL]


class LossCategory(Enum):
    ACTIVATION = "activation"
    INVOCATION = "invocation"
    EXECUTION = "execution"
    CAPABILITY = "capability"
    CONTENT = "content"
    METADATA = "metadata"


@dataclass
class ConversionLoss:
    category: LossCategory
    severity: LossSeverity
    description: str
    source_field: str
    recommendation: str | None = None

    def __str__(self) -> str:
        return f"[LOSS:{self.category.value}] {self.description}"


@dataclass
class ConversionWarning:
    code: str
    message: str
    field: str | None = None

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


@dataclass
class ComponentRef:
    agent: Agent
    component_type: str
    id: str


@dataclass
class ConversionReport:
    source: ComponentRef
    target: ComponentRef
    preserved_semantics: list[str] = field(default_factory=list)
    losses: list[ConversionLoss] = field(default_factory=list)
    warnings: list[ConversionWarning] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    fidelity_score: int = 100
    converted_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    duration_ms: float = 0.0

    @property
    def critical_losses(self) -> list[ConversionLoss]:
        return [loss for loss in self.losses if loss.severity == LossSeverity.CRITICAL]

    @property
    def has_losses(self) -> bool:
        return bool(self.losses)

    def summary(self) -> str:
        return (
            f"{self.source.agent} -> {self.target.agent}: fidelity {self.fidelity_score}% "
            f"({len(self.losses)} losses, {len(self.warnings)} warnings)"
        )


def calculate_fidelity(
    base: int,
    losses: list[ConversionLoss],
    warnings: list[ConversionWarning],
    cross_agent_penalty: int = 0,
) -> int:
    """Deduct 20/10/5 per critical/warning/info loss and 3 per warning.

    The result is clamped to [0, 100]. Deductions are summed, so the order of
    losses and warnings never changes the score.
    """
    score = base - cross_agent_penalty
    score -= sum(LOSS_PENALTIES[loss.severity.value] for loss in losses)
    score -= WARNING_PENALTY * len(warnings)
    return max(0, min(100, score))
