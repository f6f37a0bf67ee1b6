"""Canonical Intermediate Representation (IR) for agent configuration artifacts.

Every dialect is parsed into a ``ComponentSpec`` and rendered from one. The
IR normalizes:
- Identity and classification (id, version, component type, category)
- Behaviour (activation, invocation, execution)
- Content (instruction body, memory sections and imports)
- Requirements (capability flags)
"""

from cace.ir.models import (
    ActivationMode,
    ComponentSpec,
    ComponentType,
    ExecutionContext,
    SafetyLevel,
)

__all__ = [
    "ActivationMode",
    "ComponentSpec",
    "ComponentType",
    "ExecutionContext",
    "SafetyLevel",
]
