"""Version-to-version content adaptation.

Upgrades apply the field operations of every breaking change between the
two versions; changes without operations become warnings. Downgrades undo
those operations in reverse order and warn about fields the older version
does not know. Nothing is dropped without a warning.
"""

from __future__ import annotations

import logging

from cace.agents import Agent
from cace.parsing.frontmatter import FrontmatterError, dump_frontmatter, split_frontmatter
from cace.versioning.catalog import (
    VersionCatalog,
    compare_versions,
    get_agent_versions,
    get_breaking_changes_between,
)
from cace.versioning.models import (
    BreakingChange,
    FieldOperation,
    OperationKind,
    VersionAdaptResult,
)

logger = logging.getLogger(__name__)


def _applies(op: FieldOperation, snapshot: dict) -> bool:
    if op.only_if_empty and snapshot:
        return False
    if op.requires and not snapshot.get(op.requires):
        return False
    return not any(name in snapshot for name in op.unless)


def _default_value(op: FieldOperation, snapshot: dict):
    if op.default_from and snapshot.get(op.default_from) is not None:
        return snapshot[op.default_from]
    return op.default


def _upgrade(change: BreakingChange, fm: dict, transformations: list[str]) -> None:
    snapshot = dict(fm)
    for op in change.operations:
        if op.kind == OperationKind.ADD:
            if op.field in fm or not _applies(op, snapshot):
                continue
            fm[op.field] = _default_value(op, snapshot)
            transformations.append(f"Added {op.field}: {fm[op.field]!r} ({change.id})")
        elif op.kind == OperationKind.REMOVE:
            if op.field in fm:
                del fm[op.field]
                transformations.append(f"Removed {op.field} ({change.id})")
        elif op.field in fm and op.new_field not in fm:
            fm[op.new_field] = fm.pop(op.field)
            transformations.append(f"Renamed {op.field} to {op.new_field} ({change.id})")


def _downgrade(
    change: BreakingChange, fm: dict, transformations: list[str], warnings: list[str]
) -> None:
    for op in reversed(change.operations):
        if op.kind == OperationKind.ADD:
            if op.field not in fm:
                continue
            remaining = {k: v for k, v in fm.items() if k != op.field}
            if fm[op.field] == _default_value(op, remaining):
                del fm[op.field]
                transformations.append(f"Removed {op.field} ({change.id})")
                warnings.append(
                    f"Removed '{op.field}', which {change.version} introduced ({change.id})"
                )
            else:
                warnings.append(
                    f"Kept '{op.field}': it differs from the value {change.version} would add"
                )
        elif op.kind == OperationKind.REMOVE:
            warnings.append(
                f"'{op.field}' was removed in {change.version} and cannot be restored automatically"
            )
        elif op.new_field in fm and op.field not in fm:
            fm[op.field] = fm.pop(op.new_field)
            transformations.append(f"Renamed {op.new_field} back to {op.field} ({change.id})")


def adapt_version(
    agent: Agent,
    content: str,
    from_version: str,
    to_version: str,
    catalog: VersionCatalog | None = None,
) -> VersionAdaptResult:
    changes = get_breaking_changes_between(agent, from_version, to_version, catalog)
    direction = compare_versions(agent, from_version, to_version, catalog)
    result = VersionAdaptResult(content=content, has_breaking_changes=bool(changes))
    if direction == 0:
        return result

    try:
        frontmatter, body = split_frontmatter(content)
    except FrontmatterError as e:
        result.warnings.append(f"Failed to parse content frontmatter: {e}")
        return result

    fm = dict(frontmatter)
    if direction < 0:
        for change in changes:
            if change.auto_migratable and change.operations:
                _upgrade(change, fm, result.transformations)
            else:
                result.warnings.append(f"Breaking change: {change.description}. {change.migration}")
    else:
        for change in reversed(changes):
            if change.auto_migratable and change.operations:
                _downgrade(change, fm, result.transformations, result.warnings)
            else:
                result.warnings.append(
                    f"Breaking change in {change.version}: {change.description}. "
                    "Revert the migration manually."
                )
        result.warnings.extend(_unsupported_fields(agent, fm, from_version, to_version, catalog))

    if fm != frontmatter:
        result.content = dump_frontmatter(fm, body)
    logger.debug(
        "Adapted %s content %s -> %s: %d transformation(s), %d warning(s)",
        agent, from_version, to_version, len(result.transformations), len(result.warnings),
    )
    return result


def _unsupported_fields(
    agent: Agent, fm: dict, from_version: str, to_version: str, catalog: VersionCatalog | None
) -> list[str]:
    """Warnings for fields introduced after ``to_version`` (up to ``from_version``)."""
    entries = get_agent_versions(agent, catalog)
    names = [e.version for e in entries]
    newer = entries[names.index(to_version) + 1 : names.index(from_version) + 1]
    return [
        f"Field '{name}' is not supported before {entry.version}; it was kept and may be ignored"
        for entry in newer
        for name in entry.fields_introduced
        if name in fm
    ]


def needs_adaptation(
    agent: Agent, from_version: str, to_version: str, catalog: VersionCatalog | None = None
) -> bool:
    return len(get_breaking_changes_between(agent, from_version, to_version, catalog)) > 0
