"""Version catalog data model.

Agents name their format revisions freely ("2.0", "wave-13", "1.7"), so
versions are plain strings ordered by their position in the catalog, never
by semantic-version comparison.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from cace.agents import Agent


class BreakingChangeType(Enum):
    FIELD_RENAMED = "field_renamed"
    FIELD_REMOVED = "field_removed"
    FIELD_ADDED_REQUIRED = "field_added_required"
    FORMAT_CHANGED = "format_changed"
    LOCATION_CHANGED = "location_changed"
    BEHAVIOR_CHANGED = "behavior_changed"
    SYNTAX_CHANGED = "syntax_changed"


class MarkerType(Enum):
    FIELD_PRESENT = "field_present"
    FIELD_ABSENT = "field_absent"
    FIELD_VALUE = "field_value"
    FILE_PATTERN = "file_pattern"
    SYNTAX_PATTERN = "syntax_pattern"  # regex over the whole content
    STRUCTURE_PATTERN = "structure_pattern"  # regex over the body only


class OperationKind(Enum):
    ADD = "add"
    REMOVE = "remove"
    RENAME = "rename"


@dataclass
class FeatureFlag:
    id: str
    name: str
    description: str
    introduced_in: str
    deprecated_in: str | None = None
    removed_in: str | None = None


@dataclass
class FieldOperation:
    """A frontmatter edit implied by a breaking change.

    ``requires`` names a field that must be present, ``unless`` fields that
    must all be absent, and ``only_if_empty`` restricts the edit to documents
    with no frontmatter at all. ``default_from`` copies the value of another
    field, falling back to ``default``.
    """

    kind: OperationKind
    field: str
    new_field: str | None = None
    default: object = None
    default_from: str | None = None
    requires: str | None = None
    unless: list[str] = field(default_factory=list)
    only_if_empty: bool = False

    def describe(self) -> str:
        if self.kind == OperationKind.RENAME:
            return f"rename '{self.field}' to '{self.new_field}'"
        if self.kind == OperationKind.ADD:
            return f"add '{self.field}'"
        return f"remove '{self.field}'"


@dataclass
class BreakingChange:
    id: str
    type: BreakingChangeType
    version: str
    description: str
    affected: str
    migration: str
    auto_migratable: bool = False
    operations: list[FieldOperation] = field(default_factory=list)


@dataclass
class DetectionMarker:
    type: MarkerType
    weight: int
    field: str | None = None
    value: object = None
    pattern: str | None = None
    definitive: bool = False  # Matches only this version's format

    def describe(self) -> str:
        if self.type == MarkerType.FIELD_PRESENT:
            return f'Field "{self.field}" is present'
        if self.type == MarkerType.FIELD_ABSENT:
            return f'Field "{self.field}" is absent'
        if self.type == MarkerType.FIELD_VALUE:
            return f'Field "{self.field}" equals {self.value!r}'
        if self.type == MarkerType.FILE_PATTERN:
            return f'File path matches pattern "{self.pattern}"'
        if self.type == MarkerType.SYNTAX_PATTERN:
            return f'Content matches syntax pattern "{self.pattern}"'
        return f'Body matches structure pattern "{self.pattern}"'


@dataclass
class VersionEntry:
    agent: Agent
    version: str
    release_date: str | None = None
    is_current: bool = False
    is_supported: bool = True
    features_introduced: list[str] = field(default_factory=list)
    features_deprecated: list[str] = field(default_factory=list)
    breaking_changes: list[str] = field(default_factory=list)
    detection_markers: list[DetectionMarker] = field(default_factory=list)
    # Frontmatter fields first accepted in this version
    fields_introduced: list[str] = field(default_factory=list)


@dataclass
class VersionDetectionResult:
    version: str
    confidence: int
    matched_markers: list[str] = field(default_factory=list)
    is_definitive: bool = False


@dataclass
class VersionAdaptResult:
    content: str
    transformations: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    has_breaking_changes: bool = False


@dataclass
class MigrationGuideStep:
    step: int
    title: str
    description: str
    before: str | None = None
    after: str | None = None
    is_breaking: bool = True
    auto_migratable: bool = False


@dataclass
class MigrationGuide:
    agent: Agent
    from_version: str
    to_version: str
    title: str
    overview: str
    steps: list[MigrationGuideStep] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    links: list[str] = field(default_factory=list)
