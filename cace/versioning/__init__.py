"""Per-agent format versions: catalog, detection, adaptation and migration guides."""

from cace.versioning.adapter import adapt_version, needs_adaptation
from cace.versioning.catalog import (
    DEFAULT_CATALOG,
    VersionCatalog,
    compare_versions,
    get_agent_versions,
    get_breaking_changes_between,
    get_current_version,
    get_default_target_version,
)
from cace.versioning.detector import detect_version
from cace.versioning.migration_guide import generate_migration_guide

__all__ = [
    "DEFAULT_CATALOG",
    "VersionCatalog",
    "adapt_version",
    "compare_versions",
    "detect_version",
    "generate_migration_guide",
    "get_agent_versions",
    "get_breaking_changes_between",
    "get_current_version",
    "get_default_target_version",
    "needs_adaptation",
]
