"""Confidence-scored version detection.

Each version's detection markers are evaluated against the frontmatter,
body and file path. A version scores the summed weight of its matched
markers; the best score wins, ties going to the later version. Confidence
is the matched share of the winning version's total marker weight.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass

from cace.agents import Agent
from cace.parsing.frontmatter import FrontmatterError, split_frontmatter
from cace.versioning.catalog import (
    VersionCatalog,
    get_agent_versions,
    get_default_target_version,
)
from cace.versioning.models import DetectionMarker, MarkerType, VersionDetectionResult

logger = logging.getLogger(__name__)

NO_MATCH_CONFIDENCE = 30


@dataclass
class _DetectionContext:
    content: str
    frontmatter: dict
    body: str
    file_path: str | None


def _context(content: str, file_path: str | None) -> _DetectionContext:
    try:
        frontmatter, body = split_frontmatter(content)
    except FrontmatterError:
        frontmatter, body = {}, content
    path = file_path.replace("\\", "/") if file_path else None
    return _DetectionContext(content, frontmatter, body, path)


def marker_matches(marker: DetectionMarker, ctx: _DetectionContext) -> bool:
    if marker.type == MarkerType.FIELD_PRESENT:
        return marker.field in ctx.frontmatter
    if marker.type == MarkerType.FIELD_ABSENT:
        return marker.field not in ctx.frontmatter
    if marker.type == MarkerType.FIELD_VALUE:
        return ctx.frontmatter.get(marker.field) == marker.value
    if not marker.pattern:
        return False
    if marker.type == MarkerType.FILE_PATTERN:
        return ctx.file_path is not None and re.search(marker.pattern, ctx.file_path) is not None
    if marker.type == MarkerType.SYNTAX_PATTERN:
        return re.search(marker.pattern, ctx.content, re.MULTILINE) is not None
    return re.search(marker.pattern, ctx.body, re.MULTILINE) is not None


def detect_version(
    agent: Agent,
    content: str,
    file_path: str | None = None,
    catalog: VersionCatalog | None = None,
) -> VersionDetectionResult:
    ctx = _context(content, file_path)
    best = None
    for entry in get_agent_versions(agent, catalog):
        if not entry.detection_markers:
            continue
        matched = [m for m in entry.detection_markers if marker_matches(m, ctx)]
        score = sum(m.weight for m in matched)
        if score == 0:
            continue
        if best is None or score >= best[1]:
            best = (entry, score, matched)

    if best is None:
        return VersionDetectionResult(
            version=get_default_target_version(agent, catalog),
            confidence=NO_MATCH_CONFIDENCE,
        )

    entry, score, matched = best
    total = sum(m.weight for m in entry.detection_markers)
    result = VersionDetectionResult(
        version=entry.version,
        confidence=math.floor(100 * score / total + 0.5),
        matched_markers=[m.describe() for m in matched],
        is_definitive=any(m.definitive for m in matched),
    )
    logger.debug("Detected %s version %s (%d%%)", agent, result.version, result.confidence)
    return result


def confidence_label(confidence: int) -> str:
    if confidence >= 80:
        return "high"
    if confidence >= 50:
        return "medium"
    return "low"


def get_version_detection_summary(result: VersionDetectionResult) -> str:
    lines = [
        f"Detected version: {result.version} "
        f"({confidence_label(result.confidence)} confidence: {result.confidence}%)"
    ]
    if result.matched_markers:
        lines.append("Matched indicators:")
        lines.extend(f"  - {marker}" for marker in result.matched_markers)
    if not result.is_definitive:
        lines.append("")
        lines.append("Note: This detection is heuristic. Specify explicit version if needed.")
    return "\n".join(lines)
