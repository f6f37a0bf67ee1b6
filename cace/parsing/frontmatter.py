"""YAML frontmatter splitting and emission.

Markdown documents may open with a ``---`` delimited YAML block. The block
is loaded with ``yaml.safe_load`` and must be a mapping.
"""

from __future__ import annotations

import re

import yaml

_FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\n(.*?)^---[ \t]*(?:\n|\Z)(.*)\Z", re.DOTALL | re.MULTILINE
)
_EMPTY_FRONTMATTER_RE = re.compile(r"\A---[ \t]*\n---[ \t]*(?:\n|\Z)(.*)\Z", re.DOTALL)


class FrontmatterError(ValueError):
    """Raised when a frontmatter block exists but cannot be loaded."""


def has_frontmatter(content: str) -> bool:
    text = _normalize(content)
    return bool(_FRONTMATTER_RE.match(text) or _EMPTY_FRONTMATTER_RE.match(text))


def split_frontmatter(content: str) -> tuple[dict, str]:
    """Split content into (frontmatter, body).

    Content without a frontmatter block yields an empty dict and the whole
    text as body. The body is stripped of surrounding blank lines.

    Raises:
        FrontmatterError: if the YAML is malformed or not a mapping.
    """
    text = _normalize(content)

    empty = _EMPTY_FRONTMATTER_RE.match(text)
    if empty:
        return {}, _clean_body(empty.group(1))

    match = _FRONTMATTER_RE.match(text)
    if not match:
        return {}, _clean_body(text)

    raw, body = match.groups()
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise FrontmatterError(f"Failed to parse YAML frontmatter: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontmatterError(
            f"Frontmatter must be a mapping, got {type(data).__name__}"
        )
    return data, _clean_body(body)


def safe_frontmatter(content: str) -> dict:
    """Frontmatter for detection heuristics; malformed blocks yield {}."""
    try:
        return split_frontmatter(content)[0]
    except FrontmatterError:
        return {}


def dump_frontmatter(data: dict, body: str, comment: str | None = None) -> str:
    """Emit ``---`` YAML ``---`` followed by the body.

    An empty mapping emits the body alone. ``comment`` is placed between the
    frontmatter and the body so the YAML stays first in the file.
    """
    parts: list[str] = []
    if data:
        yaml_str = yaml.dump(
            data, default_flow_style=False, sort_keys=False, allow_unicode=True
        )
        parts.append(f"---\n{yaml_str}---\n")
    if comment:
        parts.append(f"{comment}\n")
    if body:
        parts.append(f"\n{body}\n" if data else f"{body}\n")
    return "".join(parts)


def _normalize(content: str) -> str:
    text = content.replace("\r\n", "\n")
    return text[1:] if text.startswith("\ufeff") else text


def _clean_body(body: str) -> str:
    return body.strip("\n").rstrip()
