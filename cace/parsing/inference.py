"""Best-effort inference shared by every parser.

Capability flags, safety level and categories are derived from lower-cased
substring matches against fixed vocabularies. The results are heuristic and
never authoritative; explicit frontmatter always wins where a dialect has it.
"""

from __future__ import annotations

import re

from cace.ir.models import CapabilitySet, MemoryImport, MemorySection, SafetyLevel

CAPABILITY_VOCABULARY: dict[str, tuple[str, ...]] = {
    "needs_shell": ("terminal", "shell", "bash", "run_command", "npm ", "pip "),
    "needs_git": ("git", "commit", "branch"),
    "needs_network": ("http", "api", "fetch", "read_url"),
    "needs_browser": ("browser", "screenshot"),
    "needs_code_search": ("search", "find", "grep"),
    "provides_analysis": ("analyz", "review", "audit"),
    "provides_code_generation": ("implement", "create", "generate"),
    "provides_refactoring": ("refactor", "restructure"),
    "provides_documentation": ("document", "readme"),
}

# Tool-name fragments that raise a capability flag
TOOL_VOCABULARY: dict[str, tuple[str, ...]] = {
    "needs_shell": ("bash", "shell", "terminal"),
    "needs_git": ("git",),
    "needs_browser": ("browser",),
    "needs_code_search": ("search", "grep", "glob"),
}

MEMORY_CATEGORIES = ("context", "instructions")

_IMPORT_RE = re.compile(r"(?<![\w@`])@([A-Za-z0-9_~./][A-Za-z0-9_\-./~:]*[A-Za-z0-9_/])")

DANGEROUS_TERMS = ("delete", "remove", "drop", "destroy")
SENSITIVE_TERMS = ("modify", "edit", "update")

CATEGORY_VOCABULARY: list[tuple[str, tuple[str, ...]]] = [
    ("architecture", ("architect",)),
    ("design", ("design",)),
    ("testing", ("test",)),
    ("debugging", ("debug",)),
    ("refactoring", ("refactor",)),
    ("documentation", ("document",)),
    ("security", ("security",)),
    ("performance", ("performance", "optimi")),
]


def _contains_any(text: str, terms: tuple[str, ...]) -> bool:
    return any(term in text for term in terms)


def infer_capabilities(body: str, tools: list[str] | None = None) -> CapabilitySet:
    """Derive capability flags from body text and an optional tool list.

    ``needs_filesystem`` is always true; every other flag is set only when
    its vocabulary matches.
    """
    text = body.lower()
    caps = CapabilitySet()
    for flag, terms in CAPABILITY_VOCABULARY.items():
        setattr(caps, flag, _contains_any(text, terms))

    for tool in tools or []:
        name = str(tool).lower()
        for flag, fragments in TOOL_VOCABULARY.items():
            if _contains_any(name, fragments):
                setattr(caps, flag, True)
    return caps


def infer_safety(body: str, capabilities: CapabilitySet) -> SafetyLevel:
    """Three-branch decision: dangerous, then sensitive, then safe."""
    text = body.lower()
    if _contains_any(text, DANGEROUS_TERMS) or capabilities.needs_shell:
        return SafetyLevel.DANGEROUS
    if capabilities.needs_network or capabilities.needs_git or _contains_any(text, SENSITIVE_TERMS):
        return SafetyLevel.SENSITIVE
    return SafetyLevel.SAFE


def infer_category(*texts: str | None) -> list[str]:
    text = " ".join(t for t in texts if t).lower()
    found = [name for name, terms in CATEGORY_VOCABULARY if _contains_any(text, terms)]
    return found or ["general"]


def string_list(value) -> list[str]:
    """Normalize a YAML scalar, comma-separated string or list to a list."""
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]


# --- Markdown helpers ---


def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def title_case(slug: str) -> str:
    return " ".join(word.capitalize() for word in re.split(r"[-_\s]+", slug) if word)


def first_heading(body: str, level: int = 1) -> str | None:
    match = re.search(rf"^{'#' * level}\s+(.+?)\s*$", body, re.MULTILINE)
    return match.group(1) if match else None


def extract_section(body: str, name: str) -> str | None:
    """Return the text under ``## <name>`` up to the next ``##`` heading."""
    pattern = rf"^##\s+{re.escape(name)}\s*\n(.*?)(?=^##\s|\Z)"
    match = re.search(pattern, body, re.MULTILINE | re.DOTALL | re.IGNORECASE)
    if not match:
        return None
    text = match.group(1).strip()
    return text or None


def first_paragraph(body: str, limit: int = 200) -> str | None:
    """First non-heading paragraph, flattened to one line and truncated."""
    for block in re.split(r"\n\s*\n", body):
        lines = [line.strip() for line in block.strip().splitlines()]
        lines = [line for line in lines if line and not line.startswith("#")]
        if lines and not lines[0].startswith(("```", "-", "*", "|", ">")):
            return " ".join(lines)[:limit]
    return None


def parse_sections(body: str) -> list[MemorySection]:
    """Split markdown into heading-delimited sections (levels 1-3)."""
    sections: list[MemorySection] = []
    current: MemorySection | None = None
    lines: list[str] = []
    in_fence = False

    for line in body.splitlines():
        if line.strip().startswith("```"):
            in_fence = not in_fence
        match = None if in_fence else re.match(r"^(#{1,3})\s+(.+?)\s*$", line)
        if match:
            if current:
                current.content = "\n".join(lines).strip()
                sections.append(current)
            current = MemorySection(title=match.group(2), content="", level=len(match.group(1)))
            lines = []
        elif current:
            lines.append(line)

    if current:
        current.content = "\n".join(lines).strip()
        sections.append(current)
    return sections


def id_from_path(path: str | None, *markers: str) -> str | None:
    """Derive an id from a file path.

    ``<dir>/SKILL.md`` yields ``<dir>``; otherwise the file stem is used.
    When ``markers`` are given the path must contain one of them.
    """
    if not path:
        return None
    normalized = path.replace("\\", "/")
    if markers and not any(m in normalized for m in markers):
        return None
    parts = [p for p in normalized.split("/") if p]
    if not parts:
        return None
    name = parts[-1]
    if name.upper() in ("SKILL.MD", "COMMAND.MD") and len(parts) > 1:
        return parts[-2]
    stem = re.sub(r"\.(md|mdc|markdown)$", "", name, flags=re.IGNORECASE)
    return stem or None


def extract_imports(body: str) -> list[MemoryImport]:
    """Collect ``@path`` references outside code fences, in order, once each.

    Scoped package names (``@types/...``) and e-mail addresses are skipped.
    """
    imports: list[MemoryImport] = []
    seen: set[str] = set()
    in_fence = False
    for line in body.splitlines():
        if line.strip().startswith("```"):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        for match in _IMPORT_RE.finditer(line):
            path = match.group(1)
            if path.startswith("types/") or path in seen:
                continue
            seen.add(path)
            kind = "url" if path.startswith(("http://", "https://")) else "file"
            imports.append(MemoryImport(path=path, type=kind))
    return imports
