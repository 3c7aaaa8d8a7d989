"""Skill / SOP markdown files: frontmatter parsing and catalog scanning."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

__all__ = [
    "SkillForm",
    "SkillSource",
    "SkillIndex",
    "parse_skill_file",
    "scan_skills_dir",
]

logger = logging.getLogger(__name__)

_PREVIEW_LINES = 40
_LAYERS = ("builtin", "local", "imported")


class SkillForm(str, Enum):
    """How a skill is meant to be consumed."""

    MARKDOWN = "markdown"
    TOOL = "tool"
    RECIPE = "recipe"

    @classmethod
    def parse(cls, text: str) -> "SkillForm":
        """Parse a form name; anything unknown is markdown."""
        lowered = text.lower()
        if lowered == "tool":
            return cls.TOOL
        if lowered == "recipe":
            return cls.RECIPE
        return cls.MARKDOWN


class SkillSource(str, Enum):
    """Which namespace a skill file was found in."""

    BUILTIN = "builtin"
    LOCAL = "local"
    IMPORTED = "imported"

    @classmethod
    def from_path(cls, path: str | Path) -> "SkillSource":
        """Return the namespace named by the first matching path component."""
        for part in Path(path).parts:
            if part in _LAYERS:
                return cls(part)
        return cls.LOCAL


@dataclass
class SkillIndex:
    """Metadata of one skill file."""

    key: str = ""
    name: str = ""
    one_line_summary: str = ""
    description: str = ""
    category: str = ""
    tags: list[str] = field(default_factory=list)
    form: SkillForm = SkillForm.MARKDOWN
    autonomous_safe: bool = False
    path: Path = field(default_factory=Path)
    body_preview: str = ""
    source: SkillSource = SkillSource.BUILTIN

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping."""
        return {
            "key": self.key,
            "name": self.name,
            "one_line_summary": self.one_line_summary,
            "description": self.description,
            "category": self.category,
            "tags": list(self.tags),
            "form": self.form.value,
            "autonomous_safe": self.autonomous_safe,
            "path": str(self.path),
            "body_preview": self.body_preview,
            "source": self.source.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SkillIndex":
        """Build from a mapping; key, name, one_line_summary and path are required."""
        missing = [
            name
            for name in ("key", "name", "one_line_summary", "path")
            if name not in data
        ]
        if missing:
            raise ValueError(f"skill record missing field(s): {', '.join(missing)}")
        return cls(
            key=str(data["key"]),
            name=str(data["name"]),
            one_line_summary=str(data["one_line_summary"]),
            description=str(data.get("description", "")),
            category=str(data.get("category", "")),
            tags=[str(tag) for tag in data.get("tags", [])],
            form=SkillForm(data.get("form", SkillForm.MARKDOWN.value)),
            autonomous_safe=bool(data.get("autonomous_safe", False)),
            path=Path(data["path"]),
            body_preview=str(data.get("body_preview", "")),
            source=SkillSource(data.get("source", SkillSource.BUILTIN.value)),
        )


def _lines(text: str) -> list[str]:
    """Split on newlines, dropping a final empty line and trailing CRs."""
    if not text:
        return []
    parts = text.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [part[:-1] if part.endswith("\r") else part for part in parts]


def _split_frontmatter(text: str) -> tuple[str | None, str]:
    trimmed = text.lstrip()
    if trimmed.startswith("---\n"):
        stripped = trimmed[4:]
        end = stripped.find("\n---")
        if end != -1:
            frontmatter = stripped[:end]
            body = stripped[end + 4 :]
            if body.startswith("\n"):
                body = body[1:]
            return frontmatter, body
    return None, text


def _parse_bool(text: str) -> bool:
    return text.lower() in {"true", "yes", "1", "on"}


def _parse_frontmatter(frontmatter: str) -> SkillIndex:
    skill = SkillIndex()
    current_key: str | None = None
    for raw_line in _lines(frontmatter):
        if not raw_line.strip():
            continue
        if raw_line.startswith("- "):
            if current_key == "tags":
                skill.tags.append(raw_line[2:].strip().strip('"'))
            continue
        key, sep, value = raw_line.partition(":")
        if not sep:
            continue
        key = key.strip()
        value = value.strip()
        current_key = key
        if not value:
            continue
        if value.startswith("[") and value.endswith("]"):
            items = [item.strip().strip('"') for item in value[1:-1].split(",")]
            if key == "tags":
                skill.tags = [item for item in items if item]
            continue
        value = value.strip('"')
        if key == "key":
            skill.key = value
        elif key == "name":
            skill.name = value
        elif key == "one_line_summary":
            skill.one_line_summary = value
        elif key == "description":
            skill.description = value
        elif key == "category":
            skill.category = value
        elif key == "form":
            skill.form = SkillForm.parse(value)
        elif key == "autonomous_safe":
            skill.autonomous_safe = _parse_bool(value)
    if not skill.key and not skill.name:
        raise ValueError("frontmatter missing key/name")
    return skill


def parse_skill_file(path: str | Path) -> SkillIndex:
    """Read a skill markdown file and return its index entry.

    Raises OSError when the file cannot be read and ValueError when it is not
    UTF-8 or its frontmatter names neither a key nor a name.
    """
    path = Path(path)
    content = path.read_text(encoding="utf-8")
    frontmatter, body = _split_frontmatter(content)
    skill = _parse_frontmatter(frontmatter) if frontmatter is not None else SkillIndex()
    skill.path = path
    skill.source = SkillSource.from_path(path)
    if not skill.key:
        skill.key = path.stem or "skill"
    if not skill.name:
        skill.name = skill.key
    skill.body_preview = "\n".join(_lines(body)[:_PREVIEW_LINES])
    return skill


def _scan_flat(root: Path) -> list[SkillIndex]:
    skills = []
    for candidate in sorted(root.rglob("*")):
        if not candidate.is_file():
            continue
        if candidate.name.startswith(".") or candidate.suffix != ".md":
            continue
        try:
            skills.append(parse_skill_file(candidate))
        except (OSError, ValueError) as err:
            logger.warning("skip %s: %s", candidate, err)
    return skills


def scan_skills_dir(root: str | Path) -> list[SkillIndex]:
    """Scan a skills root.

    With a ``builtin``/``local``/``imported`` layout the layers are read in that
    order, later ones replacing earlier entries with the same key, and the
    result is ordered by key. Otherwise every markdown file below ``root`` is
    returned.
    """
    root = Path(root)
    if not any((root / layer).is_dir() for layer in _LAYERS):
        return _scan_flat(root)
    by_key: dict[str, SkillIndex] = {}
    for layer in _LAYERS:
        directory = root / layer
        if not directory.exists():
            continue
        for skill in _scan_flat(directory):
            by_key[skill.key] = skill
    return [by_key[key] for key in sorted(by_key)]