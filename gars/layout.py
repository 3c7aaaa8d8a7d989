"""Locations of the skill, agent and plan directories under a gars home."""

from __future__ import annotations

from pathlib import Path

__all__ = ["skills_dir", "agents_dir", "plans_dir", "ensure_user_dirs"]


def skills_dir(home: str | Path) -> Path:
    """Return the skills root below ``home``."""
    return Path(home) / "skills"


def agents_dir(home: str | Path) -> Path:
    """Return the agent definitions root below ``home``."""
    return Path(home) / "agents"


def plans_dir(home: str | Path) -> Path:
    """Return the plans root below ``home``."""
    return Path(home) / "plans"


def ensure_user_dirs(home: str | Path) -> None:
    """Create the skills, agents and plans directories if they are missing."""
    for directory in (skills_dir(home), agents_dir(home), plans_dir(home)):
        directory.mkdir(parents=True, exist_ok=True)