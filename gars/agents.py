"""Subagent definitions loaded from TOML files."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from gars.layout import agents_dir

__all__ = ["AgentDefinition", "AgentRegistry"]

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_CHAR_BUDGET = 80_000
DEFAULT_MAX_TURNS = 30
_LAYERS = ("builtin", "local")


def _require_str(data: dict[str, Any], key: str) -> str:
    if key not in data:
        raise ValueError(f"agent definition missing field '{key}'")
    value = data[key]
    if not isinstance(value, str):
        raise ValueError(f"agent field '{key}' must be a string")
    return value


def _optional_count(data: dict[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"agent field '{key}' must be a non-negative integer")
    return value


@dataclass
class AgentDefinition:
    """A subagent: its prompt, tool allow-list and limits."""

    name: str
    system_prompt: str
    allowed_tools: list[str] = field(default_factory=list)
    context_char_budget: int = DEFAULT_CONTEXT_CHAR_BUDGET
    max_turns: int = DEFAULT_MAX_TURNS
    verbose_default: bool = False
    source: Path | None = None

    @classmethod
    def from_toml(cls, text: str, source: str | Path | None = None) -> "AgentDefinition":
        """Parse a TOML document; raises ValueError when it is not a valid definition."""
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as err:
            raise ValueError(f"invalid agent TOML: {err}") from err
        tools = data.get("allowed_tools", [])
        if not isinstance(tools, list) or not all(isinstance(t, str) for t in tools):
            raise ValueError("agent field 'allowed_tools' must be a list of strings")
        verbose = data.get("verbose_default", False)
        if not isinstance(verbose, bool):
            raise ValueError("agent field 'verbose_default' must be a boolean")
        return cls(
            name=_require_str(data, "name"),
            system_prompt=_require_str(data, "system_prompt"),
            allowed_tools=list(tools),
            context_char_budget=_optional_count(
                data, "context_char_budget", DEFAULT_CONTEXT_CHAR_BUDGET
            ),
            max_turns=_optional_count(data, "max_turns", DEFAULT_MAX_TURNS),
            verbose_default=verbose,
            source=Path(source) if source is not None else None,
        )


class AgentRegistry:
    """Agent definitions keyed by name, kept in name order."""

    def __init__(self, agents: Iterable[AgentDefinition] = ()) -> None:
        self._agents: dict[str, AgentDefinition] = {}
        for agent in agents:
            self._agents[agent.name] = agent

    @classmethod
    def load_from_dir(cls, directory: str | Path) -> "AgentRegistry":
        """Load every ``*.toml`` definition below ``directory``.

        With a ``builtin``/``local`` layout, ``local`` entries replace
        ``builtin`` ones of the same name. Invalid definitions are skipped
        with a warning; unreadable files raise OSError.
        """
        directory = Path(directory)
        registry = cls()
        if not directory.exists():
            return registry
        if any((directory / layer).is_dir() for layer in _LAYERS):
            candidates = [directory / layer for layer in _LAYERS if (directory / layer).is_dir()]
        else:
            candidates = [directory]
        for candidate in candidates:
            for path in sorted(candidate.iterdir()):
                if path.suffix != ".toml" or not path.is_file():
                    continue
                content = path.read_text(encoding="utf-8")
                try:
                    agent = AgentDefinition.from_toml(content, source=path)
                except ValueError as err:
                    logger.warning("invalid agent %s: %s", path, err)
                    continue
                registry._agents[agent.name] = agent
        return registry

    @classmethod
    def load(cls, home: str | Path) -> "AgentRegistry":
        """Load the agents directory of a gars home."""
        return cls.load_from_dir(agents_dir(home))

    def get(self, name: str) -> AgentDefinition | None:
        """Return the definition called ``name``, if any."""
        return self._agents.get(name)

    def names(self) -> list[str]:
        """Return all agent names in sorted order."""
        return sorted(self._agents)

    def list(self) -> list[AgentDefinition]:
        """Return all definitions ordered by name."""
        return [self._agents[name] for name in sorted(self._agents)]

    def __len__(self) -> int:
        return len(self._agents)

    def __contains__(self, name: object) -> bool:
        return name in self._agents