from pathlib import Path

import pytest

from gars.agents import AgentDefinition, AgentRegistry
from gars.layout import agents_dir


def _write(path: Path, name: str, prompt: str, extra: str = "") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f'name = "{name}"\nsystem_prompt = "{prompt}"\n{extra}', encoding="utf-8")


def test_from_toml_applies_defaults():
    agent = AgentDefinition.from_toml('name = "verifier"\nsystem_prompt = "check"\n')
    assert agent.name == "verifier"
    assert agent.system_prompt == "check"
    assert agent.allowed_tools == []
    assert agent.context_char_budget == 80_000
    assert agent.max_turns == 30
    assert agent.verbose_default is False
    assert agent.source is None


def test_from_toml_reads_all_fields_and_source(tmp_path):
    text = (
        'name = "explorer"\nsystem_prompt = "look"\n'
        'allowed_tools = ["file_read", "code_run"]\n'
        "context_char_budget = 1000\nmax_turns = 4\nverbose_default = true\n"
    )
    agent = AgentDefinition.from_toml(text, source=tmp_path / "explorer.toml")
    assert agent.allowed_tools == ["file_read", "code_run"]
    assert agent.context_char_budget == 1000
    assert agent.max_turns == 4
    assert agent.verbose_default is True
    assert agent.source == tmp_path / "explorer.toml"


def test_from_toml_missing_prompt_raises():
    with pytest.raises(ValueError):
        AgentDefinition.from_toml('name = "x"\n')


def test_from_toml_bad_syntax_raises():
    with pytest.raises(ValueError):
        AgentDefinition.from_toml("name = ")


def test_from_toml_wrong_type_raises():
    with pytest.raises(ValueError):
        AgentDefinition.from_toml('name = "x"\nsystem_prompt = "p"\nmax_turns = "many"\n')


def test_missing_directory_gives_empty_registry(tmp_path):
    registry = AgentRegistry.load_from_dir(tmp_path / "absent")
    assert registry.names() == []
    assert registry.list() == []


def test_flat_directory_loads_toml_only(tmp_path):
    _write(tmp_path / "b.toml", "beta", "second")
    _write(tmp_path / "a.toml", "alpha", "first")
    (tmp_path / "notes.md").write_text("ignored", encoding="utf-8")
    registry = AgentRegistry.load_from_dir(tmp_path)
    assert registry.names() == ["alpha", "beta"]
    assert [agent.name for agent in registry.list()] == ["alpha", "beta"]
    assert registry.get("alpha").source == tmp_path / "a.toml"
    assert registry.get("gamma") is None


def test_local_overrides_builtin(tmp_path):
    _write(tmp_path / "builtin" / "verifier.toml", "verifier", "builtin prompt")
    _write(tmp_path / "local" / "verifier.toml", "verifier", "local prompt")
    _write(tmp_path / "builtin" / "reviewer.toml", "reviewer", "review")
    registry = AgentRegistry.load_from_dir(tmp_path)
    assert registry.get("verifier").system_prompt == "local prompt"
    assert registry.names() == ["reviewer", "verifier"]


def test_layered_layout_ignores_top_level_files(tmp_path):
    _write(tmp_path / "builtin" / "one.toml", "one", "p")
    _write(tmp_path / "stray.toml", "stray", "p")
    registry = AgentRegistry.load_from_dir(tmp_path)
    assert registry.names() == ["one"]


def test_invalid_definition_is_skipped(tmp_path):
    (tmp_path / "broken.toml").write_text("name = ", encoding="utf-8")
    _write(tmp_path / "ok.toml", "ok", "fine")
    registry = AgentRegistry.load_from_dir(tmp_path)
    assert registry.names() == ["ok"]


def test_load_uses_home_agents_dir(tmp_path):
    _write(agents_dir(tmp_path) / "local" / "mine.toml", "mine", "hello")
    registry = AgentRegistry.load(tmp_path)
    assert "mine" in registry
    assert len(registry) == 1
    assert registry.get("mine").system_prompt == "hello"