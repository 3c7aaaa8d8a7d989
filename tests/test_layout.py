from gars.layout import agents_dir, ensure_user_dirs, plans_dir, skills_dir


def test_directories_live_under_home(tmp_path):
    assert skills_dir(tmp_path) == tmp_path / "skills"
    assert agents_dir(tmp_path) == tmp_path / "agents"
    assert plans_dir(tmp_path) == tmp_path / "plans"


def test_accepts_string_home(tmp_path):
    assert skills_dir(str(tmp_path)) == skills_dir(tmp_path)


def test_ensure_user_dirs_creates_all(tmp_path):
    ensure_user_dirs(tmp_path)
    for directory in (skills_dir(tmp_path), agents_dir(tmp_path), plans_dir(tmp_path)):
        assert directory.is_dir()


def test_ensure_user_dirs_is_idempotent(tmp_path):
    ensure_user_dirs(tmp_path)
    marker = skills_dir(tmp_path) / "keep.md"
    marker.write_text("kept", encoding="utf-8")
    ensure_user_dirs(tmp_path)
    assert marker.read_text(encoding="utf-8") == "kept"