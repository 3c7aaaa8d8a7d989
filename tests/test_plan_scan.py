import os

from gars.layout import plans_dir
from gars.plan_scan import scan_plans, summarize_plan


def write_plan(home, plan_id, text):
    directory = plans_dir(home) / plan_id
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "plan.md"
    path.write_text(text, encoding="utf-8")
    return path


def test_scans_plans_dir(tmp_path):
    write_plan(tmp_path, "alpha", "# Plan: Alpha\n\n- [✓] 1. one\n- [ ] 2. two\n\n")
    plans = scan_plans(tmp_path)
    assert len(plans) == 1
    assert plans[0].id == "alpha"
    assert plans[0].title == "Alpha"
    assert plans[0].done == 1
    assert plans[0].total == 2
    assert plans[0].status == "active"
    assert plans[0].updated_at


def test_summarize_counts_failures():
    title, done, failed, total = summarize_plan("# Plan: T\n- [✗] a\n  - [x] b\n- [!] c\n")
    assert title == "T"
    assert done + failed == total
    assert failed == 2


def test_statuses(tmp_path):
    write_plan(tmp_path, "empty", "# Plan: Nothing\n")
    write_plan(tmp_path, "done", "- [X] a\n- [✓] b\n")
    write_plan(tmp_path, "bad", "- [x] a\n- [✗] b\n")
    statuses = {plan.id: plan.status for plan in scan_plans(tmp_path)}
    assert statuses == {"empty": "empty", "done": "done", "bad": "failed"}


def test_missing_root_and_dirs_without_plan(tmp_path):
    assert scan_plans(tmp_path) == []
    (plans_dir(tmp_path) / "noplan").mkdir(parents=True)
    (plans_dir(tmp_path) / "stray.md").write_text("- [ ] a\n", encoding="utf-8")
    assert scan_plans(tmp_path) == []


def test_most_recently_updated_first(tmp_path):
    old = write_plan(tmp_path, "old", "- [ ] a\n")
    new = write_plan(tmp_path, "new", "- [ ] a\n")
    os.utime(old, (1_000_000, 1_000_000))
    os.utime(new, (2_000_000, 2_000_000))
    assert [plan.id for plan in scan_plans(tmp_path)] == ["new", "old"]