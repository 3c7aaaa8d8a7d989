"""Summaries of the plan files kept under the plans directory."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from gars.layout import plans_dir

__all__ = ["PlanSummary", "summarize_plan", "scan_plans"]

_DONE_MARKS = ("[✓]", "[x]", "[X]")
_FAILED_MARKS = ("[✗]", "[!]")


@dataclass
class PlanSummary:
    """Progress of one plan."""

    id: str
    path: Path
    title: str
    status: str
    total: int
    done: int
    failed: int
    created_at: str
    updated_at: str


def summarize_plan(body: str) -> tuple[str, int, int, int]:
    """Return ``(title, done, failed, total)`` for a plan document."""
    title = ""
    done = failed = total = 0
    for line in body.splitlines():
        trimmed = line.lstrip()
        if trimmed.startswith("# Plan:"):
            title = trimmed[len("# Plan:") :].strip()
            continue
        if not trimmed.startswith("- "):
            continue
        rest = trimmed[2:]
        if rest.startswith("[ ]"):
            total += 1
        elif rest.startswith(_DONE_MARKS):
            total += 1
            done += 1
        elif rest.startswith(_FAILED_MARKS):
            total += 1
            failed += 1
    return title, done, failed, total


def _rfc3339(timestamp: float | None) -> str:
    if timestamp is None:
        return ""
    return datetime.fromtimestamp(timestamp).astimezone().isoformat()


def _status(done: int, failed: int, total: int) -> str:
    if total == 0:
        return "empty"
    if failed > 0:
        return "failed"
    if done == total:
        return "done"
    return "active"


def scan_plans(home: str | Path) -> list[PlanSummary]:
    """Summarise every ``<plans>/<id>/plan.md``, most recently updated first."""
    root = plans_dir(home)
    try:
        entries = sorted(root.iterdir())
    except OSError:
        return []
    plans = []
    for plan_dir in entries:
        if not plan_dir.is_dir():
            continue
        plan_path = plan_dir / "plan.md"
        if not plan_path.exists():
            continue
        try:
            body = plan_path.read_text(encoding="utf-8")
            stat = plan_path.stat()
        except (OSError, ValueError):
            continue
        title, done, failed, total = summarize_plan(body)
        plans.append(
            PlanSummary(
                id=plan_dir.name,
                path=plan_path,
                title=title,
                status=_status(done, failed, total),
                total=total,
                done=done,
                failed=failed,
                created_at=_rfc3339(getattr(stat, "st_birthtime", None)),
                updated_at=_rfc3339(stat.st_mtime),
            )
        )
    plans.sort(key=lambda plan: plan.updated_at, reverse=True)
    return plans