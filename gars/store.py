"""SQLite storage for tasks, task events and the L4 archive index."""

from __future__ import annotations

import json
import sqlite3
import uuid
from contextlib import closing, contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator

__all__ = [
    "TaskRecord",
    "TaskEventRecord",
    "L4IndexEntry",
    "L4Hit",
    "Store",
    "score_match",
]

_SCHEMA = """
PRAGMA journal_mode = WAL;
PRAGMA foreign_keys = ON;

CREATE TABLE IF NOT EXISTS schema_migrations (
    version INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS tasks (
    id TEXT PRIMARY KEY,
    status TEXT NOT NULL,
    input TEXT NOT NULL,
    result TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS task_events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    task_id TEXT NOT NULL,
    event_type TEXT NOT NULL,
    payload TEXT NOT NULL,
    created_at TEXT NOT NULL,
    FOREIGN KEY(task_id) REFERENCES tasks(id)
);

CREATE TABLE IF NOT EXISTS l4_index (
    id TEXT PRIMARY KEY,
    path TEXT NOT NULL,
    summary TEXT,
    created_at TEXT NOT NULL
);
"""

_SCHEMA_VERSIONS = (1, 2, 3)

_LEGACY_TABLES = (
    "plans",
    "subagent_runs",
    "connector_state",
    "schedules",
    "service_state",
    "sessions",
    "messages",
)

_TASK_COLUMNS = "id, status, input, result, created_at, updated_at"
_L4_COLUMNS = "id, path, summary, created_at"
_DEFAULT_SEARCH_LIMIT = 100


def _now() -> str:
    return datetime.now(timezone.utc).astimezone().isoformat(timespec="microseconds")


@dataclass
class TaskRecord:
    """A queued or finished task."""

    id: str
    status: str
    input: str
    result: str | None
    created_at: str
    updated_at: str


@dataclass
class TaskEventRecord:
    """One event in a task's history."""

    id: int
    task_id: str
    event_type: str
    payload: Any
    created_at: str


@dataclass
class L4IndexEntry:
    """An archived session in the L4 search index."""

    id: str
    path: str
    summary: str
    created_at: str


@dataclass
class L4Hit:
    """An L4 index entry with its match score."""

    entry: L4IndexEntry
    score: float


def score_match(entry: L4IndexEntry, query: str) -> float:
    """Score an entry: 1.0 per query word in the summary, 0.5 per word in the path."""
    summary = (entry.summary or "").lower()
    path = entry.path.lower()
    score = 0.0
    for term in query.lower().split():
        if term in summary:
            score += 1.0
        if term in path:
            score += 0.5
    return score


def _task_from_row(row: tuple) -> TaskRecord:
    return TaskRecord(*row)


def _l4_from_row(row: tuple) -> L4IndexEntry:
    entry_id, path, summary, created_at = row
    return L4IndexEntry(entry_id, path, summary if summary is not None else "", created_at)


class Store:
    """A SQLite database file holding tasks, their events and the L4 index."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        with closing(sqlite3.connect(self.path)) as conn:
            with conn:
                yield conn

    def init(self) -> None:
        """Create the schema, record migrations and drop obsolete tables."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with closing(sqlite3.connect(self.path)) as conn:
            conn.executescript(_SCHEMA)
            with conn:
                for version in _SCHEMA_VERSIONS:
                    conn.execute(
                        "INSERT OR IGNORE INTO schema_migrations(version, applied_at) "
                        "VALUES(?, ?)",
                        (version, _now()),
                    )
                for table in _LEGACY_TABLES:
                    conn.execute(f"DROP TABLE IF EXISTS {table}")

    @staticmethod
    def _append_event(
        conn: sqlite3.Connection, task_id: str, event_type: str, payload: Any
    ) -> None:
        conn.execute(
            "INSERT INTO task_events(task_id, event_type, payload, created_at) "
            "VALUES(?, ?, ?, ?)",
            (task_id, event_type, json.dumps(payload, ensure_ascii=False), _now()),
        )

    def create_task(self, input_text: str) -> TaskRecord:
        """Queue a new task and record its ``queued`` event."""
        task_id = str(uuid.uuid4())
        timestamp = _now()
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO tasks(id, status, input, created_at, updated_at) "
                "VALUES(?, 'queued', ?, ?, ?)",
                (task_id, input_text, timestamp, timestamp),
            )
            self._append_event(conn, task_id, "queued", {"input": input_text})
        task = self.get_task(task_id)
        if task is None:
            raise RuntimeError("task vanished after insert")
        return task

    def set_task_status(
        self, task_id: str, status: str, result: str | None = None
    ) -> None:
        """Set a task's status, keeping its result when ``result`` is None."""
        with self._connect() as conn:
            conn.execute(
                "UPDATE tasks SET status = ?, result = COALESCE(?, result), "
                "updated_at = ? WHERE id = ?",
                (status, result, _now(), task_id),
            )
            self._append_event(
                conn, task_id, status, {"status": status, "result": result}
            )

    def append_event(self, task_id: str, event_type: str, payload: Any) -> None:
        """Record an event for a task."""
        with self._connect() as conn:
            self._append_event(conn, task_id, event_type, payload)

    def list_tasks(self, limit: int) -> list[TaskRecord]:
        """Return up to ``limit`` tasks, most recently updated first."""
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT {_TASK_COLUMNS} FROM tasks ORDER BY updated_at DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [_task_from_row(row) for row in rows]

    def get_task(self, task_id: str) -> TaskRecord | None:
        """Return the task with ``task_id``, if any."""
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_TASK_COLUMNS} FROM tasks WHERE id = ?", (task_id,)
            ).fetchone()
        return _task_from_row(row) if row is not None else None

    def task_events_after(self, task_id: str, after_id: int) -> list[TaskEventRecord]:
        """Return a task's events with an id above ``after_id``, oldest first."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT id, task_id, event_type, payload, created_at FROM task_events "
                "WHERE task_id = ? AND id > ? ORDER BY id ASC",
                (task_id, after_id),
            ).fetchall()
        events = []
        for event_id, owner, event_type, raw, created_at in rows:
            try:
                payload = json.loads(raw)
            except (TypeError, ValueError):
                payload = None
            events.append(TaskEventRecord(event_id, owner, event_type, payload, created_at))
        return events

    def l4_upsert(self, entry: L4IndexEntry) -> None:
        """Insert an index entry, or update its path and summary if it exists."""
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO l4_index(id, path, summary, created_at) VALUES(?, ?, ?, ?) "
                "ON CONFLICT(id) DO UPDATE SET path=excluded.path, summary=excluded.summary",
                (entry.id, entry.path, entry.summary, entry.created_at),
            )

    def l4_get(self, entry_id: str) -> L4IndexEntry | None:
        """Return the index entry with ``entry_id``, if any."""
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_L4_COLUMNS} FROM l4_index WHERE id = ?", (entry_id,)
            ).fetchone()
        return _l4_from_row(row) if row is not None else None

    def l4_search(self, query: str, k: int) -> list[L4Hit]:
        """Find entries whose summary or path contains ``query``, best first.

        At most ``k`` entries are read (100 when ``k`` is 0), newest first,
        before they are scored.
        """
        pattern = f"%{query.lower()}%"
        limit = k if k else _DEFAULT_SEARCH_LIMIT
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT {_L4_COLUMNS} FROM l4_index "
                "WHERE LOWER(summary) LIKE ?1 OR LOWER(path) LIKE ?1 "
                "ORDER BY created_at DESC LIMIT ?2",
                (pattern, limit),
            ).fetchall()
        hits = [
            L4Hit(entry=entry, score=score_match(entry, query))
            for entry in map(_l4_from_row, rows)
        ]
        hits.sort(key=lambda hit: hit.score, reverse=True)
        return hits