# gars

Building blocks for a local agent service. Everything lives under a single
home directory that you pass to the functions:

- a catalog of skills and SOPs written as markdown files with a small
  front-matter header, searchable offline with BM25 ranking (`gars.skill`,
  `gars.search`);
- subagent definitions written as TOML files (`gars.agents`);
- plan files whose checklist progress can be summarised (`gars.plan_scan`);
- a SQLite store for tasks, task events and an archive search index
  (`gars.store`);
- file helpers for reading, patching and writing files (`gars.fileops`) and a
  script runner (`gars.scripting`).

The package has no third-party runtime dependencies.

## Home directory layout

```
<home>/
  skills/
    builtin/
    local/
    imported/
  agents/
    builtin/
    local/
  plans/
    <plan id>/plan.md
```

`gars.layout` gives the paths (`skills_dir`, `agents_dir`, `plans_dir`) and
`ensure_user_dirs(home)` creates the three top-level directories.

When a skills root contains any of `builtin/`, `local/` or `imported/`, the
layers are read in that order and a later layer replaces an earlier entry with
the same key. Without that layout every `*.md` file below the root is read.
Agents work the same way with `builtin/` and `local/`.

## Skill files

```markdown
---
key: deploy
name: Deploy SOP
one_line_summary: Ship a release safely
category: workflow
tags: [deploy, release]
form: markdown
autonomous_safe: true
---
Step-by-step body...
```

Tags may also be given one per line as `- tag` items under `tags:`. `form` is
`markdown`, `tool` or `recipe` (anything else counts as markdown);
`autonomous_safe` accepts `true`, `yes`, `1` or `on`. A file without
frontmatter takes its key from the file name. `parse_skill_file` reads one file
into a `SkillIndex`, and `scan_skills_dir` reads a whole root.

## Searching skills

```python
from pathlib import Path

from gars.layout import ensure_user_dirs, skills_dir
from gars.search import SearchOptions, search_local

home = Path.home() / ".gars"
ensure_user_dirs(home)

hits = search_local("deploy release", skills_dir(home), SearchOptions(top_k=5))
for hit in hits:
    print(f"{hit.score:.2f}  {hit.skill.key}  {hit.skill.one_line_summary}")
```

`SearchOptions` can also restrict results to a `category` (compared without
regard to ASCII case) or to `autonomous_only` skills; `top_k=0` returns every
hit. A query term that equals a skill's key adds a bonus of 5, one that equals
a tag adds 2. `rank(skills, query, options)` ranks a list you already hold.

## Plans

```python
from gars.plan_scan import scan_plans

for plan in scan_plans(home):
    print(plan.id, plan.status, f"{plan.done}/{plan.total}", plan.title)
```

A plan file starts with `# Plan: <title>` and lists steps as `- [ ]`
(pending), `- [x]`, `- [X]` or `- [✓]` (done), `- [!]` or `- [✗]` (failed).
The status is `empty`, `failed`, `done` or `active`, and plans come most
recently updated first. `summarize_plan(body)` returns
`(title, done, failed, total)` for a single document.

## Subagents

```python
from gars.agents import AgentRegistry

registry = AgentRegistry.load(home)
print(registry.names())
reviewer = registry.get("reviewer")
```

A definition needs `name` and `system_prompt`; `allowed_tools`,
`context_char_budget` (default 80000), `max_turns` (default 30) and
`verbose_default` are optional. Invalid files are skipped with a logged
warning.

## Task store

```python
from gars.store import L4IndexEntry, Store

store = Store(home / "gars.db")
store.init()
task = store.create_task("summarise the logs")
store.set_task_status(task.id, "done", "all good")
for event in store.task_events_after(task.id, 0):
    print(event.id, event.event_type, event.payload)

store.l4_upsert(L4IndexEntry("s1", "/archive/s1.txt", "deploy notes", "2024-01-01T00:00:00+00:00"))
for hit in store.l4_search("deploy", 10):
    print(hit.score, hit.entry.path)
```

`init` creates the schema and drops obsolete tables from older databases.
`list_tasks(limit)` returns tasks most recently updated first.

## File helpers

`expand_file_refs` replaces `{{file:path:start:end}}` markers with that
inclusive, 1-based line range of another file (raising `FileRefError` when a
marker is malformed or out of range); `patch_file` replaces one unique block of
text (raising `PatchError` when it is missing or repeated); `write_file`
overwrites, appends or prepends and returns the byte count; `read_lines` pages
through text with line numbers and optional keyword context; `tail_lines`
returns the last lines.

```python
from pathlib import Path

from gars.fileops import patch_file, read_lines

patch_file(Path("notes.txt"), "old line", "new line")
print(read_lines(Path("notes.txt").read_text(), 1, 50, None, True))
```

## Running scripts

```python
from gars.scripting import run_script

result = run_script("echo hello", kind="bash", timeout=10)
print(result.ok, result.exit_code, result.stdout)
```

`kind` is `python`/`py` (written to a temporary `*.gars.py` file and run with
the current interpreter), `powershell`/`pwsh` (run through `pwsh -Command`), or
anything else (run through `bash -lc`). A script that cannot be started or runs
past the timeout yields a result with status `error` and a `msg`.

## What this package does not do

- It does not query a remote skill-search service or the SOP marketplace;
  search is local only.
- It does not ship any SOPs or agent definitions, and does not fill the
  `builtin/` directories; it only reads what is there.
- It has no vision-model or OCR support.
- It provides no server, no command-line program and no agent loop; it is a
  library for building them.