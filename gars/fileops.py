"""File helpers used by the agent tools: file references, patching, paging."""

from __future__ import annotations

import re
from pathlib import Path

__all__ = [
    "FileRefError",
    "PatchError",
    "expand_file_refs",
    "patch_file",
    "write_file",
    "read_lines",
    "tail_lines",
]

_REF_OPEN = "{{file:"
_REF_CLOSE = "}}"
_LINE_LIMIT = 8000
_NUMBER = re.compile(r"\+?[0-9]+")


class FileRefError(ValueError):
    """A ``{{file:path:start:end}}`` reference is malformed or out of range."""


class PatchError(ValueError):
    """A patch's old content is missing from the file or not unique."""


def _lines(text: str) -> list[str]:
    """Split on newlines, dropping a final empty line and trailing CRs."""
    if not text:
        return []
    parts = text.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [part.removesuffix("\r") for part in parts]


def _read_text(path: Path) -> str:
    with open(path, encoding="utf-8", newline="") as handle:
        return handle.read()


def _line_number(text: str) -> int:
    if not _NUMBER.fullmatch(text):
        raise FileRefError(f"invalid line number in file ref: {text!r}")
    return int(text)


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit]} ...[{len(text) - limit} chars truncated]"


def expand_file_refs(content: str, base: str | Path) -> str:
    """Replace each ``{{file:path:start:end}}`` with those lines of the file.

    Relative paths are taken from ``base``; lines are numbered from 1 and the
    range is inclusive. Raises FileRefError for malformed references and
    OSError when a referenced file cannot be read.
    """
    base = Path(base)
    out: list[str] = []
    rest = content
    while (start := rest.find(_REF_OPEN)) != -1:
        out.append(rest[:start])
        after = rest[start + len(_REF_OPEN) :]
        end = after.find(_REF_CLOSE)
        if end == -1:
            raise FileRefError("unterminated file ref")
        parts = after[:end].rsplit(":", 2)
        if len(parts) != 3:
            raise FileRefError("file ref must be {{file:path:start:end}}")
        raw_path, raw_start, raw_end = parts
        start_line = _line_number(raw_start)
        end_line = _line_number(raw_end)
        path = Path(raw_path)
        if not path.is_absolute():
            path = base / path
        lines = _lines(_read_text(path))
        if start_line == 0 or end_line < start_line or end_line > len(lines):
            raise FileRefError(f"file ref line range out of bounds: {path}")
        out.append("\n".join(lines[start_line - 1 : end_line]))
        rest = after[end + len(_REF_CLOSE) :]
    out.append(rest)
    return "".join(out)


def patch_file(path: str | Path, old_content: str, new_content: str) -> None:
    """Replace the single occurrence of ``old_content`` with ``new_content``.

    Raises PatchError when the block is absent or occurs more than once.
    """
    path = Path(path)
    full = _read_text(path)
    count = full.count(old_content)
    if count == 0:
        raise PatchError(
            "old_content not found; file_read first and patch a smaller exact block"
        )
    if count > 1:
        raise PatchError(f"{count} matches; old_content must be unique")
    path.write_text(full.replace(old_content, new_content, 1), encoding="utf-8", newline="")


def write_file(path: str | Path, content: str, mode: str = "overwrite") -> int:
    """Write ``content`` in ``overwrite``, ``append`` or ``prepend`` mode.

    Missing parent directories are created; an unknown mode overwrites.
    Returns the number of bytes of ``content``.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if mode == "append":
        with open(path, "a", encoding="utf-8", newline="") as handle:
            handle.write(content)
    elif mode == "prepend":
        try:
            old = _read_text(path)
        except (OSError, ValueError):
            old = ""
        path.write_text(content + old, encoding="utf-8", newline="")
    else:
        path.write_text(content, encoding="utf-8", newline="")
    return len(content.encode("utf-8"))


def read_lines(
    content: str,
    start: int = 1,
    count: int = 200,
    keyword: str | None = None,
    show_linenos: bool = True,
) -> str:
    """Render a page of ``content``.

    The page starts at line ``start`` (1-based). With ``keyword``, it is moved
    so the first later line containing it (case-insensitively) sits a third
    of the way down. With ``show_linenos`` a header and line numbers are added.
    """
    lines = _lines(content)
    total = len(lines)
    begin = min(max(start - 1, 0), total)
    if keyword is not None:
        needle = keyword.lower()
        match = next(
            (idx for idx in range(begin, total) if needle in lines[idx].lower()), None
        )
        if match is not None:
            begin = max(match - count // 3, 0)
    end = min(begin + count, total)

    out: list[str] = []
    if show_linenos:
        partial = f" | PARTIAL showing {end - begin}" if end < total else ""
        out.append(f"[FILE] {total} lines{partial} \n")
    for line_no, line in enumerate(lines[begin:end], start=begin + 1):
        line = _truncate(line, _LINE_LIMIT)
        out.append(f"{line_no}|{line}\n" if show_linenos else f"{line}\n")
    return "".join(out)


def tail_lines(content: str, count: int) -> list[str]:
    """Return the last ``count`` lines; a count of 0 keeps every line."""
    lines = _lines(content)
    if count == 0:
        return lines
    return lines[-count:]