"""Running short scripts (Python, shell or PowerShell) with a timeout."""

from __future__ import annotations

import os
import signal
import subprocess
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

__all__ = ["ScriptResult", "run_script"]

_DEFAULT_TIMEOUT_SECS = 60
_PYTHON_KINDS = frozenset({"python", "py"})
_POWERSHELL_KINDS = frozenset({"powershell", "pwsh"})
_PY_SUFFIX = ".gars.py"


@dataclass
class ScriptResult:
    """Outcome of one script run."""

    status: str
    exit_code: int | None = None
    stdout: str = ""
    stderr: str = ""
    msg: str | None = None

    @property
    def ok(self) -> bool:
        """True when the script ran and exited successfully."""
        return self.status == "success"

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping in the tool reply shape."""
        if self.msg is not None:
            return {"status": self.status, "msg": self.msg}
        return {
            "status": self.status,
            "exit_code": self.exit_code,
            "stdout": self.stdout,
            "stderr": self.stderr,
        }


def _python_program() -> str:
    return sys.executable or "python3"


def _write_temp_script(script: str, tmp_dir: Path) -> Path:
    with tempfile.NamedTemporaryFile(
        "w", suffix=_PY_SUFFIX, dir=tmp_dir, delete=False, encoding="utf-8"
    ) as handle:
        handle.write(script)
        return Path(handle.name)


def _kill(proc: subprocess.Popen) -> None:
    if os.name == "posix":
        try:
            os.killpg(proc.pid, signal.SIGKILL)
            return
        except OSError:
            pass
    proc.kill()


def run_script(
    script: str,
    kind: str = "bash",
    timeout: int = _DEFAULT_TIMEOUT_SECS,
    cwd: str | Path | None = None,
    tmp_dir: str | Path | None = None,
) -> ScriptResult:
    """Run ``script`` as ``kind`` in ``cwd`` and capture its output.

    ``python``/``py`` scripts are written to a temporary ``*.gars.py`` file in
    ``tmp_dir`` (removed afterwards); ``powershell``/``pwsh`` runs through
    ``pwsh -Command``; anything else runs through ``bash -lc``. A script that
    cannot be started or outlives ``timeout`` seconds gives an error result.
    """
    tmp_path = Path(tmp_dir) if tmp_dir is not None else Path(tempfile.gettempdir())
    tmp_path.mkdir(parents=True, exist_ok=True)

    temp_file: Path | None = None
    if kind in _PYTHON_KINDS:
        temp_file = _write_temp_script(script, tmp_path)
        command = [_python_program(), "-X", "utf8", "-u", str(temp_file)]
    elif kind in _POWERSHELL_KINDS:
        command = ["pwsh", "-NoProfile", "-Command", script]
    else:
        command = ["bash", "-lc", script]

    try:
        try:
            proc = subprocess.Popen(
                command,
                cwd=str(cwd) if cwd is not None else None,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                start_new_session=os.name == "posix",
            )
        except OSError as err:
            return ScriptResult(status="error", msg=str(err))
        try:
            out, err_bytes = proc.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            _kill(proc)
            proc.communicate()
            return ScriptResult(status="error", msg=f"timeout after {timeout}s")
    finally:
        if temp_file is not None:
            temp_file.unlink(missing_ok=True)

    code = proc.returncode
    return ScriptResult(
        status="success" if code == 0 else "error",
        exit_code=code if code is not None and code >= 0 else None,
        stdout=out.decode("utf-8", errors="replace"),
        stderr=err_bytes.decode("utf-8", errors="replace"),
    )