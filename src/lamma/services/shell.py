"""Subprocess wrappers for the external tools lamma drives."""

from __future__ import annotations

import asyncio
import logging
import subprocess
from pathlib import Path

from lamma.errors import ExternalCommandError

log = logging.getLogger(__name__)


def run(
    cmd: list[str],
    *,
    check: bool = True,
    capture: bool = True,
    cwd: Path | None = None,
    input: str | None = None,
) -> subprocess.CompletedProcess[str]:
    log.debug("run: %s (cwd=%s)", " ".join(cmd), cwd or ".")
    try:
        return subprocess.run(
            cmd,
            check=check,
            capture_output=capture,
            text=True,
            cwd=str(cwd) if cwd else None,
            input=input,
        )
    except subprocess.CalledProcessError as exc:
        raise ExternalCommandError(cmd, exc.returncode, exc.stderr or "") from exc
    except FileNotFoundError as exc:
        raise ExternalCommandError(cmd, 127, str(exc)) from exc


async def run_async(cmd: list[str], *, cwd: Path | None = None) -> str:
    """Run a command without blocking the event loop; return stripped stdout."""
    log.debug("run_async: %s (cwd=%s)", " ".join(cmd), cwd or ".")
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=str(cwd) if cwd else None,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as exc:
        raise ExternalCommandError(cmd, 127, str(exc)) from exc
    stdout, stderr = await proc.communicate()
    if proc.returncode != 0:
        raise ExternalCommandError(cmd, proc.returncode or 1, stderr.decode(errors="replace"))
    return stdout.decode(errors="replace").strip()


def sudo(cmd: list[str], **kwargs) -> subprocess.CompletedProcess[str]:
    return run(["sudo", *cmd], **kwargs)
