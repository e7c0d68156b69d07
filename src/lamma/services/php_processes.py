"""Detect which PHP-FPM versions have a live master process.

The result is a point-in-time snapshot of the process table. It can be stale
by the time a caller acts on it, so it is only suitable for status display,
never as a precondition for a mutating operation.
"""

from __future__ import annotations

import re

from lamma.errors import ExternalCommandError, ProcessQueryError
from lamma.services import shell

_MASTER_PROCESS = re.compile(
    r"php-fpm: master process \((/[^)]+)/php/(\d+\.\d+)/php-fpm\.conf\)"
)
_BREW_FORMULA = re.compile(r"php@(\d+\.\d+)")


def parse_running_versions(ps_output: str) -> set[str]:
    """Extract running PHP-FPM versions from ``ps aux`` output."""
    versions: set[str] = set()
    for line in ps_output.splitlines():
        if "php-fpm" not in line:
            continue
        m = _MASTER_PROCESS.search(line)
        if m:
            versions.add(m.group(2))
            continue
        m = _BREW_FORMULA.search(line)
        if m:
            versions.add(m.group(1))
    return versions


def query_process_table() -> str:
    """Return raw ``ps aux`` output. Raises ProcessQueryError on failure."""
    try:
        result = shell.run(["ps", "aux"], check=False)
    except ExternalCommandError as exc:
        raise ProcessQueryError(f"Error listing processes: {exc}") from exc
    if result.returncode != 0 or result.stderr.strip():
        raise ProcessQueryError(
            f"Error listing processes (exit {result.returncode}): {result.stderr.strip()}"
        )
    return result.stdout


def running_versions() -> set[str]:
    return parse_running_versions(query_process_table())
