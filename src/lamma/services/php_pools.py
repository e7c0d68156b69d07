"""PHP-FPM pool discovery and pool-config parsing."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from lamma_common import LEGACY_PHP_VERSION, NOT_AVAILABLE, PhpPoolConfig, PoolScan, ScanIssue
from lamma_common.constants import (
    LEGACY_POOL_CONFIG_RELPATH,
    PHP_INI_FILENAME,
    POOL_CONFIG_RELPATH,
)

from lamma.errors import FileSystemError, ParseError
from lamma.services import files

log = logging.getLogger(__name__)

_DIRECTIVE = re.compile(
    r"(?P<indent>[ \t]*)(?P<key>[A-Za-z0-9_.\[\]]+)(?P<sep>[ \t]*=[ \t]*)"
    r"(?P<value>[^\r\n]*)(?P<eol>\r?\n)?"
)
_TCP_LISTEN = re.compile(r"(?:\[[^\]]*\]|[^:\s]+):(\d+)")


class PoolDirectives:
    """Line-preserving ``key = value`` view of a PHP-FPM pool config.

    Only the first active (uncommented) occurrence of a key is addressed.
    Rendering returns the original text with just the touched lines changed.
    """

    def __init__(self, text: str):
        self._lines = text.splitlines(keepends=True)
        self._index: dict[str, int] = {}
        for i, line in enumerate(self._lines):
            m = _DIRECTIVE.fullmatch(line)
            if m and m.group("key") not in self._index:
                self._index[m.group("key")] = i

    def __contains__(self, key: str) -> bool:
        return key in self._index

    def get(self, key: str) -> str | None:
        i = self._index.get(key)
        if i is None:
            return None
        value = _DIRECTIVE.fullmatch(self._lines[i]).group("value")
        # Inline ';' starts a comment in php-fpm ini syntax
        return value.split(";", 1)[0].strip()

    def set(self, key: str, value: str) -> None:
        i = self._index.get(key)
        if i is None:
            if self._lines and not self._lines[-1].endswith("\n"):
                self._lines[-1] += "\n"
            self._lines.append(f"{key} = {value}\n")
            self._index[key] = len(self._lines) - 1
            return
        m = _DIRECTIVE.fullmatch(self._lines[i])
        self._lines[i] = f"{m.group('indent')}{key}{m.group('sep')}{value}{m.group('eol') or ''}"

    def render(self) -> str:
        return "".join(self._lines)


def parse_listen_port(text: str) -> str:
    """Return the TCP port of the ``listen`` directive, or ``"N/A"``."""
    return listen_port_from(PoolDirectives(text).get("listen"))


def listen_port_from(value: str | None) -> str:
    if not value:
        return NOT_AVAILABLE
    m = _TCP_LISTEN.fullmatch(value)
    if m:
        return m.group(1)
    if value.isdigit():
        return value
    return NOT_AVAILABLE


def parse_user_directive(text: str) -> tuple[str, str]:
    """Return the pool's ``(user, group)`` pair; missing halves are ``"N/A"``."""
    directives = PoolDirectives(text)
    return (
        directives.get("user") or NOT_AVAILABLE,
        directives.get("group") or NOT_AVAILABLE,
    )


def pool_config_path(version_dir: Path, version: str) -> Path:
    if version == LEGACY_PHP_VERSION:
        return version_dir / LEGACY_POOL_CONFIG_RELPATH
    return version_dir / POOL_CONFIG_RELPATH


def load_pool(version_dir: Path) -> PhpPoolConfig:
    """Parse one version directory into a PhpPoolConfig.

    Raises FileSystemError if the pool config can't be read and ParseError if
    it carries neither a ``listen`` nor a ``user`` directive.
    """
    version = version_dir.name
    config_path = pool_config_path(version_dir, version)
    text = files.read_text(config_path)
    directives = PoolDirectives(text)
    if "listen" not in directives and "user" not in directives:
        raise ParseError(f"{config_path}: no listen or user directive")

    user, group = parse_user_directive(text)
    return PhpPoolConfig(
        version=version,
        config_file_path=config_path,
        ini_file_path=version_dir / PHP_INI_FILENAME,
        listen_port=listen_port_from(directives.get("listen")),
        process_owner=user,
        process_group=group,
    )


def scan_pools(versions_dir: Path) -> PoolScan:
    """Enumerate installed PHP versions in directory-listing order.

    Versions whose pool config is missing or unusable land in ``errors``
    instead of aborting the scan.
    """
    try:
        entries = os.listdir(versions_dir)
    except OSError as exc:
        raise FileSystemError(versions_dir, exc.strerror or str(exc)) from exc

    scan = PoolScan()
    for name in entries:
        version_dir = versions_dir / name
        if not version_dir.is_dir():
            continue
        try:
            scan.pools.append(load_pool(version_dir))
        except (FileSystemError, ParseError) as exc:
            log.warning("Error processing PHP version %s: %s", name, exc)
            scan.errors.append(
                ScanIssue(
                    version=name,
                    path=pool_config_path(version_dir, name),
                    error=str(exc),
                )
            )
    return scan
