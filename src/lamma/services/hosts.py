"""Per-site blocks in the hosts file.

Each site owns one block::

    # Lamma: <site> START
    ::1 <site>.<tld>
    127.0.0.1 <site>.<tld>
    # Lamma: <site> STOP
"""

from __future__ import annotations

import re
from pathlib import Path

from lamma_common import HOSTS_MARKER, LammaConfig

from lamma.services import files


def render_block(site: str, hostname: str, marker: str = HOSTS_MARKER) -> str:
    return (
        f"# {marker}: {site} START\n"
        f"::1 {hostname}\n"
        f"127.0.0.1 {hostname}\n"
        f"# {marker}: {site} STOP\n"
    )


def _block_pattern(site: str, marker: str) -> re.Pattern[str]:
    # Older installs terminated blocks with END instead of STOP
    name = re.escape(site)
    tag = re.escape(marker)
    return re.compile(
        rf"^# {tag}: {name} START\n.*?^# {tag}:? {name} (?:STOP|END)[ \t]*\n?",
        re.MULTILINE | re.DOTALL,
    )


def with_block(content: str, site: str, hostname: str, marker: str = HOSTS_MARKER) -> str:
    """Return ``content`` holding exactly one block for ``site``."""
    block = render_block(site, hostname, marker)
    pattern = _block_pattern(site, marker)
    m = pattern.search(content)
    if m is None:
        if content and not content.endswith("\n"):
            content += "\n"
        return content + block
    head, tail = content[: m.start()], content[m.end() :]
    return head + block + pattern.sub("", tail)


def without_block(content: str, site: str, marker: str = HOSTS_MARKER) -> str:
    return _block_pattern(site, marker).sub("", content)


def _update(cfg: LammaConfig, path: Path, transform) -> bool:
    with files.locked(path, cfg.lock_dir):
        current = files.read_text(path)
        updated = transform(current)
        if updated == current:
            return False
        files.privileged_write(path, updated)
        return True


def add_site(cfg: LammaConfig, site: str) -> bool:
    """Ensure the hosts file maps ``site``. Returns False if already up to date."""
    hostname = cfg.hostname(site)
    return _update(cfg, cfg.hosts_file, lambda c: with_block(c, site, hostname))


def remove_site(cfg: LammaConfig, site: str) -> bool:
    """Drop the site's block. Returns False if there was none."""
    return _update(cfg, cfg.hosts_file, lambda c: without_block(c, site))
