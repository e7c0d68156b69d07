"""Reconcile a site's FastCGI binding with the discovered PHP-FPM pools."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Literal

from lamma_common import NOT_AVAILABLE, NginxSiteBinding, PhpPoolConfig

from lamma.errors import ParseError, PhpVersionNotFoundError
from lamma.services import files

log = logging.getLogger(__name__)

WebServer = Literal["nginx", "apache"]

_BINDINGS: dict[str, tuple[re.Pattern[str], str]] = {
    "nginx": (
        re.compile(r"fastcgi_pass\s+127\.0\.0\.1:(\d+);"),
        "fastcgi_pass 127.0.0.1:{port};",
    ),
    "apache": (
        re.compile(r"proxy:fcgi://127\.0\.0\.1:(\d+)"),
        "proxy:fcgi://127.0.0.1:{port}",
    ),
}


def read_bound_port(text: str, server: WebServer = "nginx") -> str | None:
    pattern, _ = _BINDINGS[server]
    m = pattern.search(text)
    return m.group(1) if m else None


def replace_bound_port(text: str, port: str, server: WebServer = "nginx") -> str:
    """Swap the first FastCGI binding's port; every other byte is unchanged."""
    pattern, template = _BINDINGS[server]
    return pattern.sub(lambda _: template.format(port=port), text, count=1)


def version_for_port(port: str, pools: list[PhpPoolConfig]) -> str:
    for pool in pools:
        if pool.listen_port == port:
            return pool.version
    return f"No PHP version matched with FPM Port {port}"


def resolve_version(
    config_path: Path, pools: list[PhpPoolConfig], server: WebServer = "nginx"
) -> str:
    """Which PHP version a site is bound to, as display text.

    An unknown port yields an informational string rather than an error.
    """
    port = read_bound_port(files.read_text(config_path), server)
    if port is None:
        return NOT_AVAILABLE
    return version_for_port(port, pools)



def rebind(
    site_name: str,
    config_path: Path,
    version: str,
    pools: list[PhpPoolConfig],
    *,
    lock_dir: Path,
    server: WebServer = "nginx",
) -> NginxSiteBinding:
    """Point a site's FastCGI binding at ``version``'s pool port.

    Raises PhpVersionNotFoundError, leaving the file untouched, when no pool
    with a TCP port exists for ``version``, and ParseError when the file has
    no FastCGI binding to replace.
    """
    pool = next((p for p in pools if p.version == version), None)
    if pool is None or not pool.has_tcp_port:
        raise PhpVersionNotFoundError(version)

    with files.locked(config_path, lock_dir):
        text = files.read_text(config_path)
        if read_bound_port(text, server) is None:
            raise ParseError(f"{config_path}: no FastCGI binding")
        files.atomic_write(config_path, replace_bound_port(text, pool.listen_port, server))

    log.info("Bound %s to PHP %s on port %s", site_name, version, pool.listen_port)
    return NginxSiteBinding(site_name=site_name, config_path=config_path, bound_port=pool.listen_port)
