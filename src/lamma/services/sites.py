"""Site discovery and per-site metadata collection."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from pydantic import BaseModel, Field

from lamma_common import LammaConfig, PhpPoolConfig

from lamma.errors import LammaError
from lamma.services import database, fastcgi, shell, wpcli

log = logging.getLogger(__name__)

UNKNOWN = "?"


class SiteSummary(BaseModel):
    name: str
    url: str
    theme: str = UNKNOWN
    wp_version: str = UNKNOWN
    php_version: str = UNKNOWN
    php_running: bool = False
    folder_size: str = UNKNOWN
    db_size: str = UNKNOWN
    errors: list[str] = Field(default_factory=list)


def list_site_names(cfg: LammaConfig) -> list[str]:
    """Names of all sites with a vhost file, sorted."""
    if not cfg.servers_dir.exists():
        return []
    return sorted(p.stem for p in cfg.servers_dir.glob("*.conf"))


def site_url(cfg: LammaConfig, site: str) -> str:
    return f"https://{cfg.hostname(site)}"


def site_exists(cfg: LammaConfig, site: str) -> bool:
    return cfg.site_config_path(site).exists() or cfg.site_path(site).exists()


def php_version_for(cfg: LammaConfig, site: str, pools: list[PhpPoolConfig]) -> str:
    config_path = cfg.site_config_path(site)
    try:
        return fastcgi.resolve_version(config_path, pools, cfg.web_server)
    except LammaError as exc:
        log.warning("Cannot read %s: %s", config_path, exc)
        return UNKNOWN


async def _folder_size(path: Path) -> str:
    out = await shell.run_async(["du", "-sh", str(path)])
    return out.split()[0] if out else UNKNOWN


async def _db_size(cfg: LammaConfig, site: str) -> str:
    size = await asyncio.to_thread(database.database_size_mb, cfg, site)
    return f"{size}MB"


async def _collect_one(
    cfg: LammaConfig, site: str, pools: list[PhpPoolConfig], running: set[str]
) -> SiteSummary:
    summary = SiteSummary(name=site, url=site_url(cfg, site))
    site_path = cfg.site_path(site)
    summary.php_version = php_version_for(cfg, site, pools)
    summary.php_running = summary.php_version in running

    results = await asyncio.gather(
        wpcli.wp_async(
            ["theme", "list", "--status=active", "--field=name", "--skip-themes", "--skip-plugins"],
            site_path,
        ),
        wpcli.wp_async(["core", "version", "--skip-themes", "--skip-plugins"], site_path),
        _folder_size(site_path),
        _db_size(cfg, site),
        return_exceptions=True,
    )
    names = ("theme", "wp_version", "folder_size", "db_size")
    for attr, value in zip(names, results):
        if isinstance(value, LammaError):
            summary.errors.append(f"{attr}: {value}")
        elif isinstance(value, BaseException):
            raise value
        else:
            setattr(summary, attr, value)
    return summary


async def collect_summaries(
    cfg: LammaConfig, sites: list[str], pools: list[PhpPoolConfig], running: set[str]
) -> list[SiteSummary]:
    """Gather metadata for every site concurrently; completion order is irrelevant."""
    return list(await asyncio.gather(*(_collect_one(cfg, s, pools, running) for s in sites)))
