"""Web server install, status, and reload (Nginx or Apache via Homebrew)."""

from __future__ import annotations

import logging

from lamma_common import LammaConfig

from lamma.errors import ExternalCommandError
from lamma.services import brew, files, vhost_renderer

log = logging.getLogger(__name__)

_FORMULAS = {"nginx": "nginx", "apache": "httpd"}

NGINX_BACKUP_NAME = "nginx.lamma.backup.conf"


def formula(cfg: LammaConfig) -> str:
    return _FORMULAS[cfg.web_server]


def reload(cfg: LammaConfig) -> None:
    """Restart the web server service. Raises ExternalCommandError on failure."""
    brew.service(cfg, "restart", formula(cfg))


def try_reload(cfg: LammaConfig) -> bool:
    """Reload, logging instead of raising; config edits already made stay in place."""
    try:
        reload(cfg)
    except ExternalCommandError as exc:
        log.error("Error reloading %s: %s", formula(cfg), exc)
        return False
    return True


def status(cfg: LammaConfig) -> str:
    """Return one of ``running``, ``stopped``, ``unmanaged``, ``unknown``."""
    info = brew.service_info(cfg, formula(cfg))
    if info is None:
        return "unknown"
    if info["running"]:
        return "running"
    if info["loaded"]:
        return "stopped"
    return "unmanaged"


def ensure_installed(cfg: LammaConfig) -> bool:
    """Install the web server formula if missing. Returns True if installed now."""
    name = formula(cfg)
    if brew.is_installed(cfg, name):
        return False
    brew.install(cfg, name)
    return True


def setup_directories(cfg: LammaConfig) -> list[str]:
    """Create the lamma, logs, servers, and ssl directories if they don't exist."""
    created = []
    dirs = [cfg.lamma_dir, cfg.logs_dir, cfg.servers_dir, cfg.ssl_dir]
    if cfg.web_server == "apache":
        dirs.append(cfg.apache_enabled_dir)
    for d in dirs:
        if not d.exists():
            d.mkdir(parents=True)
            created.append(str(d))
    return created


def write_nginx_main_config(cfg: LammaConfig) -> bool:
    """Back up nginx.conf once, then replace it with lamma's main config.

    Returns True when a new backup was taken.
    """
    conf = cfg.nginx_dir / "nginx.conf"
    backed_up = False
    if conf.exists():
        backed_up = files.backup_once(conf, cfg.nginx_dir / NGINX_BACKUP_NAME)
    files.atomic_write(conf, vhost_renderer.render_nginx_main(cfg))
    return backed_up


def enable_site(cfg: LammaConfig, site: str) -> None:
    """Apache only: link sites-available/<site>.conf into sites-enabled."""
    if cfg.web_server != "apache":
        return
    link = cfg.apache_enabled_dir / f"{site}.conf"
    if not link.is_symlink():
        cfg.apache_enabled_dir.mkdir(parents=True, exist_ok=True)
        link.symlink_to(cfg.site_config_path(site))
