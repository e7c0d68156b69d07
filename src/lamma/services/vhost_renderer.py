"""Jinja2 rendering of web server configs for lamma sites."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from lamma_common import LammaConfig, SiteConfig

_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


@lru_cache(maxsize=1)
def _env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATE_DIR)),
        autoescape=select_autoescape([]),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def _render(template: str, **context) -> str:
    return _env().get_template(template).render(**context)


def render_nginx_site(site: SiteConfig) -> str:
    """Server blocks for one site: port 80 redirect, TLS, and the PHP-FPM location."""
    return _render("nginx_site.conf.j2", site=site)


def render_apache_site(site: SiteConfig) -> str:
    """Virtual hosts for one site, handing ``.php`` to PHP-FPM via mod_proxy_fcgi."""
    return _render("apache_site.conf.j2", site=site)


def render_site(cfg: LammaConfig, site: SiteConfig) -> str:
    if cfg.web_server == "apache":
        return render_apache_site(site)
    return render_nginx_site(site)


def render_nginx_main(cfg: LammaConfig) -> str:
    """Top-level nginx.conf that includes every file in the servers dir."""
    return _render("nginx.conf.j2", cfg=cfg)


def render_htaccess() -> str:
    return _render("htaccess.j2")


def write_vhost(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
