"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from lamma_common import LammaConfig

POOL_TEMPLATE = """[www]
user = _www
group = _www
listen = {listen}
listen.allowed_clients = 127.0.0.1
pm = dynamic
pm.max_children = 5
"""


def _write_pool(versions_dir: Path, version: str, text: str | None = None, listen: str = "127.0.0.1:9000") -> Path:
    version_dir = versions_dir / version
    if version == "5.6":
        config = version_dir / "php-fpm.conf"
    else:
        config = version_dir / "php-fpm.d" / "www.conf"
    config.parent.mkdir(parents=True, exist_ok=True)
    config.write_text(text if text is not None else POOL_TEMPLATE.format(listen=listen))
    (version_dir / "php.ini").write_text("memory_limit = 128M\n")
    return config


@pytest.fixture
def tmp_config(tmp_path: Path) -> LammaConfig:
    """Return a LammaConfig pointing at temp directories."""
    hosts = tmp_path / "hosts"
    hosts.write_text("127.0.0.1 localhost\n::1 localhost\n")
    cfg = LammaConfig(
        ltd="test",
        homebrew_directory=tmp_path / "homebrew",
        home_directory=tmp_path / "home",
        sites_directory=tmp_path / "Sites",
        hosts_file=hosts,
        web_server="nginx",
    )
    cfg.php_versions_dir.mkdir(parents=True)
    cfg.nginx_servers_dir.mkdir(parents=True)
    return cfg


@pytest.fixture
def make_pool(tmp_config: LammaConfig):
    """Create ``<php_versions_dir>/<version>`` with a pool config; return the config path."""

    def _make(version: str, text: str | None = None, listen: str = "127.0.0.1:9000") -> Path:
        return _write_pool(tmp_config.php_versions_dir, version, text, listen)

    return _make
