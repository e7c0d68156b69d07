"""Tests for site FastCGI binding reconciliation."""

from __future__ import annotations

from pathlib import Path

import pytest

from lamma_common import PhpPoolConfig
from lamma.errors import ParseError, PhpVersionNotFoundError
from lamma.services.fastcgi import (
    read_bound_port,
    rebind,
    replace_bound_port,
    resolve_version,
    version_for_port,
)

NGINX_SITE = """server {
    listen 443 ssl;
    server_name shop.test;
    root /Users/me/Sites/shop;

    location ~ \\.php$ {
        fastcgi_pass 127.0.0.1:9021;
        include fastcgi_params;
    }
}
"""

APACHE_SITE = """<VirtualHost *:443>
    ServerName shop.test
    <FilesMatch \\.php$>
        SetHandler "proxy:fcgi://127.0.0.1:9021"
    </FilesMatch>
</VirtualHost>
"""


def _pool(version: str, port: str) -> PhpPoolConfig:
    return PhpPoolConfig(
        version=version,
        config_file_path=Path(f"/opt/homebrew/etc/php/{version}/php-fpm.d/www.conf"),
        ini_file_path=Path(f"/opt/homebrew/etc/php/{version}/php.ini"),
        listen_port=port,
    )


POOLS = [_pool("7.4", "9021"), _pool("8.1", "9033"), _pool("5.6", "N/A")]


class TestBoundPort:
    def test_read_nginx(self):
        assert read_bound_port(NGINX_SITE) == "9021"

    def test_read_apache(self):
        assert read_bound_port(APACHE_SITE, "apache") == "9021"

    def test_read_missing(self):
        assert read_bound_port("server { listen 80; }") is None

    def test_replace_is_byte_identical_elsewhere(self):
        out = replace_bound_port(NGINX_SITE, "9033")
        assert out == NGINX_SITE.replace("127.0.0.1:9021;", "127.0.0.1:9033;")

    def test_replace_apache(self):
        out = replace_bound_port(APACHE_SITE, "9033", "apache")
        assert 'SetHandler "proxy:fcgi://127.0.0.1:9033"' in out
        assert out.replace("9033", "9021") == APACHE_SITE


class TestResolveVersion:
    def test_known_port(self):
        assert version_for_port("9033", POOLS) == "8.1"

    def test_unknown_port_is_informational(self):
        assert version_for_port("9999", POOLS) == "No PHP version matched with FPM Port 9999"

    def test_from_file(self, tmp_path: Path):
        conf = tmp_path / "shop.conf"
        conf.write_text(NGINX_SITE)
        assert resolve_version(conf, POOLS) == "7.4"

    def test_no_directive(self, tmp_path: Path):
        conf = tmp_path / "static.conf"
        conf.write_text("server { listen 80; }\n")
        assert resolve_version(conf, POOLS) == "N/A"


class TestRebind:
    def test_rebind_nginx(self, tmp_path: Path):
        conf = tmp_path / "shop.conf"
        conf.write_text(NGINX_SITE)

        binding = rebind("shop", conf, "8.1", POOLS, lock_dir=tmp_path / "locks")

        assert binding.bound_port == "9033"
        assert binding.site_name == "shop"
        assert conf.read_text() == NGINX_SITE.replace("9021", "9033")
        assert resolve_version(conf, POOLS) == "8.1"

    def test_unknown_version_leaves_file_untouched(self, tmp_path: Path):
        conf = tmp_path / "shop.conf"
        conf.write_text(NGINX_SITE)

        with pytest.raises(PhpVersionNotFoundError, match="PHP version 9.9 not found"):
            rebind("shop", conf, "9.9", POOLS, lock_dir=tmp_path / "locks")

        assert conf.read_text() == NGINX_SITE

    def test_version_without_tcp_port_is_rejected(self, tmp_path: Path):
        conf = tmp_path / "shop.conf"
        conf.write_text(NGINX_SITE)

        with pytest.raises(PhpVersionNotFoundError):
            rebind("shop", conf, "5.6", POOLS, lock_dir=tmp_path / "locks")

        assert conf.read_text() == NGINX_SITE

    def test_rebind_apache(self, tmp_path: Path):
        conf = tmp_path / "shop.conf"
        conf.write_text(APACHE_SITE)

        rebind("shop", conf, "8.1", POOLS, lock_dir=tmp_path / "locks", server="apache")

        assert read_bound_port(conf.read_text(), "apache") == "9033"

    def test_vhost_without_binding_is_rejected(self, tmp_path: Path):
        conf = tmp_path / "static.conf"
        conf.write_text("server { listen 80; }\n")

        with pytest.raises(ParseError, match="no FastCGI binding"):
            rebind("static", conf, "8.1", POOLS, lock_dir=tmp_path / "locks")

        assert conf.read_text() == "server { listen 80; }\n"
