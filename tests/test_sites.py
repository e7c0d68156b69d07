"""Tests for site discovery and concurrent metadata collection."""

from __future__ import annotations

import asyncio
from unittest.mock import patch

from lamma_common import LammaConfig
from lamma.errors import DatabaseError, ExternalCommandError
from lamma.services import sites
from lamma.services.php_pools import scan_pools


async def _fake_wp(args, site_path):
    if args[0] == "theme":
        return "twentytwentyfour"
    if site_path.name == "broken":
        raise ExternalCommandError(["wp", *args], 1, "Error: This does not seem to be a WordPress installation.")
    return "6.5.2"


async def _fake_du(cmd, cwd=None):
    return "42M\t" + cmd[-1]


def _vhost(port: str) -> str:
    return f"server {{\n    fastcgi_pass 127.0.0.1:{port};\n}}\n"


class TestSiteDiscovery:
    def test_names_sorted(self, tmp_config: LammaConfig):
        for name in ("zeta", "alpha"):
            tmp_config.site_config_path(name).write_text(_vhost("9020"))
        (tmp_config.nginx_servers_dir / "notes.txt").write_text("")
        assert sites.list_site_names(tmp_config) == ["alpha", "zeta"]

    def test_php_version_for(self, tmp_config: LammaConfig, make_pool):
        make_pool("8.1", listen="127.0.0.1:9022")
        tmp_config.site_config_path("shop").write_text(_vhost("9022"))
        pools = scan_pools(tmp_config.php_versions_dir).pools
        assert sites.php_version_for(tmp_config, "shop", pools) == "8.1"
        assert sites.php_version_for(tmp_config, "missing", pools) == sites.UNKNOWN


class TestCollectSummaries:
    def test_gathers_all_sites(self, tmp_config: LammaConfig, make_pool):
        make_pool("8.1", listen="127.0.0.1:9022")
        for name in ("shop", "broken"):
            tmp_config.site_config_path(name).write_text(_vhost("9022"))
            tmp_config.site_path(name).mkdir(parents=True)
        pools = scan_pools(tmp_config.php_versions_dir).pools

        with patch("lamma.services.sites.wpcli.wp_async", side_effect=_fake_wp), \
             patch("lamma.services.sites.shell.run_async", side_effect=_fake_du), \
             patch("lamma.services.sites.database.database_size_mb", return_value=12):
            summaries = asyncio.run(
                sites.collect_summaries(tmp_config, ["shop", "broken"], pools, {"8.1"})
            )

        by_name = {s.name: s for s in summaries}
        shop = by_name["shop"]
        assert shop.theme == "twentytwentyfour"
        assert shop.wp_version == "6.5.2"
        assert shop.php_version == "8.1"
        assert shop.php_running is True
        assert shop.folder_size == "42M"
        assert shop.db_size == "12MB"
        assert shop.errors == []

        broken = by_name["broken"]
        assert broken.wp_version == sites.UNKNOWN
        assert broken.theme == "twentytwentyfour"
        assert len(broken.errors) == 1

    def test_database_error_is_reported(self, tmp_config: LammaConfig):
        tmp_config.site_path("shop").mkdir(parents=True)
        tmp_config.site_config_path("shop").write_text(_vhost("9099"))

        with patch("lamma.services.sites.wpcli.wp_async", side_effect=_fake_wp), \
             patch("lamma.services.sites.shell.run_async", side_effect=_fake_du), \
             patch("lamma.services.sites.database.database_size_mb", side_effect=DatabaseError("down")):
            [summary] = asyncio.run(sites.collect_summaries(tmp_config, ["shop"], [], set()))

        assert summary.db_size == sites.UNKNOWN
        assert summary.errors == ["db_size: down"]
        assert summary.php_version == "No PHP version matched with FPM Port 9099"
