"""Tests for LammaConfig."""

from __future__ import annotations

from pathlib import Path

from lamma_common import LammaConfig


class TestLammaConfig:
    def test_derived_paths(self, tmp_config: LammaConfig, tmp_path: Path):
        assert tmp_config.php_versions_dir == tmp_path / "homebrew" / "etc" / "php"
        assert tmp_config.nginx_servers_dir == tmp_path / "homebrew" / "etc" / "nginx" / "servers"
        assert tmp_config.logs_dir == tmp_path / "home" / "lamma" / "logs"
        assert tmp_config.audit_jsonl_path == tmp_config.logs_dir / "audit.jsonl"
        assert tmp_config.projects_file == tmp_path / "home" / ".woa_projects.json"

    def test_site_paths(self, tmp_config: LammaConfig, tmp_path: Path):
        assert tmp_config.hostname("shop") == "shop.test"
        assert tmp_config.site_config_path("shop") == tmp_config.nginx_servers_dir / "shop.conf"
        assert tmp_config.site_path("shop") == tmp_path / "Sites" / "shop"

    def test_tld_with_leading_dot(self, tmp_path: Path):
        cfg = LammaConfig(ltd=".local", home_directory=tmp_path)
        assert cfg.hostname("shop") == "shop.local"

    def test_apache_paths(self, tmp_path: Path):
        cfg = LammaConfig(homebrew_directory=tmp_path, web_server="apache")
        assert cfg.servers_dir == tmp_path / "etc" / "httpd" / "sites-available"
        assert cfg.ssl_dir == tmp_path / "etc" / "httpd" / "ssl"
        assert cfg.site_config_path("shop") == cfg.apache_vhosts_dir / "shop.conf"

    def test_from_env(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("LTD", "localhost")
        monkeypatch.setenv("HOMEBREW_DIRECTORY", str(tmp_path / "brew"))
        monkeypatch.setenv("SITES_DIRECTORY", str(tmp_path / "Sites"))
        monkeypatch.setenv("DB_USER", "wp")
        monkeypatch.setenv("LOCAL_WOO_PATH", str(tmp_path / "woo"))
        cfg = LammaConfig()
        assert cfg.hostname("shop") == "shop.localhost"
        assert cfg.homebrew_directory == tmp_path / "brew"
        assert cfg.sites_directory == tmp_path / "Sites"
        assert cfg.db_user == "wp"
        assert cfg.local_woo_path == tmp_path / "woo"

    def test_empty_env_uses_default(self, monkeypatch):
        monkeypatch.setenv("LTD", "")
        assert LammaConfig().ltd == "test"
