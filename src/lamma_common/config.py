"""Central configuration for lamma, read from the environment and ``.env``."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from lamma_common.constants import (
    DEFAULT_DB_PREFIX,
    DEFAULT_TLD,
    HOMEBREW_DIRECTORY,
    HOSTS_FILE,
    PROJECTS_FILENAME,
)


class LammaConfig(BaseSettings):
    """Runtime configuration resolved once at startup."""

    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, extra="ignore")

    ltd: str = DEFAULT_TLD
    homebrew_directory: Path = HOMEBREW_DIRECTORY
    home_directory: Path = Field(default_factory=Path.home)
    sites_directory: Path = Field(default_factory=lambda: Path.home() / "Sites")
    web_server: Literal["nginx", "apache"] = "nginx"
    hosts_file: Path = HOSTS_FILE
    brew_bin: str = "brew"

    db_host: str = "127.0.0.1"
    db_user: str = "root"
    db_password: str = ""
    db_prefix: str = DEFAULT_DB_PREFIX

    wp_admin_user: str = "admin"
    wp_admin_password: str = "password"
    wp_admin_email: str = "admin@example.com"

    local_woo_path: Path | None = None
    local_dummy_path: Path | None = None

    @property
    def tld_suffix(self) -> str:
        return "." + self.ltd.lstrip(".")

    def hostname(self, site: str) -> str:
        return f"{site}{self.tld_suffix}"

    @property
    def lamma_dir(self) -> Path:
        return self.home_directory / "lamma"

    @property
    def logs_dir(self) -> Path:
        return self.lamma_dir / "logs"

    @property
    def lock_dir(self) -> Path:
        return self.lamma_dir / "locks"

    @property
    def audit_jsonl_path(self) -> Path:
        return self.logs_dir / "audit.jsonl"

    @property
    def audit_db_path(self) -> Path:
        return self.logs_dir / "audit.db"

    @property
    def projects_file(self) -> Path:
        return self.home_directory / PROJECTS_FILENAME

    @property
    def php_versions_dir(self) -> Path:
        return self.homebrew_directory / "etc" / "php"

    @property
    def nginx_dir(self) -> Path:
        return self.homebrew_directory / "etc" / "nginx"

    @property
    def nginx_servers_dir(self) -> Path:
        return self.nginx_dir / "servers"

    @property
    def apache_dir(self) -> Path:
        return self.homebrew_directory / "etc" / "httpd"

    @property
    def apache_vhosts_dir(self) -> Path:
        return self.apache_dir / "sites-available"

    @property
    def apache_enabled_dir(self) -> Path:
        return self.apache_dir / "sites-enabled"

    @property
    def ssl_dir(self) -> Path:
        if self.web_server == "apache":
            return self.apache_dir / "ssl"
        return self.nginx_dir / "ssl"

    @property
    def servers_dir(self) -> Path:
        """Directory holding one vhost file per site for the active web server."""
        if self.web_server == "apache":
            return self.apache_vhosts_dir
        return self.nginx_servers_dir

    def site_config_path(self, site: str) -> Path:
        return self.servers_dir / f"{site}.conf"

    def site_path(self, site: str) -> Path:
        return self.sites_directory / site
