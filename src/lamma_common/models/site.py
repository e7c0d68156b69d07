"""Site models."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from lamma_common.constants import BASE_FPM_PORT, DEFAULT_SITE_TITLE


class SiteConfig(BaseModel):
    """Everything needed to render a site's vhost."""

    name: str
    hostname: str
    document_root: Path
    logs_dir: Path
    ssl_certificate: Path
    ssl_certificate_key: Path
    fpm_port: str = str(BASE_FPM_PORT)
    title: str = DEFAULT_SITE_TITLE
    client_max_body_size: str = "100M"
    memory_limit: str = "512M"
    upload_max_filesize: str = "128M"

    @property
    def php_error_log(self) -> Path:
        return self.logs_dir / f"{self.name}.php.log"


class NginxSiteBinding(BaseModel):
    """A site's FastCGI wiring to a PHP pool port."""

    site_name: str
    config_path: Path
    bound_port: str


class ManagedProject(BaseModel):
    """An entry of the managed-projects file (``~/.woa_projects.json``)."""

    name: str
    value: str
    local_dir: Path = Field(alias="localDir")
    remote_dir: str = Field(alias="remoteDir")

    model_config = {"populate_by_name": True}

    @property
    def is_theme(self) -> bool:
        return "wp-content/themes" in self.remote_dir

    @property
    def is_plugin(self) -> bool:
        return "wp-content/plugins" in self.remote_dir

    def target_in(self, site_path: Path) -> Path:
        """Where this project's symlink lives inside a site's document root."""
        return Path(self.remote_dir.replace("/srv/htdocs", str(site_path)).rstrip("/"))
