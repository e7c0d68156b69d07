"""WordPress provisioning steps for a local site."""

from __future__ import annotations

import json
import logging
import re
import shutil
from pathlib import Path

from lamma_common import LammaConfig
from lamma_common.constants import DEFAULT_SITE_TITLE

from lamma.errors import LammaError
from lamma.services import files, vhost_renderer

log = logging.getLogger(__name__)

_STOP_EDITING = re.compile(r"\n/\*\s*That's all, stop editing! Happy publishing\.\s*\*/\n")

WPRESS_BACKUP_NAME = "backup.wpress"

_DUMMY_ADDRESS = {
    "first_name": "John",
    "last_name": "Doe",
    "company": "Automattic",
    "country": "US",
    "address_1": "addr 1",
    "address_2": "addr 2",
    "city": "San Francisco",
    "state": "CA",
    "postcode": "94107",
    "phone": "123456789",
}


def install_commands(cfg: LammaConfig, site: str, title: str | None = None) -> list[list[str]]:
    """WP-CLI argument lists that download, configure and install WordPress."""
    return [
        ["core", "download", "--locale=en_US", "--force"],
        [
            "core", "config",
            f"--dbname={site}",
            f"--dbuser={cfg.db_user}",
            f"--dbpass={cfg.db_password}",
            f"--dbhost={cfg.db_host}",
            f"--dbprefix={cfg.db_prefix}",
            "--skip-check",
        ],
        [
            "core", "install",
            f"--url={cfg.hostname(site)}",
            f"--title={title or DEFAULT_SITE_TITLE}",
            f"--admin_user={cfg.wp_admin_user}",
            f"--admin_password={cfg.wp_admin_password}",
            f"--admin_email={cfg.wp_admin_email}",
            "--skip-email",
        ],
        ["option", "update", "siteurl", cfg.hostname(site)],
        ["rewrite", "structure", "/%postname%/"],
    ]


def woocommerce_commands() -> list[list[str]]:
    """Store setup for the WooCommerce dev checkout linked via LOCAL_WOO_PATH."""
    address = json.dumps(_DUMMY_ADDRESS)
    return [
        ["plugin", "activate", "woocommerce"],
        ["plugin", "activate", "woocommerce-gateway-dummy"],
        ["wc", "customer", "update", "1", "--user=1", f"--billing={address}", f"--shipping={address}"],
        ["option", "update", "woocommerce_store_address", "60 29th Street #343"],
        ["option", "update", "woocommerce_store_city", "San Francisco"],
        ["option", "update", "woocommerce_store_postcode", "94110"],
        ["option", "update", "woocommerce_default_country", "US:CA"],
        ["option", "update", "woocommerce_default_customer_address", "geolocation"],
        ["option", "update", "woocommerce_currency", "USD"],
        ["option", "update", "woocommerce_currency_pos", "left"],
        ["option", "update", "woocommerce_onboarding_profile", "--format=json", '{"skipped":true}'],
        [
            "option", "set", "--format=json", "woocommerce_dummy_settings",
            json.dumps({
                "enabled": "yes",
                "title": "Dummy Payment",
                "description": "The goods are yours. No money needed.",
                "result": "success",
            }),
        ],
        [
            "post", "create", "--post_type=page", "--post_status=publish",
            "--post_title=Blocks cart", "--post_name=blocks-cart",
            '--post_content=<!-- wp:woocommerce/cart {"align":"wide"} /-->',
        ],
        [
            "post", "create", "--post_type=page", "--post_status=publish",
            "--post_title=Blocks checkout", "--post_name=blocks-checkout",
            '--post_content=<!-- wp:woocommerce/checkout {"align":"wide"} /-->',
        ],
    ]


def default_symlinks(cfg: LammaConfig, site_path: Path) -> list[tuple[Path, Path]]:
    """``(source, target)`` pairs for the local WooCommerce checkouts, if configured."""
    if not cfg.local_woo_path:
        return []
    plugins_dir = site_path / "wp-content" / "plugins"
    links = [(cfg.local_woo_path, plugins_dir / "woocommerce")]
    if cfg.local_dummy_path:
        links.append((cfg.local_dummy_path, plugins_dir / "woocommerce-gateway-dummy"))
    return links


def create_symlinks(links: list[tuple[Path, Path]]) -> list[Path]:
    created = []
    for source, target in links:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.symlink_to(source, target_is_directory=True)
        created.append(target)
    return created


def to_php_value(value: str | bool | int | float) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"
    raise LammaError(f"Unsupported constant value type: {type(value).__name__}")


def add_constant(site_path: Path, name: str, value: str | bool | int | float) -> bool:
    """Define a constant in wp-config.php above the "stop editing" marker.

    Returns False when the constant is already mentioned.
    """
    config = site_path / "wp-config.php"
    text = files.read_text(config)
    if name in text:
        return False
    definition = f"define('{name}', {to_php_value(value)});\n"
    updated, count = _STOP_EDITING.subn(lambda m: "\n" + definition + m.group(0)[1:], text, count=1)
    if count == 0:
        raise LammaError(f"No \"That's all, stop editing!\" marker in {config}")
    files.atomic_write(config, updated)
    return True


def write_htaccess(site_path: Path) -> Path:
    path = site_path / ".htaccess"
    path.write_text(vhost_renderer.render_htaccess())
    return path


def stage_wpress(site_path: Path, wpress_file: Path) -> Path:
    """Copy a .wpress archive into ai1wm-backups (kept if already there)."""
    dest_dir = site_path / "wp-content" / "ai1wm-backups"
    dest = dest_dir / WPRESS_BACKUP_NAME
    if dest.exists():
        log.info("Destination file %s already exists. Skipping copy.", dest)
        return dest
    dest_dir.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(wpress_file, dest)
    return dest


def restore_commands(cfg: LammaConfig) -> list[list[str]]:
    return [
        ["ai1wm", "restore", WPRESS_BACKUP_NAME, "--yes"],
        ["media", "regenerate", "--yes"],
        [
            "user", "create", cfg.wp_admin_user, cfg.wp_admin_email,
            "--role=administrator", f"--user_pass={cfg.wp_admin_password}",
        ],
    ]
