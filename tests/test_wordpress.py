"""Tests for WordPress provisioning helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from lamma_common import LammaConfig
from lamma.errors import LammaError
from lamma.services.wordpress import (
    WPRESS_BACKUP_NAME,
    add_constant,
    default_symlinks,
    install_commands,
    stage_wpress,
    to_php_value,
)

WP_CONFIG = """<?php
define( 'DB_NAME', 'shop' );

/* That's all, stop editing! Happy publishing. */

require_once ABSPATH . 'wp-settings.php';
"""


class TestPhpValue:
    def test_scalars(self):
        assert to_php_value(True) == "true"
        assert to_php_value(False) == "false"
        assert to_php_value(3) == "3"
        assert to_php_value("it's") == "'it\\'s'"

    def test_unsupported(self):
        with pytest.raises(LammaError):
            to_php_value(None)


class TestAddConstant:
    def test_inserted_before_marker(self, tmp_path: Path):
        (tmp_path / "wp-config.php").write_text(WP_CONFIG)

        assert add_constant(tmp_path, "JETPACK_AUTOLOAD_DEV", True) is True

        text = (tmp_path / "wp-config.php").read_text()
        assert "define('JETPACK_AUTOLOAD_DEV', true);\n/* That's all, stop editing!" in text
        assert text.startswith("<?php\ndefine( 'DB_NAME', 'shop' );\n")

    def test_existing_constant_untouched(self, tmp_path: Path):
        (tmp_path / "wp-config.php").write_text(WP_CONFIG)
        add_constant(tmp_path, "WP_DEBUG", True)
        assert add_constant(tmp_path, "WP_DEBUG", False) is False
        assert (tmp_path / "wp-config.php").read_text().count("WP_DEBUG") == 1

    def test_missing_marker(self, tmp_path: Path):
        (tmp_path / "wp-config.php").write_text("<?php\n")
        with pytest.raises(LammaError, match="stop editing"):
            add_constant(tmp_path, "WP_DEBUG", True)


class TestProvisioning:
    def test_install_commands(self, tmp_config: LammaConfig):
        commands = install_commands(tmp_config, "shop", "Shop")
        flat = [" ".join(c) for c in commands]
        assert flat[0].startswith("core download")
        assert any("--dbname=shop" in c for c in flat)
        assert any("--url=shop.test" in c and "--title=Shop" in c for c in flat)

    def test_symlinks_only_when_configured(self, tmp_config: LammaConfig, tmp_path: Path):
        site = tmp_path / "Sites" / "shop"
        assert default_symlinks(tmp_config, site) == []

        cfg = tmp_config.model_copy(update={"local_woo_path": tmp_path / "woo"})
        links = default_symlinks(cfg, site)
        assert links == [(tmp_path / "woo", site / "wp-content" / "plugins" / "woocommerce")]

    def test_stage_wpress(self, tmp_path: Path):
        archive = tmp_path / "site.wpress"
        archive.write_bytes(b"wpress")
        site = tmp_path / "shop"

        dest = stage_wpress(site, archive)

        assert dest == site / "wp-content" / "ai1wm-backups" / WPRESS_BACKUP_NAME
        assert dest.read_bytes() == b"wpress"
        archive.write_bytes(b"other")
        assert stage_wpress(site, archive).read_bytes() == b"wpress"
