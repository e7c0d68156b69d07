"""Tests for file, Homebrew, and web server helpers."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from lamma_common import LammaConfig
from lamma.errors import ExternalCommandError, FileSystemError, ParseError
from lamma.services import brew, files, php_runtime, webserver, wpcli


def _completed(stdout: str = "", returncode: int = 0):
    return subprocess.CompletedProcess(["brew"], returncode, stdout=stdout, stderr="")


class TestFiles:
    def test_atomic_write_keeps_mode(self, tmp_path: Path):
        path = tmp_path / "www.conf"
        path.write_text("old")
        os.chmod(path, 0o640)

        files.atomic_write(path, "new")

        assert path.read_text() == "new"
        assert oct(path.stat().st_mode & 0o777) == oct(0o640)
        assert [p.name for p in tmp_path.iterdir()] == ["www.conf"]

    def test_read_missing(self, tmp_path: Path):
        with pytest.raises(FileSystemError):
            files.read_text(tmp_path / "nope")

    def test_backup_once(self, tmp_path: Path):
        path = tmp_path / "nginx.conf"
        backup = tmp_path / "nginx.backup.conf"
        path.write_text("v1")
        assert files.backup_once(path, backup) is True
        path.write_text("v2")
        assert files.backup_once(path, backup) is False
        assert backup.read_text() == "v1"

    def test_lock_file_created(self, tmp_path: Path):
        target = tmp_path / "hosts"
        with files.locked(target, tmp_path / "locks"):
            locks = list((tmp_path / "locks").iterdir())
        assert len(locks) == 1
        assert locks[0].name.startswith("hosts.")


class TestPhpRuntime:
    def test_add_xdebug_once(self, tmp_path: Path):
        ini = tmp_path / "php.ini"
        ini.write_text("memory_limit = 128M")
        assert php_runtime.add_xdebug(ini) is True
        assert php_runtime.add_xdebug(ini) is False
        text = ini.read_text()
        assert text.startswith("memory_limit = 128M\n[xdebug]\n")
        assert text.count("[xdebug]") == 1

    def test_install_skips_existing(self, tmp_config: LammaConfig):
        with patch("lamma.services.brew.shell.run", return_value=_completed("nginx\nphp@8.1\n")) as run:
            assert php_runtime.install(tmp_config, "8.1") is False
        run.assert_called_once()


class TestWebServer:
    def test_formula(self, tmp_config: LammaConfig):
        assert webserver.formula(tmp_config) == "nginx"
        assert webserver.formula(tmp_config.model_copy(update={"web_server": "apache"})) == "httpd"

    @pytest.mark.parametrize(
        "stdout,expected",
        [
            ("nginx (homebrew.mxcl.nginx)\nRunning: true\nLoaded: true\n", "running"),
            ("nginx (homebrew.mxcl.nginx)\nRunning: false\nLoaded: true\n", "stopped"),
            ("nginx (homebrew.mxcl.nginx)\nRunning: false\nLoaded: false\n", "unmanaged"),
            ("garbage\n", "unknown"),
        ],
    )
    def test_status(self, tmp_config: LammaConfig, stdout: str, expected: str):
        with patch("lamma.services.brew.shell.run", return_value=_completed(stdout)):
            assert webserver.status(tmp_config) == expected

    def test_try_reload_reports_failure(self, tmp_config: LammaConfig):
        err = ExternalCommandError(["brew", "services", "restart", "nginx"], 1, "boom")
        with patch("lamma.services.brew.shell.run", side_effect=err):
            assert webserver.try_reload(tmp_config) is False

    def test_main_config_backup(self, tmp_config: LammaConfig):
        conf = tmp_config.nginx_dir / "nginx.conf"
        conf.write_text("# stock\n")

        assert webserver.write_nginx_main_config(tmp_config) is True
        assert webserver.write_nginx_main_config(tmp_config) is False
        assert (tmp_config.nginx_dir / webserver.NGINX_BACKUP_NAME).read_text() == "# stock\n"
        assert str(tmp_config.nginx_servers_dir) in conf.read_text()

    def test_setup_directories(self, tmp_config: LammaConfig):
        created = webserver.setup_directories(tmp_config)
        assert str(tmp_config.logs_dir) in created
        assert str(tmp_config.nginx_servers_dir) not in created
        assert webserver.setup_directories(tmp_config) == []

    def test_brew_prefix(self, tmp_config: LammaConfig):
        with patch("lamma.services.brew.shell.run", return_value=_completed("/opt/homebrew\n")) as run:
            assert brew.prefix(tmp_config) == "/opt/homebrew"
        assert run.call_args.args[0] == ["brew", "--prefix"]


class TestWpCli:
    def test_plugin_rows_keeps_commas_in_fields(self, tmp_path: Path):
        out = (
            '[{"name":"woocommerce","status":"active","update":"none","version":"8.5.1"},'
            '{"name":"hello, \\"dolly\\"","status":"inactive","update":"available","version":"1.7.2"}]'
        )
        with patch("lamma.services.wpcli.shell.run", return_value=_completed(out)) as run:
            rows = wpcli.plugin_rows(tmp_path)
        assert "--format=json" in run.call_args.args[0]
        assert rows[1] == {"name": 'hello, "dolly"', "status": "inactive", "update": "available", "version": "1.7.2"}
        assert [r["name"] for r in rows] == ["woocommerce", 'hello, "dolly"']

    def test_plugin_rows_empty(self, tmp_path: Path):
        with patch("lamma.services.wpcli.shell.run", return_value=_completed("")):
            assert wpcli.plugin_rows(tmp_path) == []

    def test_plugin_rows_bad_output(self, tmp_path: Path):
        with patch("lamma.services.wpcli.shell.run", return_value=_completed("PHP Warning: oops")):
            with pytest.raises(ParseError):
                wpcli.plugin_rows(tmp_path)
