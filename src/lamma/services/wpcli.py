"""WP-CLI wrappers. Every call runs with the site's document root as cwd."""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
import tempfile
from pathlib import Path

import httpx

from lamma_common.constants import WP_CLI_INSTALL_PATH, WP_CLI_PHAR_URL

from lamma.errors import LammaError, ParseError
from lamma.services import shell

log = logging.getLogger(__name__)


def _argv(args: list[str]) -> list[str]:
    return args if args[:1] == ["wp"] else ["wp", *args]


def wp(args: list[str], site_path: Path) -> str:
    """Run ``wp <args>`` and return its stdout."""
    return shell.run(_argv(args), cwd=site_path).stdout


async def wp_async(args: list[str], site_path: Path) -> str:
    return await shell.run_async(_argv(args), cwd=site_path)


def passthrough(args: list[str], site_path: Path) -> int:
    """Run ``wp`` attached to the terminal; return its exit code."""
    return subprocess.run(_argv(args), cwd=str(site_path), check=False).returncode


def installed_path() -> str | None:
    return shutil.which("wp")


def ensure_installed() -> str:
    """Install the WP-CLI phar to /usr/local/bin/wp unless ``wp`` is on PATH."""
    existing = installed_path()
    if existing:
        return existing

    log.info("Downloading WP-CLI from %s", WP_CLI_PHAR_URL)
    try:
        with httpx.Client(timeout=60.0, follow_redirects=True) as client:
            resp = client.get(WP_CLI_PHAR_URL)
            resp.raise_for_status()
    except httpx.HTTPError as exc:
        raise LammaError(f"Failed to download WP-CLI: {exc}") from exc

    with tempfile.NamedTemporaryFile(suffix=".phar", delete=False) as fh:
        fh.write(resp.content)
        phar = fh.name
    try:
        shell.sudo(["install", "-m", "0755", phar, str(WP_CLI_INSTALL_PATH)])
    finally:
        Path(phar).unlink(missing_ok=True)
    return str(WP_CLI_INSTALL_PATH)


def active_theme(site_path: Path) -> str:
    return wp(
        ["theme", "list", "--status=active", "--field=name", "--skip-themes", "--skip-plugins"],
        site_path,
    ).strip()


def core_version(site_path: Path) -> str:
    return wp(["core", "version", "--skip-themes", "--skip-plugins"], site_path).strip()


def plugin_rows(site_path: Path) -> list[dict[str, str]]:
    """Parse ``wp plugin list`` (name, status, update, version) into dicts."""
    out = wp(["plugin", "list", "--skip-themes", "--skip-plugins", "--format=json"], site_path)
    if not out.strip():
        return []
    try:
        return json.loads(out)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Unexpected output from wp plugin list: {exc}") from exc
