"""Homebrew-managed PHP runtimes: install, services, and php.ini tweaks."""

from __future__ import annotations

from pathlib import Path

from lamma_common import LammaConfig

from lamma.services import brew, files

XDEBUG_BLOCK = (
    "[xdebug]\n"
    'zend_extension="xdebug.so"\n'
    "xdebug.mode=debug\n"
    "xdebug.client_port=9003\n"
    "xdebug.idekey=PHPSTORM\n"
)


def formula(version: str) -> str:
    return f"php@{version}"


def install(cfg: LammaConfig, version: str) -> bool:
    """Install ``php@<version>``. Returns False if it was already installed."""
    if brew.is_installed(cfg, formula(version)):
        return False
    brew.install(cfg, formula(version))
    return True


def uninstall(cfg: LammaConfig, version: str) -> bool:
    """Uninstall ``php@<version>``. Returns False if it wasn't installed."""
    if not brew.is_installed(cfg, formula(version)):
        return False
    brew.uninstall(cfg, formula(version))
    return True


def service(cfg: LammaConfig, action: str, version: str) -> None:
    brew.service(cfg, action, formula(version))


def add_xdebug(ini_path: Path) -> bool:
    """Append an ``[xdebug]`` section to php.ini unless one exists."""
    text = files.read_text(ini_path)
    if "[xdebug]" in text:
        return False
    if text and not text.endswith("\n"):
        text += "\n"
    files.atomic_write(ini_path, text + XDEBUG_BLOCK)
    return True
