"""Homebrew package and service wrappers."""

from __future__ import annotations

import subprocess

from lamma_common import LammaConfig

from lamma.services import shell


def _brew(cfg: LammaConfig, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
    return shell.run([cfg.brew_bin, *args], check=check)


def version(cfg: LammaConfig) -> str:
    return _brew(cfg, "--version").stdout.strip()


def prefix(cfg: LammaConfig) -> str:
    return _brew(cfg, "--prefix").stdout.strip()


def is_installed(cfg: LammaConfig, formula: str) -> bool:
    result = _brew(cfg, "list", "--formula", "-1")
    return formula in result.stdout.split()


def install(cfg: LammaConfig, formula: str) -> None:
    _brew(cfg, "install", formula)


def uninstall(cfg: LammaConfig, formula: str) -> None:
    _brew(cfg, "uninstall", formula)


def service(cfg: LammaConfig, action: str, formula: str) -> None:
    """Run ``brew services <action> <formula>`` (start, stop, restart)."""
    _brew(cfg, "services", action, formula)


def service_info(cfg: LammaConfig, formula: str) -> dict[str, bool] | None:
    """Parse ``brew services info`` into ``{"running": .., "loaded": ..}``."""
    result = _brew(cfg, "services", "info", formula, check=False)
    if result.returncode != 0:
        return None
    info: dict[str, bool] = {}
    for line in result.stdout.splitlines():
        key, _, value = line.strip().partition(":")
        if key in ("Running", "Loaded"):
            info[key.lower()] = "true" in value
    if "running" not in info or "loaded" not in info:
        return None
    return info
