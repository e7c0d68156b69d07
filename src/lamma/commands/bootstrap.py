"""First-run environment setup."""

from __future__ import annotations

from rich.console import Console

from lamma_common import DEFAULT_PHP_VERSION

from lamma.audit import audit
from lamma.commands.server import install_web_server
from lamma.config import get_config
from lamma.errors import LammaError
from lamma.services import brew, php_runtime, webserver

console = Console()


def setup() -> None:
    """Check Homebrew, install the web server and PHP, and create lamma's directories."""
    cfg = get_config()

    with audit("setup"):
        console.print("[bold][1/4][/bold] Checking Homebrew")
        console.print(f"  {brew.version(cfg).splitlines()[0]}")
        brew_prefix = brew.prefix(cfg)
        if brew_prefix != str(cfg.homebrew_directory):
            raise LammaError(
                f"brew --prefix is set to {brew_prefix} instead of {cfg.homebrew_directory}"
            )

        console.print("[bold][2/4][/bold] Installing web server")
        install_web_server()

        console.print("[bold][3/4][/bold] Setting up directories")
        for d in webserver.setup_directories(cfg):
            console.print(f"  Created {d}")

        console.print(f"[bold][4/4][/bold] Installing PHP {DEFAULT_PHP_VERSION}")
        if php_runtime.install(cfg, DEFAULT_PHP_VERSION):
            console.print(f"  PHP {DEFAULT_PHP_VERSION} has been installed.")
        else:
            console.print(f"  PHP {DEFAULT_PHP_VERSION} is already installed.")

        webserver.reload(cfg)
        console.print("\n[green bold]Done![/green bold] Run `lamma php-doctor` to assign PHP-FPM ports.")
