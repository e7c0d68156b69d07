"""Web server management commands."""

from __future__ import annotations

import typer
from rich.console import Console

from lamma.audit import audit
from lamma.commands.php import show_pools
from lamma.config import get_config
from lamma.services import webserver

app = typer.Typer(no_args_is_help=True)
console = Console()

_STATUS_MESSAGES = {
    "running": "[blue]{name} is running.[/blue]",
    "stopped": "[yellow]{name} is installed but not running as a service.[/yellow]",
    "unmanaged": "[red]{name} is not loaded or managed as a service.[/red]",
    "unknown": "[yellow]{name} information not found. It may not be installed or managed as a service.[/yellow]",
}


def install_web_server() -> None:
    cfg = get_config()
    name = webserver.formula(cfg)
    console.print(f"[yellow]- Installing {name}...[/yellow]")
    if webserver.ensure_installed(cfg):
        console.print(f"[grey50]{name} has been successfully installed.[/grey50]")
    else:
        console.print(f"[grey50]{name} is already installed.[/grey50]")

    if cfg.web_server == "nginx":
        if webserver.write_nginx_main_config(cfg):
            console.print(f"[grey50]Backup of nginx.conf created as {webserver.NGINX_BACKUP_NAME}[/grey50]")
        console.print("Nginx configuration updated successfully.")


@app.command()
def install() -> None:
    """Install the web server and write lamma's main config."""
    with audit("server.install"):
        install_web_server()


@app.command()
def status() -> None:
    """Show whether the web server service is running."""
    cfg = get_config()
    state = webserver.status(cfg)
    console.print(_STATUS_MESSAGES[state].format(name=webserver.formula(cfg)))


@app.command()
def reload() -> None:
    """Restart the web server service."""
    cfg = get_config()
    with audit("server.reload"):
        webserver.reload(cfg)
        console.print(f"[blue]{webserver.formula(cfg)} has been reloaded successfully.[/blue]")


@app.command()
def php() -> None:
    """List PHP-FPM pools: version, running, listen, config and ini files."""
    show_pools(get_config())
