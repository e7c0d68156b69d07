"""PHP-FPM runtime, port allocation, and per-site version binding commands."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

from lamma_common import LammaConfig, PoolScan

from lamma.audit import audit
from lamma.config import get_config
from lamma.errors import LammaError, PhpVersionNotFoundError, ProcessQueryError, SiteNotFoundError
from lamma.services import fastcgi, php_doctor, php_pools, php_processes, php_runtime, webserver

app = typer.Typer(no_args_is_help=True)
console = Console()


def _scan(cfg: LammaConfig) -> PoolScan:
    scan = php_pools.scan_pools(cfg.php_versions_dir)
    for issue in scan.errors:
        console.print(f"[yellow]Skipping PHP {issue.version}:[/yellow] {issue.error}")
    return scan


def show_pools(cfg: LammaConfig) -> None:
    """Print the pool table: version, running flag, listen port, config and ini paths."""
    scan = _scan(cfg)
    try:
        running = php_processes.running_versions()
    except ProcessQueryError as exc:
        console.print(f"[yellow]Error getting running PHP-FPM versions: {exc}[/yellow]")
        running = set()

    table = Table(title="PHP-FPM Pools")
    table.add_column("Version", style="cyan")
    table.add_column("Running")
    table.add_column("Listen")
    table.add_column("Config File")
    table.add_column(".ini File")
    for pool in scan.pools:
        table.add_row(
            pool.version,
            "[blue]Yes[/blue]" if pool.version in running else "No",
            pool.listen_port,
            str(pool.config_file_path),
            str(pool.ini_file_path),
        )
    console.print(table)


def change_site_php(cfg: LammaConfig, site: str, version: str) -> None:
    """Rebind a site's FastCGI port to ``version`` and reload the web server."""
    config_path = cfg.site_config_path(site)
    if not config_path.exists():
        raise SiteNotFoundError(f"No vhost found for {site} at {config_path}")

    pools = _scan(cfg).pools
    binding = fastcgi.rebind(
        site, config_path, version, pools, lock_dir=cfg.lock_dir, server=cfg.web_server
    )
    console.print(
        f"Updated PHP-FPM port to {binding.bound_port} in {config_path.name} "
        f"for PHP version {version}."
    )
    if webserver.try_reload(cfg):
        console.print(f"[blue]{webserver.formula(cfg)} has been reloaded successfully.[/blue]")
    else:
        console.print(
            f"[yellow]Config updated, but {webserver.formula(cfg)} failed to reload; "
            "it may still use the old port.[/yellow]"
        )


def php_doctor_command() -> None:
    """Assign ports 9020, 9021, ... to every PHP-FPM pool and run them as the current user."""
    cfg = get_config()
    scan = _scan(cfg)

    with audit("php.doctor", versions=[p.version for p in scan.pools]) as event:
        results = php_doctor.assign_ports(scan.pools, lock_dir=cfg.lock_dir)

        table = Table(title="PHP-FPM Port Assignment")
        table.add_column("Version", style="cyan")
        table.add_column("Port")
        table.add_column("User")
        table.add_column("Result")
        for r in results:
            status = "[green]ok[/green]" if r.ok else f"[red]{r.error}[/red]"
            table.add_row(r.version, r.port, r.owner, status)
        console.print(table)

        failed = [r.version for r in results if not r.ok]
        event.params["failed"] = failed
        if failed:
            console.print(f"[yellow]{len(failed)} pool(s) could not be updated.[/yellow]")
        console.print("Restart the PHP services for the new ports to take effect.")


def php_change_command(
    name: str = typer.Argument(help="The name of the site to change PHP version"),
    php_version: str = typer.Argument(help="The version of PHP to use (e.g. 8.1)"),
) -> None:
    """Change the PHP version of a site."""
    cfg = get_config()
    with audit("php.change", target=name, version=php_version):
        change_site_php(cfg, name, php_version)


def php_select_command(
    name: str = typer.Argument(help="The name of the site to change PHP version"),
) -> None:
    """Pick a PHP version for a site from the installed pools."""
    cfg = get_config()
    version = select_version(cfg)
    with audit("php.change", target=name, version=version):
        change_site_php(cfg, name, version)


def select_version(cfg: LammaConfig) -> str:
    choices = [p.version for p in _scan(cfg).pools if p.has_tcp_port]
    if not choices:
        raise LammaError("No PHP-FPM pool listens on a TCP port. Run `lamma php-doctor` first.")
    return Prompt.ask("Select a PHP version", choices=choices, default=choices[-1])


@app.command(name="list")
def list_pools() -> None:
    """List installed PHP-FPM pools and whether they are running."""
    show_pools(get_config())


@app.command()
def install(version: str = typer.Argument(help="PHP version, e.g. 8.2")) -> None:
    """Install a PHP version with Homebrew."""
    cfg = get_config()
    with audit("php.install", target=version):
        if php_runtime.install(cfg, version):
            console.print(f"[green]PHP {version} has been successfully installed.[/green]")
        else:
            console.print(f"PHP {version} is already installed.")


@app.command()
def uninstall(version: str = typer.Argument(help="PHP version, e.g. 7.4")) -> None:
    """Uninstall a PHP version."""
    cfg = get_config()
    with audit("php.uninstall", target=version):
        if php_runtime.uninstall(cfg, version):
            console.print(f"[green]PHP {version} has been successfully uninstalled.[/green]")
        else:
            console.print(f"PHP {version} is not installed.")


def _service(action: str, version: str) -> None:
    cfg = get_config()
    with audit(f"php.{action}", target=version):
        php_runtime.service(cfg, action, version)
        console.print(f"[green]PHP {version} service: {action} done.[/green]")


@app.command()
def start(version: str = typer.Argument(help="PHP version")) -> None:
    """Start a PHP-FPM service."""
    _service("start", version)


@app.command()
def stop(version: str = typer.Argument(help="PHP version")) -> None:
    """Stop a PHP-FPM service."""
    _service("stop", version)


@app.command()
def restart(version: str = typer.Argument(help="PHP version")) -> None:
    """Restart a PHP-FPM service."""
    _service("restart", version)


@app.command()
def xdebug(version: str = typer.Argument(help="PHP version")) -> None:
    """Add an [xdebug] section to a version's php.ini."""
    cfg = get_config()
    pool = _scan(cfg).find(version)
    if pool is None:
        raise PhpVersionNotFoundError(version)
    with audit("php.xdebug", target=version):
        if php_runtime.add_xdebug(pool.ini_file_path):
            console.print(f"Added xdebug configuration to {pool.ini_file_path}.")
        else:
            console.print("xdebug configuration already exists in php.ini.")
