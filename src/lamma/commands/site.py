"""Site provisioning, removal, and inspection commands."""

from __future__ import annotations

import asyncio
import re
import shutil
import subprocess
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from lamma_common import LammaConfig, SiteConfig

from lamma.audit import audit
from lamma.commands import php as php_commands
from lamma.commands import wp as wp_commands
from lamma.config import get_config
from lamma.errors import (
    LammaError,
    PhpVersionNotFoundError,
    ProcessQueryError,
    SiteExistsError,
    SiteNotFoundError,
)
from lamma.services import (
    database,
    hosts,
    php_pools,
    php_processes,
    sites,
    ssl,
    vhost_renderer,
    webserver,
    wordpress,
    wpcli,
)

console = Console()

_LOG_LINE = re.compile(r"^\[(.*?)\] (.*)")
_MIGRATION_PLUGINS = {"all-in-one-wp-migration", "all-in-one-wp-migration-unlimited-extension"}


def _running_versions() -> set[str]:
    try:
        return php_processes.running_versions()
    except ProcessQueryError as exc:
        console.print(f"[yellow]{exc}[/yellow]")
        return set()


def _php_label(version: str, running: bool) -> str:
    if running:
        return f"{version} [blue](Running)[/blue]"
    return f"{version} [grey50](Not running)[/grey50]"


def _resolve_fpm_port(cfg: LammaConfig, php_version: str | None) -> tuple[str, str]:
    scan = php_pools.scan_pools(cfg.php_versions_dir)
    version = php_version or php_commands.select_version(cfg)
    pool = scan.find(version)
    if pool is None or not pool.has_tcp_port:
        raise PhpVersionNotFoundError(version)
    return version, pool.listen_port


def build_site_config(cfg: LammaConfig, name: str, fpm_port: str, title: str | None = None) -> SiteConfig:
    key, crt = ssl.cert_paths(cfg, name)
    site = SiteConfig(
        name=name,
        hostname=cfg.hostname(name),
        document_root=cfg.site_path(name),
        logs_dir=cfg.logs_dir,
        ssl_certificate=crt,
        ssl_certificate_key=key,
        fpm_port=fpm_port,
    )
    if title:
        site.title = title
    return site


def add(
    name: str = typer.Option(..., help="The name of the site"),
    title: Optional[str] = typer.Option(None, help="The title of the site"),
    theme: Optional[str] = typer.Option(None, help="The slug of the theme to use"),
    plugins: str = typer.Option("", help="A comma-separated list of plugin slugs"),
    php: Optional[str] = typer.Option(None, "--php", help="PHP version (prompts when omitted)"),
) -> None:
    """Add a new WordPress site: vhost, SSL, hosts entry, database, and install."""
    cfg = get_config()
    site_path = cfg.site_path(name)
    config_path = cfg.site_config_path(name)

    if config_path.exists():
        raise SiteExistsError(f"Virtual host for {cfg.hostname(name)} already exists")
    if site_path.exists():
        raise SiteExistsError(f"The site directory {site_path} already exists.")

    version, fpm_port = _resolve_fpm_port(cfg, php)
    plugin_list = [p.strip() for p in plugins.split(",") if p.strip()]
    total = 8

    with audit("site.add", target=name, php=version, theme=theme or "", plugins=plugin_list) as event:
        console.print(f"[bold][1/{total}][/bold] Configuring server")
        site_path.mkdir(parents=True)
        cfg.logs_dir.mkdir(parents=True, exist_ok=True)
        site = build_site_config(cfg, name, fpm_port, title)
        site.php_error_log.touch()
        ssl.create_self_signed(cfg, name)
        vhost_renderer.write_vhost(config_path, vhost_renderer.render_site(cfg, site))
        webserver.enable_site(cfg, name)
        console.print(f"  {config_path} → PHP {version} on port {fpm_port}")

        console.print(f"[bold][2/{total}][/bold] Checking WP-CLI")
        console.print(f"  wp: {wpcli.ensure_installed()}")

        console.print(f"[bold][3/{total}][/bold] Making the site accessible")
        if hosts.add_site(cfg, name):
            console.print(f"  Added {cfg.hostname(name)} to {cfg.hosts_file}")
        else:
            console.print(f"  {cfg.hostname(name)} is already included in the hosts file")
        wordpress.write_htaccess(site_path)

        console.print(f"[bold][4/{total}][/bold] Installing WordPress")
        database.create_database(cfg, name)
        for args in wordpress.install_commands(cfg, name, title):
            console.print(f"[grey50]  wp {' '.join(args)[:150]}[/grey50]")
            wpcli.wp(args, site_path)

        console.print(f"[bold][5/{total}][/bold] Configuring WordPress")
        links = wordpress.default_symlinks(cfg, site_path)
        for target in wordpress.create_symlinks(links):
            console.print(f"[grey50]  Symlinked {target}[/grey50]")
        if links:
            for args in wordpress.woocommerce_commands():
                console.print(f"[grey50]  wp {' '.join(args)[:150]}[/grey50]")
                wpcli.wp(args, site_path)
        wordpress.add_constant(site_path, "JETPACK_AUTOLOAD_DEV", True)

        console.print(f"[bold][6/{total}][/bold] Setting up plugins")
        chosen = wp_commands.activate_plugins(
            cfg, site_path, wp_commands.choose_plugins(cfg, plugin_list)
        )
        event.params["plugins"] = chosen
        if _MIGRATION_PLUGINS.issubset(chosen) and wp_commands.ask_restore(cfg, site_path):
            console.print("[blue]Re-activating plugins[/blue]")
            for plugin in chosen:
                wpcli.wp(["plugin", "activate", plugin], site_path)

        console.print(f"[bold][7/{total}][/bold] Setting up theme")
        event.params["theme"] = wp_commands.activate_theme(cfg, site_path, theme)

        console.print(f"[bold][8/{total}][/bold] Flushing rewrites and reloading {webserver.formula(cfg)}")
        wpcli.wp(["rewrite", "flush"], site_path)
        if not webserver.try_reload(cfg):
            console.print(f"  [yellow]{webserver.formula(cfg)} reload failed; reload it manually.[/yellow]")

        console.print(
            f"\n[green bold]Done![/green bold] Your new site is available at "
            f"{sites.site_url(cfg, name)}\nDocument root is at: {site_path}"
        )


def remove(
    name: str = typer.Argument(help="The name of the site to remove"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
) -> None:
    """Remove a site: database, hosts entry, document root, vhost, and SSL files."""
    cfg = get_config()
    if not sites.site_exists(cfg, name):
        raise SiteNotFoundError(f"Site '{name}' doesn't exist")

    site_path = cfg.site_path(name)
    config_path = cfg.site_config_path(name)
    key, crt = ssl.cert_paths(cfg, name)

    if not yes:
        console.print("\n[bold red]About to remove:[/bold red]")
        console.print(f"  Database: {name}")
        console.print(f"  Hosts entry: {cfg.hostname(name)}")
        console.print(f"  Document root: {site_path}")
        console.print(f"  Vhost: {config_path}")
        console.print(f"  SSL: {key.name}, {crt.name}")
        console.print()
        if not typer.confirm("Continue?"):
            raise typer.Abort()

    def drop_db() -> None:
        database.drop_database(cfg, name)

    def drop_hosts() -> None:
        if not hosts.remove_site(cfg, name):
            console.print("  No hosts entry found")

    def drop_dir() -> None:
        if site_path.exists():
            shutil.rmtree(site_path)

    def drop_vhost() -> None:
        paths = [config_path]
        if cfg.web_server == "apache":
            paths.append(cfg.apache_enabled_dir / f"{name}.conf")
        for path in paths:
            if path.exists() or path.is_symlink():
                path.unlink()

    def drop_ssl() -> None:
        for path in (key, crt):
            if path.exists():
                path.unlink()

    steps = [
        ("Deleting database", drop_db),
        ("Removing hosts record", drop_hosts),
        ("Deleting site directory", drop_dir),
        ("Deleting site configuration", drop_vhost),
        ("Deleting SSL certificates", drop_ssl),
    ]
    failures: list[str] = []
    with audit("site.remove", target=name) as event:
        for i, (label, step) in enumerate(steps, start=1):
            console.print(f"[bold][{i}/{len(steps) + 1}][/bold] {label}")
            try:
                step()
            except (LammaError, OSError) as exc:
                console.print(f"  [red]{exc}[/red]")
                failures.append(label)

        console.print(f"[bold][{len(steps) + 1}/{len(steps) + 1}][/bold] Reloading {webserver.formula(cfg)}")
        if not webserver.try_reload(cfg):
            console.print(f"  [yellow]{webserver.formula(cfg)} reload failed[/yellow]")

        event.params["failed"] = failures
        if failures:
            raise LammaError(f"Site {name} partially removed; failed: {', '.join(failures)}")
        console.print(f"\n[green bold]Site {name} removed.[/green bold]")


def list_sites(
    all_: bool = typer.Option(False, "--all", help="Show theme, WP version, PHP, and sizes"),
) -> None:
    """List all sites."""
    cfg = get_config()
    names = sites.list_site_names(cfg)

    if not all_:
        table = Table(title=f"Sites available ({len(names)})")
        table.add_column("Site Name", style="cyan")
        table.add_column("URL")
        for name in names:
            table.add_row(name, sites.site_url(cfg, name))
        console.print(table)
        return

    pools = php_pools.scan_pools(cfg.php_versions_dir).pools
    running = _running_versions()
    with console.status("Fetching sites..."):
        summaries = asyncio.run(sites.collect_summaries(cfg, names, pools, running))

    table = Table(title=f"Sites available ({len(summaries)})")
    for column in ("Site Name", "URL", "Theme", "WP Version", "PHP Version", "Total Size", "DB Size"):
        table.add_column(column, style="cyan" if column == "Site Name" else None)
    for s in sorted(summaries, key=lambda s: s.name):
        table.add_row(
            s.name, s.url, s.theme, s.wp_version,
            _php_label(s.php_version, s.php_running), s.folder_size, s.db_size,
        )
    console.print(table)
    for s in summaries:
        for err in s.errors:
            console.print(f"[yellow]{s.name}: {err}[/yellow]")


def info(name: str = typer.Argument(help="The name of the site to get info")) -> None:
    """Show information about a site."""
    cfg = get_config()
    site_path = cfg.site_path(name)
    if not site_path.exists():
        raise SiteNotFoundError(f"Site '{name}' doesn't exist")

    with console.status(f"Fetching site data for {name}..."):
        theme = wpcli.active_theme(site_path)
        wp_version = wpcli.core_version(site_path)
        plugin_rows = wpcli.plugin_rows(site_path)

    pools = php_pools.scan_pools(cfg.php_versions_dir).pools
    php_version = sites.php_version_for(cfg, name, pools)
    theme_managed = (site_path / "wp-content" / "themes" / theme).is_symlink()

    details = Table(show_header=False, box=None, title=f"Site Information ({name})")
    details.add_column(style="cyan")
    details.add_column()
    details.add_row("Name:", name)
    details.add_row("URL:", sites.site_url(cfg, name))
    details.add_row("Theme:", f"{theme} [blue](Managed)[/blue]" if theme_managed else theme)
    details.add_row("PHP:", _php_label(php_version, php_version in _running_versions()))
    details.add_row("WP Version:", wp_version)
    details.add_row("Document Root:", str(site_path))
    details.add_row("Config File:", str(cfg.site_config_path(name)))
    _, crt = ssl.cert_paths(cfg, name)
    if crt.exists():
        details.add_row("SSL Expires:", ssl.read_expiry(crt).strftime("%Y-%m-%d"))
    details.add_row("Managed Projects Config:", str(cfg.projects_file))
    console.print(details)

    plugins_dir = site_path / "wp-content" / "plugins"
    table = Table(title=f"Installed Plugins ({len(plugin_rows)})")
    table.add_column("Plugin Name", style="cyan")
    table.add_column("Status")
    table.add_column("Version")
    table.add_column("Is Managed")
    for row in plugin_rows:
        managed = (plugins_dir / row.get("name", "")).is_symlink()
        table.add_row(
            row.get("name", ""),
            row.get("status", ""),
            row.get("version", ""),
            "[blue]Yes[/blue]" if managed else "[grey50]No[/grey50]",
        )
    console.print(table)


def hosts_doctor() -> None:
    """Ensure every configured site has its hosts file block."""
    cfg = get_config()
    with audit("hosts.doctor") as event:
        added = []
        for name in sites.list_site_names(cfg):
            if hosts.add_site(cfg, name):
                added.append(name)
                console.print(f"[grey50]- Added {cfg.hostname(name)} to {cfg.hosts_file}[/grey50]")
            else:
                console.print(f"[grey50]- {cfg.hostname(name)} is already included in the hosts file[/grey50]")
        event.params["added"] = added


def logs(name: str = typer.Argument(help="The name of the site to watch logs")) -> None:
    """Follow a site's PHP error log."""
    cfg = get_config()
    log_file = cfg.logs_dir / f"{name}.php.log"
    if not log_file.exists():
        raise SiteNotFoundError(f"No PHP log for {name} at {log_file}")

    proc = subprocess.Popen(
        ["tail", "-n", "100", "-f", str(log_file)],
        stdout=subprocess.PIPE,
        text=True,
    )
    try:
        for line in proc.stdout:
            console.print(format_log_line(line))
    except KeyboardInterrupt:
        pass
    finally:
        proc.terminate()
        proc.wait()


def format_log_line(line: str) -> Text:
    line = line.rstrip("\r\n")
    m = _LOG_LINE.match(line)
    if not m:
        return Text(line, style="white")
    return Text.assemble((m.group(1), "cyan"), " ", (m.group(2), "white"))
