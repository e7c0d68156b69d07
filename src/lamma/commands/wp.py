"""WordPress content commands: themes, managed plugins, restores, WP-CLI passthrough."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.prompt import Confirm, Prompt

from lamma_common import LammaConfig, ManagedProject

from lamma.audit import audit
from lamma.config import get_config
from lamma.errors import LammaError, SiteNotFoundError
from lamma.services import projects, wordpress, wpcli

console = Console()

CUSTOM = "custom"


def _site_path(cfg: LammaConfig, name: str) -> Path:
    path = cfg.site_path(name)
    if not path.exists():
        raise SiteNotFoundError(f"Site '{name}' doesn't exist")
    return path


def _link_and_run(project: ManagedProject, site_path: Path, args: list[str]) -> None:
    target = projects.link(project, site_path)
    if target:
        console.print(f"[grey50]- Created symlink from '{project.local_dir}' to '{target}'[/grey50]")
    wpcli.wp(args, site_path)


def activate_theme(cfg: LammaConfig, site_path: Path, theme: str | None) -> str:
    """Activate a managed theme (symlinked) or install one from wordpress.org."""
    managed = projects.load_projects(cfg.projects_file)
    if not theme:
        choices = [p.value for p in projects.themes(managed)] + [CUSTOM]
        theme = Prompt.ask("Select a theme to activate", choices=choices, default=choices[0])
    if theme == CUSTOM:
        theme = Prompt.ask("Enter the name of the custom theme to activate")

    project = projects.find(managed, theme, kind="theme")
    if project:
        console.print(f"[grey50]- Activating theme '{theme}'...[/grey50]")
        _link_and_run(project, site_path, ["theme", "activate", theme])
    else:
        console.print(f"[grey50]- Installing and activating theme '{theme}'...[/grey50]")
        wpcli.wp(["theme", "install", theme, "--activate"], site_path)
    return theme


def choose_plugins(cfg: LammaConfig, preset: list[str]) -> list[str]:
    """Merge ``preset`` with the operator's picks, deduplicated in order."""
    if preset:
        return list(dict.fromkeys(preset))

    managed = projects.plugins(projects.load_projects(cfg.projects_file))
    if managed:
        console.print("Managed plugins: " + ", ".join(p.value for p in managed))
    picked = Prompt.ask("Plugins to activate (comma-separated, empty for none)", default="")
    chosen = [p.strip() for p in picked.split(",") if p.strip()]
    return list(dict.fromkeys(chosen))


def activate_plugins(cfg: LammaConfig, site_path: Path, plugins: list[str]) -> list[str]:
    """Activate each plugin: link managed ones, install the rest."""
    managed = projects.load_projects(cfg.projects_file)
    for plugin in plugins:
        project = projects.find(managed, plugin, kind="plugin")
        if project:
            console.print(f"[grey50]- Activating plugin '{plugin}'...[/grey50]")
            # The WooCommerce checkout is linked by LOCAL_WOO_PATH during provisioning
            if plugin == "woocommerce":
                wpcli.wp(["plugin", "activate", plugin], site_path)
            else:
                _link_and_run(project, site_path, ["plugin", "activate", plugin])
        else:
            console.print(f"[grey50]- Installing and activating plugin '{plugin}'...[/grey50]")
            wpcli.wp(["plugin", "install", plugin, "--activate"], site_path)
    return plugins


def restore_wpress(cfg: LammaConfig, site_path: Path, wpress_file: Path) -> None:
    """Restore a site from an All-in-One WP Migration archive."""
    if not wpress_file.exists():
        raise LammaError(f"The specified wpress file {wpress_file} does not exist.")
    dest = wordpress.stage_wpress(site_path, wpress_file)
    console.print(f"Copied wpress file to {dest}")
    for args in wordpress.restore_commands(cfg):
        with console.status(f"wp {' '.join(args[:2])}..."):
            wpcli.wp(args, site_path)
    console.print("[blue]Migration Completed.[/blue]")


def ask_restore(cfg: LammaConfig, site_path: Path) -> bool:
    if not Confirm.ask("Do you want to use a wpress file for restoration?", default=False):
        console.print("Skipping WordPress restoration.")
        return False
    while True:
        path = Path(Prompt.ask("Enter the file path containing the wpress file")).expanduser()
        if path.exists():
            break
        console.print("[red]The specified wpress file does not exist.[/red]")
    restore_wpress(cfg, site_path, path)
    return True


def switch_theme(
    name: str = typer.Argument(help="The name of the site to switch theme"),
    theme: Optional[str] = typer.Option(None, help="Theme slug; prompts when omitted"),
) -> None:
    """Switch the theme of a site."""
    cfg = get_config()
    site_path = _site_path(cfg, name)
    with audit("wp.switch-theme", target=name) as event:
        event.params["theme"] = activate_theme(cfg, site_path, theme)
        console.print("Done.")


def add_plugins(
    name: str = typer.Argument(help="The name of the site to add plugins to"),
    plugins: str = typer.Option("", help="Comma-separated plugin slugs; prompts when omitted"),
) -> None:
    """Link managed plugins from ~/.woa_projects.json (or install others) and activate them."""
    cfg = get_config()
    site_path = _site_path(cfg, name)
    preset = [p.strip() for p in plugins.split(",") if p.strip()]
    with audit("wp.add-plugins", target=name) as event:
        event.params["plugins"] = activate_plugins(cfg, site_path, choose_plugins(cfg, preset))
        console.print("Done.")


def unmanage_plugins(
    name: str = typer.Argument(help="The name of the site to remove managed plugins from"),
) -> None:
    """Remove managed-plugin symlinks from a site."""
    cfg = get_config()
    site_path = _site_path(cfg, name)
    with audit("wp.unmanage-plugins", target=name):
        removed = projects.unlink_managed_plugins(projects.load_projects(cfg.projects_file), site_path)
        for path in removed:
            console.print(f"[grey50]- Removed symlink {path}[/grey50]")
        if not removed:
            console.print("No managed plugins linked.")


def restore(
    name: str = typer.Argument(help="The name of the site to restore into"),
    wpress_file: Path = typer.Argument(help="Path to a .wpress archive"),
) -> None:
    """Restore a site from an All-in-One WP Migration (.wpress) archive."""
    cfg = get_config()
    site_path = _site_path(cfg, name)
    with audit("wp.restore", target=name, file=str(wpress_file)):
        restore_wpress(cfg, site_path, wpress_file)


def wp_alias(
    ctx: typer.Context,
    name: str = typer.Argument(help="The name of the site to run WP-CLI commands in"),
) -> None:
    """WP-CLI alias for a specific site: lamma wp <site> <wp args...>."""
    cfg = get_config()
    if not ctx.args:
        console.print("No arguments provided to pass to the `wp` command.")
        return
    site_path = _site_path(cfg, name)
    code = wpcli.passthrough(list(ctx.args), site_path)
    if code != 0:
        console.print("[red]Error executing `wp` command.[/red]")
        raise typer.Exit(code)
