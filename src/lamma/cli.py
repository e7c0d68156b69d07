"""Root Typer application for the lamma CLI."""

from __future__ import annotations

import sys

import typer
from rich.console import Console

from lamma.commands import bootstrap, history, php, server, site, wp
from lamma.errors import LammaError
from lamma.log import setup_logging

app = typer.Typer(
    name="lamma",
    help="Local WordPress development on macOS: Homebrew, PHP-FPM, nginx/Apache and WP-CLI.",
    no_args_is_help=True,
)

_PASSTHROUGH = {"allow_extra_args": True, "ignore_unknown_options": True}


@app.callback()
def _root(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr")) -> None:
    setup_logging(verbose)


app.add_typer(server.app, name="server", help="Web server install, status and reload.")
app.add_typer(php.app, name="php", help="PHP runtimes and PHP-FPM services.")

app.command(name="setup")(bootstrap.setup)
app.command(name="sites")(site.list_sites)
app.command(name="info")(site.info)
app.command(name="add")(site.add)
app.command(name="remove")(site.remove)
app.command(name="logs")(site.logs)
app.command(name="history")(history.history)
app.command(name="hosts-doctor")(site.hosts_doctor)

app.command(name="php-doctor")(php.php_doctor_command)
app.command(name="php-change")(php.php_change_command)
app.command(name="php-select")(php.php_select_command)

app.command(name="wp", context_settings=_PASSTHROUGH)(wp.wp_alias)
app.command(name="add-plugins")(wp.add_plugins)
app.command(name="unmanage-plugins")(wp.unmanage_plugins)
app.command(name="switch-theme")(wp.switch_theme)
app.command(name="restore")(wp.restore)


def main() -> None:
    try:
        app()
    except LammaError as exc:
        Console(stderr=True).print(f"[red]Error:[/red] {exc}")
        sys.exit(exc.exit_code)


if __name__ == "__main__":
    main()
