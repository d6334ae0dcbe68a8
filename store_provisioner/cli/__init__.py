"""Main CLI application module.

Command Groups:
- db: Database schema management
- stores: Store inspection
- driver: Helm driver checks
"""

from pathlib import Path

import typer

from store_provisioner.app.runtime.config.config_loader import CONFIG_PATH

from .commands import db_app, driver_app, reconcile, serve, stores_app
from .context import build_cli_context

app = typer.Typer(
    help="🏪 Store Provisioner CLI",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def configure(
    ctx: typer.Context,
    config: Path = typer.Option(
        CONFIG_PATH,
        "--config",
        "-c",
        envvar="STORE_PROVISIONER_CONFIG",
        help="Path to config.yaml",
    ),
) -> None:
    ctx.obj = build_cli_context(config)


app.command("serve")(serve)
app.command("reconcile")(reconcile)

app.add_typer(db_app, name="db")
app.add_typer(stores_app, name="stores")
app.add_typer(driver_app, name="driver")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
