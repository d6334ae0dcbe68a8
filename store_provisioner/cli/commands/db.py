"""Database schema commands.

Commands:
    init     - Create the lifecycle tables directly from the models
    upgrade  - Apply Alembic migrations up to a revision
"""

from pathlib import Path

import typer
from alembic import command as alembic_command
from alembic.config import Config as AlembicConfig

from store_provisioner.app.core.services import DbManageService, DbSessionService
from store_provisioner.cli.context import get_cli_context
from store_provisioner.cli.shared import with_error_handling

db_app = typer.Typer(
    name="db",
    help="🗄️  Database schema commands",
    no_args_is_help=True,
)


@db_app.command("init")
@with_error_handling
def init(ctx: typer.Context) -> None:
    """Create all lifecycle tables that do not exist yet."""
    cli = get_cli_context(ctx)
    db = DbSessionService(cli.load_config().database)
    try:
        DbManageService(db).create_all()
    finally:
        db.dispose()
    cli.console.ok("Database tables are in place")


@db_app.command("upgrade")
@with_error_handling
def upgrade(
    ctx: typer.Context,
    revision: str = typer.Argument("head", help="Target revision"),
    alembic_ini: Path = typer.Option(
        Path("alembic.ini"), "--alembic-ini", help="Path to alembic.ini"
    ),
) -> None:
    """Apply migrations to the configured database."""
    cli = get_cli_context(ctx)
    alembic_config = AlembicConfig(str(alembic_ini))
    alembic_config.set_main_option("sqlalchemy.url", cli.load_config().database.url)

    with cli.console.status(f"Upgrading database to {revision}..."):
        alembic_command.upgrade(alembic_config, revision)
    cli.console.ok(f"Database upgraded to {revision}")
