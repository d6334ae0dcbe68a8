"""API server command."""

import typer
import uvicorn

from store_provisioner.app.main import create_app
from store_provisioner.cli.context import get_cli_context
from store_provisioner.cli.shared import with_error_handling


@with_error_handling
def serve(
    ctx: typer.Context,
    host: str | None = typer.Option(None, "--host", help="Bind address (default: app.host)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port (default: app.port)"),
) -> None:
    """🚀 Run the store provisioning API."""
    cli = get_cli_context(ctx)
    config = cli.load_config()

    bind_host = host or config.app.host
    bind_port = port or config.app.port
    cli.console.print_header(f"Store Provisioner on {bind_host}:{bind_port}")

    uvicorn.run(
        create_app(config),
        host=bind_host,
        port=bind_port,
        log_config=None,
    )
