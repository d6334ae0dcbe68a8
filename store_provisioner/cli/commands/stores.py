"""Read-only store inspection commands.

Commands:
    list    - Table of non-deleted stores
    show    - One store with its job history
    events  - Audit trail of a store
"""

import typer
from rich.table import Table

from store_provisioner.app.core.errors import StoreNotFoundError
from store_provisioner.app.core.models import StoreEngine, StoreStatus
from store_provisioner.cli.context import get_cli_context
from store_provisioner.cli.shared import with_error_handling
from store_provisioner.infra.k8s import run_sync

stores_app = typer.Typer(
    name="stores",
    help="🏪 Inspect provisioned stores",
    no_args_is_help=True,
)

STATUS_STYLES = {
    StoreStatus.PENDING: "yellow",
    StoreStatus.PROVISIONING: "cyan",
    StoreStatus.RUNNING: "green",
    StoreStatus.FAILED: "red",
    StoreStatus.DELETING: "magenta",
    StoreStatus.DELETED: "dim",
}


def _status(status: StoreStatus) -> str:
    style = STATUS_STYLES[status]
    return f"[{style}]{status.value}[/{style}]"


@stores_app.command("list")
@with_error_handling
def list_stores(
    ctx: typer.Context,
    status: StoreStatus | None = typer.Option(None, "--status", help="Filter by status"),
    engine: StoreEngine | None = typer.Option(None, "--engine", help="Filter by engine"),
    page: int = typer.Option(1, "--page", min=1),
    limit: int = typer.Option(20, "--limit", min=1, max=100),
) -> None:
    """List stores, newest first."""
    cli = get_cli_context(ctx)
    with cli.services() as deps:
        result = deps.orchestrator.list_stores(
            page=page, limit=limit, status=status, engine=engine
        )

    if not result.stores:
        cli.console.info("No stores found")
        return

    table = Table(title=f"Stores (page {result.page}, {result.total} total)")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Engine")
    table.add_column("Plan")
    table.add_column("Status")
    table.add_column("URL")
    table.add_column("Created")
    for store in result.stores:
        table.add_row(
            store.id,
            store.name,
            store.engine.value,
            store.plan.value,
            _status(store.status),
            store.url or "-",
            store.created_at.strftime("%Y-%m-%d %H:%M"),
        )
    cli.console.print(table)


@stores_app.command("show")
@with_error_handling
def show(
    ctx: typer.Context,
    store_id: str = typer.Argument(..., help="Store ID"),
    release: bool = typer.Option(
        False, "--release", help="Also query the live Helm release status"
    ),
) -> None:
    """Show a store, its job history and optionally its Helm release."""
    cli = get_cli_context(ctx)
    with cli.services() as deps:
        detail = deps.orchestrator.get(store_id)
        if detail is None:
            raise StoreNotFoundError(store_id)
        jobs = deps.orchestrator.jobs(store_id)
        helm_release = (
            run_sync(deps.orchestrator.release_status(detail.store)) if release else None
        )

    store = detail.store
    table = Table(show_header=False, title=f"Store {store.name}")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("ID", store.id)
    table.add_row("Status", _status(store.status))
    table.add_row("Message", store.status_message or "-")
    table.add_row("Engine / plan", f"{store.engine.value} / {store.plan.value}")
    table.add_row("Namespace", store.namespace or "-")
    table.add_row("Storefront", store.url or "-")
    table.add_row("Admin", store.admin_url or "-")
    table.add_row("Admin secret", store.admin_password_secret or "-")
    if release:
        table.add_row(
            "Release",
            f"{helm_release.status} (revision {helm_release.revision})"
            if helm_release
            else "not installed",
        )
    cli.console.print(table)

    history = Table(title="Jobs")
    history.add_column("Type")
    history.add_column("Status")
    history.add_column("Progress", justify="right")
    history.add_column("Step")
    history.add_column("Error", style="red")
    for job in jobs:
        history.add_row(
            job.job_type.value,
            job.status.value,
            f"{job.progress}%",
            job.current_step or "-",
            job.error or "",
        )
    cli.console.print(history)


@stores_app.command("events")
@with_error_handling
def events(
    ctx: typer.Context, store_id: str = typer.Argument(..., help="Store ID")
) -> None:
    """Show the audit trail of a store."""
    cli = get_cli_context(ctx)
    with cli.services() as deps:
        records = deps.orchestrator.events(store_id)

    table = Table(title=f"Events for {store_id}")
    table.add_column("Time", style="dim")
    table.add_column("Event")
    table.add_column("Message")
    for event in records:
        style = "red" if event.event_type.value.endswith("_failed") else "green"
        table.add_row(
            event.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            f"[{style}]{event.event_type.value}[/{style}]",
            event.message,
        )
    cli.console.print(table)
