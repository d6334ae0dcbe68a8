"""Operator commands acting on the lifecycle outside the API process.

Commands:
    reconcile     - Fail jobs stuck in pending/running
    driver check  - Verify Helm and the database are usable
"""

import typer
from rich.table import Table

from store_provisioner.app.api.http.schemas.health import OverallStatus, ServiceStatus
from store_provisioner.app.core.provisioning import reconcile_stale_jobs
from store_provisioner.app.core.services.health_service import HealthCheckService
from store_provisioner.cli.context import get_cli_context
from store_provisioner.cli.shared import with_error_handling
from store_provisioner.infra.k8s import run_sync

driver_app = typer.Typer(
    name="driver",
    help="⎈ Infrastructure driver commands",
    no_args_is_help=True,
)


@with_error_handling
def reconcile(
    ctx: typer.Context,
    threshold: int | None = typer.Option(
        None,
        "--threshold",
        "-t",
        min=0,
        help="Seconds without progress before a job is stale "
        "(default: provisioning.stale_job_threshold_seconds)",
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
) -> None:
    """🧹 Fail lifecycle jobs left behind by a stopped process."""
    cli = get_cli_context(ctx)
    with cli.services() as deps:
        seconds = (
            threshold
            if threshold is not None
            else deps.config.provisioning.stale_job_threshold_seconds
        )
        if not cli.console.confirm_action(
            "Mark stale lifecycle jobs as failed",
            f"Jobs without progress for more than {seconds}s and their stores "
            "will be moved to failed.",
            force=yes,
        ):
            raise typer.Exit(1)

        failed = reconcile_stale_jobs(deps.lifecycle_store, seconds)

    if failed:
        cli.console.warn(f"Marked {failed} stale job(s) as failed")
    else:
        cli.console.ok("No stale jobs found")


@driver_app.command("check")
@with_error_handling
def check(ctx: typer.Context) -> None:
    """Check Helm availability and database reachability."""
    cli = get_cli_context(ctx)
    with cli.services() as deps:
        service = HealthCheckService(deps.lifecycle_store, deps.driver, deps.config)
        with cli.console.status("Running readiness checks..."):
            result = run_sync(service.check_all())

    table = Table(title="Readiness")
    table.add_column("Check", style="bold")
    table.add_column("Status")
    table.add_column("Detail")
    for name, check_result in (
        ("database", result.checks.database),
        ("driver", result.checks.driver),
    ):
        healthy = check_result.status == ServiceStatus.HEALTHY.value
        table.add_row(
            name,
            "[green]healthy[/green]" if healthy else "[red]unhealthy[/red]",
            check_result.error or "-",
        )
    cli.console.print(table)

    if result.status != OverallStatus.READY.value:
        cli.console.handle_error("Store provisioner is not ready")
    cli.console.ok("Store provisioner is ready")
