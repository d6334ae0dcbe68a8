"""Console output shared by all CLI commands."""

from collections.abc import Callable
from functools import wraps

import typer
from rich.console import Console, ConsoleRenderable
from rich.panel import Panel
from rich.status import Status

from store_provisioner.app.core.errors import ErrorKind, StoreProvisionerError


class CLIConsole:
    """Rich console wrapper for consistent CLI output."""

    def __init__(self) -> None:
        self.console = Console()

    def print(self, msg: ConsoleRenderable | str | None = None) -> None:
        self.console.print(msg)

    def status(self, status: str) -> Status:
        return self.console.status(status)

    def info(self, msg: str) -> None:
        self.console.print(f"[cyan]ℹ[/cyan]  {msg}")

    def ok(self, msg: str) -> None:
        self.console.print(f"[green]✅[/green] {msg}")

    def error(self, msg: str) -> None:
        self.console.print(f"[red]❌[/red] {msg}")

    def warn(self, msg: str) -> None:
        self.console.print(f"[yellow]⚠️[/yellow]  {msg}")

    def confirm_action(
        self, action: str, details: str | None = None, force: bool = False
    ) -> bool:
        """Prompt user to confirm a potentially destructive action.

        Returns:
            True if the user confirmed (or `force` is set), False otherwise
        """
        if force:
            return True

        warning = f"[bold red]⚠️  {action}[/bold red]"
        if details:
            warning += f"\n\n{details}"
        self.console.print(
            Panel(warning, title="Confirmation Required", border_style="red")
        )

        try:
            response = self.console.input(
                "\n[bold]Are you sure you want to proceed?[/bold] \\[y/N]: "
            )
            return response.strip().lower() in ("y", "yes")
        except (KeyboardInterrupt, EOFError):
            self.console.print("\n[dim]Cancelled.[/dim]")
            return False

    def handle_error(
        self, message: str, details: str | None = None, exit_code: int = 1
    ) -> None:
        """Print an error and exit with `exit_code`."""
        self.error(f"[bold red]{message}[/bold red]")
        if details:
            self.console.print(Panel(details, title="Details", border_style="red"))
        raise typer.Exit(exit_code)

    def print_header(self, title: str, style: str = "blue") -> None:
        self.console.print(
            Panel.fit(
                f"[bold {style}]{title}[/bold {style}]",
                border_style=style,
            )
        )


def with_error_handling(func: Callable[..., None]) -> Callable[..., None]:
    """Decorator turning lifecycle and configuration errors into clean exits."""

    @wraps(func)
    def wrapper(*args: object, **kwargs: object) -> None:
        try:
            func(*args, **kwargs)
        except StoreProvisionerError as e:
            console.handle_error(e.message, exit_code=2 if e.kind is ErrorKind.NOT_FOUND else 1)
        except (ValueError, FileNotFoundError) as e:
            console.handle_error("Configuration error", str(e))
        except KeyboardInterrupt:
            console.print("\n[dim]Operation cancelled by user.[/dim]")
            raise typer.Exit(130) from None

    return wrapper


# Shared console instance for consistent output
console = CLIConsole()
