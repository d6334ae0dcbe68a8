"""CLI context and dependency container."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

import click
import typer

from store_provisioner.app.api.http.app_data import (
    ApplicationDependencies,
    build_application_dependencies,
)
from store_provisioner.app.runtime.config.config_data import ConfigData
from store_provisioner.app.runtime.config.config_loader import CONFIG_PATH, load_config
from store_provisioner.cli.shared.console import CLIConsole, console


@dataclass(frozen=True)
class CLIContext:
    """Runtime dependencies for CLI commands."""

    console: CLIConsole
    config_path: Path

    def load_config(self) -> ConfigData:
        return load_config(self.config_path)

    @contextmanager
    def services(self) -> Iterator[ApplicationDependencies]:
        """Service graph for one command, disposed when the command ends."""
        deps = build_application_dependencies(self.load_config())
        try:
            yield deps
        finally:
            deps.database_service.dispose()


def build_cli_context(config_path: Path = CONFIG_PATH) -> CLIContext:
    return CLIContext(console=console, config_path=config_path)


def get_cli_context(ctx: typer.Context | None = None) -> CLIContext:
    """Return the CLIContext from Typer, falling back to a new instance."""
    context = ctx or click.get_current_context(silent=True)
    if context:
        root = context.find_root()
        if isinstance(root.obj, CLIContext):
            return root.obj
    return build_cli_context()
