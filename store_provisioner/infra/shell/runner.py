"""Command runner for executing shell commands.

This module provides the base command execution used by the Helm
command module. Every call is bounded by a timeout so a hung tool can
never stall a provisioning task forever.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path

from loguru import logger

from .types import CommandResult


class CommandRunner:
    """Low-level command executor with consistent result handling.

    Non-zero exits, missing binaries and timeouts are all reported through
    `CommandResult` rather than raised, so callers decide the failure policy.
    """

    def __init__(self, working_dir: Path | None = None) -> None:
        """Initialize the command runner.

        Args:
            working_dir: Directory commands are executed from (defaults to the
                current working directory)
        """
        self.working_dir = working_dir

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        """Execute a shell command and return structured result.

        Args:
            cmd: Command and arguments as a sequence
            cwd: Working directory (defaults to working_dir)
            timeout: Hard limit in seconds for the whole process

        Returns:
            CommandResult with success status, output, and return code
        """
        argv = list(cmd)
        logger.debug(f"Running command: {' '.join(argv)}")
        try:
            result = subprocess.run(
                argv,
                cwd=cwd or self.working_dir,
                capture_output=True,
                text=True,
                check=False,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            return CommandResult(
                success=False,
                stdout=_decode(e.stdout),
                stderr=f"Command timed out after {timeout}s: {argv[0]}",
                returncode=-1,
            )
        except FileNotFoundError:
            return CommandResult(
                success=False,
                stderr=f"Executable not found: {argv[0]}",
                returncode=127,
            )

        return CommandResult(
            success=result.returncode == 0,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            returncode=result.returncode,
        )


def _decode(output: str | bytes | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode(errors="replace")
    return output
