"""Shell command abstractions for Helm operations.

- runner: bounded subprocess execution with structured results
- helm: Helm release management
"""

from .helm import HelmCommands
from .runner import CommandRunner
from .types import CommandResult, HelmRelease

__all__ = [
    "CommandResult",
    "CommandRunner",
    "HelmCommands",
    "HelmRelease",
]
