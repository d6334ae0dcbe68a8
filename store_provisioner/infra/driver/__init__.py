"""Infrastructure drivers for applying store releases to the cluster."""

from .base import InfrastructureDriver
from .helm_driver import HelmDriver

__all__ = ["InfrastructureDriver", "HelmDriver"]
