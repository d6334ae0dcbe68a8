"""CLI command modules.

Command Groups:
- db: Database schema management
- stores: Read-only store inspection
- driver: Infrastructure driver checks

Top-level commands:
- serve: Run the HTTP API
- reconcile: Fail stale lifecycle jobs
"""

from .db import db_app
from .operations import driver_app, reconcile
from .server import serve
from .stores import stores_app

__all__ = [
    "db_app",
    "driver_app",
    "reconcile",
    "serve",
    "stores_app",
]
