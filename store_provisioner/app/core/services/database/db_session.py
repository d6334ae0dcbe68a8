"""Database engine handle and scoped sessions."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import Engine, text
from sqlalchemy.pool import QueuePool, StaticPool
from sqlmodel import Session, create_engine

from store_provisioner.app.runtime.config.config_data import DatabaseConfig


class DbSessionService:
    """Owns the SQLAlchemy engine for the lifetime of the process.

    Created by the application lifespan (or a CLI command) and passed to the
    services that need it; `dispose()` releases the pool on shutdown.

    Example:
        ```python
        db = DbSessionService(config.database)
        with db.session() as session:
            session.exec(select(StoreRecord)).all()
        db.dispose()
        ```
    """

    def __init__(self, config: DatabaseConfig) -> None:
        self._config = config
        self._engine = self._create_engine(config)

    @property
    def engine(self) -> Engine:
        return self._engine

    @staticmethod
    def _create_engine(config: DatabaseConfig) -> Engine:
        url = config.url
        if url.startswith("sqlite"):
            # In-memory SQLite must share a single connection across threads.
            if url in ("sqlite://", "sqlite:///:memory:"):
                return create_engine(
                    url,
                    echo=config.echo,
                    connect_args={"check_same_thread": False},
                    poolclass=StaticPool,
                )
            return create_engine(
                url, echo=config.echo, connect_args={"check_same_thread": False}
            )
        return create_engine(
            url,
            echo=config.echo,
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_pre_ping=True,
        )

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session that commits on success and rolls back on error."""
        session = Session(self._engine, expire_on_commit=False)
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def health_check(self) -> bool:
        """Return True if the database answers `SELECT 1`."""
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning(f"Database health check failed: {e}")
            return False

    def get_pool_status(self) -> dict[str, int | str] | None:
        """Connection pool statistics, when the pool exposes them."""
        pool = self._engine.pool
        if not isinstance(pool, QueuePool):
            return None
        return {
            "size": pool.size(),
            "checked_in": pool.checkedin(),
            "checked_out": pool.checkedout(),
            "overflow": pool.overflow(),
        }

    def dispose(self) -> None:
        self._engine.dispose()
