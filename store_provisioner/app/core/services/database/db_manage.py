"""Schema management for the lifecycle tables."""

from loguru import logger
from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError
from sqlmodel import SQLModel

from store_provisioner.app.core.services.database.db_session import DbSessionService
from store_provisioner.app.entities.loader import get_metadata


class DbManageService:
    def __init__(self, db: DbSessionService) -> None:
        self._engine = db.engine

    def create_all(self) -> None:
        """Create all database tables."""
        get_metadata()  # Ensure all tables are imported and registered

        try:
            SQLModel.metadata.create_all(self._engine)
            logger.info("Database initialized with tables.")
        except (ProgrammingError, IntegrityError, OperationalError) as e:
            # Several workers racing to create the same tables
            error_msg = str(e).lower()
            if "already exists" in error_msg or "duplicate key" in error_msg:
                logger.debug(
                    f"Tables already exist or partially created, skipping: {type(e).__name__}"
                )
            else:
                raise

    def drop_all(self) -> None:
        """Drop all lifecycle tables. Used by tests and local resets."""
        get_metadata()
        SQLModel.metadata.drop_all(self._engine)
        logger.warning("Dropped all lifecycle tables.")
