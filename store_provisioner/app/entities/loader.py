"""Dynamic SQLModel table loader for Alembic migrations and create_all.

SQLModel tracks all registered tables in SQLModel.metadata. Models register
themselves when imported, so this loader imports every `table.py` module
under the entities directory.
"""

import importlib
from pathlib import Path

from loguru import logger
from sqlalchemy import MetaData
from sqlmodel import SQLModel


def get_entities_path() -> Path:
    """Get the path to the entities directory."""
    return Path(__file__).parent


def load_all_tables() -> None:
    """Import all table.py modules so their SQLModel tables are registered.

    New entities only need a `<entity>/table.py` file to be picked up.
    """
    entities_path = get_entities_path()

    # e.g. 'store_provisioner.app'
    package_base = __name__.rsplit(".", 2)[0]

    for table_file in sorted(entities_path.rglob("table.py")):
        module_parts = table_file.relative_to(entities_path).with_suffix("").parts
        module_name = f"{package_base}.entities.{'.'.join(module_parts)}"

        try:
            importlib.import_module(module_name)
            logger.debug(f"Imported tables from {module_name}")
        except ImportError as e:
            raise ImportError(
                f"Failed to import table module '{module_name}' from {table_file}: {e}"
            ) from e


def get_metadata() -> MetaData:
    """Load all tables and return SQLModel.metadata.

    This is the entry point for Alembic's env.py.
    """
    load_all_tables()
    return SQLModel.metadata
