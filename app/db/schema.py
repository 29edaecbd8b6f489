"""
Schema capability detection for the deletion_requests table.

Deployments created before app scoping existed have only the
confirmation_code, user_id and status columns. The optional columns are
detected once and described by an immutable DeletionTableSchema.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

DELETION_TABLE = "deletion_requests"
OPTIONAL_COLUMNS = ("app_id", "app_name", "created_at", "updated_at")


@dataclass(frozen=True)
class DeletionTableSchema:
    has_app_id: bool = True
    has_app_name: bool = True
    has_created_at: bool = True
    has_updated_at: bool = True

    @classmethod
    def from_columns(cls, columns) -> "DeletionTableSchema":
        names = {name.lower() for name in columns}
        return cls(
            has_app_id="app_id" in names,
            has_app_name="app_name" in names,
            has_created_at="created_at" in names,
            has_updated_at="updated_at" in names,
        )

    @property
    def optional_columns(self) -> Tuple[str, ...]:
        """Names of the optional columns present, in a stable order."""
        present = (self.has_app_id, self.has_app_name, self.has_created_at, self.has_updated_at)
        return tuple(name for name, ok in zip(OPTIONAL_COLUMNS, present) if ok)


def probe_deletion_table(engine: Engine) -> DeletionTableSchema:
    """Inspect the live table and report which optional columns exist."""
    inspector = inspect(engine)
    if not inspector.has_table(DELETION_TABLE):
        logger.warning(f"Table {DELETION_TABLE} does not exist; assuming the current schema")
        return DeletionTableSchema()

    schema = DeletionTableSchema.from_columns(
        column["name"] for column in inspector.get_columns(DELETION_TABLE)
    )
    logger.info(f"{DELETION_TABLE} optional columns: {', '.join(schema.optional_columns) or 'none'}")
    return schema
