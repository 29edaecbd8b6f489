"""
Deletion Request Store

Reads and writes the deletion_requests table. Statements are built from the
probed DeletionTableSchema so the same code runs against deployments with
and without the app scoping and timestamp columns.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import DateTime, String, column, insert, select, table, update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.exceptions import PersistenceError
from app.db.schema import DELETION_TABLE, DeletionTableSchema
from app.models.deletion_request import DeletionStatus
from app.schemas.deletion import DeletionRecord

logger = logging.getLogger(__name__)

_COLUMN_TYPES = {
    "confirmation_code": String,
    "user_id": String,
    "status": String,
    "app_id": String,
    "app_name": String,
    "created_at": DateTime,
    "updated_at": DateTime,
}


def _text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    return str(value)


class DeletionRequestStore:
    """Persistence for deletion requests, tolerant of older table layouts."""

    def __init__(self, db: Session, table_schema: DeletionTableSchema):
        self.db = db
        self.table_schema = table_schema
        column_names = ("confirmation_code", "user_id", "status") + table_schema.optional_columns
        self.table = table(
            DELETION_TABLE,
            *(column(name, _COLUMN_TYPES[name]()) for name in column_names),
        )

    def create(self, confirmation_code: str, user_id: str, app_id: str, app_name: str) -> None:
        """Insert a new queued request. Raises PersistenceError on failure."""
        values: Dict[str, Any] = {
            "confirmation_code": confirmation_code,
            "user_id": user_id,
            "status": DeletionStatus.QUEUED.value,
        }
        now = datetime.utcnow()
        if self.table_schema.has_app_id:
            values["app_id"] = app_id
        if self.table_schema.has_app_name:
            values["app_name"] = app_name
        if self.table_schema.has_created_at:
            values["created_at"] = now
        if self.table_schema.has_updated_at:
            values["updated_at"] = now

        try:
            self.db.exec(insert(self.table).values(**values))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"Insert failed for deletion request {confirmation_code}")
            raise PersistenceError(f"Insert failed: {e}") from e

    def mark_deleted(self, confirmation_code: str) -> bool:
        """
        Flip a request to deleted. Best effort: failures are logged and
        reported through the return value, the created row is kept.
        """
        values: Dict[str, Any] = {"status": DeletionStatus.DELETED.value}
        if self.table_schema.has_updated_at:
            values["updated_at"] = datetime.utcnow()

        statement = (
            update(self.table)
            .where(self.table.c.confirmation_code == confirmation_code)
            .values(**values)
        )
        try:
            self.db.exec(statement)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Could not mark deletion request {confirmation_code} as deleted")
            return False
        return True

    def find(self, confirmation_code: str, app_filter: Optional[str] = None) -> Optional[DeletionRecord]:
        """
        Look up a request by confirmation code.

        The app filter only narrows the match when the table has an app_id
        column. Fields whose column does not exist come back as None.
        """
        statement = select(self.table).where(self.table.c.confirmation_code == confirmation_code)
        if app_filter and self.table_schema.has_app_id:
            statement = statement.where(self.table.c.app_id == app_filter)

        try:
            row = self.db.exec(statement.limit(1)).mappings().first()
        except SQLAlchemyError as e:
            logger.exception(f"Lookup failed for deletion request {confirmation_code}")
            raise PersistenceError(f"Lookup failed: {e}") from e

        if row is None:
            return None

        return DeletionRecord(
            confirmation_code=row["confirmation_code"],
            user_id=_text(row["user_id"]),
            status=_text(row["status"]),
            app_id=_text(row.get("app_id")),
            app_name=_text(row.get("app_name")),
            created_at=_text(row.get("created_at")),
            updated_at=_text(row.get("updated_at")),
        )
