import threading
from typing import Optional

from sqlmodel import Session, create_engine

from app.core.config import settings
from app.db.schema import DeletionTableSchema, probe_deletion_table

connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
engine = create_engine(settings.database_url, connect_args=connect_args)

_table_schema: Optional[DeletionTableSchema] = None
_table_schema_lock = threading.Lock()


def get_session():
    """Dependency to get database session."""
    with Session(engine) as session:
        yield session


def get_deletion_table_schema() -> DeletionTableSchema:
    """Dependency returning the deletion table layout, probed once per process."""
    global _table_schema
    if _table_schema is None:
        with _table_schema_lock:
            if _table_schema is None:
                _table_schema = probe_deletion_table(engine)
    return _table_schema
