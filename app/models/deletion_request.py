from sqlmodel import SQLModel, Field
from datetime import datetime
from enum import Enum
from typing import Optional


class DeletionStatus(str, Enum):
    """Lifecycle of a data deletion request."""
    QUEUED = "queued"
    DELETED = "deleted"


class DeletionRequest(SQLModel, table=True):
    """
    Deletion request table model.

    This is the current schema. Older deployments lack app_id, app_name,
    created_at and updated_at; the store probes for them instead of relying
    on this model for reads and writes.
    """
    __tablename__ = "deletion_requests"

    id: Optional[int] = Field(default=None, primary_key=True)
    confirmation_code: str = Field(unique=True, index=True, max_length=64)
    user_id: str = Field(max_length=255)
    app_id: Optional[str] = Field(default=None, index=True, max_length=255)
    app_name: Optional[str] = Field(default=None, max_length=255)
    status: str = Field(default=DeletionStatus.QUEUED.value, max_length=32)
    created_at: Optional[datetime] = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = Field(default=None)
