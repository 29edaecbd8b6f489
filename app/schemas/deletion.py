"""
Deletion request schemas for API request/response serialization.
"""

from pydantic import BaseModel, ConfigDict
from typing import Optional


class DeletionRecord(BaseModel):
    """A stored deletion request. Fields missing from the table layout are None."""
    model_config = ConfigDict(frozen=True)

    confirmation_code: str
    user_id: Optional[str] = None
    status: Optional[str] = None
    app_id: Optional[str] = None
    app_name: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class DeletionCallbackResponse(BaseModel):
    """Body returned to the platform after a callback is accepted."""
    url: str
    confirmation_code: str
    app_id: str
    app_slug: str
    app_name: str


class DeletionStatusView(BaseModel):
    """Status of a deletion request as shown to the user or the platform."""
    confirmation_code: str
    user_id: Optional[str] = None
    status: Optional[str] = None
    app_id: Optional[str] = None
    app_name: Optional[str] = None
    app_slug: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_public_dict(self) -> dict:
        """JSON body: slug and timestamps are omitted when unknown."""
        data = self.model_dump()
        for key in ("app_slug", "created_at", "updated_at"):
            if not data[key]:
                data.pop(key)
        return data


class HealthResponse(BaseModel):
    ok: bool
    ts: str
