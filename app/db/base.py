from sqlmodel import SQLModel

# Import all models here to ensure they are registered with SQLModel
from app.models.deletion_request import DeletionRequest  # noqa

__all__ = ["SQLModel"]
