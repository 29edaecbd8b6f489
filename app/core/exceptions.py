"""
Error taxonomy for the deletion callback service.

Client input problems become 4xx responses with a machine-readable error code,
persistence and configuration problems become 500s with a generic body.
"""

from typing import Any, Dict


class DeletionCallbackError(Exception):
    """Base class for all service errors."""


class ClientInputError(DeletionCallbackError):
    """A request was rejected at one of the validation steps."""

    def __init__(self, error_code: str, status_code: int = 400, **extra: Any):
        super().__init__(error_code)
        self.error_code = error_code
        self.status_code = status_code
        self.extra = extra

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error_code, **self.extra}


class PersistenceError(DeletionCallbackError):
    """The deletion request table could not be written or read."""


class ConfigurationError(DeletionCallbackError):
    """Required configuration is present but unusable."""
