import logging
import re
from typing import Optional

from app.core.exceptions import ClientInputError
from app.schemas.deletion import DeletionRecord, DeletionStatusView
from app.services.app_registry import AppRegistry, slugify
from app.services.deletion_store import DeletionRequestStore

logger = logging.getLogger(__name__)

CONFIRMATION_CODE_PATTERN = re.compile(r"^[a-f0-9]{8,64}$", re.IGNORECASE)


class DeletionStatusService:
    """Looks up deletion requests by confirmation code."""

    def __init__(self, store: DeletionRequestStore, registry: AppRegistry):
        self.store = store
        self.registry = registry

    def lookup(self, confirmation_code: Optional[str], app: Optional[str] = None) -> DeletionStatusView:
        """
        Find a deletion request, optionally scoped to an app slug or id.

        Raises:
            ClientInputError: missing_or_invalid_id (400) or not_found (404)
            PersistenceError: If the table could not be queried
        """
        if not confirmation_code or not CONFIRMATION_CODE_PATTERN.match(confirmation_code):
            raise ClientInputError("missing_or_invalid_id")

        code = confirmation_code.lower()
        app_filter = self.registry.resolve_app_param(app)

        record = self.store.find(code, app_filter)
        if record is None:
            logger.info(f"No deletion request for code {code} (app filter {app_filter})")
            raise ClientInputError("not_found", status_code=404, confirmation_code=confirmation_code)

        return DeletionStatusView(
            **record.model_dump(),
            app_slug=self._display_slug(record, app_filter),
        )

    def _display_slug(self, record: DeletionRecord, app_filter: Optional[str]) -> Optional[str]:
        if record.app_id:
            return self.registry.app_slug(record.app_id)
        if app_filter:
            return self.registry.app_slug(app_filter)
        if record.app_name:
            return slugify(record.app_name)
        return None
