"""
Deletion Callback Service

Handles the platform's data deletion callback: verifies the signed request,
records the deletion request and builds the confirmation the platform shows
to the user. Every check runs before the first write.
"""

import logging
import secrets
from typing import Any, Optional
from urllib.parse import quote, urlencode

from app.core.exceptions import ClientInputError
from app.schemas.deletion import DeletionCallbackResponse
from app.services.app_registry import AppRegistry
from app.services.deletion_store import DeletionRequestStore
from app.services.signed_request import decode_payload, split_signed_request, verify_signature

logger = logging.getLogger(__name__)

CONFIRMATION_CODE_BYTES = 8


def generate_confirmation_code() -> str:
    return secrets.token_hex(CONFIRMATION_CODE_BYTES)


def _payload_str(value: Any) -> Optional[str]:
    """Accept string or integer ids from the payload; anything else counts as missing."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str) and value:
        return value
    return None


def _reject(error_code: str, context_app_id: Optional[str] = None, **extra: Any) -> ClientInputError:
    logger.warning(f"Deletion callback rejected: {error_code} (app_id={context_app_id})")
    return ClientInputError(error_code, **extra)


class DeletionCallbackService:
    """Verifies and records data deletion callbacks."""

    def __init__(self, store: DeletionRequestStore, registry: AppRegistry):
        self.store = store
        self.registry = registry

    def handle_callback(
        self,
        signed_request: Optional[str],
        status_url_base: str,
        requested_app: Optional[str] = None,
    ) -> DeletionCallbackResponse:
        """
        Process one signed deletion callback.

        Args:
            signed_request: The `signed_request` form field
            status_url_base: Absolute URL of the status endpoint, without query
            requested_app: Optional `app` query parameter (slug or app id)

        Raises:
            ClientInputError: At the first failed check
            PersistenceError: If the request could not be recorded
        """
        if not signed_request:
            raise _reject("missing_signed_request")

        encoded_sig, encoded_payload = split_signed_request(signed_request)
        data = decode_payload(encoded_payload)

        app_id = _payload_str(data.get("app_id"))
        if app_id is None:
            raise _reject("missing_app_id")

        # A request signed for one app must not be accepted on another app's endpoint
        requested_app_id = self.registry.resolve_app_param(requested_app)
        if requested_app_id is not None and requested_app_id != app_id:
            raise _reject("app_mismatch", app_id)

        app = self.registry.resolve(app_id)
        if app is None:
            raise _reject("unknown_app", app_id, app_id=app_id)

        if not app.secret:
            raise _reject("missing_app_secret", app_id)

        if not verify_signature(encoded_sig, encoded_payload, app.secret):
            raise _reject("bad_signature", app_id)

        user_id = _payload_str(data.get("user_id"))
        if user_id is None:
            raise _reject("missing_user_id", app_id)

        confirmation_code = generate_confirmation_code()
        app_slug = app.canonical_slug
        app_name = app.display_name

        self.store.create(confirmation_code, user_id, app_id, app_name)
        # No deletion pipeline exists yet, so the request completes immediately
        self.store.mark_deleted(confirmation_code)

        logger.info(f"Deletion request {confirmation_code} recorded for app {app_id}")

        query = urlencode({"app": app_slug, "id": confirmation_code}, quote_via=quote)
        return DeletionCallbackResponse(
            url=f"{status_url_base}?{query}",
            confirmation_code=confirmation_code,
            app_id=app_id,
            app_slug=app_slug,
            app_name=app_name,
        )
