import re

import pytest
from unittest.mock import MagicMock, call

from app.core.exceptions import ClientInputError, PersistenceError
from app.schemas.deletion import DeletionRecord
from app.services.app_registry import AppRegistry
from app.services.deletion_service import DeletionCallbackService, generate_confirmation_code
from app.services.deletion_store import DeletionRequestStore
from app.services.signed_request import base64_url_encode, compute_signature
from app.services.status_service import DeletionStatusService

STATUS_URL = "https://example.org/fb_deletion/status"


@pytest.fixture
def mock_store():
    """Provides a mock of the DeletionRequestStore."""
    return MagicMock(spec=DeletionRequestStore)


@pytest.fixture
def callback_service(mock_store, registry):
    return DeletionCallbackService(mock_store, registry)


@pytest.fixture
def status_service(mock_store, registry):
    return DeletionStatusService(mock_store, registry)


def _rejection(service, *args, **kwargs) -> ClientInputError:
    with pytest.raises(ClientInputError) as exc_info:
        service.handle_callback(*args, **kwargs)
    return exc_info.value


def test_generate_confirmation_code():
    codes = {generate_confirmation_code() for _ in range(50)}
    assert len(codes) == 50
    assert all(re.fullmatch(r"[0-9a-f]{16}", code) for code in codes)


def test_handle_callback_success(callback_service, mock_store, sign):
    result = callback_service.handle_callback(sign("123", "u1"), STATUS_URL)

    code = result.confirmation_code
    assert re.fullmatch(r"[0-9a-f]{16}", code)
    assert result.app_id == "123"
    assert result.app_slug == "my-app"
    assert result.app_name == "My App"
    assert result.url == f"{STATUS_URL}?app=my-app&id={code}"

    assert mock_store.mock_calls == [
        call.create(code, "u1", "123", "My App"),
        call.mark_deleted(code),
    ]


def test_numeric_ids_in_payload_are_accepted(callback_service, mock_store, sign):
    result = callback_service.handle_callback(sign(user_id=987, secret="secret-for-app-456", app_id=456), STATUS_URL)
    assert result.app_id == "456"
    mock_store.create.assert_called_once_with(result.confirmation_code, "987", "456", "Other App")


def test_app_name_falls_back_to_slug(mock_store, sign):
    registry = AppRegistry.from_mapping({"123": {"secret": "secret-for-app-123", "slug": "Nice Slug"}})

    result = DeletionCallbackService(mock_store, registry).handle_callback(sign("123"), STATUS_URL)
    assert result.app_name == "Nice Slug"
    assert result.app_slug == "nice-slug"


@pytest.mark.parametrize("signed_request", [None, ""])
def test_missing_signed_request(callback_service, mock_store, signed_request):
    assert _rejection(callback_service, signed_request, STATUS_URL).error_code == "missing_signed_request"
    mock_store.create.assert_not_called()


def test_checks_run_in_order(callback_service, sign):
    """A payload for an unconfigured app is reported as unknown, not as a bad signature."""
    signed = sign("555", secret="whatever")
    error = _rejection(callback_service, signed, STATUS_URL)
    assert error.error_code == "unknown_app"
    assert error.to_dict() == {"error": "unknown_app", "app_id": "555"}


def test_app_mismatch_checked_before_signature(callback_service, sign):
    signed = sign("123", secret="wrong-secret")
    assert _rejection(callback_service, signed, STATUS_URL, requested_app="456").error_code == "app_mismatch"


def test_user_id_checked_after_signature(callback_service, app_secrets):
    encoded_payload = base64_url_encode(b'{"algorithm":"HMAC-SHA256","app_id":"123"}')
    encoded_sig = base64_url_encode(compute_signature(encoded_payload, app_secrets["123"]))

    assert _rejection(callback_service, f"{encoded_sig}.{encoded_payload}", STATUS_URL).error_code == "missing_user_id"
    assert _rejection(callback_service, f"AAAA.{encoded_payload}", STATUS_URL).error_code == "bad_signature"


@pytest.mark.parametrize("user_id", ["", None, True, ["u1"]])
def test_unusable_user_id(callback_service, sign, user_id):
    assert _rejection(callback_service, sign("123", user_id), STATUS_URL).error_code == "missing_user_id"


def test_persistence_error_propagates_without_status_flip(callback_service, mock_store, sign):
    mock_store.create.side_effect = PersistenceError("duplicate")
    with pytest.raises(PersistenceError):
        callback_service.handle_callback(sign("123"), STATUS_URL)
    mock_store.mark_deleted.assert_not_called()


def test_mark_deleted_failure_does_not_fail_callback(callback_service, mock_store, sign):
    mock_store.mark_deleted.return_value = False
    assert callback_service.handle_callback(sign("123"), STATUS_URL).confirmation_code


@pytest.mark.parametrize("code", [None, "", "abc", "xyz12345", "0123456789abcdef0" * 4, "0123-456789"])
def test_lookup_rejects_invalid_codes(status_service, mock_store, code):
    with pytest.raises(ClientInputError) as exc_info:
        status_service.lookup(code)
    assert exc_info.value.error_code == "missing_or_invalid_id"
    mock_store.find.assert_not_called()


def test_lookup_normalizes_code_and_resolves_app(status_service, mock_store):
    mock_store.find.return_value = DeletionRecord(
        confirmation_code="0123456789abcdef", user_id="u1", status="deleted", app_id="123", app_name="My App",
    )
    view = status_service.lookup("0123456789ABCDEF", app="my-app")

    mock_store.find.assert_called_once_with("0123456789abcdef", "123")
    assert view.app_slug == "my-app"
    assert view.status == "deleted"


def test_lookup_not_found(status_service, mock_store):
    mock_store.find.return_value = None
    with pytest.raises(ClientInputError) as exc_info:
        status_service.lookup("0123456789abcdef")
    assert exc_info.value.status_code == 404
    assert exc_info.value.to_dict() == {"error": "not_found", "confirmation_code": "0123456789abcdef"}


@pytest.mark.parametrize("record_fields, app, expected_slug", [
    ({"app_id": "123", "app_name": "Whatever"}, "456", "my-app"),
    ({"app_id": None, "app_name": "Legacy Name"}, "Some App", "some-app"),
    ({"app_id": None, "app_name": "Legacy Name"}, "123", "my-app"),
    ({"app_id": None, "app_name": None}, "my-app", "my-app"),
    ({"app_id": None, "app_name": "Legacy Name"}, None, "legacy-name"),
    ({"app_id": None, "app_name": None}, None, None),
])
def test_display_slug_preference(status_service, mock_store, record_fields, app, expected_slug):
    mock_store.find.return_value = DeletionRecord(confirmation_code="0123456789abcdef", **record_fields)
    assert status_service.lookup("0123456789abcdef", app=app).app_slug == expected_slug
