"""
Signed Request Codec

Decodes and verifies the platform's `<signature>.<payload>` signed requests.
Both halves are unpadded URL-safe base64. The signature is an HMAC-SHA256 of
the encoded payload text, keyed by the application's secret.
"""

import base64
import binascii
import hashlib
import hmac
import json
from typing import Any, Dict, Tuple

from app.core.exceptions import ClientInputError

SIGNING_ALGORITHM = "HMAC-SHA256"


def base64_url_decode(data: str) -> bytes:
    """Decode unpadded URL-safe base64. Raises ValueError on malformed input."""
    remainder = len(data) % 4
    if remainder:
        data += "=" * (4 - remainder)
    try:
        return base64.b64decode(data.encode("ascii"), altchars=b"-_", validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise ValueError(f"Malformed base64url data: {e}") from e


def base64_url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def split_signed_request(signed_request: str) -> Tuple[str, str]:
    """Split into (encoded_signature, encoded_payload) on the first dot."""
    encoded_sig, sep, encoded_payload = signed_request.partition(".")
    if not sep or not encoded_sig or not encoded_payload:
        raise ClientInputError("invalid_payload")
    return encoded_sig, encoded_payload


def decode_payload(encoded_payload: str) -> Dict[str, Any]:
    """
    Decode the payload half into a JSON object.

    The payload must be decoded before the signature can be checked, since
    the app id inside it selects the secret. Nothing in the result is
    trusted until verify_signature succeeds.
    """
    try:
        data = json.loads(base64_url_decode(encoded_payload).decode("utf-8"))
    except ValueError:
        # covers base64, UnicodeDecodeError and JSONDecodeError
        raise ClientInputError("invalid_payload")

    if not isinstance(data, dict) or data.get("algorithm") != SIGNING_ALGORITHM:
        raise ClientInputError("invalid_payload")
    return data


def compute_signature(encoded_payload: str, secret: str) -> bytes:
    return hmac.new(
        secret.encode("utf-8"),
        encoded_payload.encode("utf-8"),
        hashlib.sha256,
    ).digest()


def verify_signature(encoded_sig: str, encoded_payload: str, secret: str) -> bool:
    """Constant-time check of the signature half against the encoded payload."""
    try:
        signature = base64_url_decode(encoded_sig)
    except ValueError:
        return False
    return hmac.compare_digest(signature, compute_signature(encoded_payload, secret))


def sign_payload(payload: Dict[str, Any], secret: str) -> str:
    """Produce a signed request the way the platform does."""
    data = dict(payload)
    data.setdefault("algorithm", SIGNING_ALGORITHM)
    encoded_payload = base64_url_encode(json.dumps(data, separators=(",", ":")).encode("utf-8"))
    encoded_sig = base64_url_encode(compute_signature(encoded_payload, secret))
    return f"{encoded_sig}.{encoded_payload}"
