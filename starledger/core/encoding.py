# starledger/core/encoding.py
import base64
import binascii
import json
from typing import Any

from starledger.core.canon import canonical_json
from starledger.core.errors import PayloadError


def b64url_encode(data: bytes) -> str:
    """Encode bytes to base64url (no padding, URL-safe)."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(s: str) -> bytes:
    """Decode base64url string back to bytes."""
    # Restore padding
    padding = len(s) % 4
    if padding:
        s += "=" * (4 - padding)
    return base64.urlsafe_b64decode(s)


MAX_SAFE_INTEGER = 2**53 - 1       # largest integer an IEEE double holds exactly


def _check_integers(obj: Any) -> None:
    if isinstance(obj, bool):
        return
    if isinstance(obj, int):
        if abs(obj) > MAX_SAFE_INTEGER:
            raise PayloadError(f"Integer {obj} cannot be stored exactly (limit is ±{MAX_SAFE_INTEGER})")
    elif isinstance(obj, dict):
        for value in obj.values():
            _check_integers(value)
    elif isinstance(obj, (list, tuple)):
        for value in obj:
            _check_integers(value)


def encode_payload(payload: Any) -> str:
    """
    Canonical JSON of the payload, wrapped in base64url for storage in a block body.

    Numbers are written as RFC 8785 doubles, so integers beyond ±(2**53 - 1)
    are refused with PayloadError. Round trips are exact at the JSON level:
    a float with no fraction (1.0) comes back as an int (1), and tuples come
    back as lists.
    """
    _check_integers(payload)
    return b64url_encode(canonical_json(payload))


def decode_payload(body: str) -> Any:
    """Inverse of encode_payload. Raises PayloadError on anything unreadable."""
    try:
        raw = b64url_decode(body)
        return json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise PayloadError(f"Block body is not a valid encoded payload: {e}") from e
