# starledger/core/canon.py
from typing import Any

import jcs

from starledger.core.errors import PayloadError


def canonical_json(obj: Any) -> bytes:
    """
    Produce deterministic UTF-8 bytes according to RFC 8785 (JSON Canonicalization Scheme).
    Returns bytes ready for hashing.
    """
    try:
        return jcs.canonicalize(obj)
    except (TypeError, ValueError, AttributeError, OverflowError) as e:
        raise PayloadError(f"Value is not canonicalizable JSON: {e}") from e
