# starledger/core/errors.py
"""
Exceptions raised by the ledger.

Timing and signature failures are expected, caller-recoverable outcomes.
Chain corruption is surfaced, never repaired.
"""

from typing import List


class LedgerError(Exception):
    """Base for everything the ledger raises on purpose."""


class MalformedChallenge(LedgerError, ValueError):
    """Challenge message is not `address:unixSeconds:starRegistry`."""


class ExpiredChallenge(LedgerError):
    def __init__(self, elapsed: int, window: int):
        super().__init__(f"Challenge expired: {elapsed}s elapsed, window is {window}s")
        self.elapsed = elapsed
        self.window = window


class VerificationFailed(LedgerError):
    def __init__(self, address: str, reason: str = "signature does not verify"):
        super().__init__(f"Verification failed for {address}: {reason}")
        self.address = address
        self.reason = reason


class NotFound(LedgerError, LookupError):
    """No block matches the requested hash or height."""


class ChainCorruption(LedgerError):
    def __init__(self, errors: List):
        super().__init__(f"Refusing to extend a corrupted chain ({len(errors)} issues)")
        self.errors = errors


class PayloadError(LedgerError, ValueError):
    """Payload could not be encoded or decoded."""
