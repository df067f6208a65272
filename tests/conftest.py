# tests/conftest.py
import base64
import hashlib

import base58
import pytest
from ecdsa import SECP256k1, SigningKey, VerifyingKey
from ecdsa.util import sigencode_string

from starledger.chain.ledger import Ledger
from starledger.crypto.bitcoin import hash160, message_digest

T0 = 1_760_000_000


def _has_ripemd160() -> bool:
    try:
        hashlib.new("ripemd160")
    except ValueError:
        return False
    return True


requires_ripemd160 = pytest.mark.skipif(
    not _has_ripemd160(), reason="hashlib built without RIPEMD-160"
)


class FakeClock:
    def __init__(self, now: int = T0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


class StubVerifier:
    """Accepts exactly the signature `sig:<address>:<message>`."""

    def __init__(self):
        self.calls = []

    def verify(self, message: str, address: str, signature: str) -> bool:
        self.calls.append((message, address, signature))
        return signature == stub_signature(address, message)


def stub_signature(address: str, message: str) -> str:
    return f"sig:{address}:{message}"


def wallet_address(sk: SigningKey, compressed: bool = True, version: int = 0x00) -> str:
    pub = sk.get_verifying_key().to_string("compressed" if compressed else "uncompressed")
    return base58.b58encode_check(bytes([version]) + hash160(pub)).decode("ascii")


def wallet_sign(sk: SigningKey, message: str, compressed: bool = True) -> str:
    """What Electrum / Bitcoin Core produce for `signmessage`."""
    digest = message_digest(message)
    sig = sk.sign_digest_deterministic(digest, hashfunc=hashlib.sha256, sigencode=sigencode_string)
    candidates = VerifyingKey.from_public_key_recovery_with_digest(
        sig, digest, curve=SECP256k1, hashfunc=hashlib.sha256
    )
    own = sk.get_verifying_key().to_string()
    recid = next(i for i, vk in enumerate(candidates) if vk.to_string() == own)
    header = 27 + recid + (4 if compressed else 0)
    return base64.b64encode(bytes([header]) + sig).decode("ascii")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def verifier() -> StubVerifier:
    return StubVerifier()


@pytest.fixture
def ledger(clock: FakeClock, verifier: StubVerifier) -> Ledger:
    return Ledger(clock=clock, verifier=verifier)


@pytest.fixture
def signing_key() -> SigningKey:
    return SigningKey.from_secret_exponent(0xC0FFEE1234, curve=SECP256k1)
