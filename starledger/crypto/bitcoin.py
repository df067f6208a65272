# starledger/crypto/bitcoin.py
"""
Bitcoin signed-message verification (Electrum / Bitcoin Core "signmessage").

Only legacy P2PKH addresses are understood; anything else simply fails to verify.
"""

import base64
import binascii
import hashlib
import logging
from typing import Iterable

import base58
from ecdsa import SECP256k1, VerifyingKey
from ecdsa.util import sigdecode_string

logger = logging.getLogger(__name__)

MESSAGE_MAGIC = b"\x18Bitcoin Signed Message:\n"
P2PKH_VERSIONS = (0x00, 0x6F)       # mainnet, testnet


def _varint(n: int) -> bytes:
    if n < 0xFD:
        return bytes([n])
    if n <= 0xFFFF:
        return b"\xfd" + n.to_bytes(2, "little")
    if n <= 0xFFFFFFFF:
        return b"\xfe" + n.to_bytes(4, "little")
    return b"\xff" + n.to_bytes(8, "little")


def message_digest(message: str) -> bytes:
    """Double SHA-256 of the magic-prefixed, length-prefixed message."""
    raw = message.encode("utf-8")
    data = MESSAGE_MAGIC + _varint(len(raw)) + raw
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def hash160(data: bytes) -> bytes:
    """RIPEMD-160 of SHA-256, as used for P2PKH addresses."""
    return hashlib.new("ripemd160", hashlib.sha256(data).digest()).digest()


class BitcoinMessageVerifier:
    """
    verify(message, address, signature) -> bool

    signature is base64 of 65 bytes: a header byte (27..34, +4 when the
    signing key is compressed) followed by r || s.
    """

    def __init__(self, address_versions: Iterable[int] = P2PKH_VERSIONS):
        self.address_versions = tuple(address_versions)

    def verify(self, message: str, address: str, signature: str) -> bool:
        try:
            sig = base64.b64decode(signature, validate=True)
        except (binascii.Error, ValueError):
            logger.debug("Signature is not valid base64")
            return False
        if len(sig) != 65 or not 27 <= sig[0] <= 34:
            logger.debug("Signature has wrong length or header byte")
            return False
        compressed = sig[0] >= 31

        try:
            decoded = base58.b58decode_check(address)
        except ValueError:
            logger.debug("Address %s is not base58check", address)
            return False
        if len(decoded) != 21 or decoded[0] not in self.address_versions:
            logger.debug("Address %s is not a supported P2PKH address", address)
            return False
        expected = decoded[1:]

        try:
            candidates = VerifyingKey.from_public_key_recovery_with_digest(
                sig[1:],
                message_digest(message),
                curve=SECP256k1,
                hashfunc=hashlib.sha256,
                sigdecode=sigdecode_string,
            )
        except Exception as e:
            logger.debug("Public key recovery failed: %s", e)
            return False

        encoding = "compressed" if compressed else "uncompressed"
        try:
            return any(hash160(vk.to_string(encoding)) == expected for vk in candidates)
        except ValueError as e:
            logger.error("RIPEMD-160 unavailable, cannot check address %s: %s", address, e)
            return False
