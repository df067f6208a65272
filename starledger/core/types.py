# starledger/core/types.py
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Union

from starledger.core.encoding import encode_payload, decode_payload
from starledger.core.errors import PayloadError
from starledger.crypto.hashing import block_hash

GENESIS_PREVIOUS_HASH = ""          # genesis has no predecessor
GENESIS_DATA = "Genesis Block"
CHALLENGE_TAG = "starRegistry"
CHALLENGE_WINDOW_SECONDS = 300


@dataclass(frozen=True)
class GenesisMarker:
    """Fixed payload of block 0."""
    data: str = GENESIS_DATA

    def to_dict(self) -> dict:
        return {"data": self.data}


@dataclass(frozen=True)
class StarClaim:
    """Ownership claim: a wallet address plus caller-defined star metadata."""
    owner: str
    star: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"owner": self.owner, "star": self.star}


Payload = Union[GenesisMarker, StarClaim]


def payload_from_dict(d: Any) -> Payload:
    """Map a decoded payload back onto its variant."""
    if not isinstance(d, dict):
        raise PayloadError(f"Payload must be an object, got {type(d).__name__}")
    if set(d) == {"data"} and d["data"] == GENESIS_DATA:
        return GenesisMarker()
    if set(d) == {"owner", "star"} and isinstance(d["owner"], str):
        return StarClaim(owner=d["owner"], star=d["star"])
    raise PayloadError(f"Unrecognised payload keys: {sorted(d)}")


@dataclass(frozen=True)
class Block:
    """
    One record of the chain.

    Created unsealed (height -1, no hash) from a payload, then sealed by the
    Ledger, which assigns height, timestamp, previous_hash and hash.
    """
    body: str                                       # base64url(canonical JSON payload)
    height: int = -1
    timestamp: int = 0                              # unix seconds
    previous_hash: str = GENESIS_PREVIOUS_HASH
    hash: str = ""                                  # hex(sha256), empty until sealed

    @classmethod
    def from_payload(cls, payload: Payload) -> "Block":
        return cls(body=encode_payload(payload.to_dict()))

    @property
    def is_sealed(self) -> bool:
        return bool(self.hash)

    def to_dict(self) -> dict:
        return asdict(self)

    def validate(self) -> bool:
        """True iff the stored hash matches a fresh digest of the other fields."""
        if not self.hash:
            return False
        return block_hash(self) == self.hash

    def get_data(self) -> Payload:
        return payload_from_dict(decode_payload(self.body))


@dataclass(frozen=True)
class ChainError:
    """A single integrity finding produced by chain validation."""
    height: int
    error: str
    block: Block
    category: str = "block"     # "block" (digest), "height" (position) or "link" (previous_hash)

    def to_dict(self) -> dict:
        return {"error": self.error, "block": self.block.to_dict()}
