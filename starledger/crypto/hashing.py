# starledger/crypto/hashing.py
import hashlib

from starledger.core.canon import canonical_json


def block_hash(block) -> str:
    """hex(sha256) over the canonical JSON of every block field except `hash`."""
    fields = {k: v for k, v in block.to_dict().items() if k != "hash"}
    return hashlib.sha256(canonical_json(fields)).hexdigest()
