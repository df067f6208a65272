# starledger/chain/challenge.py
from dataclasses import dataclass

from starledger.core.errors import MalformedChallenge
from starledger.core.types import CHALLENGE_TAG


@dataclass(frozen=True)
class Challenge:
    address: str
    issued_at: int      # unix seconds
    tag: str = CHALLENGE_TAG

    def __str__(self) -> str:
        return f"{self.address}:{self.issued_at}:{self.tag}"

    def elapsed(self, now: int) -> int:
        return now - self.issued_at


def make_challenge(address: str, now: int) -> str:
    """The message a wallet owner signs to prove control of `address`."""
    return str(Challenge(address=address, issued_at=now))


def parse_challenge(message: str) -> Challenge:
    """
    Split `address:unixSeconds:starRegistry` back into its parts.
    The issue time embedded here is the only state the handshake keeps.
    """
    parts = message.split(":")
    if len(parts) != 3:
        raise MalformedChallenge(f"Expected 'address:time:{CHALLENGE_TAG}', got {message!r}")
    address, issued, tag = parts
    if not address:
        raise MalformedChallenge("Challenge has an empty address")
    if tag != CHALLENGE_TAG:
        raise MalformedChallenge(f"Unknown challenge tag {tag!r}")
    if not (issued.isascii() and issued.isdigit()):
        raise MalformedChallenge(f"Challenge time {issued!r} is not unix seconds")
    return Challenge(address=address, issued_at=int(issued))
