# starledger/chain/ledger.py
import logging
import threading
import time
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Tuple

from starledger.chain.challenge import Challenge, make_challenge, parse_challenge
from starledger.core.errors import (
    ChainCorruption,
    ExpiredChallenge,
    MalformedChallenge,
    NotFound,
    VerificationFailed,
)
from starledger.core.types import (
    Block,
    ChainError,
    GenesisMarker,
    StarClaim,
    CHALLENGE_WINDOW_SECONDS,
    GENESIS_PREVIOUS_HASH,
)
from starledger.crypto.bitcoin import BitcoinMessageVerifier
from starledger.crypto.hashing import block_hash
from starledger.verify.validator import ChainValidator

logger = logging.getLogger(__name__)


def unix_now() -> int:
    return int(time.time())


class Ledger:
    """
    In-memory append-only chain of star ownership claims.

    All mutation goes through append_block under a single writer lock.
    The chain itself is a tuple replaced wholesale on every append, so
    readers always see a complete snapshot without locking.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], int]] = None,
        verifier=None,
        challenge_window: int = CHALLENGE_WINDOW_SECONDS,
    ):
        self._clock = clock or unix_now
        self._verifier = verifier or BitcoinMessageVerifier()
        self._validator = ChainValidator()
        self.challenge_window = challenge_window
        self._chain: Tuple[Block, ...] = ()
        self._write_lock = threading.RLock()
        self.initialize()

    def _now(self) -> int:
        return int(self._clock())

    @property
    def length(self) -> int:
        return len(self._chain)

    def initialize(self) -> None:
        """Seal the genesis block if the chain is empty; no-op otherwise."""
        with self._write_lock:
            if self.current_height() != -1:
                return
            genesis = self.append_block(Block.from_payload(GenesisMarker()))
            logger.info("Genesis block created: %s", genesis.hash)

    def current_height(self) -> int:
        return len(self._chain) - 1

    def append_block(self, block: Block) -> Block:
        """
        Seal `block` on top of the current tip and push it.
        Refuses (ChainCorruption) to build on a chain that already fails validation.
        """
        if block.is_sealed:
            raise ValueError("Cannot append an already-sealed block")

        with self._write_lock:
            chain = self._chain
            height = len(chain) - 1
            previous_hash = GENESIS_PREVIOUS_HASH if height == -1 else chain[-1].hash

            sealed = replace(
                block,
                height=height + 1,
                timestamp=self._now(),
                previous_hash=previous_hash,
                hash="",
            )
            sealed = replace(sealed, hash=block_hash(sealed))

            if chain:
                errors = self._validator.validate(chain)
                if errors:
                    logger.warning("Append refused: chain has %d integrity errors", len(errors))
                    raise ChainCorruption(errors)

            self._chain = chain + (sealed,)

        logger.debug("Appended block %d (%s…)", sealed.height, sealed.hash[:12])
        return sealed

    def request_challenge(self, address: str) -> str:
        """Message the owner of `address` must sign before submitting a star."""
        if not address or ":" in address:
            raise MalformedChallenge(f"Cannot issue a challenge for address {address!r}")
        return make_challenge(address, self._now())

    def _check_window(self, challenge: Challenge) -> None:
        elapsed = challenge.elapsed(self._now())
        if elapsed > self.challenge_window:
            logger.info("Expired challenge from %s (%ds old)", challenge.address, elapsed)
            raise ExpiredChallenge(elapsed, self.challenge_window)

    def submit_block(self, address: str, message: str, signature: str, star: Dict[str, Any]) -> Block:
        """
        Signature-gated append of a star claim.

        Order of checks: message format, time window, address match, signature.
        Nothing is written unless all of them pass.
        """
        try:
            challenge = parse_challenge(message)
        except MalformedChallenge:
            logger.info("Malformed challenge submitted by %s", address)
            raise

        self._check_window(challenge)

        if challenge.address != address:
            logger.info("Challenge for %s submitted by %s", challenge.address, address)
            raise VerificationFailed(address, "challenge was issued for a different address")

        if not self._verifier.verify(message, address, signature):
            logger.info("Signature rejected for %s", address)
            raise VerificationFailed(address)

        # the window is a hard deadline, so a slow verifier cannot stretch it
        self._check_window(challenge)

        claim = Block.from_payload(StarClaim(owner=address, star=star))
        return self.append_block(claim)

    def get_block_by_hash(self, hash_hex: str) -> Block:
        for block in self._chain:
            if block.hash == hash_hex:
                return block
        raise NotFound(f"No block with hash {hash_hex}")

    def get_block_by_height(self, height: int) -> Block:
        for block in self._chain:
            if block.height == height:
                return block
        raise NotFound(f"No block at height {height}")

    def get_stars_by_owner(self, address: str) -> List[StarClaim]:
        """Decoded star claims owned by `address`, in chain order."""
        stars = []
        for block in self._chain:
            data = block.get_data()
            if isinstance(data, StarClaim) and data.owner == address:
                stars.append(data)
        return stars

    def validate_chain(self) -> List[ChainError]:
        """Integrity findings for the whole chain; empty means valid."""
        return self._validator.validate(self._chain)

    def get_chain(self) -> Tuple[Block, ...]:
        """Immutable snapshot of the chain."""
        return self._chain
