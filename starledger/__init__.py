# starledger/__init__.py
"""
StarLedger: a minimal append-only, hash-chained ledger of star ownership claims.
Claims are gated by a Bitcoin signed-message challenge with a 5 minute window.
"""

from starledger.chain.ledger import Ledger
from starledger.core.types import Block, GenesisMarker, StarClaim, ChainError

__version__ = "0.1.0-dev"

__all__ = ["Ledger", "Block", "GenesisMarker", "StarClaim", "ChainError"]
