# starledger/verify/validator.py
from dataclasses import dataclass, field
from typing import List, Sequence

from starledger.core.types import Block, ChainError, GENESIS_PREVIOUS_HASH


@dataclass
class ValidationReport:
    failures: List[ChainError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.failures

    @property
    def first_failure(self):
        return self.failures[0] if self.failures else None

    def __bool__(self):
        return self.is_valid

    def __str__(self):
        if self.is_valid:
            return "Chain is valid ✓"
        lines = [f"Validation FAILED ({len(self.failures)} issues):"]
        for f in self.failures:
            lines.append(f"  • [{f.height}] {f.category}: {f.error}")
        return "\n".join(lines)


class ChainValidator:
    """
    Walks a chain and reports tamper evidence as data.

    Per block: its own digest, its height against its position, and (past
    genesis) that it points at the hash actually stored one position earlier.
    """

    def validate(self, chain: Sequence[Block]) -> List[ChainError]:
        errors: List[ChainError] = []
        for i, block in enumerate(chain):
            if not block.validate():
                errors.append(ChainError(block.height, f"block {block.height} failed validation", block, "block"))

            if block.height != i:
                errors.append(ChainError(block.height, f"block at position {i} claims height {block.height}", block, "height"))

            if i == 0:
                if block.previous_hash != GENESIS_PREVIOUS_HASH:
                    errors.append(ChainError(block.height, "genesis block links to a predecessor", block, "link"))
                continue

            if block.previous_hash != chain[i - 1].hash:
                errors.append(ChainError(block.height, f"previous block {i - 1} has been tampered", block, "link"))
        return errors

    def report(self, chain: Sequence[Block]) -> ValidationReport:
        return ValidationReport(self.validate(chain))


def validate_chain(chain: Sequence[Block]) -> List[ChainError]:
    return ChainValidator().validate(chain)
