from typing import List, Optional
from dataclasses import dataclass

from starledger.core.block import Block
from starledger.core.errors import DecodeError


@dataclass
class VerificationFailure:
    index: int
    message: str
    category: str = "general"  # e.g. "integrity", "linkage", "missing", "height", "genesis", "body"


@dataclass
class VerificationResult:
    is_valid: bool
    message: str = ""
    failures: List[VerificationFailure] = None

    def __post_init__(self):
        if self.failures is None:
            self.failures = []

    @property
    def first_failure(self) -> Optional[VerificationFailure]:
        return self.failures[0] if self.failures else None

    def fail(self, index: int, message: str, category: str) -> None:
        self.failures.append(VerificationFailure(index, message, category))
        self.is_valid = False

    def __bool__(self):
        return self.is_valid

    def __str__(self):
        if self.is_valid:
            return "Chain is valid ✓"
        lines = [f"Verification FAILED ({len(self.failures)} issues):"]
        for f in self.failures:
            lines.append(f"  • [{f.index}] {f.category}: {f.message}")
        return "\n".join(lines)


class ChainVerifier:
    """
    Offline verifier for exported chains.
    Checks blocks by position, so it also catches reordering and gaps that a
    walk over previous_block_hash links cannot see.
    """

    def verify(self, chain: List[Block]) -> VerificationResult:
        if not chain:
            return VerificationResult(False, "Empty chain", [VerificationFailure(-1, "Chain has no genesis block", "genesis")])

        result = VerificationResult(True)

        # 1. Genesis shape
        genesis = chain[0]
        if genesis.previous_block_hash is not None:
            result.fail(0, "Genesis block has a previous_block_hash", "genesis")

        # 2. Heights, hashes, linkage, bodies
        for i, block in enumerate(chain):
            if block.height != i:
                result.fail(i, f"Height mismatch: expected {i}, got {block.height}", "height")
            if not block.check_integrity():
                result.fail(i, f"Block {block.hash} does not match its contents", "integrity")
            if i > 0:
                if block.previous_block_hash != chain[i - 1].hash:
                    result.fail(i, "previous_block_hash does not match previous block hash", "linkage")
                try:
                    block.decode_body()
                except DecodeError as e:
                    result.fail(i, f"Body does not decode: {e}", "body")

        result.message = "Valid chain" if result.is_valid else f"Failed with {len(result.failures)} issues"
        return result
