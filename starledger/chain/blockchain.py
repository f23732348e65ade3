import logging
import threading
from typing import List, Optional

from starledger.core.block import Block
from starledger.core.clock import Clock, current_time_seconds
from starledger.core.errors import ChainIntegrityError
from starledger.core.types import GENESIS_PAYLOAD, StarClaim
from starledger.verify.verifier import VerificationFailure

logger = logging.getLogger(__name__)


class Blockchain:
    """
    In-memory, append-only chain of hash-linked blocks.

    The genesis block is created on construction. Blocks are only added through
    _add_block, which assigns height, time and linkage, then re-validates the
    whole chain. Nothing is persisted; the chain lives as long as this object.

    Lookups are linear scans over the chain and every append walks the whole
    chain again, so writes cost O(height).
    """

    def __init__(self, clock: Optional[Clock] = None):
        self._chain: List[Block] = []
        self._height = -1
        self._clock = clock or current_time_seconds
        self._lock = threading.RLock()
        self._initialize_chain()

    def _initialize_chain(self) -> None:
        if self._height == -1:
            self._add_block(Block.from_payload(GENESIS_PAYLOAD))

    @property
    def chain(self) -> List[Block]:
        """Shallow copy of the block list."""
        return self._chain.copy()

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def height(self) -> int:
        return self._height

    def get_chain_height(self) -> int:
        return self._height

    def _add_block(self, block: Block) -> Block:
        """
        Finalize block and append it.

        If the re-validation that follows fails, the block stays appended and
        ChainIntegrityError propagates to the caller.
        """
        with self._lock:
            block.height = self._height + 1
            block.time = self._clock()
            latest = self.get_latest_block()
            if latest is not None:
                block.previous_block_hash = latest.hash
            block.recompute_hash()

            # publish only once every field is final
            self._chain.append(block)
            self._height += 1
            logger.debug("Appended block %d (%s)", block.height, block.hash)

            try:
                self.validate_chain()
            except ChainIntegrityError as e:
                logger.error("Chain failed validation after appending block %d:\n%s", block.height, e)
                raise
        return block

    def get_block_by_hash(self, hash: Optional[str]) -> Optional[Block]:
        if hash is None:
            return None
        for block in self._chain.copy():
            if block.hash == hash:
                return block
        return None

    def get_block_by_height(self, height: int) -> Optional[Block]:
        for block in self._chain.copy():
            if block.height == height:
                return block
        return None

    def get_latest_block(self) -> Optional[Block]:
        return self.get_block_by_height(self._height)

    def get_stars_by_wallet_address(self, address: str) -> List[StarClaim]:
        """Star claims owned by address, in chain order. Genesis is skipped."""
        stars = []
        for block in self._chain.copy():
            payload = block.decode_body()
            if isinstance(payload, StarClaim) and payload.owner == address:
                stars.append(payload)
        return stars

    def validate_chain(self) -> None:
        """
        Walk from the latest block back to genesis through previous_block_hash.
        Collect every failure on the way, then raise them all at once.
        """
        with self._lock:
            failures: List[VerificationFailure] = []
            current = self.get_latest_block()
            if current is None:
                failures.append(VerificationFailure(-1, "Latest block not found", "missing"))

            seen = set()
            while current is not None:
                seen.add(id(current))
                if not current.check_integrity():
                    failures.append(VerificationFailure(
                        current.height, f"Block {current.hash} is invalid", "integrity"
                    ))
                if current.previous_block_hash is None:
                    break
                previous = self.get_block_by_hash(current.previous_block_hash)
                if previous is None:
                    failures.append(VerificationFailure(
                        current.height,
                        f"Block {current.hash} links to unknown block {current.previous_block_hash}",
                        "linkage",
                    ))
                elif id(previous) in seen:
                    failures.append(VerificationFailure(
                        current.height, f"Block {current.hash} links back into a cycle", "linkage"
                    ))
                    break
                current = previous

            if failures:
                raise ChainIntegrityError(failures)
