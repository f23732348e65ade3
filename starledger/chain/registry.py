import logging
from typing import Any, List, Optional

from starledger.chain import challenge
from starledger.chain.blockchain import Blockchain
from starledger.core.block import Block
from starledger.core.clock import Clock
from starledger.core.errors import ExpiredChallengeError, InvalidSignatureError
from starledger.core.types import StarClaim
from starledger.crypto.signatures import BitcoinMessageVerifier, SignatureVerifier

logger = logging.getLogger(__name__)


class StarRegistry:
    """
    Operations a transport layer (HTTP routes, RPC, CLI) exposes over a chain.

    The chain is owned by the caller and injected here; several registries may
    share one chain, and tests build an independent chain per case.
    """

    def __init__(
        self,
        blockchain: Blockchain,
        verifier: Optional[SignatureVerifier] = None,
        clock: Optional[Clock] = None,
        window_seconds: int = challenge.CHALLENGE_WINDOW_SECONDS,
    ):
        self.blockchain = blockchain
        self.verifier = verifier or BitcoinMessageVerifier()
        self.clock = clock or blockchain.clock
        self.window_seconds = window_seconds

    def request_message_ownership_verification(self, address: str) -> str:
        """Message the owner of address must sign before submitting a star."""
        return challenge.issue(address, now=self.clock())

    def submit_star(self, address: str, message: str, signature: str, star: Any) -> Block:
        """
        Admit a star claim signed by address.

        Raises MalformedChallengeError, ExpiredChallengeError,
        InvalidSignatureError or InvalidPayloadError before anything is written.
        """
        issued_time = challenge.parse_time(message)
        now = self.clock()
        if not challenge.is_within_window(issued_time, now=now, window=self.window_seconds):
            logger.info("Rejected star for %s: challenge issued %ds ago", address, now - issued_time)
            raise ExpiredChallengeError(issued_time, now, self.window_seconds)

        if not self.verifier.verify(message, address, signature):
            logger.info("Rejected star for %s: signature does not verify", address)
            raise InvalidSignatureError(address)

        block = Block.from_payload(StarClaim(owner=address, star=star))
        return self.blockchain._add_block(block)

    def get_block_by_hash(self, hash: Optional[str]) -> Optional[Block]:
        return self.blockchain.get_block_by_hash(hash)

    def get_block_by_height(self, height: int) -> Optional[Block]:
        return self.blockchain.get_block_by_height(height)

    def get_stars_by_wallet_address(self, address: str) -> List[StarClaim]:
        return self.blockchain.get_stars_by_wallet_address(address)

    def get_chain_height(self) -> int:
        return self.blockchain.get_chain_height()
