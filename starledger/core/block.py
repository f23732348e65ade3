from dataclasses import dataclass, asdict
from typing import Any, Optional

from starledger.core.encoding import encode_body, decode_body
from starledger.core.errors import DecodeError
from starledger.core.types import BlockPayload, payload_from_dict
from starledger.crypto.hashing import block_hash


@dataclass
class Block:
    """
    Unit of storage in the star ledger.

    height, time, hash and previous_block_hash are provisional until the
    Blockchain appends the block; callers only choose the payload.
    """
    body: str                                   # hex(canonical JSON of the payload)
    height: int = 0
    time: int = 0                               # unix seconds, set on append
    previous_block_hash: Optional[str] = None   # None only for genesis
    hash: Optional[str] = None                  # None until first computed

    @classmethod
    def from_payload(cls, payload: BlockPayload) -> "Block":
        return cls(body=encode_body(payload.to_dict()))

    def hashable_fields(self) -> dict:
        """Everything that goes into the digest. Never includes hash itself."""
        return {
            "height": self.height,
            "body": self.body,
            "time": self.time,
            "previous_block_hash": self.previous_block_hash,
        }

    def calculate_hash(self) -> str:
        return block_hash(self.hashable_fields())

    def recompute_hash(self) -> str:
        """Assign and return the digest of the current fields."""
        self.hash = self.calculate_hash()
        return self.hash

    def check_integrity(self) -> bool:
        """True if the stored hash matches the current fields. Does not mutate."""
        return self.hash is not None and self.hash == self.calculate_hash()

    def validate(self) -> bool:
        """
        Compare the stored hash with a freshly computed one.

        The fresh hash replaces the stored one even when they differ, so a
        second call on a tampered block returns True. Use check_integrity()
        for detection without repair.
        """
        current = self.hash
        self.recompute_hash()
        return current == self.hash

    def decode_body(self) -> Optional[BlockPayload]:
        """Decoded payload, or None for the genesis block."""
        if self.height == 0:
            return None
        return payload_from_dict(decode_body(self.body))

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Any) -> "Block":
        if not isinstance(d, dict):
            raise DecodeError(f"Block record must be an object, got {type(d).__name__}")
        try:
            block = cls(
                body=d["body"],
                height=d["height"],
                time=d["time"],
                previous_block_hash=d.get("previous_block_hash"),
                hash=d.get("hash"),
            )
        except KeyError as e:
            raise DecodeError(f"Block record is missing field {e}") from e
        if not isinstance(block.body, str) or not isinstance(block.height, int) or not isinstance(block.time, int):
            raise DecodeError("Block record has fields of the wrong type")
        return block
