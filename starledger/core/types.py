from dataclasses import dataclass
from typing import Any, Union

from starledger.core.errors import DecodeError


@dataclass(frozen=True)
class StarClaim:
    """Ownership claim over a star, written by a successful submission."""
    owner: str                      # wallet address that signed the challenge
    star: Any = None                # opaque star record, e.g. {"ra": ..., "dec": ..., "story": ...}

    def to_dict(self) -> dict:
        return {"owner": self.owner, "star": self.star}


@dataclass(frozen=True)
class DataPayload:
    """Free-form payload. The genesis block carries one of these."""
    data: Any = None

    def to_dict(self) -> dict:
        return {"data": self.data}


BlockPayload = Union[StarClaim, DataPayload]

GENESIS_PAYLOAD = DataPayload(data="Genesis Block")


def payload_from_dict(d: Any) -> BlockPayload:
    """Pick the payload variant from the decoded body keys."""
    if not isinstance(d, dict):
        raise DecodeError(f"Block body must decode to an object, got {type(d).__name__}")
    if "owner" in d:
        if not isinstance(d["owner"], str):
            raise DecodeError("Star claim owner must be a string")
        return StarClaim(owner=d["owner"], star=d.get("star"))
    if "data" in d:
        return DataPayload(data=d["data"])
    raise DecodeError(f"Unknown block payload with keys {sorted(d)}")
