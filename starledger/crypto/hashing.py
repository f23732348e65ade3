import hashlib

from starledger.core.canon import canonical_json


def sha256_hex(data: bytes) -> str:
    """Hex SHA-256 digest."""
    return hashlib.sha256(data).hexdigest()


def block_hash(fields: dict) -> str:
    """SHA-256 over the RFC 8785 canonical JSON of the block fields."""
    return sha256_hex(canonical_json(fields))
