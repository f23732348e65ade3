import json
from typing import Any

from starledger.core.canon import canonical_json
from starledger.core.errors import DecodeError, InvalidPayloadError


def hex_encode(data: bytes) -> str:
    """Encode bytes to lowercase hex."""
    return data.hex()


def hex_decode(s: str) -> bytes:
    """Decode a hex string back to bytes."""
    try:
        return bytes.fromhex(s)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"Body is not valid hex: {e}") from e


def encode_body(obj: Any) -> str:
    """Canonical JSON of obj, hex encoded. Reversible with decode_body."""
    try:
        canon = canonical_json(obj)
    except (TypeError, ValueError, AttributeError) as e:
        # jcs raises AttributeError for non-string object keys
        raise InvalidPayloadError(f"Payload is not JSON-representable: {e}") from e
    return hex_encode(canon)


def decode_body(body: str) -> Any:
    raw = hex_decode(body)
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DecodeError(f"Body does not hold valid JSON: {e}") from e
