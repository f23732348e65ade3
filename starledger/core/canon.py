import json
from typing import Any

import jcs


def canonical_json(obj: Any) -> bytes:
    """
    Produce deterministic UTF-8 bytes according to RFC 8785 (JSON Canonicalization Scheme).
    Used for block hashing and for the stored block body.
    """
    return jcs.canonicalize(obj)


def compact_json(obj: Any) -> str:
    """Compact, non-canonical JSON for export lines."""
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)
