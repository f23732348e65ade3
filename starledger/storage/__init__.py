"""
Snapshot files for exported chains.

The chain itself is never persisted; these files are audit exports that the
CLI can verify and query offline.
"""

from .jsonl import write_chain, read_chain

__all__ = ["write_chain", "read_chain"]
