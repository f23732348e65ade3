"""
starledger — an in-memory, hash-linked star registry.
Ownership claims are admitted only after a signed challenge proves control of a
Bitcoin address (address-recoverable message signatures).
"""

__version__ = "0.1.0-dev"

from starledger.core.block import Block
from starledger.core.types import StarClaim, DataPayload
from starledger.core.errors import (
    StarLedgerError,
    SubmissionError,
    ExpiredChallengeError,
    InvalidSignatureError,
    MalformedChallengeError,
    InvalidPayloadError,
    ChainIntegrityError,
    DecodeError,
)
from starledger.chain.blockchain import Blockchain
from starledger.chain.registry import StarRegistry
from starledger.crypto.signatures import BitcoinMessageVerifier, WalletKey
from starledger.verify.verifier import ChainVerifier

__all__ = [
    "Block",
    "StarClaim",
    "DataPayload",
    "StarLedgerError",
    "SubmissionError",
    "ExpiredChallengeError",
    "InvalidSignatureError",
    "MalformedChallengeError",
    "InvalidPayloadError",
    "ChainIntegrityError",
    "DecodeError",
    "Blockchain",
    "StarRegistry",
    "BitcoinMessageVerifier",
    "WalletKey",
    "ChainVerifier",
]
