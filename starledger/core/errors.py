"""
Error taxonomy for the star ledger.

Submission errors are user-correctable and raised before anything is written.
ChainIntegrityError means the in-memory chain no longer hashes or links
consistently; it carries every failure found, in walk order.
"""

from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from starledger.verify.verifier import VerificationFailure


class StarLedgerError(Exception):
    """Base class for all starledger errors."""


class SubmissionError(StarLedgerError):
    """A star submission was rejected. Nothing was appended."""


class ExpiredChallengeError(SubmissionError):
    def __init__(self, issued_time: int, now: int, window: int):
        self.issued_time = issued_time
        self.now = now
        self.window = window
        super().__init__(
            f"Ownership challenge expired: issued {now - issued_time}s ago, window is {window}s"
        )


class InvalidSignatureError(SubmissionError):
    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Signature does not verify for address {address}")


class MalformedChallengeError(SubmissionError, ValueError):
    """The challenge message does not follow <address>:<time>:starRegistry."""


class ChainIntegrityError(StarLedgerError):
    def __init__(self, failures: "List[VerificationFailure]"):
        self.failures = list(failures)
        lines = [f"Chain integrity check failed ({len(self.failures)} issues):"]
        for f in self.failures:
            lines.append(f"  • [{f.index}] {f.category}: {f.message}")
        super().__init__("\n".join(lines))

    @property
    def errors(self) -> List[str]:
        """Plain fault descriptions, in the order they were found."""
        return [f.message for f in self.failures]


class InvalidPayloadError(SubmissionError, ValueError):
    """The payload cannot be represented as canonical JSON (sets, non-string keys, NaN, ...)."""


class DecodeError(StarLedgerError, ValueError):
    """A stored block body (or exported record) could not be decoded."""
