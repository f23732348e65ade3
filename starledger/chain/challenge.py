"""
Ownership challenge messages: "<address>:<unix seconds>:starRegistry".

A caller signs the message with the key behind <address>; the signed message
is accepted for a star submission only within the challenge window.
"""

from dataclasses import dataclass
from typing import Optional

from starledger.core.clock import current_time_seconds
from starledger.core.errors import MalformedChallengeError

MESSAGE_TAG = "starRegistry"
CHALLENGE_WINDOW_SECONDS = 300


@dataclass(frozen=True)
class OwnershipChallenge:
    address: str
    time: int

    def __str__(self) -> str:
        return f"{self.address}:{self.time}:{MESSAGE_TAG}"

    @classmethod
    def parse(cls, message: str) -> "OwnershipChallenge":
        """
        Split on the last two colons. The trailing tag is positional only and
        is not checked, neither is the address format.
        """
        parts = message.rsplit(":", 2)
        if len(parts) != 3:
            raise MalformedChallengeError(
                f"Challenge must look like <address>:<time>:{MESSAGE_TAG}, got {message!r}"
            )
        address, raw_time, _tag = parts
        if not (raw_time.isascii() and raw_time.isdigit()):
            raise MalformedChallengeError(f"Challenge time is not a decimal integer: {raw_time!r}")
        return cls(address=address, time=int(raw_time))


def issue(address: str, now: Optional[int] = None) -> str:
    issued = current_time_seconds() if now is None else now
    return str(OwnershipChallenge(address, issued))


def parse_time(message: str) -> int:
    return OwnershipChallenge.parse(message).time


def is_within_window(
    issued_time: int,
    now: Optional[int] = None,
    window: int = CHALLENGE_WINDOW_SECONDS,
) -> bool:
    """Exactly `window` seconds old is still valid; one second more is not."""
    if now is None:
        now = current_time_seconds()
    return now - issued_time <= window
