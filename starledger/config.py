"""
Settings resolved in this order: explicit argument, environment, default.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from starledger.chain.challenge import CHALLENGE_WINDOW_SECONDS

DEFAULT_SNAPSHOT_NAME = "starledger-chain.jsonl"


def _env_bool(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    challenge_window: int = CHALLENGE_WINDOW_SECONDS
    snapshot_path: Path = Path(DEFAULT_SNAPSHOT_NAME)
    testnet: bool = False
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Settings":
        raw_window = os.environ.get("STARLEDGER_CHALLENGE_WINDOW")
        try:
            window = int(raw_window) if raw_window else CHALLENGE_WINDOW_SECONDS
        except ValueError:
            raise ValueError(f"STARLEDGER_CHALLENGE_WINDOW must be an integer, got {raw_window!r}") from None
        if window < 0:
            raise ValueError("STARLEDGER_CHALLENGE_WINDOW must not be negative")

        return cls(
            challenge_window=window,
            snapshot_path=get_snapshot_path(),
            testnet=_env_bool("STARLEDGER_TESTNET"),
            log_level=os.environ.get("STARLEDGER_LOG_LEVEL", "WARNING").upper(),
        )


def get_snapshot_path(path_flag: Optional[Path] = None) -> Path:
    """Resolve the snapshot file:
    1. explicit path (CLI argument / --output)
    2. STARLEDGER_SNAPSHOT_PATH environment variable
    3. Default: ./starledger-chain.jsonl
    """
    if path_flag:
        return path_flag.resolve()
    env_path = os.environ.get("STARLEDGER_SNAPSHOT_PATH")
    if env_path:
        return Path(env_path).resolve()
    return (Path.cwd() / DEFAULT_SNAPSHOT_NAME).resolve()
