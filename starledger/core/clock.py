import time
from typing import Callable

Clock = Callable[[], int]


def current_time_seconds() -> int:
    """Unix time in whole seconds, truncated toward zero."""
    return int(time.time())
