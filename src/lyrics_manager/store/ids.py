"""Identifier generation for catalog entities."""

import secrets
import threading
import time
from typing import Callable


class IdGenerator:
    """Generates identities of the form <prefix><nanoseconds>_<hex>.

    The timestamp part is strictly increasing per generator: when the clock
    does not advance between calls it is bumped by one nanosecond. The random
    suffix separates identities minted by different processes in the same tick.

    Attributes:
        prefix: String prepended to every identity (e.g., "song_")
    """

    SUFFIX_BYTES = 4

    def __init__(self, prefix: str = "", clock: Callable[[], int] = time.time_ns):
        """Initialize the generator.

        Args:
            prefix: String prepended to every identity
            clock: Source of nanosecond timestamps
        """
        self.prefix = prefix
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def generate(self) -> str:
        """Generate a new identity.

        Returns:
            Unique ID string
        """
        with self._lock:
            stamp = max(self._clock(), self._last + 1)
            self._last = stamp
        return f"{self.prefix}{stamp}_{secrets.token_hex(self.SUFFIX_BYTES)}"
