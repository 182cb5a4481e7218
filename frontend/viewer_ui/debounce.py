import time
from typing import Callable, Optional

DEFAULT_DELAY = 1.0 # seconds


class Debouncer:
    """
    Holds back a changing value until it has stayed the same for `delay` seconds.

    Every change of the raw value restarts the stability window; `poll()` hands
    out each settled value exactly once. Driven by whoever owns the clock (a
    Streamlit rerun loop, a test), so it never sleeps itself.
    """

    def __init__(self, delay: float = DEFAULT_DELAY, clock: Callable[[], float] = time.monotonic):
        self.delay = delay
        self.clock = clock
        self.raw: Optional[str] = None
        self.settled: Optional[str] = None
        self._changed_at: Optional[float] = None

    def push(self, value: str) -> None:
        if value == self.raw:
            return
        self.raw = value
        self._changed_at = self.clock()

    @property
    def pending(self) -> bool:
        return self._changed_at is not None

    def remaining(self) -> Optional[float]:
        """Seconds until the pending value settles, or None when nothing is pending."""
        if self._changed_at is None:
            return None
        return max(0.0, self._changed_at + self.delay - self.clock())

    def poll(self) -> Optional[str]:
        """Returns the raw value once it has been stable for the full delay."""
        if self._changed_at is None or self.clock() - self._changed_at < self.delay:
            return None
        self._changed_at = None
        self.settled = self.raw
        return self.settled
