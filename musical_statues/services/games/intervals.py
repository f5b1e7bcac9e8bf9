import random
from typing import Optional


class IntervalGenerator:
    """Draw phase durations uniformly from an inclusive range of whole seconds.

    The random source is injected so tests can pin the sequence; each
    generator gets its own ``random.Random`` otherwise.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng if rng is not None else random.Random()

    def draw(self, min_seconds: int, max_seconds: int) -> int:
        """Return a duration in milliseconds within ``[min_seconds, max_seconds]``."""
        if min_seconds < 0 or min_seconds > max_seconds:
            raise ValueError(f"invalid interval range {min_seconds}..{max_seconds}")
        return self._rng.randint(min_seconds, max_seconds) * 1000
