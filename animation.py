"""
Animated counters
=================
Each displayed number owns one AnimatedNumber. It is either idle (showing
its target) or animating from the value on screen towards a new target with
a cubic ease-out. A new target always restarts from whatever is currently
displayed, so interrupted animations never jump.
"""

import math
import time


def ease_out_cubic(p):
    return 1 - (1 - p) ** 3


class AnimatedNumber:
    """Interpolates a displayed value towards its target over `duration` seconds."""

    IDLE = 'idle'
    ANIMATING = 'animating'

    def __init__(self, value, duration=0.5, clock=time.monotonic):
        if duration < 0:
            raise ValueError(f"duration must be non-negative, got {duration}")
        self.duration = duration
        self._clock = clock
        self._from = value
        self._to = value
        self._start = None

    @property
    def target(self):
        return self._to

    def state(self, now=None):
        return self.ANIMATING if self.is_animating(now) else self.IDLE

    def is_animating(self, now=None):
        if self._start is None:
            return False
        now = self._clock() if now is None else now
        return now - self._start < self.duration

    def set_target(self, value, now=None):
        """Retarget; returns False when value is already the target."""
        if value == self._to:
            return False
        now = self._clock() if now is None else now
        self._from = self.value_at(now)
        self._to = value
        self._start = now
        return True

    def value_at(self, now=None):
        if self._start is None:
            return self._to
        now = self._clock() if now is None else now
        if self.duration == 0:
            return self._to
        p = min(max((now - self._start) / self.duration, 0.0), 1.0)
        if p >= 1.0:
            # Settled
            self._start = None
            return self._to
        return self._from + (self._to - self._from) * ease_out_cubic(p)

    def display(self, now=None):
        """Current value rounded half up to a whole number."""
        return math.floor(self.value_at(now) + 0.5)
