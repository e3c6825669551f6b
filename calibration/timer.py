"""
calibration/timer.py

Clock-driven settle timer.

The timer is polled from the frame loop with the current time; on elapse it
flips its ready flag and stops. It never captures anything itself.
"""

import time
from typing import Callable, Optional

from contracts.validation import validate_finite_scalar, validate_positive

Clock = Callable[[], float]


class SettleTimer:
    """
    One-shot timer measured against an injectable clock.

    Parameters
    ----------
    duration : float
        Settle time in seconds. Zero makes the timer elapse on first poll.
    clock : Callable[[], float]
        Monotonic time source in seconds. Defaults to time.monotonic.
    """

    def __init__(self, duration: float, clock: Clock = time.monotonic) -> None:
        validate_finite_scalar(duration, "duration")
        validate_positive(duration, "duration", allow_zero=True)
        self._duration = float(duration)
        self._clock = clock
        self._started_at: Optional[float] = None
        self._elapsed = False

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def running(self) -> bool:
        """True between start() and elapse/stop."""
        return self._started_at is not None and not self._elapsed

    @property
    def elapsed(self) -> bool:
        """True once the duration has passed since the last start()."""
        return self._elapsed

    def start(self, now: Optional[float] = None) -> None:
        """(Re)start the countdown."""
        self._started_at = self._clock() if now is None else float(now)
        self._elapsed = False

    def stop(self) -> None:
        self._started_at = None
        self._elapsed = False

    def remaining(self, now: Optional[float] = None) -> float:
        """Seconds left; 0.0 when elapsed or not running."""
        if not self.running:
            return 0.0
        now = self._clock() if now is None else now
        return max(0.0, self._started_at + self._duration - now)

    def poll(self, now: Optional[float] = None) -> bool:
        """
        Check the clock and flip to elapsed when the duration has passed.

        Returns
        -------
        bool
            True if the timer has elapsed.
        """
        if self.running:
            now = self._clock() if now is None else now
            if now - self._started_at >= self._duration:
                self._elapsed = True
        return self._elapsed
