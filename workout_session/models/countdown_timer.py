# countdown_timer.py
"""
One-tick-per-second countdown used for preparation, timed work and rest.
The timer knows nothing about phases: it only reports that an arm cycle expired.
"""

from dataclasses import dataclass, replace
from typing import Optional, Tuple


@dataclass(frozen=True)
class CountdownTimer:
    """
    Immutable countdown value. Every operation returns a new timer.
    `cycle` increases on each arm so ticks scheduled for an older cycle can be recognised and dropped.
    """
    value: int = 0
    active: bool = False
    cycle: int = 0

    def arm(self, duration: int) -> "CountdownTimer":
        """Start a new arm cycle at `duration` seconds"""
        duration = max(0, int(duration))
        return CountdownTimer(value=duration, active=duration > 0, cycle=self.cycle + 1)

    def pause(self) -> "CountdownTimer":
        if not self.active:
            return self
        return replace(self, active=False)

    def resume(self) -> "CountdownTimer":
        if self.active or self.value <= 0:
            return self
        return replace(self, active=True)

    def reset(self, duration: int) -> "CountdownTimer":
        """Pause, then re-arm to a fresh duration"""
        return self.pause().arm(duration)

    def clear(self) -> "CountdownTimer":
        """Stop and zero the timer, invalidating any in-flight tick"""
        return CountdownTimer(value=0, active=False, cycle=self.cycle + 1)

    def tick(self, cycle: Optional[int] = None) -> Tuple["CountdownTimer", bool]:
        """
        Advance one second.
        Returns (timer, expired). Expiry is reported once, on the tick that reaches zero;
        ticks while inactive or addressed to a stale cycle change nothing.
        """
        if not self.active:
            return self, False
        if cycle is not None and cycle != self.cycle:
            return self, False

        remaining = self.value - 1
        if remaining <= 0:
            return replace(self, value=0, active=False), True
        return replace(self, value=remaining), False
