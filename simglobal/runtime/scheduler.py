"""
Fixed rate callback scheduling.
"""

import math
import threading
import time
from typing import Callable


class PeriodicTrigger:
    """
    Calls a zero-argument callback at a fixed frequency.

    The callback returns True to keep running and False to stop. Deadlines
    are kept on a monotonic clock, so a slow tick shortens the following
    wait instead of shifting the whole schedule.
    """

    def __init__(self, frequency: float):
        if not math.isfinite(frequency) or frequency <= 0:
            raise ValueError(f"Trigger frequency must be positive, got {frequency}")

        self.frequency = frequency
        self.period = 1.0 / frequency
        self._stop_event = threading.Event()

        # Statistics
        self.tick_count = 0
        self.overrun_count = 0

    @property
    def running(self) -> bool:
        return not self._stop_event.is_set()

    def run(self, callback: Callable[[], bool]):
        """Block, invoking callback every period until it returns False or stop() is called."""
        next_time = time.monotonic()

        while not self._stop_event.is_set():
            if not callback():
                break
            self.tick_count += 1

            next_time += self.period
            delay = next_time - time.monotonic()
            if delay > 0:
                self._stop_event.wait(delay)
            else:
                # Missed the deadline, restart the schedule from now
                self.overrun_count += 1
                next_time = time.monotonic()

    def stop(self):
        """Stop a running trigger from any thread."""
        self._stop_event.set()

    def get_statistics(self) -> dict:
        return {
            'frequency': self.frequency,
            'ticks': self.tick_count,
            'overruns': self.overrun_count
        }
