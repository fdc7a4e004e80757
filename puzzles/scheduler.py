"""Cancellable delayed tasks for a rerun-driven UI.

Streamlit has no event loop timers, so tasks are stored with a deadline and
executed by `run_due()`, which the page calls on every rerun.
"""

from __future__ import annotations

import itertools
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional


@dataclass(order=True)
class ScheduledTask:
    deadline: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)
    done: bool = field(default=False, compare=False)

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.done)

    def cancel(self) -> None:
        self.cancelled = True


class DeadlineScheduler:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._tasks: List[ScheduledTask] = []
        self._seq = itertools.count()

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> ScheduledTask:
        task = ScheduledTask(self._clock() + max(0.0, delay_s), next(self._seq), callback)
        self._tasks.append(task)
        self._tasks.sort()
        return task

    def run_due(self) -> int:
        """Run every pending task whose deadline has passed. Returns how many ran."""
        ran = 0
        now = self._clock()
        while self._tasks and self._tasks[0].deadline <= now:
            task = self._tasks.pop(0)
            if not task.pending:
                continue
            task.done = True
            task.callback()
            ran += 1
        self._tasks = [t for t in self._tasks if t.pending]
        return ran

    def next_delay(self) -> Optional[float]:
        """Seconds until the next pending task, or None."""
        pending = [t for t in self._tasks if t.pending]
        if not pending:
            return None
        return max(0.0, pending[0].deadline - self._clock())

    def cancel_all(self) -> None:
        for task in self._tasks:
            task.cancel()
        self._tasks = []
