"""Run epochs for cooperative cancellation.

Starting a run bumps the counter and hands the run a token stamped with the
new generation. Every asynchronous continuation checks its token right before
mutating shared state; a stale token means the run was superseded and the
continuation's effect is dropped. In-flight requests are never aborted.
"""

from dataclasses import dataclass


class EpochCounter:
    """Monotonic counter identifying the current run."""

    def __init__(self):
        self._current = 0

    @property
    def current(self) -> int:
        return self._current

    def advance(self) -> "RunToken":
        """Start a new epoch and return its token."""
        self._current += 1
        return RunToken(generation=self._current, counter=self)

    def invalidate(self) -> None:
        """Supersede the current run without starting a new one."""
        self._current += 1


@dataclass(frozen=True)
class RunToken:
    """Generation-stamped handle passed into every task of a run."""

    generation: int
    counter: EpochCounter

    def is_current(self) -> bool:
        return self.counter.current == self.generation

    def is_stale(self) -> bool:
        return not self.is_current()
