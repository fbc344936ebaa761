"""
Error kinds raised by the tracking core (v1).

All of them derive from CrocBenchmarkError so the episode runner can end a
single episode cleanly without stopping the whole session.
"""
from __future__ import annotations
from typing import Any, Optional


class CrocBenchmarkError(Exception):
    pass


class InvalidLocation(CrocBenchmarkError, IndexError):
    def __init__(self, location: Any, n: Optional[int] = None, what: str = "index"):
        self.location = location
        self.n = n
        if n is None:
            msg = f"invalid waterhole {what}: {location!r}"
        elif what == "id":
            msg = f"invalid waterhole id {location!r} (valid: 1..{n})"
        else:
            msg = f"invalid waterhole index {location!r} (valid: 0..{n - 1})"
        super().__init__(msg)


class InvalidGraph(CrocBenchmarkError, ValueError):
    pass


class NoPathFound(CrocBenchmarkError):
    def __init__(self, start: int, goal: int):
        self.start = int(start)
        self.goal = int(goal)
        super().__init__(f"no path from index {self.start} to index {self.goal} (graph disconnected?)")


class DegenerateBelief(CrocBenchmarkError):
    def __init__(self, turn: Optional[int] = None, total: float = 0.0):
        self.turn = turn
        self.total = float(total)
        where = "" if turn is None else f" at turn {turn}"
        super().__init__(f"belief mass collapsed to {self.total!r}{where}")


class InvalidDistributions(CrocBenchmarkError, ValueError):
    """Per-episode sensor distributions the model cannot use (shape, NaN, size mismatch)."""
    pass
