"""
Belief tracker over waterholes (v1).

Per turn:
  b'[j] = max_i b[i] * T[i, j] * e[j]      (max_product, default)
  b'[j] = sum_i b[i] * T[i, j] * e[j]      (sum_product, forward algorithm)
followed by renormalization.

max_product follows the most probable single trajectory into each waterhole
rather than the marginal mass; sum_product is the textbook filter and is kept
as a switchable variant (tracker.recurrence in the session config).

First update of an episode: b = (1/N) * e, renormalized, or the one-hot reveal
vector when the croc is revealed on turn 0.
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from croc_benchmark.errors import DegenerateBelief, InvalidLocation
from croc_benchmark.sensor.emission import reveal_emission


RECURRENCES = ("max_product", "sum_product")
TOPK_DEFAULT = 5


def _normalize(v: np.ndarray, turn: Optional[int] = None) -> np.ndarray:
    s = float(np.sum(v))
    if s <= 0.0 or not np.isfinite(s):
        raise DegenerateBelief(turn=turn, total=s)
    return v / s


def initial_belief(emission: np.ndarray) -> np.ndarray:
    e = np.asarray(emission, dtype=np.float64)
    return _normalize(e * (1.0 / float(e.size)))


def advance(
    prev: np.ndarray,
    transition: np.ndarray,
    emission: np.ndarray,
    recurrence: str = "max_product",
    turn: Optional[int] = None,
) -> np.ndarray:
    """One prediction + correction step. Raises DegenerateBelief on zero mass."""
    b = np.asarray(prev, dtype=np.float64)
    T = np.asarray(transition, dtype=np.float64)
    e = np.asarray(emission, dtype=np.float64)
    if T.shape != (b.size, b.size) or e.shape != b.shape:
        raise ValueError(f"shape mismatch: belief {b.shape}, transition {T.shape}, emission {e.shape}")

    if recurrence == "max_product":
        pred = np.max(b[:, None] * T, axis=0)
    elif recurrence == "sum_product":
        pred = b @ T
    else:
        raise ValueError(f"Unknown recurrence '{recurrence}'. Known: {list(RECURRENCES)}")
    return _normalize(pred * e, turn=turn)


def entropy(belief: np.ndarray) -> float:
    p = np.asarray(belief, dtype=np.float64)
    return float(-np.sum(p * np.log(p + 1e-12)))


class BeliefTracker:
    def __init__(self, transition: np.ndarray, recurrence: str = "max_product", topk: int = TOPK_DEFAULT):
        if recurrence not in RECURRENCES:
            raise ValueError(f"Unknown recurrence '{recurrence}'. Known: {list(RECURRENCES)}")
        T = np.asarray(transition, dtype=np.float64)
        if T.ndim != 2 or T.shape[0] != T.shape[1]:
            raise ValueError(f"transition matrix must be square, got {T.shape}")
        self.transition = T
        self.recurrence = recurrence
        self._topk = int(topk)
        self.P = np.full((T.shape[0],), 1.0 / T.shape[0], dtype=np.float64)
        self._started = False
        self.degenerate_count = 0

    @property
    def N(self) -> int:
        return int(self.P.size)

    def reset(self) -> None:
        self.P[:] = 1.0 / self.N
        self._started = False
        self.degenerate_count = 0

    def update(self, turn: int, emission: Optional[np.ndarray] = None, revealed: Optional[int] = None) -> Dict[str, Any]:
        """
        Fold one turn of evidence into the belief and return a summary.

        revealed (0-based index) takes precedence over emission.
        """
        if revealed is not None:
            if revealed < 0 or revealed >= self.N:
                raise InvalidLocation(revealed, self.N)
            e = reveal_emission(self.N, revealed)
        elif emission is None:
            raise ValueError("update() needs an emission vector or a revealed index")
        else:
            e = np.asarray(emission, dtype=np.float64)
            if e.shape != (self.N,):
                raise ValueError(f"emission must have shape ({self.N},), got {e.shape}")

        degenerate = False
        try:
            if not self._started:
                self.P = e.copy() if revealed is not None else initial_belief(e)
            else:
                self.P = advance(self.P, self.transition, e, recurrence=self.recurrence, turn=turn)
        except DegenerateBelief as ex:
            degenerate = True
            self.degenerate_count += 1
            if revealed is not None:
                print(f"[WARN] {ex}; collapsing onto revealed waterhole index {revealed}")
                self.P = e.copy()
            else:
                print(f"[WARN] {ex}; resetting belief to uniform")
                self.P = np.full((self.N,), 1.0 / self.N, dtype=np.float64)
        self._started = True

        idx, p = self.map_estimate()
        return {
            "turn": int(turn),
            "map_index": int(idx),
            "map_probability": float(p),
            "entropy": entropy(self.P),
            "revealed": None if revealed is None else int(revealed),
            "degenerate": int(degenerate),
            "topk": self.topk(self._topk),
        }

    def map_estimate(self) -> Tuple[int, float]:
        # np.argmax returns the first maximum, i.e. the lowest index on ties
        idx = int(np.argmax(self.P))
        return idx, float(self.P[idx])

    def topk(self, k: int = TOPK_DEFAULT) -> List[Dict[str, Any]]:
        k = int(k)
        if k <= 0:
            return []
        idx = np.argsort(-self.P, kind="stable")[:k]
        return [{"index": int(i), "p": float(self.P[i])} for i in idx]
