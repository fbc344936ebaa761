"""
Reading emulator (v1) used by the lite backend.

Contract:
  step(true_index) -> {"calcium", "salinity", "alkalinity"}
Each channel is drawn from N(mean_c(true), spread_c(true)) with a seeded RNG,
so an episode is reproducible from its seed.
"""
from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Tuple
import random

from croc_benchmark.sensor.emission import CHANNELS


def _copy_distributions(distributions: Sequence[Sequence[Tuple[float, float]]]) -> List[List[Tuple[float, float]]]:
    if len(distributions) != len(CHANNELS):
        raise ValueError(f"expected {len(CHANNELS)} channel distributions, got {len(distributions)}")
    return [[(float(m), float(s)) for m, s in ch] for ch in distributions]


class ReadingEmulator:
    def __init__(self, distributions: Sequence[Sequence[Tuple[float, float]]], seed: int = 0):
        self.distributions = _copy_distributions(distributions)
        self._rng = random.Random(int(seed) + 999)

    def reset(self, seed: int = 0, distributions: Optional[Sequence[Sequence[Tuple[float, float]]]] = None) -> None:
        """Reseed for a new episode; the backend passes the episode's fresh distributions."""
        if distributions is not None:
            self.distributions = _copy_distributions(distributions)
        self._rng = random.Random(int(seed) + 999)

    def step(self, true_index: int) -> Dict[str, float]:
        out: Dict[str, float] = {}
        for name, ch in zip(CHANNELS, self.distributions):
            mean, spread = ch[int(true_index)]
            out[name] = float(self._rng.gauss(mean, spread)) if spread > 0 else float(mean)
        return out
