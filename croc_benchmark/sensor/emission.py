"""
Sensor model (v1): per-episode channel distributions -> emission vector.

Three independent channels (calcium, salinity, alkalinity), each given per
waterhole as (mean, spread). Two scoring modes:

  inverse_deviation (default)
      score(loc) = 1 / sum_c |mean_c(loc) - reading_c| / spread_c(loc)
      The deviation sum is clamped at DEVIATION_FLOOR so an exact match gets
      (almost) all the mass instead of a division by zero.
  gaussian
      product of per-channel normal likelihoods, evaluated in log space.

A reveal bypasses the model entirely: reveal_emission() is one-hot.
"""
from __future__ import annotations
from typing import Optional, Sequence, Tuple
import math

import numpy as np

from croc_benchmark.errors import InvalidDistributions, InvalidLocation


CHANNELS = ("calcium", "salinity", "alkalinity")
EMISSION_MODES = ("inverse_deviation", "gaussian")

DEVIATION_FLOOR = 1e-9
SPREAD_FLOOR = 1e-9

Distribution = Sequence[Tuple[float, float]]


def _as_channel(dist: Distribution, name: str) -> Tuple[np.ndarray, np.ndarray]:
    arr = np.asarray(dist, dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise InvalidDistributions(f"{name} distribution must be a list of (mean, spread) pairs, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise InvalidDistributions(f"{name} distribution contains non-finite values")
    return arr[:, 0], arr[:, 1]


class SensorModel:
    def __init__(
        self,
        calcium: Distribution,
        salinity: Distribution,
        alkalinity: Distribution,
        mode: str = "inverse_deviation",
    ):
        if mode not in EMISSION_MODES:
            raise ValueError(f"Unknown emission mode '{mode}'. Known: {list(EMISSION_MODES)}")
        self.mode = mode
        means, spreads = [], []
        for name, dist in zip(CHANNELS, (calcium, salinity, alkalinity)):
            m, s = _as_channel(dist, name)
            means.append(m)
            spreads.append(s)
        n_set = {m.shape[0] for m in means}
        if len(n_set) != 1:
            raise InvalidDistributions(f"channel distributions disagree on waterhole count: {sorted(n_set)}")

        self.means = np.stack(means, axis=1)  # (N, 3)
        self.spreads = np.maximum(np.stack(spreads, axis=1), SPREAD_FLOOR)
        self.means.flags.writeable = False
        self.spreads.flags.writeable = False

    @property
    def N(self) -> int:
        return int(self.means.shape[0])

    def emission_probabilities(self, reading: Sequence[float]) -> np.ndarray:
        r = np.asarray(reading, dtype=np.float64).reshape(-1)
        if r.shape[0] != len(CHANNELS):
            raise ValueError(f"reading must have {len(CHANNELS)} channels, got {r.shape[0]}")
        if not np.all(np.isfinite(r)):
            print(f"[WARN] non-finite sensor reading {r.tolist()}; using a flat emission")
            return np.full((self.N,), 1.0 / self.N, dtype=np.float64)

        if self.mode == "gaussian":
            return self._gaussian(r)
        return self._inverse_deviation(r)

    def _inverse_deviation(self, r: np.ndarray) -> np.ndarray:
        dev = np.sum(np.abs(self.means - r[None, :]) / self.spreads, axis=1)
        score = 1.0 / np.maximum(dev, DEVIATION_FLOOR)
        return score / float(np.sum(score))

    def _gaussian(self, r: np.ndarray) -> np.ndarray:
        z = (r[None, :] - self.means) / self.spreads
        loglik = np.sum(-0.5 * z * z - np.log(self.spreads), axis=1) - 1.5 * math.log(2.0 * math.pi)
        # stable normalization
        m = float(np.max(loglik))
        w = np.exp(loglik - m)
        return w / float(np.sum(w))

    def expected_reading(self, index: int) -> Tuple[float, float, float]:
        if index < 0 or index >= self.N:
            raise InvalidLocation(index, self.N)
        return tuple(float(x) for x in self.means[index])  # type: ignore[return-value]


def reveal_emission(n: int, index: int) -> np.ndarray:
    """Degenerate emission: 1.0 at the revealed waterhole, 0 elsewhere."""
    n = int(n)
    if index < 0 or index >= n:
        raise InvalidLocation(index, n)
    e = np.zeros((n,), dtype=np.float64)
    e[int(index)] = 1.0
    return e


def make_sensor_model(distributions: Tuple[Distribution, Distribution, Distribution], mode: Optional[str] = None) -> SensorModel:
    if len(distributions) != len(CHANNELS):
        raise InvalidDistributions(f"expected {len(CHANNELS)} channel distributions, got {len(distributions)}")
    calcium, salinity, alkalinity = distributions
    return SensorModel(calcium, salinity, alkalinity, mode=mode or "inverse_deviation")
