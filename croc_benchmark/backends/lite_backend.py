"""
Lite backend (v1): in-process croc game for tests and offline runs.

Rules:
  - static waterhole graph from scenarios.waterholes (or sim_params["paths"]);
    a generated graph must be connected, a supplied disconnected one only warns
  - episodes replaced by start_episode() before they end are tallied as unfinished
  - per episode: channel means/spreads drawn uniformly from sim_params["sensor"] ranges
  - croc moves to a uniform random neighbor after every submit_moves()
  - two backpackers wander the same way; one standing on the croc's waterhole
    reports -location for that turn and 0 (eaten) afterwards
  - a move must target a neighbor of (or stay on) the player's waterhole
  - "S" ends the episode when the player stands on the croc
  - one point lost per turn; max_turns ends the episode unfound
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple
import random

from .base_backend import Backend, SEARCH_MOVE
from croc_benchmark.errors import InvalidGraph
from croc_benchmark.graph.planner import graph_distances
from croc_benchmark.graph.waterholes import WaterholeGraph
from croc_benchmark.scenarios.waterholes import make_waterhole_graph, N_WATERHOLES_DEFAULT
from croc_benchmark.sensor.emulator import ReadingEmulator


SENSOR_DEFAULTS = {
    "mean_range": [[50.0, 250.0], [50.0, 250.0], [50.0, 250.0]],
    "spread_range": [[5.0, 40.0], [5.0, 40.0], [5.0, 40.0]],
}


class LiteBackend(Backend):
    def init(self, sim_params: Dict[str, Any]) -> None:
        self.sim_params = sim_params
        paths = sim_params.get("paths", None)
        generated = paths is None
        if generated:
            paths = make_waterhole_graph(
                seed=int(sim_params.get("graph_seed", 0)),
                n=int(sim_params.get("n_waterholes", N_WATERHOLES_DEFAULT)),
                extra_edges=int(sim_params.get("extra_edges", 18)),
            )
        self._paths: List[List[int]] = [[int(j) for j in nbrs] for nbrs in paths]
        self._check_connected(generated)
        self._adj: List[List[int]] = [[j - 1 for j in nbrs] for nbrs in self._paths]
        self._n = len(self._paths)
        self._max_turns = int(sim_params.get("max_turns", 200))

        sensor = dict(SENSOR_DEFAULTS)
        sensor.update(sim_params.get("sensor", {}) or {})
        self._mean_range = [tuple(float(x) for x in r) for r in sensor["mean_range"]]
        self._spread_range = [tuple(float(x) for x in r) for r in sensor["spread_range"]]

        self._rng = random.Random(0)
        self._dists: Tuple[List[Tuple[float, float]], ...] = ([], [], [])
        self._emulator: Optional[ReadingEmulator] = None
        self._player = 0
        self._croc = 0
        self._bp_pos = [0, 0]
        self._bp_state = ["alive", "alive"]  # alive | eating | eaten
        self._reading: Dict[str, float] = {}
        self._turn = 0
        self._score = 0
        self._found = False
        self._over = True
        self._results: List[Dict[str, Any]] = []

    # ----- collaborator API -----
    def get_graph(self) -> List[List[int]]:
        return [list(nbrs) for nbrs in self._paths]

    def start_episode(self, seed: int) -> None:
        if not self._over:
            # replaced before it ended (the caller gave up on it)
            self._finish()
        self._rng = random.Random(int(seed))
        dists = []
        for (m_lo, m_hi), (s_lo, s_hi) in zip(self._mean_range, self._spread_range):
            dists.append([(self._rng.uniform(m_lo, m_hi), self._rng.uniform(s_lo, s_hi)) for _ in range(self._n)])
        self._dists = tuple(dists)
        if self._emulator is None:
            self._emulator = ReadingEmulator(self._dists, seed=int(seed))
        else:
            self._emulator.reset(seed=int(seed), distributions=self._dists)

        self._player = self._rng.randrange(self._n)
        self._croc = self._rng.randrange(self._n)
        while self._croc == self._player and self._n > 1:
            self._croc = self._rng.randrange(self._n)
        self._bp_pos = [self._rng.randrange(self._n), self._rng.randrange(self._n)]
        self._bp_state = ["alive", "alive"]
        self._turn = 0
        self._score = 0
        self._found = False
        self._over = False
        self._begin_turn()

    def get_distributions(self) -> Tuple[List[Tuple[float, float]], ...]:
        return tuple(list(ch) for ch in self._dists)

    def get_snapshot(self) -> Dict[str, Any]:
        return {
            "score": int(self._score),
            "player_location": self._player + 1,
            "backpacker1": self._bp_status(0),
            "backpacker2": self._bp_status(1),
            "calcium": float(self._reading.get("calcium", 0.0)),
            "salinity": float(self._reading.get("salinity", 0.0)),
            "alkalinity": float(self._reading.get("alkalinity", 0.0)),
        }

    def submit_moves(self, move1: str, move2: str) -> Tuple[bool, int]:
        if self._over:
            raise RuntimeError("submit_moves() called on a finished episode; call start_episode() first")

        for move in (move1, move2):
            if str(move) == SEARCH_MOVE:
                if self._player == self._croc:
                    self._found = True
                    self._over = True
                    self._finish()
                    return False, int(self._score)
                continue
            dest = int(move) - 1
            if dest != self._player and dest not in self._adj[self._player]:
                raise ValueError(f"illegal move {move!r} from waterhole {self._player + 1}")
            self._player = dest

        self._croc = self._rng.choice(self._adj[self._croc])
        for k in range(2):
            if self._bp_state[k] == "alive":
                self._bp_pos[k] = self._rng.choice(self._adj[self._bp_pos[k]])
        self._turn += 1
        self._score -= 1

        if self._turn >= self._max_turns:
            self._over = True
            self._finish()
            return False, int(self._score)

        self._begin_turn()
        return True, int(self._score)

    def episode_outcome(self) -> Dict[str, Any]:
        return {"found": bool(self._found), "turns": int(self._turn), "score": int(self._score), "over": bool(self._over)}

    def report_results(self) -> Dict[str, Any]:
        n = len(self._results)
        found = sum(1 for r in self._results if r["found"])
        unfinished = sum(1 for r in self._results if not r["over"])
        turns = [r["turns"] for r in self._results if r["found"]]
        out = {
            "episodes": n,
            "found": found,
            "unfinished": unfinished,
            "mean_turns_found": (float(sum(turns)) / len(turns)) if turns else float("nan"),
        }
        print(f"[INFO] lite backend results: {out}")
        return out

    def close(self) -> None:
        self._emulator = None

    # ----- internals -----
    def _begin_turn(self) -> None:
        for k in range(2):
            if self._bp_state[k] == "eating":
                self._bp_state[k] = "eaten"
            elif self._bp_state[k] == "alive" and self._bp_pos[k] == self._croc:
                self._bp_state[k] = "eating"
        assert self._emulator is not None
        self._reading = self._emulator.step(self._croc)

    def _bp_status(self, k: int) -> int:
        state = self._bp_state[k]
        if state == "eaten":
            return 0
        if state == "eating":
            return -(self._bp_pos[k] + 1)
        return self._bp_pos[k] + 1

    def _finish(self) -> None:
        self._results.append(self.episode_outcome())

    def _check_connected(self, generated: bool) -> None:
        graph = WaterholeGraph.from_paths(self._paths)
        unreachable = [i + 1 for i, d in enumerate(graph_distances(graph, 0)) if d < 0]
        if not unreachable:
            return
        if generated:
            raise InvalidGraph(f"generated waterhole graph is disconnected; unreachable from 1: {unreachable}")
        print(f"[WARN] waterhole graph is disconnected; unreachable from 1: {unreachable}")

    # test hooks
    @property
    def croc_index(self) -> int:
        return int(self._croc)

    def place(self, player: Optional[int] = None, croc: Optional[int] = None, backpackers: Optional[Sequence[int]] = None) -> None:
        """Override positions (0-based) of a running episode and redraw the turn's readings."""
        if player is not None:
            self._player = int(player)
        if croc is not None:
            self._croc = int(croc)
        if backpackers is not None:
            self._bp_pos = [int(b) for b in backpackers]
            self._bp_state = ["alive", "alive"]
        self._begin_turn()
