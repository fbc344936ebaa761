"""
Policy contract (v1).

A policy sees, once per turn:
  - turn: 0-based turn counter within the episode
  - snapshot: collaborator snapshot already converted to 0-based indices
    (at least "player_index" and "score")
  - belief_summary: dict returned by BeliefTracker.update()
and returns an action dict with a fixed key:
  - "moves": (move1, move2), each a 0-based waterhole index or SEARCH

DO NOT rename public API.
"""
from __future__ import annotations
from typing import Any, Dict, Optional, Tuple, Union


SEARCH = "search"
MOVES_PER_TURN = 2

Move = Union[int, str]


class Policy:
    name: str = "BasePolicy"

    def __init__(self, policy_cfg: Dict[str, Any], sim_params: Dict[str, Any]):
        self.policy_cfg = dict(policy_cfg or {})
        self.sim_params = dict(sim_params or {})
        self._budget_stats = {
            "inference_ms_mean": 0.0,
            "planning_ms_mean": 0.0,
        }
        self._timing_n = 0
        self._planning_n = 0
        self._planning_ms_sum = 0.0
        self._inference_ms_sum = 0.0

    def reset(self, seed: int, episode_spec: Dict[str, Any]) -> None:
        self.seed = int(seed)
        self.episode_spec = episode_spec
        self._timing_n = 0
        self._planning_n = 0
        self._planning_ms_sum = 0.0
        self._inference_ms_sum = 0.0
        self._budget_stats["inference_ms_mean"] = 0.0
        self._budget_stats["planning_ms_mean"] = 0.0

    def step(
        self,
        turn: int,
        snapshot: Dict[str, Any],
        belief_summary: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        raise NotImplementedError

    # ----- timing stats -----
    def record_inference_ms(self, inference_ms: float) -> None:
        self._timing_n += 1
        self._inference_ms_sum += float(inference_ms)
        self._budget_stats["inference_ms_mean"] = self._inference_ms_sum / max(1, self._timing_n)

    def record_planning_ms(self, planning_ms: float) -> None:
        self._planning_n += 1
        self._planning_ms_sum += float(planning_ms)
        self._budget_stats["planning_ms_mean"] = self._planning_ms_sum / max(1, self._planning_n)

    # ----- runner API -----
    def get_budget_stats(self) -> Dict[str, Any]:
        return {
            "inference_ms_mean": float(self._budget_stats.get("inference_ms_mean", 0.0)),
            "planning_ms_mean": float(self._budget_stats.get("planning_ms_mean", 0.0)),
        }


def pad_moves(path, slots: int = MOVES_PER_TURN) -> Tuple[Move, ...]:
    """First `slots` steps of path, padded with SEARCH."""
    moves = [int(p) for p in list(path)[:slots]]
    while len(moves) < slots:
        moves.append(SEARCH)
    return tuple(moves)
