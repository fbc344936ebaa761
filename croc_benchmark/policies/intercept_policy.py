"""
Intercept policy (v1): walk towards the most likely croc waterhole.

Per turn:
  1) target = arg-max of the belief (lowest index on ties, as reported by the tracker)
  2) path = find_path(player, target)
  3) moves = first two hops of the path, SEARCH in any slot the path does not fill

NoPathFound is not caught here; the episode runner ends the episode on it.
"""
from __future__ import annotations
from typing import Any, Dict, Optional
import time

from .base_policy import Policy, pad_moves, MOVES_PER_TURN
from croc_benchmark.graph.planner import find_path


class InterceptPolicy(Policy):
    name = "Intercept"

    def reset(self, seed: int, episode_spec: Dict[str, Any]) -> None:
        super().reset(seed, episode_spec)
        self._graph = episode_spec["graph"]

    def step(self, turn: int, snapshot: Dict[str, Any], belief_summary: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if belief_summary is None:
            raise ValueError("InterceptPolicy needs a belief summary")
        t0 = time.perf_counter()

        player = int(snapshot["player_index"])
        target = int(belief_summary["map_index"])
        path = find_path(self._graph, player, target)
        moves = pad_moves(path, MOVES_PER_TURN)

        if not path:
            action_id = f"search_at_{target:02d}"
        else:
            action_id = f"intercept_{target:02d}_hops{len(path)}"

        t1 = time.perf_counter()
        self.record_planning_ms((t1 - t0) * 1000.0)
        return {
            "moves": moves,
            "target": target,
            "path": list(path),
            "action_id": action_id,
        }
