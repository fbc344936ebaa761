"""
Backend interface contract (v1): the croc game collaborator.

Locations cross this boundary as 1-based ids. Moves are strings: a 1-based
waterhole id ("12") or SEARCH_MOVE ("S").

Do NOT rename public class/methods. Only append.
"""
from __future__ import annotations
from typing import Any, Dict, List, Sequence, Tuple


SEARCH_MOVE = "S"

SNAPSHOT_KEYS = (
    "score",
    "player_location",
    "backpacker1",
    "backpacker2",
    "calcium",
    "salinity",
    "alkalinity",
)


class Backend:
    """
    Abstract backend API used by runners.

    Methods:
      - init(sim_params)
      - get_graph() -> list of 1-based neighbor lists (constant for the run)
      - start_episode(seed)
      - get_distributions() -> (calcium, salinity, alkalinity), each [(mean, spread), ...]
      - get_snapshot() -> dict with SNAPSHOT_KEYS
          backpacker status: 0 eaten, negative while being eaten (abs = croc location)
      - submit_moves(move1, move2) -> (continues, score)
      - episode_outcome() -> dict
      - report_results() -> dict
      - close()
    """
    def __init__(self, sim_params: Dict[str, Any]):
        self.init(sim_params)

    def init(self, sim_params: Dict[str, Any]) -> None:
        raise NotImplementedError

    def get_graph(self) -> List[List[int]]:
        raise NotImplementedError

    def start_episode(self, seed: int) -> None:
        raise NotImplementedError

    def get_distributions(self) -> Tuple[Sequence[Tuple[float, float]], ...]:
        raise NotImplementedError

    def get_snapshot(self) -> Dict[str, Any]:
        raise NotImplementedError

    def submit_moves(self, move1: str, move2: str) -> Tuple[bool, int]:
        raise NotImplementedError

    def episode_outcome(self) -> Dict[str, Any]:
        raise NotImplementedError

    def report_results(self) -> Dict[str, Any]:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError
