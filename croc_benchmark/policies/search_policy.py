"""
Search policy (v1): stay put and search the current waterhole every action.

Baseline only; it ignores the belief.
"""
from __future__ import annotations
from typing import Any, Dict, Optional
from .base_policy import Policy, SEARCH


class SearchPolicy(Policy):
    name = "Search"

    def step(self, turn: int, snapshot: Dict[str, Any], belief_summary: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return {"moves": (SEARCH, SEARCH), "action_id": "search_in_place"}
