"""
Policy registry (v1).
"""
from __future__ import annotations
from typing import Any, Dict, Type

from .base_policy import Policy
from .intercept_policy import InterceptPolicy
from .search_policy import SearchPolicy


_REGISTRY: Dict[str, Type[Policy]] = {
    "Intercept": InterceptPolicy,
    "Search": SearchPolicy,
}


def make_policy(policy_name: str, policy_cfg: Dict[str, Any], sim_params: Dict[str, Any]) -> Policy:
    if policy_name not in _REGISTRY:
        raise ValueError(f"Unknown policy_name '{policy_name}'. Known: {sorted(_REGISTRY.keys())}")
    return _REGISTRY[policy_name](policy_cfg=policy_cfg, sim_params=sim_params)


def known_policies() -> list:
    return sorted(_REGISTRY.keys())
