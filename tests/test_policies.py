"""Decision policies: move selection from the MAP estimate and SEARCH padding."""
import pytest

from croc_benchmark.errors import NoPathFound
from croc_benchmark.graph.waterholes import WaterholeGraph
from croc_benchmark.policies.base_policy import SEARCH, pad_moves
from croc_benchmark.policies.registry import known_policies, make_policy


def _intercept(graph):
    policy = make_policy("Intercept", policy_cfg={}, sim_params={})
    policy.reset(seed=0, episode_spec={"graph": graph, "episode": 0})
    return policy


def test_pad_moves():
    assert pad_moves([]) == (SEARCH, SEARCH)
    assert pad_moves([4]) == (4, SEARCH)
    assert pad_moves([4, 5, 6]) == (4, 5)


def test_two_moves_toward_far_target():
    # path graph 1-2-3-4-5
    g = WaterholeGraph.from_paths([[2], [1, 3], [2, 4], [3, 5], [4]])
    policy = _intercept(g)
    action = policy.step(0, {"player_index": 0}, {"map_index": 4})
    assert action["moves"] == (1, 2)
    assert action["path"] == [1, 2, 3, 4]
    assert action["target"] == 4


def test_one_hop_then_search(ring5):
    policy = _intercept(ring5)
    action = policy.step(3, {"player_index": 0}, {"map_index": 1})
    assert action["moves"] == (1, SEARCH)


def test_search_in_place_at_target(ring5):
    policy = _intercept(ring5)
    action = policy.step(1, {"player_index": 2}, {"map_index": 2})
    assert action["moves"] == (SEARCH, SEARCH)
    assert action["path"] == []


def test_ring_reveal_scenario(ring5):
    # agent at waterhole 1, croc revealed at waterhole 3
    policy = _intercept(ring5)
    action = policy.step(0, {"player_index": ring5.index_of(1)}, {"map_index": ring5.index_of(3)})
    assert [ring5.location_of(m) for m in action["moves"]] == [2, 3]


def test_unreachable_target_propagates():
    g = WaterholeGraph.from_paths([[2], [1], [4], [3]])
    policy = _intercept(g)
    with pytest.raises(NoPathFound):
        policy.step(0, {"player_index": 0}, {"map_index": 2})


def test_planning_time_is_recorded(ring5):
    policy = _intercept(ring5)
    policy.step(0, {"player_index": 0}, {"map_index": 2})
    stats = policy.get_budget_stats()
    assert stats["planning_ms_mean"] >= 0.0
    policy.record_inference_ms(2.0)
    policy.record_inference_ms(4.0)
    assert policy.get_budget_stats()["inference_ms_mean"] == pytest.approx(3.0)


def test_search_policy_never_moves(ring5):
    policy = make_policy("Search", policy_cfg={}, sim_params={})
    policy.reset(seed=0, episode_spec={"graph": ring5})
    assert policy.step(0, {"player_index": 3}, {"map_index": 0})["moves"] == (SEARCH, SEARCH)


def test_registry():
    assert known_policies() == ["Intercept", "Search"]
    with pytest.raises(ValueError):
        make_policy("Nope", policy_cfg={}, sim_params={})
