"""Belief tracker: normalization, recurrences, reveals and degenerate recovery."""
import numpy as np
import pytest

from croc_benchmark.belief.tracker import BeliefTracker, advance, entropy, initial_belief
from croc_benchmark.errors import DegenerateBelief, InvalidLocation
from croc_benchmark.graph.waterholes import WaterholeGraph
from croc_benchmark.sensor.emission import reveal_emission


def _random_simplex(rng, n):
    v = rng.random(n)
    return v / v.sum()


def test_advance_is_a_distribution(graph35):
    T = graph35.transition_matrix()
    rng = np.random.default_rng(0)
    for recurrence in ("max_product", "sum_product"):
        b = _random_simplex(rng, 35)
        for _ in range(30):
            b = advance(b, T, _random_simplex(rng, 35), recurrence=recurrence)
            assert np.all(b >= 0.0)
            assert b.sum() == pytest.approx(1.0)


def test_max_product_recurrence_by_hand():
    # path 1-2-3
    T = WaterholeGraph.from_paths([[2], [1, 3], [2]]).transition_matrix()
    prev = np.array([0.5, 0.2, 0.3])
    e = np.array([1.0, 1.0, 1.0])
    # pred[0] = max(0.2*0.5) = 0.1 ; pred[1] = max(0.5*1, 0.3*1) = 0.5 ; pred[2] = 0.1
    np.testing.assert_allclose(advance(prev, T, e, "max_product"), np.array([0.1, 0.5, 0.1]) / 0.7)
    # sum: pred[1] = 0.8
    np.testing.assert_allclose(advance(prev, T, e, "sum_product"), np.array([0.1, 0.8, 0.1]) / 1.0)


def test_zero_mass_raises():
    T = WaterholeGraph.from_paths([[2], [1, 3], [2]]).transition_matrix()
    prev = np.array([1.0, 0.0, 0.0])
    with pytest.raises(DegenerateBelief) as ei:
        advance(prev, T, np.array([1.0, 0.0, 0.0]), turn=4)
    assert ei.value.turn == 4


def test_unknown_recurrence(ring5):
    with pytest.raises(ValueError):
        advance(np.full(5, 0.2), ring5.transition_matrix(), np.full(5, 0.2), recurrence="viterbi")
    with pytest.raises(ValueError):
        BeliefTracker(ring5.transition_matrix(), recurrence="viterbi")


def test_initial_belief_is_normalized_emission():
    e = np.array([0.1, 0.6, 0.3])
    np.testing.assert_allclose(initial_belief(e), e)


def test_no_new_information_does_not_sharpen():
    n = 6
    T = np.full((n, n), 1.0 / n)
    rng = np.random.default_rng(9)
    for recurrence in ("max_product", "sum_product"):
        b = _random_simplex(rng, n)
        for _ in range(10):
            nxt = advance(b, T, b, recurrence=recurrence)
            assert np.var(nxt) <= np.var(b) + 1e-12
            b = nxt


def test_tracker_first_update_uses_uniform_prior(ring5):
    tr = BeliefTracker(ring5.transition_matrix())
    e = np.array([0.1, 0.2, 0.4, 0.2, 0.1])
    s = tr.update(0, emission=e)
    np.testing.assert_allclose(tr.P, e)
    assert s["map_index"] == 2
    assert s["turn"] == 0
    assert s["revealed"] is None
    assert s["entropy"] == pytest.approx(entropy(e))


def test_reveal_on_first_turn_is_certain(ring5):
    tr = BeliefTracker(ring5.transition_matrix())
    s = tr.update(0, revealed=3)
    np.testing.assert_array_equal(tr.P, reveal_emission(5, 3))
    assert s["map_index"] == 3
    assert s["map_probability"] == 1.0


def test_later_reveal_wins_argmax(graph35):
    tr = BeliefTracker(graph35.transition_matrix())
    rng = np.random.default_rng(2)
    tr.update(0, emission=_random_simplex(rng, 35))
    tr.update(1, emission=_random_simplex(rng, 35))
    s = tr.update(2, revealed=17)
    assert s["map_index"] == 17
    assert s["revealed"] == 17
    assert tr.P.sum() == pytest.approx(1.0)


def test_reveal_after_certain_nonadjacent_belief_collapses(ring5, capsys):
    tr = BeliefTracker(ring5.transition_matrix())
    tr.update(0, revealed=0)
    # index 0 cannot reach index 0 in one step (no self-transition)
    s = tr.update(1, revealed=0)
    assert s["degenerate"] == 1
    assert s["map_index"] == 0
    np.testing.assert_array_equal(tr.P, reveal_emission(5, 0))
    assert "[WARN]" in capsys.readouterr().out


def test_degenerate_without_reveal_resets_uniform(ring5, capsys):
    tr = BeliefTracker(ring5.transition_matrix())
    tr.update(0, revealed=0)
    s = tr.update(1, emission=np.array([1.0, 0.0, 0.0, 0.0, 0.0]))
    assert s["degenerate"] == 1
    np.testing.assert_allclose(tr.P, np.full(5, 0.2))
    assert tr.degenerate_count == 1
    assert "turn 1" in capsys.readouterr().out


def test_argmax_ties_take_lowest_index(ring5):
    tr = BeliefTracker(ring5.transition_matrix())
    s = tr.update(0, emission=np.array([0.1, 0.3, 0.1, 0.3, 0.2]))
    assert s["map_index"] == 1


def test_reset_starts_a_new_episode(ring5):
    tr = BeliefTracker(ring5.transition_matrix())
    tr.update(0, revealed=2)
    tr.reset()
    np.testing.assert_allclose(tr.P, np.full(5, 0.2))
    s = tr.update(0, revealed=4)
    assert s["degenerate"] == 0
    assert s["map_index"] == 4


def test_bad_update_arguments(ring5):
    tr = BeliefTracker(ring5.transition_matrix())
    with pytest.raises(ValueError):
        tr.update(0)
    with pytest.raises(ValueError):
        tr.update(0, emission=np.ones(4) / 4)
    with pytest.raises(InvalidLocation):
        tr.update(0, revealed=9)


def test_topk_is_sorted(graph35):
    tr = BeliefTracker(graph35.transition_matrix(), topk=3)
    rng = np.random.default_rng(4)
    s = tr.update(0, emission=_random_simplex(rng, 35))
    ps = [row["p"] for row in s["topk"]]
    assert len(ps) == 3
    assert ps == sorted(ps, reverse=True)
    assert s["topk"][0]["index"] == s["map_index"]
