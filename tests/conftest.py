"""Shared fixtures: small synthetic waterhole graphs."""
import random

import pytest

from croc_benchmark.graph.waterholes import WaterholeGraph
from croc_benchmark.scenarios.waterholes import make_ring_graph, make_waterhole_graph


@pytest.fixture
def ring5() -> WaterholeGraph:
    return WaterholeGraph.from_paths(make_ring_graph(5))


@pytest.fixture
def graph35() -> WaterholeGraph:
    return WaterholeGraph.from_paths(make_waterhole_graph(seed=7, n=35, extra_edges=18))


def random_graphs(count=20, n_range=(3, 15)):
    rng = random.Random(1234)
    for k in range(count):
        n = rng.randint(*n_range)
        extra = rng.randint(0, n)
        yield WaterholeGraph.from_paths(make_waterhole_graph(seed=k, n=n, extra_edges=extra))
