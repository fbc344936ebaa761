"""
Waterhole graph generator (v1) for the lite backend.

Deterministic from seed:
  - random spanning tree (each new waterhole attaches to an earlier one) -> connected
  - extra_edges random chords between distinct, not yet adjacent waterholes
  - neighbor lists sorted ascending, 1-based like the collaborator's getPaths()
"""
from __future__ import annotations
from typing import List, Set
import random


N_WATERHOLES_DEFAULT = 35


def make_waterhole_graph(seed: int, n: int = N_WATERHOLES_DEFAULT, extra_edges: int = 18) -> List[List[int]]:
    n = int(n)
    if n < 2:
        raise ValueError(f"need at least 2 waterholes, got {n}")
    rng = random.Random(int(seed) + 31)
    order = list(range(n))
    rng.shuffle(order)

    adj: List[Set[int]] = [set() for _ in range(n)]
    for k in range(1, n):
        a = order[k]
        b = order[rng.randrange(k)]
        adj[a].add(b)
        adj[b].add(a)

    max_extra = n * (n - 1) // 2 - (n - 1)
    want = max(0, min(int(extra_edges), max_extra))
    added = 0
    while added < want:
        a = rng.randrange(n)
        b = rng.randrange(n)
        if a == b or b in adj[a]:
            continue
        adj[a].add(b)
        adj[b].add(a)
        added += 1

    return [sorted(j + 1 for j in nbrs) for nbrs in adj]


def make_ring_graph(n: int) -> List[List[int]]:
    """1-2-...-n-1 ring, 1-based."""
    n = int(n)
    if n < 3:
        raise ValueError(f"a ring needs at least 3 waterholes, got {n}")
    return [sorted([(i - 1) % n + 1, (i + 1) % n + 1]) for i in range(n)]
