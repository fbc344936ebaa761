"""
Waterhole graph (v1).

Fixed concept:
  - the collaborator hands over 1-based adjacency lists (paths[i] = neighbors of waterhole i+1)
  - everything inside the package works on 0-based indices
  - index_of() / location_of() are the only places where the two meet
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from croc_benchmark.errors import InvalidGraph, InvalidLocation


@dataclass(frozen=True)
class WaterholeGraph:
    adjacency: Tuple[Tuple[int, ...], ...]  # 0-based, neighbor order as provided

    @classmethod
    def from_paths(cls, paths: Sequence[Iterable[int]]) -> "WaterholeGraph":
        """Build from 1-based adjacency lists and validate symmetry."""
        n = len(paths)
        adj: List[Tuple[int, ...]] = []
        for i, nbrs in enumerate(paths):
            row = []
            for loc in nbrs:
                loc = int(loc)
                if loc < 1 or loc > n:
                    raise InvalidGraph(f"waterhole {i + 1} lists neighbor {loc} outside 1..{n}")
                row.append(loc - 1)
            adj.append(tuple(row))
        graph = cls(adjacency=tuple(adj))
        graph.validate()
        return graph

    @classmethod
    def from_adjacency(cls, adjacency: Sequence[Iterable[int]]) -> "WaterholeGraph":
        """Build from 0-based adjacency lists (tests, generators)."""
        graph = cls(adjacency=tuple(tuple(int(j) for j in nbrs) for nbrs in adjacency))
        graph.validate()
        return graph

    def validate(self) -> None:
        n = self.n
        if n == 0:
            raise InvalidGraph("graph has no waterholes")
        for i, nbrs in enumerate(self.adjacency):
            if not nbrs:
                raise InvalidGraph(f"waterhole index {i} is isolated")
            if len(set(nbrs)) != len(nbrs):
                raise InvalidGraph(f"waterhole index {i} lists a neighbor twice: {list(nbrs)}")
            for j in nbrs:
                if j < 0 or j >= n:
                    raise InvalidGraph(f"waterhole index {i} lists neighbor {j} outside 0..{n - 1}")
                if j == i:
                    raise InvalidGraph(f"waterhole index {i} has a self-loop")
                if i not in self.adjacency[j]:
                    raise InvalidGraph(f"edge {i}->{j} has no reverse edge {j}->{i}")

    @property
    def n(self) -> int:
        return len(self.adjacency)

    def check_index(self, index: int) -> int:
        if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
            raise InvalidLocation(index, self.n)
        index = int(index)
        if index < 0 or index >= self.n:
            raise InvalidLocation(index, self.n)
        return index

    def neighbors(self, index: int) -> Tuple[int, ...]:
        return self.adjacency[self.check_index(index)]

    def degree(self, index: int) -> int:
        return len(self.neighbors(index))

    def index_of(self, location_id: int) -> int:
        """1-based collaborator id -> 0-based index."""
        try:
            loc = int(location_id)
        except (TypeError, ValueError):
            raise InvalidLocation(location_id, self.n, what="id") from None
        if loc < 1 or loc > self.n:
            raise InvalidLocation(location_id, self.n, what="id")
        return loc - 1

    def location_of(self, index: int) -> int:
        """0-based index -> 1-based collaborator id."""
        return self.check_index(index) + 1

    def to_paths(self) -> List[List[int]]:
        return [[j + 1 for j in nbrs] for nbrs in self.adjacency]

    def transition_matrix(self) -> np.ndarray:
        """
        Row i puts 1/deg(i) on each neighbor of i; no self-transition.
        Built on first use and cached on the instance; the array is read-only
        so it can be shared across episodes.
        """
        T = self.__dict__.get("_transition")
        if T is not None:
            return T
        n = self.n
        T = np.zeros((n, n), dtype=np.float64)
        for i, nbrs in enumerate(self.adjacency):
            T[i, list(nbrs)] = 1.0 / float(len(nbrs))
        T.flags.writeable = False
        object.__setattr__(self, "_transition", T)  # frozen dataclass
        return T
