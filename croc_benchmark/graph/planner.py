"""
Shortest-path planner over the waterhole graph (v1).

Uniform edge cost (1 per hop). The open list is scanned linearly for the
cheapest node, first found wins ties, so the result only depends on the
neighbor order of the graph. N is small (35), O(N^2) is fine.
"""
from __future__ import annotations
from collections import deque
from typing import Dict, List

from croc_benchmark.errors import NoPathFound
from croc_benchmark.graph.waterholes import WaterholeGraph


COST_SENTINEL = 10**9


def _pop_cheapest(open_list: List[int], cost: List[int]) -> int:
    best = 0
    for k in range(1, len(open_list)):
        if cost[open_list[k]] < cost[open_list[best]]:
            best = k
    return open_list.pop(best)


def _trace_back(parent: Dict[int, int], start: int, goal: int) -> List[int]:
    path = []
    cur = goal
    while cur != start:
        path.append(cur)
        cur = parent[cur]
    path.reverse()
    return path


def find_path(graph: WaterholeGraph, start: int, goal: int) -> List[int]:
    """
    Return the hop sequence from start (exclusive) to goal (inclusive).

    Empty list when start == goal. Raises NoPathFound when goal is not
    reachable, InvalidLocation when either index is out of range.
    """
    start = graph.check_index(start)
    goal = graph.check_index(goal)
    if start == goal:
        return []

    cost = [COST_SENTINEL] * graph.n
    cost[start] = 0
    parent: Dict[int, int] = {}
    open_list = [start]
    in_open = {start}
    closed = set()

    while open_list:
        cur = _pop_cheapest(open_list, cost)
        in_open.discard(cur)
        closed.add(cur)
        if cur == goal:
            return _trace_back(parent, start, goal)

        step_cost = cost[cur] + 1
        for nxt in graph.neighbors(cur):
            if nxt in closed:
                continue
            if nxt not in in_open or step_cost < cost[nxt]:
                parent[nxt] = cur
                cost[nxt] = step_cost
                if nxt not in in_open:
                    open_list.append(nxt)
                    in_open.add(nxt)

    raise NoPathFound(start, goal)


def graph_distances(graph: WaterholeGraph, source: int) -> List[int]:
    """BFS hop distance from source to every index (-1 when unreachable)."""
    source = graph.check_index(source)
    dist = [-1] * graph.n
    dist[source] = 0
    q = deque([source])
    while q:
        cur = q.popleft()
        for nxt in graph.neighbors(cur):
            if dist[nxt] < 0:
                dist[nxt] = dist[cur] + 1
                q.append(nxt)
    return dist
