# git_graph_layout.py

import logging
from collections import deque
from typing import Optional

from git_graph_data import CommitGraph
from git_graph_errors import GraphConsistencyError
from git_graph_items import HORIZONTAL_SPACING, VERTICAL_SPACING, Point
from utils import timeit

logger = logging.getLogger(__name__)


class CommitLayout:
    """Per-commit depth, height and graph-space position for one graph revision."""

    def __init__(self, depth: dict[str, int], height: dict[str, int], positions: dict[str, Point], revision: int):
        self.depth = depth
        self.height = height
        self.positions = positions
        self.revision = revision

    def __len__(self) -> int:
        return len(self.positions)

    def position(self, sha: str) -> Optional[Point]:
        return self.positions.get(sha)

    def bounds(self) -> Optional[tuple[float, float, float, float]]:
        """(min_x, min_y, max_x, max_y) of all positions, None for an empty layout."""
        if not self.positions:
            return None
        xs = [p[0] for p in self.positions.values()]
        ys = [p[1] for p in self.positions.values()]
        return min(xs), min(ys), max(xs), max(ys)


def _topological_order(graph: CommitGraph, parent_idx: list[list[int]], child_idx: list[list[int]]) -> list[int]:
    """Parents before children (Kahn)."""
    pending = [len(parents) for parents in parent_idx]
    queue = deque(i for i, count in enumerate(pending) if count == 0)
    order = []
    while queue:
        i = queue.popleft()
        order.append(i)
        for c in child_idx[i]:
            pending[c] -= 1
            if pending[c] == 0:
                queue.append(c)
    if len(order) != len(graph):
        raise GraphConsistencyError(f"Commit graph has a cycle ({len(graph) - len(order)} commits unreachable)")
    return order


def compute_depths(parent_idx: list[list[int]], order: list[int]) -> list[int]:
    """depth = 0 for roots, else 1 + the smallest parent depth."""
    depth = [0] * len(parent_idx)
    for i in order:
        parents = parent_idx[i]
        if parents:
            depth[i] = 1 + min(depth[p] for p in parents)
    return depth


def compute_subtree_sizes(child_idx: list[list[int]], order: list[int]) -> list[int]:
    """Extra rows a commit's descendants need: max(0, children - 1) + sum over children."""
    size = [0] * len(child_idx)
    for i in reversed(order):
        children = child_idx[i]
        size[i] = max(0, len(children) - 1) + sum(size[c] for c in children)
    return size


def compute_heights(parent_idx: list[list[int]], child_idx: list[list[int]], subtree: list[int], order: list[int]) -> list[int]:
    """
    Vertical row of each commit, relative to its first parent.

    A commit continues its parent's row when it is the only child. Otherwise the
    first child moves up and every later child moves down, each by one row plus
    the rows reserved for its own subtree.
    """
    height = [0] * len(parent_idx)
    for i in order:
        parents = parent_idx[i]
        if not parents:
            continue
        p = parents[0]
        siblings = child_idx[p]
        if len(siblings) == 1:
            height[i] = height[p]
            continue
        offset = 1 + subtree[i]
        if siblings.index(i) == 0:
            height[i] = height[p] - offset
        else:
            height[i] = height[p] + offset
    return height


@timeit
def calculate_commit_positions(graph: CommitGraph) -> CommitLayout:
    """
    Calculates depth, height and (x, y) for every commit in `graph`.
    x grows with generational distance from a root, y separates sibling branches.
    """
    parent_idx = [[graph.index_of(p) for p in node.parents] for node in graph]
    child_idx = [[graph.index_of(c) for c in node.children] for node in graph]

    order = _topological_order(graph, parent_idx, child_idx)
    depth = compute_depths(parent_idx, order)
    subtree = compute_subtree_sizes(child_idx, order)
    height = compute_heights(parent_idx, child_idx, subtree, order)

    depth_by_sha: dict[str, int] = {}
    height_by_sha: dict[str, int] = {}
    positions: dict[str, Point] = {}
    for node in graph:
        d = depth[node.index]
        h = height[node.index]
        depth_by_sha[node.sha] = d
        height_by_sha[node.sha] = h
        positions[node.sha] = (d * HORIZONTAL_SPACING, h * VERTICAL_SPACING)

    logger.debug("Layout calculated for %d commits (revision %d)", len(graph), graph.revision)
    return CommitLayout(depth_by_sha, height_by_sha, positions, graph.revision)


class LayoutEngine:
    """Keeps the last layout and only recomputes it when the graph changed."""

    def __init__(self):
        self._graph: Optional[CommitGraph] = None
        self._layout: Optional[CommitLayout] = None

    def layout(self, graph: CommitGraph) -> CommitLayout:
        if self._layout is None or self._graph is not graph or self._layout.revision != graph.revision:
            self._layout = calculate_commit_positions(graph)
            self._graph = graph
        return self._layout

    def invalidate(self):
        self._graph = None
        self._layout = None
