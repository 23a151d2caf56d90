import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from fake_commits import linear_history, make_history
from git_graph_builder import GraphBuilder
from git_graph_data import CommitGraph
from git_graph_errors import GraphConsistencyError
from git_graph_items import COMMIT_RADIUS
from git_graph_layout import (
    LayoutEngine,
    calculate_commit_positions,
    compute_subtree_sizes,
)


def build(edges, heads):
    commits = make_history(edges)
    return GraphBuilder().build([(f"refs/heads/{name}", commits[sha]) for name, sha in heads])


class TestSimpleFork(unittest.TestCase):
    """A with children B and C, discovered in that order."""

    def setUp(self):
        self.graph = build({"A": [], "B": ["A"], "C": ["A"]}, [("main", "B"), ("topic", "C")])
        self.layout = calculate_commit_positions(self.graph)

    def test_depths(self):
        self.assertEqual(self.layout.depth, {"A": 0, "B": 1, "C": 1})

    def test_heights(self):
        self.assertEqual(self.layout.height["A"], 0)
        self.assertEqual(self.layout.height["B"], -1)
        self.assertEqual(self.layout.height["C"], 1)

    def test_positions_use_radius_spacing(self):
        x, y = self.layout.position("C")
        self.assertAlmostEqual(x, 1 * COMMIT_RADIUS * 2.5)
        self.assertAlmostEqual(y, 1 * COMMIT_RADIUS * 1.5)
        self.assertEqual(self.layout.position("A"), (0.0, 0.0))
        self.assertIsNone(self.layout.position("missing"))

    def test_bounds(self):
        self.assertEqual(self.layout.bounds(), (0.0, -15.0, 25.0, 15.0))


class TestDepth(unittest.TestCase):
    def test_merge_uses_nearest_parent(self):
        # M merges the long line A-B-C with A itself
        graph = build({"A": [], "B": ["A"], "C": ["B"], "M": ["C", "A"]}, [("main", "M")])
        layout = calculate_commit_positions(graph)
        self.assertEqual(layout.depth["C"], 2)
        self.assertEqual(layout.depth["M"], 1)

    def test_depth_rule_holds_for_every_commit(self):
        graph = build(
            {"R": [], "A": ["R"], "B": ["A"], "C": ["R"], "M": ["B", "C"], "N": ["M"], "T": ["C"]},
            [("main", "N"), ("topic", "T")],
        )
        layout = calculate_commit_positions(graph)
        for node in graph:
            with self.subTest(sha=node.sha):
                if node.parents:
                    expected = 1 + min(layout.depth[p] for p in node.parents)
                else:
                    expected = 0
                self.assertEqual(layout.depth[node.sha], expected)

    def test_long_linear_history(self):
        count = sys.getrecursionlimit() * 3
        history = linear_history(count)
        graph = GraphBuilder().build([("refs/heads/main", history[-1])])
        layout = calculate_commit_positions(graph)
        self.assertEqual(layout.depth[f"c{count - 1}"], count - 1)
        self.assertEqual(set(layout.height.values()), {0})


class TestHeights(unittest.TestCase):
    def setUp(self):
        # R -> X -> (X1, X2), R -> Y
        self.graph = build(
            {"R": [], "X": ["R"], "X1": ["X"], "X2": ["X"], "Y": ["R"]},
            [("one", "X1"), ("two", "X2"), ("three", "Y")],
        )
        self.layout = calculate_commit_positions(self.graph)

    def test_sibling_subtrees_reserve_rows(self):
        self.assertEqual(self.layout.height["R"], 0)
        self.assertEqual(self.layout.height["X"], -2)
        self.assertEqual(self.layout.height["Y"], 1)
        self.assertEqual(self.layout.height["X1"], -3)
        self.assertEqual(self.layout.height["X2"], -1)

    def test_no_two_commits_share_a_cell(self):
        cells = [(self.layout.depth[n.sha], self.layout.height[n.sha]) for n in self.graph]
        self.assertEqual(len(cells), len(set(cells)))

    def test_single_child_continues_parent_row(self):
        graph = build({"A": [], "B": ["A"], "C": ["B"], "D": ["B"], "E": ["D"]}, [("c", "C"), ("e", "E")])
        layout = calculate_commit_positions(graph)
        checked = 0
        for node in graph:
            if not node.parents:
                continue
            parent = graph.node(node.parents[0])
            if len(parent.children) == 1:
                checked += 1
                self.assertEqual(layout.height[node.sha], layout.height[parent.sha])
        self.assertGreater(checked, 0)


class TestSubtreeSizes(unittest.TestCase):
    def test_sizes(self):
        graph = build(
            {"R": [], "X": ["R"], "X1": ["X"], "X2": ["X"], "Y": ["R"]},
            [("one", "X1"), ("two", "X2"), ("three", "Y")],
        )
        child_idx = [[graph.index_of(c) for c in node.children] for node in graph]
        order = list(range(len(graph)))  # Insertion order already has parents first here
        sizes = compute_subtree_sizes(child_idx, order)
        by_sha = {node.sha: sizes[node.index] for node in graph}
        self.assertEqual(by_sha, {"R": 2, "X": 1, "X1": 0, "X2": 0, "Y": 0})
        for node in graph:
            self.assertGreaterEqual(by_sha[node.sha], 0)
            if node.is_leaf:
                self.assertEqual(by_sha[node.sha], 0)


class TestConsistency(unittest.TestCase):
    def test_missing_parent_raises(self):
        graph = CommitGraph()
        node = graph.add_node("b")
        node.parents.append("ghost")
        with self.assertRaises(GraphConsistencyError):
            calculate_commit_positions(graph)

    def test_empty_graph(self):
        layout = calculate_commit_positions(CommitGraph())
        self.assertEqual(len(layout), 0)
        self.assertIsNone(layout.bounds())


class TestLayoutEngine(unittest.TestCase):
    def test_layout_is_cached_until_graph_changes(self):
        commits = make_history({"A": [], "B": ["A"]})
        builder = GraphBuilder()
        builder.build([("refs/heads/main", commits["B"])])
        engine = LayoutEngine()

        first = engine.layout(builder.graph)
        self.assertIs(engine.layout(builder.graph), first)

        more = make_history({"A": [], "C": ["A"]})
        builder.add_reference("refs/heads/topic", more["C"])
        second = engine.layout(builder.graph)
        self.assertIsNot(second, first)
        self.assertIn("C", second.positions)

    def test_invalidate(self):
        graph = build({"A": []}, [("main", "A")])
        engine = LayoutEngine()
        first = engine.layout(graph)
        engine.invalidate()
        self.assertIsNot(engine.layout(graph), first)


if __name__ == "__main__":
    unittest.main()
