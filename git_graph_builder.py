# git_graph_builder.py

import logging
from typing import TYPE_CHECKING, Any, Iterable, Optional

from git_graph_data import CommitGraph, CommitNode
from git_graph_errors import GraphConsistencyError, MalformedReferenceName

if TYPE_CHECKING:
    from git_manager import GitManager

logger = logging.getLogger(__name__)

# Namespaces whose second path segment is only a category ('refs/heads/x' -> 'x')
REF_NAMESPACE_PREFIX = "refs/"


def reference_label(name: str) -> str:
    """
    Extracts the display label from a full reference name.

    'refs/heads/main'           -> 'main'
    'refs/heads/feature/login'  -> 'feature/login'
    'refs/remotes/origin/main'  -> 'origin/main'
    'refs/tags/v1.0'            -> 'v1.0'
    'origin/main'               -> 'main'

    Names without a '/' separator are rejected instead of being used as-is.
    """
    if not name or "/" not in name:
        raise MalformedReferenceName(name)

    if name.startswith(REF_NAMESPACE_PREFIX):
        parts = name.split("/", 2)
        label = parts[2] if len(parts) == 3 else ""
    else:
        label = name.rsplit("/", 1)[1]

    if not label:
        raise MalformedReferenceName(name)
    return label


class GraphBuilder:
    """
    Grows a CommitGraph from reference heads.

    Commits are duck-typed on the GitPython `Commit` shape: a `hexsha` string, a
    `parents` sequence of commits and optionally a `summary`.
    """

    def __init__(self, graph: Optional[CommitGraph] = None):
        self.graph = graph if graph is not None else CommitGraph()

    def add_reference(self, name: str, commit: Any) -> CommitNode:
        return self.add_commit(commit, reference_label(name))

    def add_commit(self, commit: Any, label: Optional[str] = None) -> CommitNode:
        """
        Inserts `commit` and every ancestor not yet in the graph.

        Known commits are not expanded again; a label is attached only if the
        node does not have one yet. The walk uses an explicit stack so long
        linear histories do not hit the recursion limit. Parents are visited in
        order and a node's edges are added once its whole ancestry is present,
        which fixes the order of every `children` list.
        """
        graph = self.graph
        node = graph.get(commit.hexsha)
        if node is None:
            node = self._expand(commit)
        if label:
            if graph.set_label(node.sha, label):
                logger.debug("Labelled %s as %s", node.sha[:7], label)
        return node

    def _expand(self, commit: Any) -> CommitNode:
        graph = self.graph
        in_progress: set[str] = set()
        stack: list[tuple[Any, bool]] = [(commit, False)]

        while stack:
            current, parents_done = stack.pop()
            sha = current.hexsha

            if not parents_done:
                if sha in graph:
                    continue
                if sha in in_progress:
                    raise GraphConsistencyError(f"Commit {sha} is its own ancestor")
                in_progress.add(sha)
                stack.append((current, True))
                for parent in reversed(current.parents):
                    if parent.hexsha not in graph:
                        stack.append((parent, False))
                continue

            in_progress.discard(sha)
            graph.add_node(sha, summary=getattr(current, "summary", "") or "")
            for parent in current.parents:
                graph.add_edge(sha, parent.hexsha)

        return graph.node(commit.hexsha)

    def build(self, references: Iterable[tuple[str, Any]]) -> CommitGraph:
        """Consumes (reference name, head commit) pairs and returns the graph."""
        for name, commit in references:
            self.add_reference(name, commit)
        logger.info("Built commit graph with %d commits", len(self.graph))
        return self.graph


def build_graph(repository: "GitManager") -> CommitGraph:
    """Builds a fresh graph from every reference the repository reports."""
    return GraphBuilder().build(repository.iter_references())
