# git_graph_data.py

from typing import Iterator, Optional

from git_graph_errors import GraphConsistencyError, UnknownCommitId


class CommitNode:
    def __init__(self, sha: str, index: int, summary: str = "", label: Optional[str] = None):
        self.sha: str = sha
        self.index: int = index  # Slot in the owning CommitGraph
        self.parents: list[str] = []  # In the order the repository reports them
        self.children: list[str] = []  # In the order the edges were added
        self.summary: str = summary
        self.label: Optional[str] = label  # e.g. 'main', 'origin/main', 'v1.0'

    @property
    def is_root(self) -> bool:
        return not self.parents

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def __repr__(self) -> str:
        return (
            f"CommitNode(sha='{self.sha[:7]}', "
            f"parents={[p[:7] for p in self.parents]}, "
            f"children={[c[:7] for c in self.children]}, "
            f"label={self.label!r})"
        )


class CommitGraph:
    """
    Commit DAG stored as an arena: nodes live in a list in insertion order and
    are addressed by a stable integer index mapped from their sha.
    `revision` changes on every mutation so cached layouts can be invalidated.
    """

    def __init__(self):
        self.nodes: list[CommitNode] = []
        self._index: dict[str, int] = {}
        self.revision: int = 0

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, sha: object) -> bool:
        return sha in self._index

    def __iter__(self) -> Iterator[CommitNode]:
        return iter(self.nodes)

    def add_node(self, sha: str, summary: str = "", label: Optional[str] = None) -> CommitNode:
        """Adds a node, or returns the existing one when `sha` is already known."""
        existing = self.get(sha)
        if existing is not None:
            return existing
        node = CommitNode(sha, len(self.nodes), summary=summary, label=label)
        self._index[sha] = node.index
        self.nodes.append(node)
        self.revision += 1
        return node

    def add_edge(self, child_sha: str, parent_sha: str):
        """Wires child -> parent in both directions. Both nodes must exist."""
        child = self.node(child_sha)
        parent = self.node(parent_sha)
        child.parents.append(parent.sha)
        parent.children.append(child.sha)
        self.revision += 1

    def set_label(self, sha: str, label: str) -> bool:
        """Attaches `label` unless the node already has one. Returns True if it was set."""
        node = self.node(sha)
        if node.label is not None:
            return False
        node.label = label
        self.revision += 1
        return True

    def get(self, sha: str) -> Optional[CommitNode]:
        index = self._index.get(sha)
        if index is None:
            return None
        return self.nodes[index]

    def node(self, sha: str) -> CommitNode:
        node = self.get(sha)
        if node is None:
            raise UnknownCommitId(sha)
        return node

    def index_of(self, sha: str) -> int:
        """Arena index for `sha`, used while walking edges during layout."""
        index = self._index.get(sha)
        if index is None:
            raise GraphConsistencyError(f"Edge points at commit {sha} which is not in the graph")
        return index

    def roots(self) -> list[CommitNode]:
        return [n for n in self.nodes if n.is_root]

    def leaves(self) -> list[CommitNode]:
        return [n for n in self.nodes if n.is_leaf]

    def labels(self) -> dict[str, str]:
        return {n.label: n.sha for n in self.nodes if n.label is not None}

    def __repr__(self) -> str:
        return f"CommitGraph(nodes={len(self.nodes)}, revision={self.revision})"
