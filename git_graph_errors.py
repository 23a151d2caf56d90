# git_graph_errors.py


class GraphError(Exception):
    """Base class for errors raised by the commit graph modules."""


class MalformedReferenceName(GraphError, ValueError):
    def __init__(self, name: str):
        super().__init__(f"Reference name '{name}' has no '<prefix>/<name>' structure")
        self.name = name


class UnknownCommitId(GraphError, KeyError):
    def __init__(self, commit_id: str):
        super().__init__(commit_id)
        self.commit_id = commit_id

    def __str__(self) -> str:
        return f"Unknown commit id: {self.commit_id}"


class GraphConsistencyError(GraphError):
    """The graph references an id it does not contain, or contains a cycle."""


class RepositoryError(GraphError):
    """Errors reported by the repository collaborator."""


class CheckoutFailed(RepositoryError):
    def __init__(self, revision: str, details: str = ""):
        message = f"Checkout of '{revision}' failed"
        if details:
            message += f"\nDetails: {details}"
        super().__init__(message)
        self.revision = revision
        self.details = details


class StageFailed(RepositoryError):
    def __init__(self, path: str, details: str = ""):
        message = f"Staging '{path}' failed"
        if details:
            message += f"\nDetails: {details}"
        super().__init__(message)
        self.path = path
        self.details = details
