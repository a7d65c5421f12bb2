"""Git module error types."""


class GitError(Exception):
    """Base error for git operations."""

    pass


class NotARepositoryError(GitError):
    """Path is not a git repository."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Not a git repository: {path}")
        self.path = path


class RefNotFoundError(GitError):
    """Reference or object (commit, tree) not found."""

    def __init__(self, ref: str) -> None:
        super().__init__(f"Reference not found: {ref}")
        self.ref = ref


class PathNotFoundError(GitError):
    """Path does not name a directory inside a tree."""

    def __init__(self, path: str, tree_sha: str) -> None:
        super().__init__(f"Path {path!r} not found as a directory in tree {tree_sha}")
        self.path = path
        self.tree_sha = tree_sha


class LeaseRequiredError(GitError):
    """Working tree mutation attempted without holding a checkout lease."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"Cannot {operation}: no checkout lease held on repository")
        self.operation = operation


class RemoteError(GitError):
    """Error communicating with remote."""

    def __init__(self, remote: str, message: str) -> None:
        super().__init__(f"Remote error ({remote}): {message}")
        self.remote = remote


class AuthenticationError(GitError):
    """Authentication failed for remote operation."""

    def __init__(self, remote: str, operation: str | None = None) -> None:
        op_part = f" during {operation}" if operation else ""
        super().__init__(f"Authentication failed for remote {remote!r}{op_part}")
        self.remote = remote
        self.operation = operation


class BridgeError(GitError):
    """Bridged fetch did not bring the requested commit into the target repository."""

    def __init__(self, source: str, commit_sha: str) -> None:
        super().__init__(f"Commit {commit_sha} not available after fetching from {source}")
        self.source = source
        self.commit_sha = commit_sha
