"""Git operations module."""

from cratecheck.git.bridge import bridge
from cratecheck.git.errors import (
    AuthenticationError,
    BridgeError,
    GitError,
    LeaseRequiredError,
    NotARepositoryError,
    PathNotFoundError,
    RefNotFoundError,
    RemoteError,
)
from cratecheck.git.models import DiffSummary, TagTarget
from cratecheck.git.repository import RepositoryHandle

__all__ = [
    # Main class
    "RepositoryHandle",
    "bridge",
    # Models
    "DiffSummary",
    "TagTarget",
    # Errors
    "GitError",
    "NotARepositoryError",
    "RefNotFoundError",
    "PathNotFoundError",
    "LeaseRequiredError",
    "RemoteError",
    "AuthenticationError",
    "BridgeError",
]
