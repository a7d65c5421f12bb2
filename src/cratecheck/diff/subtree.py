"""Scope a tree to a package subdirectory."""

from __future__ import annotations

from pathlib import PurePosixPath

import pygit2

from cratecheck.git.errors import PathNotFoundError
from cratecheck.git.repository import RepositoryHandle


def scope(
    repository: RepositoryHandle, tree: pygit2.Tree, relative_path: PurePosixPath | str
) -> pygit2.Tree:
    """The subtree of ``tree`` at ``relative_path``.

    The repository root (``""`` or ``"."``) returns ``tree`` itself.

    Raises:
        PathNotFoundError: ``relative_path`` is missing or is not a directory.
    """
    path = PurePosixPath(relative_path)
    if not path.parts or path == PurePosixPath("."):
        return tree

    key = path.as_posix()
    try:
        entry = tree[key]
    except KeyError as e:
        raise PathNotFoundError(key, str(tree.id)) from e

    obj = repository.get_object(entry.id)
    if not isinstance(obj, pygit2.Tree):
        raise PathNotFoundError(key, str(tree.id))
    return obj
