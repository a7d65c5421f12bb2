"""Internal components for git operations - not part of public API."""

from cratecheck.git._internal.errors import git_operation
from cratecheck.git._internal.parsing import (
    extract_tag_name,
    make_remote_refspec,
    make_tags_refspec,
)

__all__ = [
    "extract_tag_name",
    "git_operation",
    "make_remote_refspec",
    "make_tags_refspec",
]
