"""String parsing helpers for git ref names and refspecs."""

from __future__ import annotations

from cratecheck.git._internal.constants import REFS_HEADS_PREFIX, REFS_TAGS_PREFIX


def extract_tag_name(refname: str) -> str | None:
    """Extract tag name from full ref (e.g., 'refs/tags/v1.0' -> 'v1.0')."""
    if refname.startswith(REFS_TAGS_PREFIX):
        return refname[len(REFS_TAGS_PREFIX) :]
    return None


def make_remote_refspec(remote: str) -> str:
    """Force-update refspec mirroring every branch under refs/remotes/<remote>/."""
    return f"+{REFS_HEADS_PREFIX}*:refs/remotes/{remote}/*"


def make_tags_refspec() -> str:
    """Force-update refspec copying all tags verbatim."""
    return f"+{REFS_TAGS_PREFIX}*:{REFS_TAGS_PREFIX}*"
