"""Internal pygit2 constants - keeps trivia out of public modules."""

from __future__ import annotations

import pygit2

# Commit walking
SORT_TIME = pygit2.enums.SortMode.TIME

# Checkout
CHECKOUT_FORCE = pygit2.enums.CheckoutStrategy.FORCE

# Diff delta status
DELTA_ADDED = pygit2.enums.DeltaStatus.ADDED
DELTA_DELETED = pygit2.enums.DeltaStatus.DELETED
DELTA_MODIFIED = pygit2.enums.DeltaStatus.MODIFIED

# Reference namespaces
REFS_TAGS_PREFIX = "refs/tags/"
REFS_HEADS_PREFIX = "refs/heads/"
