"""Credentials for cloning upstream repositories.

Upstream URLs are normalized to https before cloning, but crates published
from private forges still need a token. Those come from whatever the user's
git is already configured with: the SSH agent, or ``git credential fill``.
"""

from __future__ import annotations

import os
import subprocess
from typing import TYPE_CHECKING
from urllib.parse import urlparse

import pygit2

from cratecheck.core.logging import get_logger

if TYPE_CHECKING:
    from pygit2.enums import CredentialType

log = get_logger("git.credentials")

_HELPER_TIMEOUT_SEC = 30


def credential_request(url: str) -> str:
    """Input for ``git credential fill`` describing ``url``."""
    parsed = urlparse(url)
    lines = [f"protocol={parsed.scheme}", f"host={parsed.hostname or parsed.netloc}"]
    if parsed.port is not None:
        lines[-1] += f":{parsed.port}"
    if parsed.path.strip("/"):
        lines.append(f"path={parsed.path.strip('/')}")
    return "\n".join(lines) + "\n\n"


def parse_credential_response(output: str) -> tuple[str, str] | None:
    """(username, password) from ``git credential fill`` output, if both are present."""
    fields = dict(line.split("=", 1) for line in output.splitlines() if "=" in line)
    if "username" in fields and "password" in fields:
        return fields["username"], fields["password"]
    return None


class CloneCallbacks(pygit2.RemoteCallbacks):
    """RemoteCallbacks that defer to the system's SSH agent and credential helper."""

    def credentials(  # type: ignore[override]
        self,
        url: str,
        username_from_url: str | None,
        allowed_types: CredentialType,
    ) -> pygit2.UserPass | pygit2.Keypair | None:
        if allowed_types & pygit2.enums.CredentialType.SSH_KEY:
            return pygit2.KeypairFromAgent(username_from_url or "git")
        if allowed_types & pygit2.enums.CredentialType.USERPASS_PLAINTEXT:
            found = self._fill(url)
            if found is not None:
                return pygit2.UserPass(*found)
        # libgit2 reports the authentication failure itself
        return None

    def _fill(self, url: str) -> tuple[str, str] | None:
        try:
            result = subprocess.run(
                ["git", "credential", "fill"],
                input=credential_request(url),
                capture_output=True,
                text=True,
                timeout=_HELPER_TIMEOUT_SEC,
                env={**os.environ, "GIT_TERMINAL_PROMPT": "0"},
                check=False,
            )
        except (subprocess.TimeoutExpired, OSError) as e:
            log.debug("credential_helper_unavailable", url=url, reason=str(e))
            return None
        if result.returncode != 0:
            log.debug("credential_helper_declined", url=url, returncode=result.returncode)
            return None
        return parse_credential_response(result.stdout)
