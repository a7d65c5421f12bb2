"""Tests for pygit2 error translation."""

from __future__ import annotations

import pygit2
import pytest

from cratecheck.git._internal import git_operation
from cratecheck.git.errors import AuthenticationError, GitError, RemoteError


class TestGitOperation:
    def test_local_failure_becomes_git_error(self) -> None:
        with pytest.raises(GitError) as exc_info, git_operation("checkout"):
            raise pygit2.GitError("index locked")

        assert type(exc_info.value) is GitError
        assert "checkout failed: index locked" in str(exc_info.value)

    def test_remote_failure_becomes_remote_error(self) -> None:
        with pytest.raises(RemoteError) as exc_info, git_operation("fetch", remote="source"):
            raise pygit2.GitError("failed to resolve address")

        assert exc_info.value.remote == "source"

    @pytest.mark.parametrize(
        "message",
        ["authentication required but no callback set", "unexpected http status code: 401"],
    )
    def test_rejected_credentials_become_authentication_error(self, message: str) -> None:
        with pytest.raises(AuthenticationError) as exc_info, git_operation("clone", remote="https://x/o/r"):
            raise pygit2.GitError(message)

        assert exc_info.value.operation == "clone"

    def test_auth_text_without_remote_stays_git_error(self) -> None:
        with pytest.raises(GitError) as exc_info, git_operation("init"):
            raise pygit2.GitError("credential store unreadable")

        assert not isinstance(exc_info.value, AuthenticationError)

    def test_other_exceptions_pass_through(self) -> None:
        with pytest.raises(KeyError), git_operation("diff"):
            raise KeyError("src")
