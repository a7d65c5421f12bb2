"""Ephemeral workspace for downloads and clones."""

from cratecheck.workspace.urls import trim_remote_url
from cratecheck.workspace.workspace import Workspace

__all__ = ["Workspace", "trim_remote_url"]
