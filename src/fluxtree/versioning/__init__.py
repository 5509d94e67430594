"""Workspace-aware resolution of the row an operation acts upon."""

from fluxtree.versioning.resolver import VersionResolver

__all__ = ["VersionResolver"]
