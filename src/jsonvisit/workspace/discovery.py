"""Locate the workspace descriptor by walking up parent directories."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from jsonvisit.errors import WorkspaceNotFoundError

logger = logging.getLogger(__name__)

__all__ = ["WORKSPACE_FILE_NAME", "find_up", "locate_workspace"]

WORKSPACE_FILE_NAME = ".workspace.json"


def find_up(names: str | Sequence[str], start: Path) -> Path | None:
    """Find the first of ``names`` in ``start`` or one of its parents.

    Candidates are checked in order within each directory before moving up.
    The filesystem root itself is not searched.

    Args:
        names: File name or names to look for
        start: Directory to start from

    Returns:
        Path to the first match, or None if nothing was found
    """
    if isinstance(names, str):
        names = [names]
    current = start.resolve()
    root = Path(current.anchor)

    while current != root:
        for name in names:
            candidate = current / name
            if candidate.exists():
                return candidate
        current = current.parent

    return None


def locate_workspace(start: Path, file_name: str = WORKSPACE_FILE_NAME) -> Path:
    """Return the workspace descriptor path for ``start``.

    Raises:
        WorkspaceNotFoundError: If no descriptor exists up to the filesystem root.
    """
    path = find_up(file_name, start)
    if path is None:
        raise WorkspaceNotFoundError(file_name, str(start))
    logger.info(f"Using workspace descriptor {path}")
    return path
