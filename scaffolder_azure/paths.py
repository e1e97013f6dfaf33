"""
paths.py

Responsibility: Keep user-supplied working subdirectories inside the workspace.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

from scaffolder_azure.errors import PathSafetyError

_LEADING_PARENT_SEGMENTS = re.compile(r"^(\.\.([/\\]|$))+")


def is_child_path(base: str | Path, path: str | Path) -> bool:
    """True if `path` is `base` itself or lies below it (after resolving)."""
    base_resolved = Path(base).resolve()
    try:
        Path(path).resolve().relative_to(base_resolved)
    except ValueError:
        return False
    return True


def resolve_safe_child_path(base: str | Path, path: str | Path) -> Path:
    """
    Join `path` onto `base` and refuse anything that resolves outside `base`.

    Unlike `get_repo_source_directory`, parent segments are not stripped.
    """
    target = (Path(base) / path).resolve()
    if not is_child_path(base, target):
        raise PathSafetyError(f"Relative path is not allowed to refer to a directory outside its parent: {path}")
    return target


def get_repo_source_directory(workspace_path: str | Path, source_path: str | None) -> Path:
    """
    Return the repository directory inside the workspace.

    Leading `../` (or `..\\`) segments are dropped, so `../../etc` maps to
    `<workspace>/etc`. Any remaining escape (e.g. an absolute path, or `..`
    in the middle) is rejected.
    """
    if not source_path:
        return Path(workspace_path)

    safe_suffix = _LEADING_PARENT_SEGMENTS.sub("", os.path.normpath(source_path))
    joined = Path(os.path.normpath(os.path.join(workspace_path, safe_suffix)))
    if not is_child_path(workspace_path, joined):
        raise PathSafetyError("Invalid source path")
    return joined
