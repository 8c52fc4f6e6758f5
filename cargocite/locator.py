"""Discovery of Cargo manifests below a starting directory."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, FrozenSet, Iterator, List, Optional, Tuple

from .logging import get_logger
from .manifest import MANIFEST_FILENAME

logger = get_logger("locator")


def find_manifests(
    start_dir: Path,
    max_depth: Optional[int] = None,
    *,
    filename: str = MANIFEST_FILENAME,
) -> List[Path]:
    """Return every ``filename`` found below ``start_dir``.

    ``start_dir`` is level 0. ``None`` or a negative ``max_depth`` walks the
    whole tree, otherwise directories deeper than ``max_depth`` are not
    entered. Symbolic links are followed; unreadable entries are logged and
    skipped. Results follow a sorted top-down walk, so they are stable for an
    unchanged tree.
    """
    found: List[Path] = []
    for path in _iter_matches(Path(start_dir), _normalise_depth(max_depth), filename):
        logger.info("Found %s at: %s", filename, path)
        found.append(path)
    return found


def describe_scope(max_depth: Optional[int]) -> str:
    """Return the human-readable suffix used when announcing a search."""
    if max_depth is None:
        return " (searching all subdirectories)"
    if max_depth < 0:
        return " and all subdirectories"
    if max_depth == 0:
        return " (current directory only)"
    return f" (max depth: {max_depth})"


def _normalise_depth(max_depth: Optional[int]) -> Optional[int]:
    if max_depth is None or max_depth < 0:
        return None
    return max_depth


def _report_walk_error(error: OSError) -> None:
    logger.warning("Error accessing path %s: %s", error.filename, error.strerror or error)


def _iter_matches(root: Path, max_depth: Optional[int], filename: str) -> Iterator[Path]:
    # Keys of each walked directory plus its ancestors; a link is only a loop
    # when it points back into its own branch.
    branches: Dict[str, FrozenSet[Tuple[int, int]]] = {}

    for dirpath, dirnames, filenames in os.walk(root, onerror=_report_walk_error, followlinks=True):
        current_dir = Path(dirpath)
        depth = len(current_dir.relative_to(root).parts)

        key = _directory_key(current_dir)
        if key is None:
            dirnames[:] = []
            continue
        ancestors = branches.get(os.path.dirname(dirpath), frozenset()) if depth else frozenset()
        if key in ancestors:
            logger.warning("Skipping %s: filesystem loop detected", current_dir)
            dirnames[:] = []
            continue
        branches[dirpath] = ancestors | {key}

        if max_depth is not None and depth >= max_depth:
            dirnames[:] = []
        else:
            dirnames.sort()

        if filename not in filenames:
            continue
        candidate = current_dir / filename
        if candidate.is_file():
            yield candidate
        elif candidate.is_symlink():
            logger.warning("Error accessing path %s: broken symbolic link", candidate)


def _directory_key(directory: Path) -> Optional[Tuple[int, int]]:
    try:
        stat_result = directory.stat()
    except OSError as exc:
        _report_walk_error(exc)
        return None
    return (stat_result.st_dev, stat_result.st_ino)


__all__ = ["describe_scope", "find_manifests"]
