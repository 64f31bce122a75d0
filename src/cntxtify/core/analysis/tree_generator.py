from __future__ import annotations

"""
Directory Tree Generator.

Constructs the ordered hierarchical representation of a project. Each
directory level is listed, filtered through the run's PathFilter and
sorted folders-first then case-insensitively, and each subdirectory is
built by a recursive call that returns its own subtree.
"""

import logging
import os
from typing import Iterator, List, Sequence, Set

from cntxtify.core.pipeline.components.filters import PathFilter
from cntxtify.domain.pipeline_models import RootAccessError
from cntxtify.domain.tree_models import NodeKind, ScanSummary, TreeNode

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def scan_directory(root_path: str, path_filter: PathFilter) -> List[TreeNode]:
    """
    Scan a project root into an ordered forest of TreeNodes.

    Filtered entries are pruned before recursion, so excluded subtrees are
    never visited. Subdirectories that cannot be listed become empty
    folder nodes.

    Args:
        root_path: Directory to scan.
        path_filter: Participation rules for this run.

    Returns:
        List[TreeNode]: The root's immediate children with their subtrees.

    Raises:
        RootAccessError: If the root is missing, not a directory or unreadable.
    """
    root_abs = os.path.abspath(root_path)
    if not os.path.isdir(root_abs):
        raise RootAccessError(root_abs, "not a directory")

    try:
        entries = _list_entries(root_abs)
    except OSError as e:
        raise RootAccessError(root_abs, str(e)) from e

    logger.info(f"Scanning directory tree: {root_abs}")
    nodes = _build_level(root_abs, "", entries, path_filter)
    logger.debug(f"Scan complete: {sum(1 for _ in iter_nodes(nodes))} entries")
    return nodes


def iter_nodes(nodes: Sequence[TreeNode]) -> Iterator[TreeNode]:
    """Yield every node of the forest depth-first, in scan order."""
    for node in nodes:
        yield node
        if node.children:
            yield from iter_nodes(node.children)


def summarize_scan(nodes: Sequence[TreeNode]) -> ScanSummary:
    """
    Reduce a scan to the flat probe used by selection surfaces.

    Args:
        nodes: Scanned forest.

    Returns:
        ScanSummary: Folder paths in scan order and sorted extensions.
    """
    folders: List[str] = []
    extensions: Set[str] = set()
    for node in iter_nodes(nodes):
        if node.is_folder:
            folders.append(node.path)
            continue
        _, ext = os.path.splitext(node.name)
        if ext:
            extensions.add(ext.lower())
    return ScanSummary(folders=folders, extensions=sorted(extensions))

# -----------------------------------------------------------------------------
# INTERNAL HELPERS (SCANNING)
# -----------------------------------------------------------------------------

def _sort_key(entry: os.DirEntry) -> tuple:
    """Folders before files, case-insensitive name, raw name as tie-break."""
    return (not _is_dir(entry), entry.name.casefold(), entry.name)


def _is_dir(entry: os.DirEntry) -> bool:
    # Links are never followed so that link cycles cannot recurse forever
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError:
        return False


def _list_entries(abs_dir: str) -> List[os.DirEntry]:
    with os.scandir(abs_dir) as it:
        return sorted(it, key=_sort_key)


def _build_level(
        abs_dir: str,
        rel_dir: str,
        entries: List[os.DirEntry],
        path_filter: PathFilter,
) -> List[TreeNode]:
    """
    Build the nodes of one directory level from its sorted entries.
    """
    level: List[TreeNode] = []

    for entry in entries:
        rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
        is_dir = _is_dir(entry)

        if not path_filter.includes(rel_path, is_dir):
            continue

        if not is_dir:
            level.append(TreeNode(name=entry.name, path=rel_path, kind=NodeKind.FILE))
            continue

        level.append(TreeNode(
            name=entry.name,
            path=rel_path,
            kind=NodeKind.FOLDER,
            children=tuple(_scan_subdirectory(entry.path, rel_path, path_filter)),
        ))

    return level


def _scan_subdirectory(abs_dir: str, rel_dir: str, path_filter: PathFilter) -> List[TreeNode]:
    """List and recurse into a subdirectory, degrading to empty on failure."""
    try:
        entries = _list_entries(abs_dir)
    except OSError as e:
        logger.warning(f"Failed to read directory '{rel_dir}': {e}")
        return []
    return _build_level(abs_dir, rel_dir, entries, path_filter)
