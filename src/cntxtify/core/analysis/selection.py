from __future__ import annotations

"""
Selection Resolution.

Turns a sparse, possibly stale selection map into the effective per-node
inclusion decision. Unknown paths default to inclusion (files with
content, folders tree-only), and a folder hidden from the tree hides its
whole subtree regardless of what the map says about descendants.
"""

import logging
import os
from typing import Dict, List, Mapping, Optional, Sequence

from cntxtify.core.analysis.tree_generator import iter_nodes
from cntxtify.domain.selection_models import (
    EXCLUDED,
    SelectionEntry,
    SelectionMap,
    normalize_rel_path,
)
from cntxtify.domain.tree_models import TreeNode

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def resolve(
        node: TreeNode,
        selections: SelectionMap,
        parent: Optional[SelectionEntry] = None,
) -> SelectionEntry:
    """
    Compute the effective selection of a single node.

    Args:
        node: Node to resolve.
        selections: Sparse map keyed by normalized relative path.
        parent: Effective entry of the parent folder, if any.

    Returns:
        SelectionEntry: Effective decision for the node.
    """
    if parent is not None and not parent.include_in_tree:
        return EXCLUDED

    entry = selections.get(node.path)
    if entry is None:
        return SelectionEntry(include_in_tree=True, include_content=node.is_file)

    if node.is_folder and entry.include_content:
        return SelectionEntry(include_in_tree=entry.include_in_tree, include_content=False)
    return entry


def resolve_tree(nodes: Sequence[TreeNode], selections: SelectionMap) -> Dict[str, SelectionEntry]:
    """
    Resolve every node of the forest, cascading folder exclusion downward.

    Args:
        nodes: Scanned forest.
        selections: Sparse selection map (normalized keys).

    Returns:
        Dict[str, SelectionEntry]: Effective entry for every node path.
    """
    effective: Dict[str, SelectionEntry] = {}
    _resolve_level(nodes, selections, None, effective)

    stale = [k for k in selections if k not in effective]
    if stale:
        logger.debug(f"{len(stale)} selection entries do not match any scanned path")
    return effective


def normalize_selections(raw: Mapping[str, SelectionEntry]) -> Dict[str, SelectionEntry]:
    """Normalize the keys of a caller supplied selection map."""
    out: Dict[str, SelectionEntry] = {}
    for key, entry in raw.items():
        norm = normalize_rel_path(key)
        if norm:
            out[norm] = entry
    return out


def selections_from_rules(
        nodes: Sequence[TreeNode],
        folders: Optional[Mapping[str, SelectionEntry]] = None,
        extensions: Optional[Mapping[str, SelectionEntry]] = None,
) -> Dict[str, SelectionEntry]:
    """
    Expand folder and extension rules into a per-path selection map.

    A node's entry is the logical AND of the rules for every folder on
    its path (itself included when it is a folder) and, for files, of the
    rule for its extension. Nodes without any matching rule are left out
    of the map so the default policy applies to them.

    Args:
        nodes: Scanned forest.
        folders: Rules keyed by folder relative path.
        extensions: Rules keyed by extension (e.g. '.md').

    Returns:
        Dict[str, SelectionEntry]: Sparse selection map.
    """
    folder_rules = normalize_selections(folders or {})
    ext_rules = {k.lower(): v for k, v in (extensions or {}).items()}
    out: Dict[str, SelectionEntry] = {}
    _apply_rules(nodes, folder_rules, ext_rules, [], out)
    return out


def content_paths(nodes: Sequence[TreeNode], effective: Mapping[str, SelectionEntry]) -> List[str]:
    """
    Paths of files whose effective content inclusion is true.

    Args:
        nodes: Scanned forest.
        effective: Output of resolve_tree.

    Returns:
        List[str]: Paths in ascending lexicographic order.
    """
    return sorted(
        node.path for node in iter_nodes(nodes)
        if node.is_file and effective.get(node.path, EXCLUDED).include_content
    )

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _resolve_level(
        nodes: Sequence[TreeNode],
        selections: SelectionMap,
        parent: Optional[SelectionEntry],
        effective: Dict[str, SelectionEntry],
) -> None:
    for node in nodes:
        entry = resolve(node, selections, parent)
        effective[node.path] = entry
        if node.children:
            _resolve_level(node.children, selections, entry, effective)


def _apply_rules(
        nodes: Sequence[TreeNode],
        folder_rules: Mapping[str, SelectionEntry],
        ext_rules: Mapping[str, SelectionEntry],
        inherited: List[SelectionEntry],
        out: Dict[str, SelectionEntry],
) -> None:
    for node in nodes:
        matched = list(inherited)
        if node.is_folder:
            rule = folder_rules.get(node.path)
            if rule is not None:
                matched.append(rule)
        else:
            _, ext = os.path.splitext(node.name)
            rule = ext_rules.get(ext.lower()) if ext else None
            if rule is not None:
                matched.append(rule)

        if matched:
            out[node.path] = SelectionEntry(
                include_in_tree=all(r.include_in_tree for r in matched),
                include_content=node.is_file and all(r.include_content for r in matched),
            )

        if node.children:
            folder_rule = folder_rules.get(node.path)
            child_inherited = inherited + [folder_rule] if folder_rule is not None else inherited
            _apply_rules(node.children, folder_rules, ext_rules, child_inherited, out)