from __future__ import annotations

"""
Tree Renderer.

Serializes the scanned forest, restricted to nodes whose effective
tree-inclusion is true, into the structure block of the context. Two
styles are supported: a sorted '- path' list of files and a nested
box-drawing tree mirroring scan order.
"""

from typing import List, Mapping, Sequence, Set

from cntxtify.core.analysis.tree_generator import iter_nodes
from cntxtify.domain.constants import TREE_STYLE_BOX, TREE_STYLE_LIST, TREE_STYLES
from cntxtify.domain.selection_models import SelectionEntry
from cntxtify.domain.tree_models import TreeNode

_LIST_PREFIX = "- "

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def render_tree(
        nodes: Sequence[TreeNode],
        effective: Mapping[str, SelectionEntry],
        style: str = TREE_STYLE_LIST,
) -> str:
    """
    Render the visible part of the forest in the requested style.

    Args:
        nodes: Scanned forest.
        effective: Effective selection per node path.
        style: 'list' or 'box'.

    Returns:
        str: Rendered block without trailing newline, empty if nothing is visible.

    Raises:
        ValueError: On an unknown style.
    """
    if style == TREE_STYLE_LIST:
        return "\n".join(render_path_list(nodes, effective))
    if style == TREE_STYLE_BOX:
        lines: List[str] = []
        render_box_tree(nodes, effective, lines)
        return "\n".join(lines)
    raise ValueError(f"Unknown tree style '{style}'. Expected one of {TREE_STYLES}.")


def render_path_list(
        nodes: Sequence[TreeNode],
        effective: Mapping[str, SelectionEntry],
) -> List[str]:
    """
    Produce one '- relative/path' line per visible file, sorted by path.
    """
    paths = sorted(
        node.path for node in iter_nodes(nodes)
        if node.is_file and _is_visible(node, effective)
    )
    return [f"{_LIST_PREFIX}{p}" for p in paths]


def render_box_tree(
        nodes: Sequence[TreeNode],
        effective: Mapping[str, SelectionEntry],
        lines: List[str],
        prefix: str = "",
) -> None:
    """
    Recursively transform the forest into box-drawing lines.

    Uses standard connectors (├──, └──) and manages indentation levels for
    nested directories. Hidden nodes are skipped before connectors are
    chosen so the last visible sibling always closes its branch.

    Args:
        nodes: Current level to process.
        effective: Effective selection per node path.
        lines: Accumulator list for output strings.
        prefix: Indentation prefix for the current recursion level.
    """
    visible = [n for n in nodes if _is_visible(n, effective)]
    total = len(visible)

    for i, node in enumerate(visible):
        is_last = (i == total - 1)
        connector = "└── " if is_last else "├── "
        lines.append(f"{prefix}{connector}{node.name}")

        if node.children:
            new_prefix = prefix + ("    " if is_last else "│   ")
            render_box_tree(node.children, effective, lines, prefix=new_prefix)


def parse_path_list(text: str) -> Set[str]:
    """
    Recover the set of paths from a rendered '- path' list.

    Args:
        text: Output of the list style renderer.

    Returns:
        Set[str]: Paths listed.
    """
    return {
        line[len(_LIST_PREFIX):]
        for line in text.splitlines()
        if line.startswith(_LIST_PREFIX)
    }

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _is_visible(node: TreeNode, effective: Mapping[str, SelectionEntry]) -> bool:
    entry = effective.get(node.path)
    return entry is not None and entry.include_in_tree

