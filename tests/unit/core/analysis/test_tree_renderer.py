from __future__ import annotations

"""
Unit tests for the Tree Renderer.

Verifies both rendering styles, the exclusion of hidden nodes and the
round trip between the list rendering and the set of visible files.
"""

import pytest

from cntxtify.core.analysis.selection import resolve_tree
from cntxtify.core.analysis.tree_renderer import parse_path_list, render_tree
from cntxtify.domain.selection_models import EXCLUDED, SelectionEntry
from cntxtify.domain.tree_models import NodeKind, TreeNode


@pytest.fixture
def forest():
    b = TreeNode("b.ts", "src/b.ts", NodeKind.FILE)
    a = TreeNode("a.ts", "src/a.ts", NodeKind.FILE)
    src = TreeNode("src", "src", NodeKind.FOLDER, (a, b))
    docs = TreeNode("docs", "docs", NodeKind.FOLDER, (TreeNode("x.md", "docs/x.md", NodeKind.FILE),))
    readme = TreeNode("README.md", "README.md", NodeKind.FILE)
    return [docs, src, readme]


def test_list_style_lists_visible_files_sorted(forest) -> None:
    effective = resolve_tree(forest, {"docs": EXCLUDED})

    text = render_tree(forest, effective, "list")

    assert text == "- README.md\n- src/a.ts\n- src/b.ts"


def test_list_round_trip(forest) -> None:
    """Parsing the list rendering yields exactly the visible file paths."""
    effective = resolve_tree(forest, {"src/b.ts": SelectionEntry(True, False)})

    parsed = parse_path_list(render_tree(forest, effective, "list"))

    assert parsed == {"README.md", "docs/x.md", "src/a.ts", "src/b.ts"}


def test_box_style_connectors(forest) -> None:
    effective = resolve_tree(forest, {})

    lines = render_tree(forest, effective, "box").splitlines()

    assert lines == [
        "├── docs",
        "│   └── x.md",
        "├── src",
        "│   ├── a.ts",
        "│   └── b.ts",
        "└── README.md",
    ]


def test_box_style_last_visible_sibling_closes_branch(forest) -> None:
    effective = resolve_tree(forest, {"README.md": EXCLUDED, "src/b.ts": EXCLUDED})

    lines = render_tree(forest, effective, "box").splitlines()

    assert lines == [
        "├── docs",
        "│   └── x.md",
        "└── src",
        "    └── a.ts",
    ]


def test_nothing_visible_renders_empty(forest) -> None:
    effective = resolve_tree(forest, {"docs": EXCLUDED, "src": EXCLUDED, "README.md": EXCLUDED})

    assert render_tree(forest, effective, "list") == ""
    assert render_tree(forest, effective, "box") == ""


def test_unknown_style_raises(forest) -> None:
    with pytest.raises(ValueError):
        render_tree(forest, resolve_tree(forest, {}), "fancy")
