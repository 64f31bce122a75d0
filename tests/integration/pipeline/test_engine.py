from __future__ import annotations

"""
Integration tests for the Context Generation Pipeline.

Runs the full scan -> resolve -> render -> aggregate -> assemble chain
against real temporary projects.
"""

import os
from unittest.mock import patch

import pytest

from cntxtify.core.pipeline.engine import generate_context, run_pipeline, scan_project
from cntxtify.core.pipeline.stages.aggregator import aggregate_contents
from cntxtify.core.processing.tokenizer import estimate_tokens
from cntxtify.domain.pipeline_models import RootAccessError
from cntxtify.domain.selection_models import EXCLUDED, GeneratorConfig, SelectionEntry

SEP = "=" * 64


@pytest.fixture
def ts_project(tmp_path):
    """
    /root
      /src
        a.ts  ("A")
        b.ts  ("B")
      README.md  ("# Hi")
    """
    root = tmp_path / "root"
    (root / "src").mkdir(parents=True)
    (root / "src" / "a.ts").write_text("A", encoding="utf-8")
    (root / "src" / "b.ts").write_text("B", encoding="utf-8")
    (root / "README.md").write_text("# Hi", encoding="utf-8")
    return root


def test_tree_only_file_and_readme(ts_project) -> None:
    """b.ts stays in the tree without content; README is embedded once."""
    tree_only = SelectionEntry(include_in_tree=True, include_content=False)
    config = GeneratorConfig(
        selections={"src/b.ts": tree_only, "README.md": tree_only},
        user_prompt="focus on a.ts",
        include_readme=True,
    )

    result = generate_context(str(ts_project), config)

    expected = (
        f"USER INSTRUCTIONS:\nfocus on a.ts\n{SEP}\n\n"
        f"PROJECT README (README.md):\n\n# Hi\n\n{SEP}\n\n"
        f"PROJECT STRUCTURE:\n- README.md\n- src/a.ts\n- src/b.ts\n\n{SEP}\n\n"
        "FILE CONTENTS:\n\n"
        "--- START FILE: src/a.ts ---\nA\n--- END FILE: src/a.ts ---\n\n"
    )
    assert result.output == expected
    assert result.token_count == estimate_tokens(expected)


def test_default_selection_includes_everything(ts_project) -> None:
    result = generate_context(str(ts_project), GeneratorConfig())

    assert not result.output.startswith("USER INSTRUCTIONS")
    assert "PROJECT README" not in result.output
    assert "--- START FILE: src/b.ts ---\nB\n" in result.output


def test_hidden_folder_excludes_subtree(ts_project) -> None:
    config = GeneratorConfig(selections={"src": EXCLUDED, "src/a.ts": SelectionEntry(True, True)})

    result = generate_context(str(ts_project), config)

    assert "src/" not in result.output
    assert "PROJECT STRUCTURE:\n- README.md\n\n" in result.output


def test_everything_hidden_omits_structure(ts_project) -> None:
    config = GeneratorConfig(selections={"src": EXCLUDED, "README.md": EXCLUDED})

    result = generate_context(str(ts_project), config)

    assert result.output == "FILE CONTENTS:\n\n"


def test_vanished_path_is_skipped(ts_project) -> None:
    """A file deleted between scan and read disappears without a placeholder."""
    def delete_then_aggregate(root_path, rel_paths, path_filter, max_workers=8):
        os.remove(os.path.join(root_path, "src", "a.ts"))
        return aggregate_contents(root_path, rel_paths, path_filter, max_workers=max_workers)

    with patch("cntxtify.core.pipeline.engine.aggregate_contents", side_effect=delete_then_aggregate):
        result = run_pipeline(str(ts_project), GeneratorConfig())

    assert result.ok
    assert "START FILE: src/a.ts" not in result.result.output
    assert "[Error reading file" not in result.result.output
    assert "- src/a.ts" in result.result.output
    assert result.summary["files_skipped"] == 1


def test_stale_selection_keys_do_not_fail(ts_project) -> None:
    config = GeneratorConfig(selections={"src/deleted.ts": SelectionEntry(True, True)})
    result = generate_context(str(ts_project), config)
    assert "deleted.ts" not in result.output


def test_missing_root_raises(tmp_path) -> None:
    with pytest.raises(RootAccessError):
        generate_context(str(tmp_path / "missing"), GeneratorConfig())


def test_run_pipeline_reports_root_error(tmp_path) -> None:
    result = run_pipeline(str(tmp_path / "missing"), GeneratorConfig())

    assert not result.ok
    assert "Cannot access project root" in result.error
    assert result.result is None


def test_run_pipeline_success_summary(ts_project) -> None:
    result = run_pipeline(str(ts_project), GeneratorConfig())

    assert result.ok
    assert result.tier.label == "LOW"
    assert result.summary["files_included"] == 3
    assert result.summary["errors"] == 0
    assert result.summary["token_count"] == result.result.token_count


def test_settings_drive_filtering_and_style(ts_project) -> None:
    (ts_project / ".gitignore").write_text("*.md\n", encoding="utf-8")

    result = generate_context(str(ts_project), GeneratorConfig(), {"tree_style": "box"})

    assert "README.md" not in result.output
    assert "PROJECT STRUCTURE:\n├── src\n│   ├── a.ts\n│   └── b.ts\n└── .gitignore\n" in result.output


def test_scan_project(ts_project) -> None:
    nodes = scan_project(str(ts_project))
    assert [n.path for n in nodes] == ["src", "README.md"]


def test_root_name_with_dollar_is_not_expanded(tmp_path) -> None:
    """A literal '$NAME' directory is used as-is even when NAME is set."""
    root = tmp_path / "$CNTXTIFY_PROJ"
    root.mkdir()
    (root / "main.py").write_text("print(1)", encoding="utf-8")
    (tmp_path / "elsewhere").mkdir()

    with patch.dict(os.environ, {"CNTXTIFY_PROJ": str(tmp_path / "elsewhere")}):
        result = run_pipeline(str(root), GeneratorConfig())
        nodes = scan_project(str(root))

    assert result.ok
    assert result.root_path == str(root)
    assert "--- START FILE: main.py ---\nprint(1)\n--- END FILE: main.py ---" in result.result.output
    assert [n.path for n in nodes] == ["main.py"]
