from __future__ import annotations

"""
Unit tests for the CLI Application Controller.

Runs ``main(argv)`` in-process with logging bootstrap and settings
lookup patched out, checking exit codes and stream separation.
"""

import json
from unittest.mock import patch

import pytest

from cntxtify.domain.config import get_default_settings
from cntxtify.interface.cli import app


@pytest.fixture(autouse=True)
def isolated_environment():
    with patch("cntxtify.interface.cli.app.configure_logging"), \
            patch("cntxtify.interface.cli.app.load_settings", side_effect=lambda path=None: get_default_settings()):
        yield


def test_generate_exit_code_and_streams(sample_project, capsys) -> None:
    code = app.main(["generate", str(sample_project)])
    out, err = capsys.readouterr()

    assert code == 0
    assert out.startswith("PROJECT STRUCTURE:\n")
    assert "Files included: 5" in err


def test_generate_model_report(sample_project, capsys) -> None:
    with patch("cntxtify.interface.cli.app.count_tokens", return_value=123) as mock_count:
        code = app.main(["generate", str(sample_project), "--model", "gpt-4o"])

    _, err = capsys.readouterr()
    assert code == 0
    assert "Tokens for gpt-4o: 123" in err
    assert mock_count.call_args[0][1] == "gpt-4o"


def test_generate_missing_root(tmp_path, capsys) -> None:
    code = app.main(["generate", str(tmp_path / "missing")])
    assert code == 2
    assert "does not exist" in capsys.readouterr().err


def test_generate_root_becomes_inaccessible(sample_project, capsys) -> None:
    with patch("cntxtify.core.analysis.tree_generator.os.scandir", side_effect=PermissionError("denied")):
        code = app.main(["generate", str(sample_project)])

    assert code == 2
    assert "Cannot access project root" in capsys.readouterr().err


def test_unexpected_failure_exit_code(sample_project, capsys) -> None:
    with patch("cntxtify.interface.cli.app.run_pipeline", side_effect=RuntimeError("boom")):
        code = app.main(["generate", str(sample_project)])

    assert code == 1
    assert "boom" in capsys.readouterr().err


def test_keyboard_interrupt_exit_code(sample_project) -> None:
    with patch("cntxtify.interface.cli.app.run_pipeline", side_effect=KeyboardInterrupt):
        assert app.main(["generate", str(sample_project)]) == 130


def test_scan_json(sample_project, capsys) -> None:
    code = app.main(["scan", str(sample_project), "--exclude", "^docs$"])
    out, _ = capsys.readouterr()

    assert code == 0
    assert json.loads(out)["folders"] == ["src"]


def test_generate_hides_dot_folder(sample_project, capsys) -> None:
    """A '--hide .github' rule removes the folder from tree and contents."""
    ci_dir = sample_project / ".github"
    ci_dir.mkdir()
    (ci_dir / "ci.yml").write_text("on: push", encoding="utf-8")

    code = app.main(["generate", str(sample_project), "--hide", ".github"])
    out, _ = capsys.readouterr()

    assert code == 0
    assert ".github" not in out
    assert "on: push" not in out
    assert "- src/a.ts" in out
