from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared on-disk project fixtures used across unit and integration tests.
"""

import os
import sys
from pathlib import Path

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """
    Create a small project on disk.

    Structure:
    /project
      /docs
        guide.md
      /node_modules
        /lib
          index.js
      /src
        a.ts
        b.ts
      README.md
      setup.cfg
    """
    root = tmp_path / "project"
    root.mkdir()

    src = root / "src"
    src.mkdir()
    (src / "a.ts").write_text("export const a = 1;", encoding="utf-8")
    (src / "b.ts").write_text("export const b = 2;", encoding="utf-8")

    docs = root / "docs"
    docs.mkdir()
    (docs / "guide.md").write_text("# Guide", encoding="utf-8")

    deps = root / "node_modules" / "lib"
    deps.mkdir(parents=True)
    (deps / "index.js").write_text("module.exports = {};", encoding="utf-8")

    (root / "README.md").write_text("# Hi", encoding="utf-8")
    (root / "setup.cfg").write_text("[metadata]\nname = demo\n", encoding="utf-8")

    return root

