from __future__ import annotations

"""
Domain Constants and Static Data Structures.

Centralizes the text format markers of the assembled context, the
built-in exclusion set, README probe order and token tier thresholds.
Downstream tooling parses the assembled text, so the markers below are
part of the output contract.
"""

from typing import FrozenSet, List, Tuple

APP_NAME = "cntxtify"

# -----------------------------------------------------------------------------
# OUTPUT FORMAT
# -----------------------------------------------------------------------------

SECTION_SEPARATOR = "=" * 64

USER_INSTRUCTIONS_HEADER = "USER INSTRUCTIONS:"
README_HEADER = "PROJECT README ({name}):"
STRUCTURE_HEADER = "PROJECT STRUCTURE:"
CONTENTS_HEADER = "FILE CONTENTS:"

FILE_START_MARKER = "--- START FILE: {path} ---"
FILE_END_MARKER = "--- END FILE: {path} ---"
READ_ERROR_PLACEHOLDER = "[Error reading file: {path}]"

TREE_STYLE_LIST = "list"
TREE_STYLE_BOX = "box"
TREE_STYLES: Tuple[str, ...] = (TREE_STYLE_LIST, TREE_STYLE_BOX)

# First match wins; never more than one README is embedded
README_CANDIDATES: List[str] = ["README.md", "Readme.md", "readme.md", "README.txt"]

# -----------------------------------------------------------------------------
# FILTERING DEFAULTS
# -----------------------------------------------------------------------------

DEFAULT_IGNORE_FILE = ".gitignore"
DEFAULT_MAX_FILE_BYTES = 1024 * 1024
DEFAULT_MAX_WORKERS = 8

DEFAULT_DENY_NAMES: FrozenSet[str] = frozenset({
    # Version control
    ".git", ".hg", ".svn",
    # Dependency caches
    "node_modules", "bower_components", "__pycache__", ".venv", "venv",
    ".tox", ".mypy_cache", ".pytest_cache", ".ruff_cache",
    # Build output
    "dist", "out", "build",
    # Editor settings
    ".vscode", ".idea",
    # OS metadata
    ".DS_Store", "Thumbs.db", "desktop.ini",
    # Lockfiles
    "package-lock.json", "yarn.lock", "pnpm-lock.yaml", "poetry.lock",
    "Pipfile.lock", "Cargo.lock", "composer.lock", "Gemfile.lock", "uv.lock",
})

# -----------------------------------------------------------------------------
# TOKEN ESTIMATION
# -----------------------------------------------------------------------------

CHARS_PER_TOKEN = 4
DEFAULT_MODEL = "- Heuristic -"

TIER_LOW_LIMIT = 6000
TIER_MODERATE_LIMIT = 25000

TIER_HINTS = {
    "LOW": "Fits all models (GPT-3.5, Llama 3, standard Claude)",
    "MODERATE": "Good for GPT-4, Claude 3.5 Sonnet or Gemini Pro",
    "HIGH": "Requires large context models (Claude 3 Opus, Gemini 1.5, GPT-4 Turbo)",
}
