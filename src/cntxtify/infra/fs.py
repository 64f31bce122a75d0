from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides cross-platform path manipulation, relative path normalization and
output persistence. Acts as an abstraction over the 'os' module so paths
reaching the rest of the application are always '/'-separated.
"""

import os
from typing import Optional

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "cntxtify"
UNIX_APP_DIR_NAME = ".cntxtify"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for application data.

    Standards:
    - Windows: %LOCALAPPDATA%/cntxtify
    - Linux/Mac: ~/.cntxtify

    The directory is not created; callers only read from it.

    Returns:
        str: Absolute path to the application data directory.
    """
    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            return os.path.abspath(os.path.join(base, APP_DIR_NAME))

    home = os.path.expanduser("~")
    return os.path.abspath(os.path.join(home, UNIX_APP_DIR_NAME))


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a directory path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.abspath(p)


def join_rel_path(root_path: str, rel_path: str) -> str:
    """Map a '/'-separated relative path back to a native absolute path."""
    return os.path.join(root_path, *rel_path.split("/"))

# -----------------------------------------------------------------------------
# OUTPUT PERSISTENCE
# -----------------------------------------------------------------------------

def write_text_file(path: str, text: str) -> str:
    """
    Persist text to disk, creating parent directories as needed.

    Args:
        path: Target file path.
        text: Content to write.

    Returns:
        str: Absolute path of the written file.

    Raises:
        OSError: If the file cannot be written.
    """
    abs_path = os.path.abspath(path)
    parent = os.path.dirname(abs_path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(abs_path, "w", encoding="utf-8", newline="") as f:
        f.write(text)
    return abs_path
