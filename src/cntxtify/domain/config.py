from __future__ import annotations

"""
Configuration Domain Management.

Handles runtime settings of the assembly pipeline: defaults, and an
optional JSON settings file read from an explicit path or from the user
data directory. Settings are never written back by the pipeline.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from cntxtify.domain.constants import (
    DEFAULT_IGNORE_FILE,
    DEFAULT_MAX_FILE_BYTES,
    DEFAULT_MAX_WORKERS,
    TREE_STYLE_LIST,
)
from cntxtify.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "settings.json"


def get_default_settings_path() -> str:
    """Location of the optional per-user settings file."""
    return os.path.join(get_user_data_dir(), SETTINGS_FILE_NAME)

# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------

def get_default_settings() -> Dict[str, Any]:
    """
    Generate the default runtime settings.
    This dictionary drives filtering, rendering and read fan-out.

    Returns:
        Dict[str, Any]: Default settings values.
    """
    return {
        # Rendering
        "tree_style": TREE_STYLE_LIST,

        # Filtering
        "respect_gitignore": True,
        "ignore_file": DEFAULT_IGNORE_FILE,
        "exclude_patterns": [],
        "max_file_bytes": DEFAULT_MAX_FILE_BYTES,

        # Performance
        "max_workers": DEFAULT_MAX_WORKERS,
    }

# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------

def load_settings(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load runtime settings, merging a JSON file over the defaults.

    When no path is given the per-user settings file is used if it exists.
    Unknown keys are kept so the validator can report them.

    Args:
        path: Optional explicit settings file.

    Returns:
        Dict[str, Any]: The merged settings or the defaults on failure.
    """
    settings = get_default_settings()
    target = path or get_default_settings_path()

    if not os.path.exists(target):
        if path:
            logger.warning(f"Settings file not found: {target}. Using defaults.")
        else:
            logger.debug("Settings file not found. Returning defaults.")
        return settings

    try:
        with open(target, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load settings from '{target}': {e}. Using defaults.")
        return settings

    if not isinstance(data, dict):
        logger.warning("Corrupted settings file. Resetting to defaults.")
        return settings

    settings.update(data)
    logger.debug(f"Settings loaded from {target}")
    return settings
