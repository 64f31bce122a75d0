from __future__ import annotations

"""
Configuration Validation Service.

Acts as the gatekeeper for the pipeline, converting untrusted JSON-like
input (settings files, CLI overrides, selection payloads posted by a
selection surface) into strictly typed values. Handles type coercion and
default injection; in strict mode mismatches raise instead of warning.
"""

import logging
from typing import Any, Dict, List, Mapping, Tuple

from cntxtify.domain.config import get_default_settings
from cntxtify.domain.constants import TREE_STYLES
from cntxtify.domain.selection_models import (
    GeneratorConfig,
    SelectionEntry,
    normalize_rel_path,
)

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_settings(
        settings: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the runtime settings dictionary.

    Args:
        settings: Raw settings data (usually a dictionary).
        strict: If True, raises exceptions on type mismatch instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: Normalized settings and warnings.
    """
    warnings: List[str] = []
    defaults = get_default_settings()

    if not isinstance(settings, dict):
        msg = f"Invalid settings type: expected dict, received {type(settings).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    unknown = sorted(set(settings) - set(defaults))
    for key in unknown:
        warnings.append(f"Unknown setting '{key}' ignored.")

    merged: Dict[str, Any] = dict(defaults)
    merged.update({k: v for k, v in settings.items() if k in defaults})

    merged["tree_style"] = _as_str(merged.get("tree_style"), defaults["tree_style"], "tree_style", warnings, strict)
    if merged["tree_style"] not in TREE_STYLES:
        msg = f"Invalid field 'tree_style': '{merged['tree_style']}' not in {TREE_STYLES}."
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Using fallback.")
        merged["tree_style"] = defaults["tree_style"]

    merged["ignore_file"] = _as_str(merged.get("ignore_file"), defaults["ignore_file"], "ignore_file", warnings, strict)

    merged["respect_gitignore"] = _as_bool(
        merged.get("respect_gitignore"), defaults["respect_gitignore"], "respect_gitignore", warnings, strict
    )

    merged["exclude_patterns"] = _as_list_str(
        merged.get("exclude_patterns"), defaults["exclude_patterns"], "exclude_patterns", warnings, strict
    )

    merged["max_file_bytes"] = _as_int(
        merged.get("max_file_bytes"), defaults["max_file_bytes"], "max_file_bytes", warnings, strict, minimum=0
    )
    merged["max_workers"] = _as_int(
        merged.get("max_workers"), defaults["max_workers"], "max_workers", warnings, strict, minimum=1
    )

    return merged, warnings


def parse_generator_config(
        payload: Any,
        *,
        strict: bool = False,
) -> Tuple[GeneratorConfig, List[str]]:
    """
    Build a GeneratorConfig from a JSON-compatible payload.

    Accepts ``{"selections": {path: {"tree": bool, "content": bool}},
    "userPrompt": str, "includeReadme": bool}``; snake_case keys are also
    accepted. A ``content=true`` entry whose ``tree`` is false is
    normalized to fully excluded.

    Args:
        payload: Raw decoded JSON.
        strict: If True, raises exceptions on malformed input.

    Returns:
        Tuple[GeneratorConfig, List[str]]: Parsed configuration and warnings.
    """
    warnings: List[str] = []

    if payload is None:
        return GeneratorConfig(), warnings

    if not isinstance(payload, dict):
        msg = f"Invalid generator config: expected dict, received {type(payload).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        return GeneratorConfig(), warnings

    raw_prompt = _first_present(payload, "userPrompt", "user_prompt")
    prompt = None
    if raw_prompt is not None:
        if isinstance(raw_prompt, str):
            prompt = raw_prompt
        else:
            msg = f"Invalid field 'userPrompt': expected str, received {type(raw_prompt).__name__}."
            if strict:
                raise TypeError(msg)
            warnings.append(f"{msg} Ignored.")

    include_readme = _as_bool(
        _first_present(payload, "includeReadme", "include_readme"), False, "includeReadme", warnings, strict
    )

    selections = parse_selection_map(payload.get("selections"), warnings, strict)

    return GeneratorConfig(
        selections=selections,
        user_prompt=prompt,
        include_readme=include_readme,
    ), warnings


def parse_selection_map(raw: Any, warnings: List[str], strict: bool) -> Dict[str, SelectionEntry]:
    """
    Convert the ``selections`` payload into normalized SelectionEntries.

    Args:
        raw: Mapping of path to ``{"tree": bool, "content": bool}``.
        warnings: Accumulator for coercion warnings.
        strict: If True, raises on malformed entries.

    Returns:
        Dict[str, SelectionEntry]: Normalized sparse selection map.
    """
    if raw is None:
        return {}

    if not isinstance(raw, Mapping):
        msg = f"Invalid field 'selections': expected dict, received {type(raw).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using empty selection.")
        return {}

    out: Dict[str, SelectionEntry] = {}
    for key, value in raw.items():
        path = normalize_rel_path(str(key))
        if not path:
            warnings.append(f"Selection key '{key}' is not a relative path. Entry discarded.")
            continue

        if not isinstance(value, Mapping):
            msg = f"Invalid selection for '{key}': expected dict."
            if strict:
                raise TypeError(msg)
            warnings.append(f"{msg} Entry discarded.")
            continue

        tree = _as_bool(value.get("tree"), True, f"selections[{key}].tree", warnings, strict)
        content = _as_bool(value.get("content"), tree, f"selections[{key}].content", warnings, strict)
        if content and not tree:
            warnings.append(f"Selection '{path}' requests content without tree. Content dropped.")
        out[path] = SelectionEntry(include_in_tree=tree, include_content=content)

    return out

# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _first_present(data: Mapping[str, Any], *keys: str) -> Any:
    for k in keys:
        if k in data:
            return data[k]
    return None


def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        # Support numeric coercion (0/1)
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        # Support string coercion (human-friendly keywords)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_int(
        value: Any,
        fallback: int,
        field: str,
        warnings: List[str],
        strict: bool,
        minimum: int = 0,
) -> int:
    """Coerce numeric input into an int not lower than ``minimum``."""
    if value is None:
        return fallback

    result = None
    if isinstance(value, int) and not isinstance(value, bool):
        result = value
    elif not strict and isinstance(value, str) and value.strip().isdigit():
        warnings.append(f"Field '{field}' converted from '{value}' to int.")
        result = int(value.strip())

    if result is None:
        msg = f"Invalid field '{field}': expected int, received {type(value).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using fallback.")
        return fallback

    if result < minimum:
        msg = f"Invalid field '{field}': {result} is lower than {minimum}."
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Using fallback.")
        return fallback

    return result


def _as_list_str(value: Any, fallback: List[str], field: str, warnings: List[str], strict: bool) -> List[str]:
    """Ensure input is a list of sanitized strings, supporting CSV parsing."""
    if value is None:
        return list(fallback)

    # Support CSV string to list conversion for CLI compatibility
    if isinstance(value, str) and not strict:
        items = [x.strip() for x in value.split(",") if x.strip()]
        warnings.append(f"Field '{field}' converted from CSV string to list.")
        return items

    if isinstance(value, list):
        out: List[str] = []
        for i, item in enumerate(value):
            if isinstance(item, str):
                s = item.strip()
                if s:
                    out.append(s)
            else:
                msg = f"Invalid item in '{field}[{i}]': expected str."
                if strict:
                    raise TypeError(msg)
                warnings.append(f"{msg} Item discarded.")
        return out

    msg = f"Invalid field '{field}': expected list[str], received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return list(fallback)
