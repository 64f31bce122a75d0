from __future__ import annotations

"""
Selection Domain Data Models.

Defines the per-path inclusion decisions supplied by selection surfaces
and the immutable generator configuration for one pipeline run.
"""

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

# -----------------------------------------------------------------------------
# SELECTION ENTRIES
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class SelectionEntry:
    """
    Inclusion decision for a single path.

    Content without tree visibility is meaningless, so ``include_content``
    is forced to False whenever ``include_in_tree`` is False.

    Attributes:
        include_in_tree: Show the path in the structure section.
        include_content: Emit the file body in the contents section.
    """
    include_in_tree: bool = True
    include_content: bool = True

    def __post_init__(self) -> None:
        if self.include_content and not self.include_in_tree:
            object.__setattr__(self, "include_content", False)

    def to_dict(self) -> Dict[str, bool]:
        return {"tree": self.include_in_tree, "content": self.include_content}


EXCLUDED = SelectionEntry(include_in_tree=False, include_content=False)

SelectionMap = Mapping[str, SelectionEntry]


def normalize_rel_path(path: str) -> str:
    """
    Canonicalize a relative path key to the '/'-separated form.

    Args:
        path: Raw key, possibly using backslashes or a leading './'.

    Returns:
        str: Normalized relative path without leading or trailing slashes.
    """
    p = path.replace("\\", "/").strip()
    while p.startswith("./"):
        p = p[2:]
    return p.strip("/")

# -----------------------------------------------------------------------------
# RUN CONFIGURATION
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class GeneratorConfig:
    """
    Immutable input of one assembly run.

    Attributes:
        selections: Sparse mapping of relative path to selection entry.
        user_prompt: Optional free-text instructions placed first.
        include_readme: Whether to probe and embed the root README.
    """
    selections: SelectionMap = field(default_factory=dict)
    user_prompt: Optional[str] = None
    include_readme: bool = False
