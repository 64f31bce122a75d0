from __future__ import annotations

"""
Context Assembler Stage.

Formats the individual sections of the context artifact and joins them
in their fixed order:
1. User instructions (only when the trimmed prompt is non-empty).
2. Project README (only when requested and a candidate exists).
3. Project structure (only when the rendered tree is non-empty).
4. File contents (header always present).
The token estimate is computed once over the joined text.
"""

import logging
import os
from typing import Optional, Tuple

from cntxtify.core.processing.tokenizer import estimate_tokens
from cntxtify.domain.constants import (
    CONTENTS_HEADER,
    README_CANDIDATES,
    README_HEADER,
    SECTION_SEPARATOR,
    STRUCTURE_HEADER,
    USER_INSTRUCTIONS_HEADER,
)
from cntxtify.domain.pipeline_models import AssemblyResult

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# SECTION FORMATTERS
# -----------------------------------------------------------------------------

def format_instructions_block(user_prompt: Optional[str]) -> str:
    """Instructions section, or an empty string for a blank prompt."""
    if not user_prompt or not user_prompt.strip():
        return ""
    return f"{USER_INSTRUCTIONS_HEADER}\n{user_prompt}\n{SECTION_SEPARATOR}\n\n"


def find_readme(root_path: str) -> Optional[Tuple[str, str]]:
    """
    Probe the README candidates at the project root.

    Candidates are tried in their fixed order; the first one that is a
    readable regular file wins. Symbolic links are skipped. A candidate
    that exists but fails to read is logged and the probe moves on to the
    next one.

    Args:
        root_path: Absolute project root.

    Returns:
        Optional[Tuple[str, str]]: (candidate name, text) or None.
    """
    for name in README_CANDIDATES:
        path = os.path.join(root_path, name)
        if os.path.islink(path) or not os.path.isfile(path):
            continue
        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                return name, f.read()
        except OSError as e:
            logger.error(f"Error reading README '{name}': {e}")
    return None


def format_readme_block(name: str, text: str) -> str:
    return f"{README_HEADER.format(name=name)}\n\n{text}\n\n{SECTION_SEPARATOR}\n\n"


def format_tree_block(tree_text: str) -> str:
    """Structure section, or an empty string when no node is visible."""
    if not tree_text:
        return ""
    return f"{STRUCTURE_HEADER}\n{tree_text}\n\n{SECTION_SEPARATOR}\n\n"


def format_contents_block(contents_text: str) -> str:
    return f"{CONTENTS_HEADER}\n\n{contents_text}"

# -----------------------------------------------------------------------------
# CORE ASSEMBLY LOGIC
# -----------------------------------------------------------------------------

def assemble_output(
        user_prompt: Optional[str],
        readme: Optional[Tuple[str, str]],
        tree_text: str,
        contents_text: str,
) -> AssemblyResult:
    """
    Join the sections in their fixed order and attach the estimate.

    Args:
        user_prompt: Free-text instructions, possibly blank.
        readme: (name, text) of the selected README, or None.
        tree_text: Rendered structure block body, possibly empty.
        contents_text: Aggregated file blocks, possibly empty.

    Returns:
        AssemblyResult: The final artifact and its token estimate.
    """
    parts = [format_instructions_block(user_prompt)]
    if readme is not None:
        parts.append(format_readme_block(*readme))
    parts.append(format_tree_block(tree_text))
    parts.append(format_contents_block(contents_text))

    output = "".join(parts)
    tokens = estimate_tokens(output)
    logger.info(f"Context assembled: {len(output)} chars, ~{tokens} tokens")
    return AssemblyResult(output=output, token_count=tokens)
