from __future__ import annotations

"""
Heuristic Tokenization Strategy.

Implements the character-based estimate used for every assembled
context. It is a pure function of text length, so it is deterministic
and monotonic: a longer text never yields a smaller estimate.
"""

import math

from cntxtify.core.processing.strategies.base import TokenizerStrategy
from cntxtify.domain.constants import CHARS_PER_TOKEN


def estimate_tokens(text: str) -> int:
    """
    Estimate tokens as characters divided by CHARS_PER_TOKEN, rounded up.

    Args:
        text: Final assembled text.

    Returns:
        int: Estimated tokens (0 for empty text).
    """
    if not text:
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN)


class HeuristicStrategy(TokenizerStrategy):
    """
    Character density estimation, independent of the model.
    """

    name = "heuristic"

    def count(self, text: str, model_id: str) -> int:
        return estimate_tokens(text)
