from __future__ import annotations

from .base import TokenizerStrategy
from .heuristic import HeuristicStrategy, estimate_tokens
from .bpe import TiktokenStrategy, encoding_name_for

__all__ = [
    "TokenizerStrategy",
    "HeuristicStrategy",
    "TiktokenStrategy",
    "estimate_tokens",
    "encoding_name_for",
]
