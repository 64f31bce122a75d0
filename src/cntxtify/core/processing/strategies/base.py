from __future__ import annotations

"""
Token Counter Contract.

Every assembled context carries the character estimate; counters tied to
a model family only refine the number shown in the ``--model`` report.
TokenizerService routes a model id to one of these counters and falls
back to the estimate whenever a counter raises.
"""

from abc import ABC, abstractmethod


class TokenizerStrategy(ABC):
    """Counts the tokens of a finished context for one model family."""

    #: Label used in fallback diagnostics.
    name: str = "counter"

    @abstractmethod
    def count(self, text: str, model_id: str) -> int:
        """
        Args:
            text: Assembled context, or a fragment of it.
            model_id: Lower-cased model identifier.

        Returns:
            int: Non-negative token count.
        """
        raise NotImplementedError
