from __future__ import annotations

"""
BPE Token Counter for OpenAI Models.

Counts a context the way OpenAI chat models see it, with the tiktoken
vocabularies. Encoders are loaded lazily and kept per counter, since
loading one reads (and on first use downloads) the vocabulary file.
"""

import logging
from typing import Any, Dict, Tuple

import tiktoken

from cntxtify.core.processing.strategies.base import TokenizerStrategy

logger = logging.getLogger(__name__)

CURRENT_ENCODING = "o200k_base"
GPT4_ENCODING = "cl100k_base"

# GPT-4 (not 4o) and GPT-3.5 families still use the cl100k vocabulary
_GPT4_ERA_PREFIXES: Tuple[str, ...] = ("gpt-4-", "gpt-4.", "gpt-3.5", "gpt-35")


def encoding_name_for(model_id: str) -> str:
    """
    Pick the tiktoken vocabulary serving a model.

    Args:
        model_id: Model identifier, any case.

    Returns:
        str: Encoding name.
    """
    model = model_id.strip().lower()
    if model == "gpt-4" or model.startswith(_GPT4_ERA_PREFIXES):
        return GPT4_ENCODING
    return CURRENT_ENCODING


class TiktokenStrategy(TokenizerStrategy):
    """Exact counts for GPT and o-series models."""

    name = "tiktoken"

    def __init__(self) -> None:
        self._encoders: Dict[str, Any] = {}

    def count(self, text: str, model_id: str) -> int:
        encoder = self._encoder(encoding_name_for(model_id))
        # Special-token markup inside project files is plain text here
        return len(encoder.encode(text, disallowed_special=()))

    def _encoder(self, encoding_name: str) -> Any:
        if encoding_name not in self._encoders:
            try:
                encoder = tiktoken.get_encoding(encoding_name)
            except ValueError:
                logger.debug(f"tiktoken has no '{encoding_name}' vocabulary, counting with {GPT4_ENCODING}.")
                encoder = tiktoken.get_encoding(GPT4_ENCODING)
            self._encoders[encoding_name] = encoder
        return self._encoders[encoding_name]
