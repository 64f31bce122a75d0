from __future__ import annotations

"""
Token Counting Engine.

Provides the approximate, reproducible token estimate attached to every
assembled context, the LOW/MODERATE/HIGH size classification shown to
users, and an optional model-aware count routed to tiktoken for callers
that want a closer figure for a specific model.
"""

import logging
from typing import Dict

from cntxtify.core.processing.strategies import (
    HeuristicStrategy,
    TiktokenStrategy,
    TokenizerStrategy,
    estimate_tokens,
)
from cntxtify.domain.constants import (
    DEFAULT_MODEL,
    TIER_HINTS,
    TIER_LOW_LIMIT,
    TIER_MODERATE_LIMIT,
)
from cntxtify.domain.pipeline_models import TokenTier

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# SIZE CLASSIFICATION
# -----------------------------------------------------------------------------

def classify_token_tier(token_count: int) -> TokenTier:
    """
    Classify an estimate into a coarse context-size tier.

    Args:
        token_count: Estimated tokens of the assembled context.

    Returns:
        TokenTier: LOW below 6000, MODERATE below 25000, HIGH otherwise.
    """
    if token_count < TIER_LOW_LIMIT:
        label = "LOW"
    elif token_count < TIER_MODERATE_LIMIT:
        label = "MODERATE"
    else:
        label = "HIGH"
    return TokenTier(label=label, hint=TIER_HINTS[label])

# -----------------------------------------------------------------------------
# SERVICE ORCHESTRATION (FACADE)
# -----------------------------------------------------------------------------

class TokenizerService:
    """
    Model-aware token counting with a heuristic safety net.
    """

    def __init__(self) -> None:
        self.heuristic = HeuristicStrategy()
        self._tiktoken: TokenizerStrategy = TiktokenStrategy()

        # Model prefixes served by the BPE encoder
        self._strategy_map: Dict[str, TokenizerStrategy] = {
            "gpt": self._tiktoken,
            "o1": self._tiktoken,
            "o3": self._tiktoken,
            "o4": self._tiktoken,
            "chatgpt": self._tiktoken,
        }

    def count(self, text: str, model: str = DEFAULT_MODEL) -> int:
        """
        Count tokens for the target model.

        Unknown models and the default model use the heuristic; encoder
        failures (e.g. encoding files unavailable offline) fall back to it.

        Args:
            text: Raw input text.
            model: Target model identifier.

        Returns:
            int: Token count.
        """
        if not text:
            return 0

        model_lower = (model or "").lower()
        strategy: TokenizerStrategy = self.heuristic
        for prefix, strat in self._strategy_map.items():
            if model_lower.startswith(prefix):
                strategy = strat
                break

        try:
            return strategy.count(text, model_lower)
        except Exception as e:
            logger.warning(f"{strategy.name} counter failed for '{model_lower}': {e}. Using heuristic fallback.")
            return self.heuristic.count(text, model_lower)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

_SERVICE_INSTANCE = TokenizerService()


def count_tokens(text: str, model: str = DEFAULT_MODEL) -> int:
    """
    Count tokens for a specific model via the shared TokenizerService.

    Args:
        text: Input string content.
        model: Target model name (e.g. "gpt-4o").

    Returns:
        int: Total token count.
    """
    return _SERVICE_INSTANCE.count(text, model)


__all__ = ["classify_token_tier", "count_tokens", "estimate_tokens", "TokenizerService"]
