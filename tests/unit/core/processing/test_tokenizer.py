from __future__ import annotations

"""
Unit tests for the Token Counting Engine.

Verifies the character heuristic (pure, monotonic), the size tiers and
the routing of model-aware counts, with tiktoken mocked so no encoding
files are downloaded.
"""

from unittest.mock import MagicMock, patch

import pytest

from cntxtify.core.processing.strategies.heuristic import HeuristicStrategy
from cntxtify.core.processing.strategies.bpe import TiktokenStrategy, encoding_name_for
from cntxtify.core.processing.tokenizer import (
    TokenizerService,
    classify_token_tier,
    count_tokens,
    estimate_tokens,
)


def test_estimate_rounds_up() -> None:
    assert estimate_tokens("") == 0
    assert estimate_tokens("a") == 1
    assert estimate_tokens("abcd") == 1
    assert estimate_tokens("abcde") == 2
    assert estimate_tokens("x" * 400) == 100


def test_estimate_is_monotonic() -> None:
    text = ""
    previous = estimate_tokens(text)
    for _ in range(50):
        text += "ab"
        current = estimate_tokens(text)
        assert current >= previous
        previous = current


def test_estimate_is_pure() -> None:
    sample = "def main():\n    return 42\n"
    assert estimate_tokens(sample) == estimate_tokens(sample)


def test_heuristic_strategy_ignores_model() -> None:
    strategy = HeuristicStrategy()
    assert strategy.count("12345678", "any") == 2
    assert strategy.count("123456789", "gpt-4o") == 3


@pytest.mark.parametrize(
    "count, label",
    [(0, "LOW"), (5999, "LOW"), (6000, "MODERATE"), (24999, "MODERATE"), (25000, "HIGH")],
)
def test_classify_token_tier_boundaries(count: int, label: str) -> None:
    tier = classify_token_tier(count)
    assert tier.label == label
    assert tier.hint


@patch("cntxtify.core.processing.strategies.bpe.tiktoken")
def test_tiktoken_strategy_encoding(mock_tiktoken: MagicMock) -> None:
    """Modern models use o200k_base."""
    mock_encoding = MagicMock()
    mock_encoding.encode.return_value = [1, 2, 3]
    mock_tiktoken.get_encoding.return_value = mock_encoding

    assert TiktokenStrategy().count("sample text", "gpt-4o") == 3
    mock_tiktoken.get_encoding.assert_called_with("o200k_base")


@patch("cntxtify.core.processing.strategies.bpe.tiktoken")
def test_tiktoken_strategy_legacy_encoding(mock_tiktoken: MagicMock) -> None:
    mock_encoding = MagicMock()
    mock_encoding.encode.return_value = [1]
    mock_tiktoken.get_encoding.return_value = mock_encoding

    TiktokenStrategy().count("x", "gpt-3.5-turbo")
    mock_tiktoken.get_encoding.assert_called_with("cl100k_base")


@pytest.mark.parametrize(
    "model, encoding",
    [
        ("gpt-4o", "o200k_base"),
        ("o3-mini", "o200k_base"),
        ("GPT-4", "cl100k_base"),
        ("gpt-4-turbo", "cl100k_base"),
        ("gpt-3.5-turbo", "cl100k_base"),
    ],
)
def test_encoding_name_for(model: str, encoding: str) -> None:
    assert encoding_name_for(model) == encoding


@patch("cntxtify.core.processing.strategies.bpe.tiktoken")
def test_tiktoken_strategy_loads_each_encoding_once(mock_tiktoken: MagicMock) -> None:
    mock_encoding = MagicMock()
    mock_encoding.encode.return_value = [1, 2]
    mock_tiktoken.get_encoding.return_value = mock_encoding

    strategy = TiktokenStrategy()
    strategy.count("a", "gpt-4o")
    strategy.count("b", "gpt-4o-mini")

    mock_tiktoken.get_encoding.assert_called_once_with("o200k_base")


@patch("cntxtify.core.processing.strategies.bpe.tiktoken")
def test_tiktoken_strategy_unknown_encoding_uses_cl100k(mock_tiktoken: MagicMock) -> None:
    """Older tiktoken releases without o200k_base still produce a count."""
    mock_encoding = MagicMock()
    mock_encoding.encode.return_value = [1]
    mock_tiktoken.get_encoding.side_effect = [ValueError("unknown"), mock_encoding]

    assert TiktokenStrategy().count("x", "gpt-4o") == 1
    assert mock_tiktoken.get_encoding.call_args_list[-1][0][0] == "cl100k_base"


def test_service_routes_openai_models_to_tiktoken() -> None:
    service = TokenizerService()
    with patch.object(TiktokenStrategy, "count", return_value=7) as mock_count:
        assert service.count("hello world", "GPT-4o") == 7
    mock_count.assert_called_once()


def test_service_unknown_model_uses_heuristic() -> None:
    service = TokenizerService()
    with patch.object(TiktokenStrategy, "count") as mock_count:
        assert service.count("abcdefgh", "some-local-model") == 2
    mock_count.assert_not_called()


def test_service_falls_back_on_encoder_failure() -> None:
    """Encoder failures (e.g. offline without cached encodings) degrade to the heuristic."""
    service = TokenizerService()
    with patch.object(TiktokenStrategy, "count", side_effect=RuntimeError("offline")):
        assert service.count("abcdefgh", "gpt-4o") == 2


def test_count_tokens_empty_text() -> None:
    assert count_tokens("", "gpt-4o") == 0
