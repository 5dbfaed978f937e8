"""Token counting with tiktoken."""

import json
from functools import lru_cache
from typing import Any

import tiktoken

from ..config import config


@lru_cache(maxsize=None)
def get_encoding(name: str = config.token_encoding) -> "tiktoken.Encoding":
    """Load (once) the tiktoken encoding used for token budgets."""
    return tiktoken.get_encoding(name)


def count_tokens(text: str) -> int:
    """Number of tokens in text."""
    return len(get_encoding().encode(text, disallowed_special=()))


def tokenized_length(value: Any) -> int:
    """Number of tokens in the compact JSON serialization of value."""
    if isinstance(value, str):
        return count_tokens(value)
    return count_tokens(json.dumps(value, separators=(",", ":"), ensure_ascii=False))
