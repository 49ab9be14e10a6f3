"""Token estimation helpers."""

from functools import lru_cache

import tiktoken

from catalog_agent.utils.logging import get_logger

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_tokenizer() -> tiktoken.Encoding | None:
    """Load the shared tokenizer, or None when the encoding is unavailable."""
    try:
        return tiktoken.get_encoding("cl100k_base")
    except Exception as e:
        logger.warning(f"Tokenizer unavailable, falling back to character estimate: {e}")
        return None


def estimate_tokens(text: str, tokenizer: tiktoken.Encoding | None = None) -> int:
    """Estimate the token count of a piece of text.

    Falls back to roughly 4 characters per token without a tokenizer.
    """
    encoder = tokenizer if tokenizer is not None else get_tokenizer()
    try:
        return len(encoder.encode(text)) if encoder else len(text) // 4
    except Exception:
        return len(text) // 4
