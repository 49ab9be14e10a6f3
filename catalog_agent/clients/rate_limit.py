"""Client-side rate limiting for LLM backends."""

import asyncio
import time

from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter

from catalog_agent.utils.logging import get_logger

logger = get_logger(__name__)


class BackendRateLimiter:
    """Request and token rate limiter using the limits library."""

    def __init__(self, requests_per_minute: int = 50, tokens_per_minute: int = 40_000):
        """Initialize rate limiter.

        Args:
            requests_per_minute: Maximum requests per minute
            tokens_per_minute: Maximum tokens per minute
        """
        self.storage = MemoryStorage()
        self.limiter = MovingWindowRateLimiter(self.storage)

        self.request_limit = parse(f"{requests_per_minute}/minute")
        self.token_limit = parse(f"{tokens_per_minute}/minute")

    async def check_rate_limit(self, estimated_tokens: int, identifier: str = "llm") -> None:
        """Wait until the request fits within the rate limits."""
        logger.debug(f"Checking rate limit for {estimated_tokens} tokens, identifier: {identifier}")

        if not self.limiter.hit(self.request_limit, identifier):
            await self._wait_for_window(self.request_limit, identifier, "Request")

        token_identifier = f"{identifier}_tokens"
        cost = max(1, min(estimated_tokens, self.token_limit.amount))
        if not self.limiter.hit(self.token_limit, token_identifier, cost=cost):
            await self._wait_for_window(self.token_limit, token_identifier, "Token")

    async def _wait_for_window(self, limit, identifier: str, label: str) -> None:
        window_stats = self.limiter.get_window_stats(limit, identifier)
        if window_stats:
            wait_time = max(0.0, window_stats.reset_time - time.time())
            if wait_time > 0:
                logger.warning(f"{label} rate limit exceeded, waiting {wait_time:.2f}s")
                await asyncio.sleep(wait_time)
