from stack_discovery.scrapers.client.http_client import RateLimitedClient
from stack_discovery.scrapers.client.rate_limiter import SlidingWindowRateLimiter

__all__ = ["RateLimitedClient", "SlidingWindowRateLimiter"]
