"""Disk cache utility for generation responses.

This module provides a simple interface for caching using diskcache.
Only deterministic, side-effect free calls (text completions) are cached;
image and video generation always hit the service.
"""

import functools

from diskcache import Cache

from studioflow.config import CACHE_PATH

# Global cache switch
_cache_enabled = True


def enable_cache() -> None:
    """Enable caching globally."""
    global _cache_enabled
    _cache_enabled = True


def disable_cache() -> None:
    """Disable caching globally."""
    global _cache_enabled
    _cache_enabled = False


def is_cache_enabled() -> bool:
    """Check if caching is enabled."""
    return _cache_enabled


_llm_cache = Cache(str(CACHE_PATH / "llm_generation"))


def get_llm_cache() -> Cache:
    """Get LLM text generation cache instance."""
    return _llm_cache


def memoize(cache_instance: Cache, **kwargs):
    """Decorator to cache function results with global switch support.

    This is a thin wrapper around diskcache.Cache.memoize() that respects
    the global cache enable/disable setting.

    Args:
        cache_instance: Cache instance to use (from get_llm_cache())
        **kwargs: Arguments passed to cache.memoize() (expire, typed, etc.)

    Returns:
        Decorated function

    Examples:
        @memoize(get_llm_cache(), expire=3600, typed=True)
        def call_api(prompt: str):
            response = client.chat.completions.create(...)
            if not response.choices:
                raise ValueError("Invalid response")  # Exceptions are not cached
            return response
    """

    def decorator(func):
        memoized_func = cache_instance.memoize(**kwargs)(func)

        @functools.wraps(func)
        def wrapper(*args, **kw):
            if _cache_enabled:
                return memoized_func(*args, **kw)
            return func(*args, **kw)

        return wrapper

    return decorator
