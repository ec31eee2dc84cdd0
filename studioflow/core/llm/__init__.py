"""OpenAI unified client module."""

from .client import call_llm, call_with_rate_limit_retry, get_llm_client, reset_llm_client

__all__ = [
    "call_llm",
    "call_with_rate_limit_retry",
    "get_llm_client",
    "reset_llm_client",
]
