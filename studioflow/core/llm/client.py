"""Unified OpenAI client for the application."""

import os
import threading
from typing import Any, List, Optional
from urllib.parse import urlparse, urlunparse

import openai
from openai import OpenAI
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

from studioflow.core.utils.cache import get_llm_cache, memoize
from studioflow.core.utils.logger import setup_logger

from .request_logger import create_logging_http_client

_global_client: Optional[OpenAI] = None
_client_lock = threading.Lock()

logger = setup_logger("llm_client")


def normalize_base_url(base_url: str) -> str:
    """Normalize API base URL by ensuring /v1 suffix when needed."""
    url = base_url.strip()
    parsed = urlparse(url)
    path = parsed.path.rstrip("/")

    if not path:
        path = "/v1"

    normalized = urlunparse(
        (
            parsed.scheme,
            parsed.netloc,
            path,
            parsed.params,
            parsed.query,
            parsed.fragment,
        )
    )

    return normalized


def get_llm_client() -> OpenAI:
    """Get global OpenAI client instance (thread-safe singleton)."""
    global _global_client

    if _global_client is None:
        with _client_lock:
            if _global_client is None:
                api_key = os.getenv("OPENAI_API_KEY", "").strip()
                if not api_key:
                    raise ValueError("OPENAI_API_KEY environment variable must be set")

                base_url = os.getenv("OPENAI_BASE_URL", "").strip()
                _global_client = OpenAI(
                    base_url=normalize_base_url(base_url) if base_url else None,
                    api_key=api_key,
                    http_client=create_logging_http_client(),
                )

    return _global_client


def reset_llm_client() -> None:
    """Drop the cached client (credentials changed, tests)."""
    global _global_client
    with _client_lock:
        _global_client = None


def before_sleep_log(retry_state: RetryCallState) -> None:
    logger.warning(
        "Rate limit error, sleeping before retry #%s...",
        retry_state.attempt_number,
    )


@retry(
    stop=stop_after_attempt(10),
    wait=wait_random_exponential(multiplier=1, min=5, max=60),
    retry=retry_if_exception_type(openai.RateLimitError),
    before_sleep=before_sleep_log,
)
def _call_llm_api(
    messages: List[dict],
    model: str,
    temperature: float = 1,
    **kwargs: Any,
) -> Any:
    """Call the chat completions endpoint (with retry)."""
    client = get_llm_client()

    return client.chat.completions.create(
        model=model,
        messages=messages,  # pyright: ignore[reportArgumentType]
        temperature=temperature,
        **kwargs,
    )


@memoize(get_llm_cache(), expire=3600, typed=True)
def call_llm(
    messages: List[dict],
    model: str,
    temperature: float = 1,
    **kwargs: Any,
) -> str:
    """Call the LLM and return the first choice's text, with automatic caching."""
    response = _call_llm_api(messages, model, temperature, **kwargs)

    if not (
        response
        and getattr(response, "choices", None)
        and response.choices[0].message
        and response.choices[0].message.content
    ):
        raise ValueError("Invalid OpenAI API response: empty choices or content")

    return response.choices[0].message.content


@retry(
    stop=stop_after_attempt(5),
    wait=wait_random_exponential(multiplier=1, min=5, max=60),
    retry=retry_if_exception_type(openai.RateLimitError),
    before_sleep=before_sleep_log,
)
def call_with_rate_limit_retry(func, *args: Any, **kwargs: Any) -> Any:
    """Run any SDK call with the same rate-limit retry policy as call_llm."""
    return func(*args, **kwargs)
