"""OpenAI-compatible chat client with retries."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional
from enum import Enum

from openai import (
    AsyncOpenAI,
    APIConnectionError,
    RateLimitError,
    AuthenticationError,
    BadRequestError,
    APIStatusError,
)

from .config import DEFAULT_BASE_URL

logger = logging.getLogger(__name__)


class APIErrorType(Enum):
    """API 错误类型分类。"""
    RATE_LIMIT = "rate_limit"      # 429
    CONNECTION = "connection"
    AUTH = "auth"                  # 401
    BAD_REQUEST = "bad_request"    # 400
    SERVER = "server"              # 5xx
    UNKNOWN = "unknown"


_RETRYABLE = {APIErrorType.RATE_LIMIT, APIErrorType.CONNECTION, APIErrorType.SERVER}


def classify_error(error: Exception) -> tuple[APIErrorType, bool]:
    """
    Classify an API error.

    Returns:
        (error type, whether the call may be retried)
    """
    if isinstance(error, RateLimitError):
        kind = APIErrorType.RATE_LIMIT
    elif isinstance(error, APIConnectionError):
        kind = APIErrorType.CONNECTION
    elif isinstance(error, AuthenticationError):
        kind = APIErrorType.AUTH
    elif isinstance(error, BadRequestError):
        kind = APIErrorType.BAD_REQUEST
    elif isinstance(error, APIStatusError) and getattr(error, 'status_code', 0) >= 500:
        kind = APIErrorType.SERVER
    else:
        kind = APIErrorType.UNKNOWN
    return kind, kind in _RETRYABLE


def retry_delay(error_type: APIErrorType, attempt: int) -> float:
    """Backoff in seconds before retry number ``attempt`` (0-based)."""
    if error_type == APIErrorType.RATE_LIMIT:
        return min(2 ** (attempt + 2), 60)  # 4, 8, 16... max 60
    return 2 ** (attempt + 1)  # 2, 4, 8


async def chat(
    client: AsyncOpenAI,
    model: str,
    system_prompt: str,
    user_prompt: str,
    temperature: float = 0.3,
    max_retries: int = 3,
    json_mode: bool = False,
) -> str:
    """
    Send one system + user exchange and return the reply text.

    Args:
        client: AsyncOpenAI client instance
        model: Model name to use
        system_prompt: Instructions for the model
        user_prompt: The request content
        temperature: Sampling temperature
        max_retries: Maximum attempts for retryable errors
        json_mode: Whether to request a JSON object response

    Returns:
        Response content, empty string when every attempt failed
    """
    params: Dict = {
        "model": model,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        "temperature": temperature,
    }
    if json_mode:
        params["response_format"] = {"type": "json_object"}

    last_error: Optional[Exception] = None

    for attempt in range(max_retries):
        try:
            response = await client.chat.completions.create(**params)
            content = response.choices[0].message.content
            return content.strip() if content else ""

        except Exception as e:
            last_error = e
            error_type, retryable = classify_error(e)

            if not retryable:
                logger.error(f"Non-retryable error ({error_type.value}): {e}")
                return ""

            if attempt + 1 >= max_retries:
                break

            delay = retry_delay(error_type, attempt)
            logger.warning(
                f"Retryable error ({error_type.value}): {e}. "
                f"Retry {attempt + 1}/{max_retries} in {delay}s..."
            )
            await asyncio.sleep(delay)

    if last_error:
        logger.error(f"All {max_retries} attempts failed. Last error: {last_error}")

    return ""


def create_client(
    api_key: str,
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = 60.0,
) -> AsyncOpenAI:
    """Create an AsyncOpenAI client for an OpenAI-compatible endpoint."""
    return AsyncOpenAI(
        api_key=api_key,
        base_url=base_url,
        timeout=timeout,
    )
