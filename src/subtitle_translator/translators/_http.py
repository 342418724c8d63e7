# SPDX-License-Identifier: Apache-2.0
"""Shared aiohttp helpers for HTTP-based backends."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import aiohttp

from subtitle_translator.translators.base import (
    AuthenticationError,
    ParseError,
    RateLimitError,
    ServerError,
    TranslationError,
    parse_retry_after,
)

DEFAULT_TIMEOUT = aiohttp.ClientTimeout(total=60)

# Every aiohttp client failure counts as a transport failure, as do timeouts.
NETWORK_ERRORS: tuple[type[BaseException], ...] = (
    aiohttp.ClientError,
    asyncio.TimeoutError,
)


async def raise_for_status(response: aiohttp.ClientResponse, service: str) -> None:
    """Map a non-200 response onto the translator error taxonomy.

    Args:
        response: Backend response.
        service: Display name used in error messages.

    Raises:
        AuthenticationError: On 401/403.
        RateLimitError: On 429.
        ServerError: On 5xx.
        TranslationError: On any other non-200 status.
    """
    status = response.status
    if status == 200:
        return
    if status in (401, 403):
        raise AuthenticationError(f"{service} rejected the API credentials (status {status})")
    if status == 429:
        retry_after = parse_retry_after(response.headers.get("Retry-After"))
        raise RateLimitError(f"{service} rate limit exceeded", retry_after=retry_after)
    if status >= 500:
        raise ServerError(f"{service} server error (status {status})", status=status)

    error_text = await response.text(errors="replace")
    raise TranslationError(f"{service} API error (status {status}): {error_text}")


async def read_json(response: aiohttp.ClientResponse, service: str) -> Any:
    """Decode a JSON body regardless of its declared content type.

    Raises:
        ParseError: If the body cannot be decoded or is not valid JSON.
    """
    # UnicodeDecodeError and JSONDecodeError are both ValueErrors.
    try:
        body = await response.text()
        return json.loads(body)
    except ValueError as e:
        raise ParseError(f"{service} returned an unreadable body: {e}") from e
