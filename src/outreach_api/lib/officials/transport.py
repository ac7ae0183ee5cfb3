"""GET-with-retry helper shared by the directory providers.

Retries timeouts, connection errors, and HTTP 502/503/504 with a fixed
delay; every other failure is raised immediately as OfficialsProviderError.
"""

import asyncio
import json
from typing import Any

import httpx
from loguru import logger

from outreach_api.lib.officials.base import OfficialsProviderError

DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_RETRIES = 2
DEFAULT_RETRY_DELAY = 0.5

RETRYABLE_STATUS_CODES = frozenset({502, 503, 504})


async def get_json(
    client: httpx.AsyncClient,
    path: str,
    params: dict[str, Any] | list[tuple[str, Any]] | None = None,
    *,
    provider_name: str,
    label: str,
    max_retries: int = DEFAULT_MAX_RETRIES,
    retry_delay: float = DEFAULT_RETRY_DELAY,
) -> dict[str, Any]:
    """GET ``path`` and decode a JSON object, retrying transient failures.

    Args:
        client: Provider HTTP client (base URL and auth already configured).
        path: Request path relative to the client's base URL.
        params: Query parameters.
        provider_name: Provider short name for errors.
        label: Human-readable provider label for log lines.
        max_retries: Retries after the first attempt.
        retry_delay: Seconds to wait between attempts.

    Returns:
        Decoded JSON object.

    Raises:
        OfficialsProviderError: On a non-retryable failure or once retries are exhausted.
    """
    attempts = max_retries + 1
    for attempt in range(attempts):
        last_attempt = attempt == attempts - 1
        try:
            response = await client.get(path, params=params or {})
            response.raise_for_status()
            result = response.json()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            if status_code in RETRYABLE_STATUS_CODES and not last_attempt:
                logger.warning("{} HTTP {} for {} (attempt {}/{})", label, status_code, path, attempt + 1, attempts)
                await asyncio.sleep(retry_delay)
                continue
            logger.error(
                "{} API error: {} {} for {}",
                label,
                status_code,
                exc.response.reason_phrase,
                path,
            )
            raise OfficialsProviderError(
                provider_name,
                f"HTTP {status_code}: {exc.response.reason_phrase}",
                status_code=status_code,
            ) from exc
        except (httpx.TimeoutException, httpx.NetworkError) as exc:
            if not last_attempt:
                logger.warning("{} transient error for {} (attempt {}/{}): {}", label, path, attempt + 1, attempts, exc)
                await asyncio.sleep(retry_delay)
                continue
            logger.error("{} request failed after {} attempts: {}", label, attempts, exc)
            raise OfficialsProviderError(provider_name, f"Request failed: {exc}") from exc
        except httpx.RequestError as exc:
            logger.error("{} request failed: {}", label, exc)
            raise OfficialsProviderError(provider_name, f"Request failed: {exc}") from exc
        except json.JSONDecodeError as exc:
            logger.error("{} returned non-JSON response for {}", label, path)
            raise OfficialsProviderError(provider_name, f"Invalid JSON response for {path}") from exc

        if not isinstance(result, dict):
            raise OfficialsProviderError(provider_name, f"Unexpected response shape for {path}")
        return result

    # Unreachable: the final attempt either returns or raises
    raise OfficialsProviderError(provider_name, f"Request failed for {path}")
