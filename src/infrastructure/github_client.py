import aiohttp
import json
import asyncio
import logging
import random
from typing import Any, Optional

from src.domain.exceptions import RateLimitExceededException, StarMetricUnavailableException

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = aiohttp.ClientTimeout(total=30, connect=10)
MAX_RETRIES = 5
DEFAULT_RETRY_AFTER = 60
SERVER_ERRORS = {500, 502, 503, 504}


def _parse_retry_after(value: Optional[str]) -> int:
    # Retry-After may also be an HTTP-date; fall back to a fixed wait then.
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return DEFAULT_RETRY_AFTER


class GitHubRestClient:
    """
    Client for the GitHub REST repositories endpoint.
    Supplies the star count shown in the docs navigation. Works unauthenticated;
    a token only raises the rate limit.
    """

    def __init__(self, token: Optional[str] = None):
        self.headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "docs-site-pipeline",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            self.headers["Authorization"] = f"Bearer {token}"
        self.api_url = "https://api.github.com"

    async def fetch_repository(
        self,
        session: aiohttp.ClientSession,
        repository: str,
    ) -> Optional[Any]:
        """
        Fetches the repository payload for "owner/name".

        Returns:
            The decoded JSON body, or None when GitHub answers with a non-OK status
            that retrying will not fix (e.g. 404).
        """
        url = f"{self.api_url}/repos/{repository}"

        for attempt in range(MAX_RETRIES):
          try:
            async with session.get(url, headers=self.headers, timeout=REQUEST_TIMEOUT) as response:
                if response.status in {403, 429}:
                  retry_after = response.headers.get('Retry-After')
                  if retry_after is None and response.headers.get('X-RateLimit-Remaining') == "0":
                    raise RateLimitExceededException(reset_at=response.headers.get('X-RateLimit-Reset', 'unknown'))
                  if retry_after is not None or response.status == 429:
                    sleep_time = _parse_retry_after(retry_after)
                    logger.warning(f"Secondary rate limit ({response.status}). Sleeping {sleep_time}s...")
                    await asyncio.sleep(sleep_time)
                    continue

                if response.status in SERVER_ERRORS:
                  sleep_time = (2 ** attempt) + random.uniform(0, 2)
                  logger.warning(
                      f"Server error ({response.status}) for {repository}, "
                      f"retrying in {sleep_time:.1f}s (attempt {attempt + 1}/{MAX_RETRIES})..."
                  )
                  await asyncio.sleep(sleep_time)
                  continue

                if response.status != 200:
                    logger.warning(f"GitHub returned {response.status} for {repository}. Star count unknown.")
                    return None

                try:
                    return await response.json()
                except (aiohttp.ContentTypeError, json.JSONDecodeError) as e:
                    logger.warning(f"GitHub returned a non-JSON body for {repository}: {e}. Star count unknown.")
                    return None

          except (aiohttp.ClientError, asyncio.TimeoutError) as e:
              sleep_time = (2 ** attempt) + random.uniform(0, 2)
              logger.warning(
                  f"Request failed (attempt {attempt + 1}/{MAX_RETRIES}): {e}. "
                  f"Retrying in {sleep_time:.1f}s..."
              )
              await asyncio.sleep(sleep_time)

        raise StarMetricUnavailableException(f"Failed to fetch {repository} after {MAX_RETRIES} attempts.")
