import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import aiohttp

from src.domain.exceptions import DocsSiteException
from src.domain.models import StarMetric
from src.infrastructure.acl import GitHubTranslator
from src.infrastructure.database import StarMetricCache
from src.infrastructure.github_client import GitHubRestClient

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE = timedelta(hours=1)


class StarMetricSource:
    """
    Provides the star metric handed to the hydration controller.

    A cached value younger than max_age is served without touching GitHub. Any
    provider failure degrades to the stale cached value, or to an unknown metric.
    """

    def __init__(
            self,
            github_client: GitHubRestClient,
            repository: str,
            cache: Optional[StarMetricCache] = None,
            max_age: timedelta = DEFAULT_MAX_AGE,
    ):
        self.github_client = github_client
        self.repository = repository
        self.cache = cache
        self.max_age = max_age

    def is_fresh(self, metric: StarMetric, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now - metric.fetched_at < self.max_age

    async def get(self, session: Optional[aiohttp.ClientSession] = None) -> StarMetric:
        cached = await self._read_cache()
        if cached is not None and self.is_fresh(cached):
            logger.info(f"Using cached star count for {self.repository}: {cached.count}.")
            return cached

        try:
            if session is None:
                async with aiohttp.ClientSession() as own_session:
                    raw_repo = await self.github_client.fetch_repository(own_session, self.repository)
            else:
                raw_repo = await self.github_client.fetch_repository(session, self.repository)
        except DocsSiteException as e:
            logger.warning(f"Star count for {self.repository} unavailable: {e}")
            return cached if cached is not None else StarMetric.unknown(self.repository)

        metric = GitHubTranslator.to_star_metric(self.repository, raw_repo)
        await self._write_cache(metric)
        logger.info(f"Fetched star count for {self.repository}: {metric.count}.")
        return metric

    async def _read_cache(self) -> Optional[StarMetric]:
        if self.cache is None:
            return None
        try:
            return await self.cache.get(self.repository)
        except DocsSiteException as e:
            logger.warning(f"Star metric cache read failed: {e}")
            return None

    async def _write_cache(self, metric: StarMetric) -> None:
        # Unknown values are not cached so the next build asks GitHub again.
        if self.cache is None or metric.count is None:
            return
        try:
            await self.cache.upsert(metric)
        except DocsSiteException as e:
            logger.warning(f"Star metric cache write failed: {e}")
