from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy import Table, Column, String, Integer, DateTime, MetaData, select

from src.domain.exceptions import DatabaseException
from src.domain.models import StarMetric

# SQLAlchemy core Table definition
metadata = MetaData()
star_metrics_table = Table(
    'star_metrics', metadata,
    Column('repository', String, primary_key=True),
    Column('stars', Integer, nullable=True),
    Column('fetched_at', DateTime(timezone=True), nullable=False),
)

class StarMetricCache:
    """
    PostgreSQL-backed cache of star metrics shared across builds.
    Freshness is decided by the caller from each row's fetched_at.
    """

    def __init__(self, db_url: str):
        self.engine = create_async_engine(db_url, echo=False)

    async def create_schema(self) -> None:
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(metadata.create_all)
        except SQLAlchemyError as e:
            raise DatabaseException(f"Failed to create star metric schema: {e}") from e

    async def get(self, repository: str) -> Optional[StarMetric]:
        """
        Returns the cached metric for a repository, or None if nothing is cached.
        """
        stmt = select(star_metrics_table).where(star_metrics_table.c.repository == repository)
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(stmt)
                row = result.mappings().first()
        except SQLAlchemyError as e:
            raise DatabaseException(f"Failed to read star metric for {repository}: {e}") from e

        if row is None:
            return None
        return StarMetric(repository=row['repository'], count=row['stars'], fetched_at=row['fetched_at'])

    async def upsert(self, metric: StarMetric) -> None:
        """
        Stores a metric, replacing an older row for the same repository.

        Args:
            metric (StarMetric): The freshly fetched metric.
        """
        values = {
            'repository': metric.repository,
            'stars': metric.count,
            'fetched_at': metric.fetched_at,
        }

        try:
            async with self.engine.begin() as conn:
                stmt = insert(star_metrics_table).values(values)

                # Never let a late writer overwrite a newer observation.
                upsert_stmt = stmt.on_conflict_do_update(
                    index_elements=['repository'],
                    set_={
                        'stars': stmt.excluded.stars,
                        'fetched_at': stmt.excluded.fetched_at,
                    },
                    where=(star_metrics_table.c.fetched_at < stmt.excluded.fetched_at)
                )

                await conn.execute(upsert_stmt)
        except SQLAlchemyError as e:
            raise DatabaseException(f"Failed to store star metric for {metric.repository}: {e}") from e
