import asyncio
import json
import os
import sys
import logging
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from src.domain.exceptions import DatabaseException
from src.infrastructure.source_attacher import SourceAttacher
from src.infrastructure.github_client import GitHubRestClient
from src.infrastructure.database import StarMetricCache
from src.application.build_service import PageBuildService
from src.application.star_metric_source import StarMetricSource

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)
logger = logging.getLogger(__name__)


class BuildSettings(BaseModel):
    """Build configuration read from the environment."""
    content_root: Path
    output_dir: Path = Path("build")
    github_repository: str = "raine/workmux"
    github_token: Optional[str] = None
    database_url: Optional[str] = None
    star_cache_max_age_seconds: int = Field(default=3600, ge=0)

    @classmethod
    def from_env(cls) -> "BuildSettings":
        env = {
            "content_root": os.getenv("CONTENT_ROOT"),
            "output_dir": os.getenv("OUTPUT_DIR"),
            "github_repository": os.getenv("GITHUB_REPOSITORY"),
            "github_token": os.getenv("GITHUB_TOKEN"),
            "database_url": os.getenv("DATABASE_URL"),
            "star_cache_max_age_seconds": os.getenv("STAR_CACHE_MAX_AGE_SECONDS"),
        }
        # Unset variables fall back to the field defaults
        return cls(**{key: value for key, value in env.items() if value})


async def main():
    # Load environment variables from .env file
    load_dotenv()

    if not os.getenv("CONTENT_ROOT"):
        logger.error("CONTENT_ROOT is not set in the environment.")
        sys.exit(1)

    try:
        settings = BuildSettings.from_env()
    except ValidationError as e:
        logger.error(f"Invalid build configuration: {e}")
        sys.exit(1)

    build_service = PageBuildService(attacher=SourceAttacher(settings.content_root))

    cache = None
    if settings.database_url:
        cache = StarMetricCache(db_url=settings.database_url)
    else:
        logger.info("DATABASE_URL is not set; star count will not be cached between builds.")

    star_source = StarMetricSource(
        github_client=GitHubRestClient(token=settings.github_token),
        repository=settings.github_repository,
        cache=cache,
        max_age=timedelta(seconds=settings.star_cache_max_age_seconds),
    )

    try:
        if cache is not None:
            try:
                await cache.create_schema()
            except DatabaseException as e:
                logger.warning(f"Star metric cache unavailable: {e}")

        pages = await build_service.transform_pages(build_service.discover_pages())
        build_service.write_page_data(pages, settings.output_dir / "pages.json")

        metric = await star_source.get()
        stars_path = settings.output_dir / "stars.json"
        stars_path.write_text(
            json.dumps({"repository": metric.repository, "count": metric.count}),
            encoding="utf-8",
        )
        logger.info(f"Wrote star metric to {stars_path}.")
    except KeyboardInterrupt:
        logger.info("Build interrupted by user. Exiting gracefully.")
    except Exception as e:
        logger.exception(f"An unexpected error occurred: {e}")
        sys.exit(1)

if __name__ == "__main__":
    asyncio.run(main())
