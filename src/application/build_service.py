import asyncio
import json
import logging
from pathlib import Path
from typing import Iterable, List, Sequence, Union

from src.domain.models import PageData
from src.infrastructure.source_attacher import SourceAttacher

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".md",)
# Upper bound on source files read at the same time
MAX_CONCURRENT_PAGES = 16


class PageBuildService:
    """
    Drives one generation pass: discovers pages under the content root and runs the
    source attacher over each of them.

    Pages are independent. A failure on one page is logged and never affects another.
    """

    def __init__(self, attacher: SourceAttacher, max_concurrency: int = MAX_CONCURRENT_PAGES):
        self.attacher = attacher
        self.max_concurrency = max_concurrency

    def discover_pages(self, extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> List[PageData]:
        root = self.attacher.content_root
        if not root.is_dir():
            logger.warning(f"Content root {root} does not exist. No pages discovered.")
            return []

        relative_paths = sorted(
            path.relative_to(root).as_posix()
            for path in root.rglob("*")
            if path.is_file() and path.suffix in extensions
        )
        return [PageData(relative_path=rel) for rel in relative_paths]

    async def transform_pages(self, pages: Iterable[PageData]) -> List[PageData]:
        """
        Attaches encoded sources to every page concurrently.

        Returns:
            List[PageData]: The same page objects, augmented in place.
        """
        pages = list(pages)
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _attach(page: PageData) -> None:
            async with semaphore:
                await asyncio.to_thread(self.attacher.attach, page)

        logger.info(f"Attaching sources for {len(pages)} pages.")
        results = await asyncio.gather(*(_attach(page) for page in pages), return_exceptions=True)

        attached = 0
        for page, result in zip(pages, results):
            if isinstance(result, Exception):
                logger.error(f"Unexpected error while attaching '{page.relative_path}': {result}")
            elif page.raw_source_base64 is not None:
                attached += 1

        logger.info(f"Generation pass completed. Sources attached: {attached}/{len(pages)}.")
        return pages

    @staticmethod
    def write_page_data(pages: Iterable[PageData], output_path: Union[str, Path]) -> Path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        payload = {page.relative_path: page.to_payload() for page in pages}
        output_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        logger.info(f"Wrote page data for {len(payload)} pages to {output_path}.")
        return output_path
