import base64
import logging
from pathlib import Path
from typing import Union

from src.domain.exceptions import SourceReadException
from src.domain.models import PageData

logger = logging.getLogger(__name__)


def decode_source(encoded: str) -> bytes:
    return base64.b64decode(encoded, validate=True)


class SourceAttacher:
    """
    Build-time hook that attaches a base64 copy of a page's source file to its metadata.
    Holds no state besides the content root, so one instance can serve concurrent pages.
    """

    def __init__(self, content_root: Union[str, Path]):
        self.content_root = Path(content_root)

    def resolve(self, relative_path: str) -> Path:
        return self.content_root / relative_path

    def encode_source(self, path: Path) -> str:
        """
        Reads the file's bytes and returns them as base64 text.

        Raises:
            SourceReadException: If the file cannot be read.
        """
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise SourceReadException(path=str(path)) from e
        return base64.b64encode(raw).decode("ascii")

    def attach(self, page: PageData) -> None:
        """
        Augments the page in place with its encoded source.

        Args:
            page (PageData): The page metadata handed over by the generator.
        """
        source_path = self.resolve(page.relative_path)

        try:
            # exists() still raises for errors other than "not found", e.g. EACCES on a parent.
            source_exists = source_path.exists()
        except OSError as e:
            logger.warning(f"Skipping source for '{page.relative_path}': {e}")
            return

        if not source_exists:
            # Virtual or generated pages have no source file.
            logger.debug(f"No source file for '{page.relative_path}' at {source_path}.")
            return

        try:
            page.raw_source_base64 = self.encode_source(source_path)
        except SourceReadException as e:
            logger.warning(f"Skipping source for '{page.relative_path}': {e.__cause__ or e}")
