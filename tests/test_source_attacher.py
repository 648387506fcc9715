import base64
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from src.domain.models import PageData, RAW_SOURCE_FIELD
from src.infrastructure.source_attacher import SourceAttacher, decode_source


class TestSourceAttacher(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.attacher = SourceAttacher(self.root)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _write(self, relative_path: str, content: bytes) -> None:
        path = self.root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)

    def test_attached_source_decodes_to_original_bytes(self) -> None:
        content = "# Quick start\r\n\r\nInstall with `cargo install`.\n★ ünïcode\n".encode("utf-8")
        self._write("guide/quick-start.md", content)
        page = PageData(relative_path="guide/quick-start.md")

        self.attacher.attach(page)

        self.assertEqual(decode_source(page.raw_source_base64), content)
        self.assertEqual(page.to_payload()[RAW_SOURCE_FIELD], base64.b64encode(content).decode("ascii"))

    def test_non_utf8_bytes_are_kept_verbatim(self) -> None:
        content = b"\xff\xfe\x00binary\x80\r\n"
        self._write("raw.md", content)
        page = PageData(relative_path="raw.md")

        self.attacher.attach(page)

        self.assertEqual(decode_source(page.raw_source_base64), content)

    def test_empty_file_attaches_empty_string(self) -> None:
        self._write("empty.md", b"")
        page = PageData(relative_path="empty.md")

        self.attacher.attach(page)

        self.assertEqual(page.raw_source_base64, "")
        self.assertIn(RAW_SOURCE_FIELD, page.to_payload())

    def test_missing_source_leaves_field_absent(self) -> None:
        page = PageData(relative_path="generated/changelog.md")

        self.attacher.attach(page)

        self.assertIsNone(page.raw_source_base64)
        self.assertNotIn(RAW_SOURCE_FIELD, page.to_payload())

    def test_read_failure_leaves_field_absent(self) -> None:
        self._write("locked.md", b"secret")
        page = PageData(relative_path="locked.md")

        with patch.object(Path, "read_bytes", side_effect=PermissionError("denied")):
            with self.assertLogs("src.infrastructure.source_attacher", level="WARNING"):
                self.attacher.attach(page)

        self.assertIsNone(page.raw_source_base64)
        self.assertNotIn(RAW_SOURCE_FIELD, page.to_payload())

    def test_unreadable_parent_directory_does_not_propagate(self) -> None:
        page = PageData(relative_path="locked/page.md")

        with patch("os.stat", side_effect=PermissionError(13, "Permission denied")):
            self.attacher.attach(page)

        self.assertIsNone(page.raw_source_base64)
        self.assertNotIn(RAW_SOURCE_FIELD, page.to_payload())

    def test_existence_check_error_is_logged_and_contained(self) -> None:
        page = PageData(relative_path="locked/page.md")

        with patch.object(Path, "exists", side_effect=PermissionError(13, "Permission denied")):
            with self.assertLogs("src.infrastructure.source_attacher", level="WARNING"):
                self.attacher.attach(page)

        self.assertIsNone(page.raw_source_base64)

    def test_directory_path_is_treated_as_read_failure(self) -> None:
        (self.root / "guide").mkdir()
        page = PageData(relative_path="guide")

        with self.assertLogs("src.infrastructure.source_attacher", level="WARNING"):
            self.attacher.attach(page)

        self.assertIsNone(page.raw_source_base64)

    def test_resolve_joins_content_root(self) -> None:
        self.assertEqual(self.attacher.resolve("a/b.md"), self.root / "a" / "b.md")


if __name__ == "__main__":
    unittest.main()
