"""Tests for MIME lookup."""

import pytest

from s3compat.mime import DEFAULT_MIME_TYPE, MimeResolver, MimetypesResolver, category_for


class TestMimetypesResolver:
    """Tests for the default resolver."""

    @pytest.mark.parametrize("key, expected", [
        ("photos/cat.jpg", "image/jpeg"),
        ("photos/CAT.PNG", "image/png"),
        ("docs/report.pdf", "application/pdf"),
        ("notes.txt", "text/plain"),
        ("backup.tar.gz", "application/gzip"),
        ("archive.rar", "application/x-rar-compressed"),
        ("image.webp", "image/webp"),
    ])
    def test_known_extensions(self, key: str, expected: str):
        assert MimetypesResolver().guess(key) == expected

    def test_unknown_extension(self):
        assert MimetypesResolver().guess("data.zzunknown") == DEFAULT_MIME_TYPE

    def test_folder_key(self):
        assert MimetypesResolver().guess("photos/") == DEFAULT_MIME_TYPE

    def test_custom_resolver(self):
        class FixedResolver(MimeResolver):
            def guess(self, key: str) -> str:
                return "text/x-fixed"

        assert FixedResolver().guess("anything.jpg") == "text/x-fixed"


class TestCategoryFor:
    @pytest.mark.parametrize("mime_type, expected", [
        ("image/jpeg", "image"),
        ("video/mp4", "video"),
        ("audio/mpeg", "audio"),
        ("application/pdf", "document"),
        ("text/csv", "document"),
        ("application/zip", "archive"),
        ("application/octet-stream", "other"),
    ])
    def test_categories(self, mime_type: str, expected: str):
        assert category_for(mime_type) == expected
