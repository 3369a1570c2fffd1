"""Tests for ConsoleReporter.

Tests the Rich-based console output reporter.
"""

from datetime import datetime, timezone
from io import StringIO

import pytest
from rich.console import Console

from s3compat.errors import InvalidParameters, RemoteError
from s3compat.models import (
    BucketListing,
    CorsConfiguration,
    CorsRule,
    NormalizedBucket,
    NormalizedObject,
    ObjectListing,
    ObjectLocation,
    Owner,
    PageCursor,
    PresignedUrl,
    UploadCheck,
)
from s3compat.providers import PROFILES, create_provider
from s3compat.reporters.base import Reporter
from s3compat.reporters.console import ConsoleReporter, format_size


@pytest.fixture
def output() -> StringIO:
    return StringIO()


@pytest.fixture
def reporter(output) -> ConsoleReporter:
    return ConsoleReporter(console=Console(file=output, width=200, legacy_windows=True))


class TestConsoleReporterInterface:
    """Tests that ConsoleReporter implements Reporter interface."""

    def test_inherits_from_reporter(self):
        """ConsoleReporter should inherit from Reporter."""
        assert isinstance(ConsoleReporter(), Reporter)

    def test_on_complete_returns_none(self, reporter):
        assert reporter.on_complete() is None


class TestFormatSize:
    @pytest.mark.parametrize("size, expected", [
        (0, "0 B"),
        (512, "512 B"),
        (1536, "1.5 KB"),
        (5 * 1024 * 1024, "5.0 MB"),
        (3 * 1024 ** 4, "3.0 TB"),
    ])
    def test_format(self, size: int, expected: str):
        assert format_size(size) == expected


class TestProviderOutput:
    """Tests for provider, region and endpoint tables."""

    def test_providers_table(self, reporter, output):
        reporter.on_providers(list(PROFILES.values()))

        text = output.getvalue()
        assert "Providers" in text
        for profile_id in PROFILES:
            assert profile_id in text

    def test_regions_marks_default(self, reporter, output):
        reporter.on_regions(PROFILES["digitalocean_spaces"])

        text = output.getvalue()
        assert "Regions: DigitalOcean Spaces" in text
        assert "nyc3" in text

    def test_endpoint(self, reporter, output):
        reporter.on_endpoint(create_provider("cloudflare_r2", "eu", account_id="abc123"))

        text = output.getvalue()
        assert "abc123.eu.r2.cloudflarestorage.com" in text
        assert "auto" in text
        assert "Also recognised" in text


class TestListingOutput:
    """Tests for bucket and object listings."""

    def test_buckets(self, reporter, output):
        reporter.on_buckets(BucketListing(
            buckets=[NormalizedBucket("photos", "2024-01-01T00:00:00.000Z")],
            owner=Owner(id="1", display_name="alice"),
        ))

        text = output.getvalue()
        assert "photos" in text
        assert "Owner: alice" in text

    def test_no_buckets(self, reporter, output):
        reporter.on_buckets(BucketListing())

        assert "No buckets found." in output.getvalue()

    def test_objects(self, reporter, output):
        reporter.on_objects(ObjectListing(
            bucket="photos",
            prefix="2025/",
            objects=[NormalizedObject(key="2025/cat.jpg", size=1536, mime_type="image/jpeg")],
            prefixes=["2025/raw/"],
            cursor=PageCursor(is_truncated=True, token="next-token"),
        ))

        text = output.getvalue()
        assert "photos/2025/" in text
        assert "2025/cat.jpg" in text
        assert "1.5 KB" in text
        assert "2025/raw/" in text
        assert "next-token" in text

    def test_no_objects(self, reporter, output):
        reporter.on_objects(ObjectListing(bucket="photos"))

        assert "No objects found." in output.getvalue()


class TestOtherOutput:
    """Tests for presigned URLs, locations, CORS and errors."""

    def test_presigned(self, reporter, output):
        reporter.on_presigned("b", "k.txt", PresignedUrl(
            url="https://s3.example.com/b/k.txt?X-Amz-Signature=abc",
            expires_at=datetime(2025, 1, 1, 1, tzinfo=timezone.utc),
            expires_seconds=3600,
        ))

        text = output.getvalue()
        assert "https://s3.example.com/b/k.txt?X-Amz-Signature=abc" in text
        assert "3600s" in text

    def test_location(self, reporter, output):
        reporter.on_location("https://x/b/k", ObjectLocation("b", "dir/k.txt"))

        assert "dir/k.txt" in output.getvalue()

    def test_unmatched_location(self, reporter, output):
        reporter.on_location("https://example.org/x", None)

        assert "Not a URL of this provider: https://example.org/x" in output.getvalue()

    def test_cors(self, reporter, output):
        rule = CorsRule(allowed_methods=["PUT"], allowed_origins=["*"], max_age_seconds=0)
        check = UploadCheck(origin="*", allows_upload=True, allowed_methods=["PUT"])

        reporter.on_cors("photos", CorsConfiguration(rules=[rule]), check)

        text = output.getvalue()
        assert "CORS: photos" in text
        assert "Browser uploads allowed from * (PUT)" in text

    def test_no_cors(self, reporter, output):
        reporter.on_cors("photos", CorsConfiguration(), UploadCheck(origin="*"))

        text = output.getvalue()
        assert "No CORS configuration." in text
        assert "Browser uploads not allowed from *" in text

    def test_remote_error(self, reporter, output):
        reporter.on_error(RemoteError("Access Denied", code="AccessDenied", status=403, request_id="R1"))

        text = output.getvalue()
        assert "AccessDenied (HTTP 403): Access Denied" in text
        assert "Request id: R1" in text

    def test_other_error(self, reporter, output):
        reporter.on_error(InvalidParameters("Missing required value: bucket"))

        assert "Error: Missing required value: bucket" in output.getvalue()
