"""Tests for data models."""

import dataclasses

import pytest

from s3compat.models import (
    BatchDeleteResult,
    CorsConfiguration,
    CorsRule,
    Credentials,
    DeletedEntry,
    DeleteFailure,
    Endpoint,
    NormalizedObject,
    PageCursor,
)


class TestCredentials:
    """Tests for Credentials dataclass."""

    def test_whitespace_stripped(self):
        """Keys pasted with a trailing newline still sign correctly."""
        credentials = Credentials(" AKID\n", "secret \n")

        assert credentials.access_key == "AKID"
        assert credentials.secret_key == "secret"

    def test_secret_not_in_repr(self):
        credentials = Credentials("AKID", "hunter2", session_token="tok")

        assert "hunter2" not in repr(credentials)
        assert "tok" not in repr(credentials)

    def test_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            Credentials("a", "b").access_key = "c"


class TestEndpoint:
    def test_base_url(self):
        assert Endpoint("s3.example.com", path_style=True).base_url == "https://s3.example.com"
        assert Endpoint("localhost:9000", True, "http").base_url == "http://localhost:9000"


class TestPageCursor:
    """Tests for the truncation invariant."""

    def test_token_dropped_when_not_truncated(self):
        assert PageCursor(is_truncated=False, token="abc").token == ""

    def test_token_kept_when_truncated(self):
        assert PageCursor(is_truncated=True, token="abc").token == "abc"

    def test_truncated_without_token(self):
        cursor = PageCursor(is_truncated=True)

        assert cursor.is_truncated is True
        assert cursor.token == ""


class TestNormalizedObject:
    """Tests for NormalizedObject properties."""

    def test_single_part(self):
        obj = NormalizedObject(key="a.txt", etag="d41d8cd98f00b204e9800998ecf8427e")

        assert obj.is_multipart is False
        assert obj.part_count == 0

    def test_multipart(self):
        obj = NormalizedObject(key="big.bin", etag="9b2cf535f27731c974343645a3985328-12")

        assert obj.is_multipart is True
        assert obj.part_count == 12

    def test_folder(self):
        assert NormalizedObject(key="photos/").is_folder is True
        assert NormalizedObject(key="photos/a.jpg").is_folder is False


class TestCorsConfiguration:
    """Tests for CorsConfiguration aggregates."""

    def test_empty(self):
        config = CorsConfiguration()

        assert config.has_cors is False
        assert config.rules_count == 0
        assert config.supports_upload is False

    def test_aggregates_deduplicated(self):
        config = CorsConfiguration(rules=[
            CorsRule(allowed_methods=["GET"], allowed_origins=["*"]),
            CorsRule(allowed_methods=["GET", "POST"], allowed_origins=["*", "https://a.example"]),
        ])

        assert config.allowed_methods == ["GET", "POST"]
        assert config.allowed_origins == ["*", "https://a.example"]
        assert config.supports_upload is True


class TestBatchDeleteResult:
    def test_extend(self):
        result = BatchDeleteResult(deleted=[DeletedEntry("a")])

        result.extend(BatchDeleteResult(
            deleted=[DeletedEntry("b")],
            failed=[DeleteFailure("c", "AccessDenied", "no")],
        ))

        assert result.success_count == 2
        assert result.error_count == 1
