"""Tests for CORS validation, presets and upload checks."""

import pytest

from s3compat.cors import (
    check_upload,
    preset_rules,
    rule_from_dict,
    validate_rules,
)
from s3compat.errors import InvalidParameters
from s3compat.models import CorsConfiguration, CorsRule


class TestValidateRules:
    """Tests for validate_rules."""

    def test_valid_rules(self):
        validate_rules([CorsRule(allowed_methods=["GET", "put"], allowed_origins=["*"])])

    def test_no_rules(self):
        with pytest.raises(InvalidParameters, match="At least one"):
            validate_rules([])

    def test_all_problems_reported(self):
        rules = [
            CorsRule(allowed_methods=[], allowed_origins=[]),
            CorsRule(allowed_methods=["PATCH"], allowed_origins=["*"], max_age_seconds=-1),
        ]

        with pytest.raises(InvalidParameters) as exc_info:
            validate_rules(rules)

        message = str(exc_info.value)
        assert exc_info.value.code == "invalid_cors_rules"
        assert "rule 1: AllowedMethods is required" in message
        assert "rule 1: AllowedOrigins is required" in message
        assert "rule 2: invalid method(s) PATCH" in message
        assert "rule 2: MaxAgeSeconds must not be negative" in message

    def test_zero_max_age_is_valid(self):
        validate_rules([CorsRule(allowed_methods=["GET"], allowed_origins=["*"], max_age_seconds=0)])

    def test_long_id(self):
        rule = CorsRule(allowed_methods=["GET"], allowed_origins=["*"], id="x" * 256)

        with pytest.raises(InvalidParameters, match="ID exceeds"):
            validate_rules([rule])

    def test_too_many_rules(self):
        rules = [CorsRule(allowed_methods=["GET"], allowed_origins=["*"])] * 101

        with pytest.raises(InvalidParameters, match="too many rules"):
            validate_rules(rules)


class TestRuleFromDict:
    """Tests for rule_from_dict."""

    def test_plural_names(self):
        rule = rule_from_dict({
            "ID": "r1",
            "AllowedMethods": ["get", "PUT"],
            "AllowedOrigins": ["https://a.example"],
            "MaxAgeSeconds": "0",
        })

        assert rule.id == "r1"
        assert rule.allowed_methods == ["GET", "PUT"]
        assert rule.allowed_origins == ["https://a.example"]
        assert rule.max_age_seconds == 0

    def test_singular_string_values(self):
        rule = rule_from_dict({"AllowedMethod": "GET", "AllowedOrigin": "*"})

        assert rule.allowed_methods == ["GET"]
        assert rule.allowed_origins == ["*"]
        assert rule.max_age_seconds is None
        assert rule.id is None


class TestPresets:
    """Tests for the named rule presets."""

    def test_upload_preset(self):
        rules = preset_rules("upload", "https://app.example.com")

        assert rules[0].allowed_methods == ["PUT"]
        assert rules[0].allowed_origins == ["https://app.example.com"]

    def test_browser_preset_allows_everything(self):
        rules = preset_rules("browser")

        assert set(rules[0].allowed_methods) == {"GET", "PUT", "POST", "DELETE", "HEAD"}
        assert rules[0].allowed_origins == ["*"]

    @pytest.mark.parametrize("name", ["upload", "browser", "restrictive"])
    def test_presets_are_valid(self, name: str):
        validate_rules(preset_rules(name))

    def test_unknown_preset(self):
        with pytest.raises(InvalidParameters, match="Known presets: browser, restrictive, upload"):
            preset_rules("everything")


class TestCheckUpload:
    """Tests for check_upload."""

    def test_wildcard_origin(self):
        config = CorsConfiguration(rules=[
            CorsRule(allowed_methods=["GET", "PUT"], allowed_origins=["*"]),
        ])

        check = check_upload(config, "https://app.example.com")

        assert check.allows_upload is True
        assert check.allowed_methods == ["PUT"]
        assert check.rules_checked == 1

    def test_origin_mismatch(self):
        config = CorsConfiguration(rules=[
            CorsRule(allowed_methods=["PUT"], allowed_origins=["https://a.example"]),
        ])

        assert check_upload(config, "https://b.example").allows_upload is False

    def test_read_only_rules(self):
        config = CorsConfiguration(rules=[
            CorsRule(allowed_methods=["GET", "HEAD"], allowed_origins=["*"]),
        ])

        check = check_upload(config)

        assert check.allows_upload is False
        assert check.matching_rules == []

    def test_methods_collected_across_rules(self):
        config = CorsConfiguration(rules=[
            CorsRule(allowed_methods=["POST"], allowed_origins=["*"]),
            CorsRule(allowed_methods=["PUT", "POST"], allowed_origins=["*"]),
        ])

        check = check_upload(config)

        assert check.allowed_methods == ["POST", "PUT"]
        assert len(check.matching_rules) == 2

    def test_empty_configuration(self):
        check = check_upload(CorsConfiguration())

        assert check.allows_upload is False
        assert check.rules_checked == 0
