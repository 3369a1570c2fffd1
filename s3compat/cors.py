"""CORS rule validation, presets and analysis."""

from typing import Iterable, Mapping

from s3compat.errors import InvalidParameters
from s3compat.models import CorsConfiguration, CorsRule, UploadCheck

VALID_METHODS = ("GET", "PUT", "POST", "DELETE", "HEAD")
UPLOAD_METHODS = ("PUT", "POST")

# S3 limits
MAX_RULES = 100
MAX_ID_LENGTH = 255


def validate_rules(rules: list[CorsRule]) -> None:
    """Check CORS rules before sending them.

    Raises:
        InvalidParameters: With code invalid_cors_rules, listing every
            problem found
    """
    if not rules:
        raise InvalidParameters("At least one CORS rule is required")

    problems = []
    if len(rules) > MAX_RULES:
        problems.append(f"too many rules ({len(rules)} > {MAX_RULES})")

    for index, rule in enumerate(rules, start=1):
        if not rule.allowed_methods:
            problems.append(f"rule {index}: AllowedMethods is required")
        if not rule.allowed_origins:
            problems.append(f"rule {index}: AllowedOrigins is required")
        invalid = [m for m in rule.allowed_methods if m.upper() not in VALID_METHODS]
        if invalid:
            problems.append(f"rule {index}: invalid method(s) {', '.join(invalid)}")
        if rule.id and len(rule.id) > MAX_ID_LENGTH:
            problems.append(f"rule {index}: ID exceeds {MAX_ID_LENGTH} characters")
        if rule.max_age_seconds is not None and rule.max_age_seconds < 0:
            problems.append(f"rule {index}: MaxAgeSeconds must not be negative")

    if problems:
        raise InvalidParameters(
            "Invalid CORS configuration: " + "; ".join(problems),
            code="invalid_cors_rules",
        )


def rule_from_dict(data: Mapping) -> CorsRule:
    """Build a CorsRule from a dict using S3's field names.

    Both the XML element names (AllowedMethod) and the plural API names
    (AllowedMethods) are accepted.
    """
    def values(name: str) -> list[str]:
        raw = data.get(name + "s", data.get(name, []))
        if isinstance(raw, str):
            raw = [raw]
        return [str(value) for value in raw]

    max_age = data.get("MaxAgeSeconds")
    return CorsRule(
        id=data.get("ID") or None,
        allowed_methods=[m.upper() for m in values("AllowedMethod")],
        allowed_origins=values("AllowedOrigin"),
        allowed_headers=values("AllowedHeader"),
        expose_headers=values("ExposeHeader"),
        max_age_seconds=None if max_age is None else int(max_age),
    )


def upload_rules(origin: str) -> list[CorsRule]:
    """Minimal rules for presigned PUT uploads from a browser."""
    return [CorsRule(
        id="UploadFromBrowser",
        allowed_origins=[origin],
        allowed_methods=["PUT"],
        allowed_headers=["Content-Type", "Content-Length"],
        max_age_seconds=3600,
    )]


def browser_rules(origin: str) -> list[CorsRule]:
    """Full browser access: every method, signed headers allowed."""
    return [CorsRule(
        id="BrowserAccess",
        allowed_origins=[origin],
        allowed_methods=list(VALID_METHODS),
        allowed_headers=["Content-Type", "Content-Length", "Authorization", "x-amz-*"],
        max_age_seconds=3600,
    )]


def restrictive_rules(origin: str) -> list[CorsRule]:
    """Uploads only, one origin, short preflight cache."""
    return [CorsRule(
        id="RestrictiveUpload",
        allowed_origins=[origin],
        allowed_methods=["PUT"],
        allowed_headers=["Content-Type"],
        max_age_seconds=1800,
    )]


PRESETS = {
    "upload": upload_rules,
    "browser": browser_rules,
    "restrictive": restrictive_rules,
}


def preset_rules(name: str, origin: str = "*") -> list[CorsRule]:
    """Rules for a named preset.

    Raises:
        InvalidParameters: If the preset is unknown
    """
    try:
        factory = PRESETS[name]
    except KeyError:
        known = ", ".join(sorted(PRESETS))
        raise InvalidParameters(
            f"Unknown CORS preset {name!r}. Known presets: {known}"
        ) from None
    return factory(origin)


def _origin_matches(origins: Iterable[str], origin: str) -> bool:
    origins = list(origins)
    return "*" in origins or origin in origins


def check_upload(config: CorsConfiguration, origin: str = "*") -> UploadCheck:
    """Work out whether the rules allow browser uploads from an origin."""
    check = UploadCheck(origin=origin, rules_checked=config.rules_count)
    for rule in config.rules:
        if not _origin_matches(rule.allowed_origins, origin):
            continue
        methods = [m for m in UPLOAD_METHODS if m in rule.allowed_methods]
        if not methods:
            continue
        check.allows_upload = True
        check.matching_rules.append(rule)
        for method in methods:
            if method not in check.allowed_methods:
                check.allowed_methods.append(method)
    return check
