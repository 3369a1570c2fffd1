"""AWS Signature Version 4 for S3.

Implements both flavours used against S3-compatible endpoints:

- header authorization (sign_headers), where the payload hash is the
  SHA-256 of the body and the signature goes into an Authorization header;
- query-string presigning (sign_query), where the payload is
  UNSIGNED-PAYLOAD, only 'host' is signed and the X-Amz-* parameters plus
  the signature travel in the URL.

Browser POST policies (presign_post) reuse the same signing key chain.

Every operation takes an optional ``now`` so results are reproducible;
without it the current UTC time is used.
"""

import base64
import hashlib
import hmac
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Callable, Mapping, Optional, Union

from s3compat.errors import InvalidParameters, UnsupportedOperation
from s3compat.models import Credentials, PresignedPost, PresignedUrl
from s3compat.providers import Provider
from s3compat.urls import build_url, encode_key, encode_query

logger = logging.getLogger(__name__)

ALGORITHM = "AWS4-HMAC-SHA256"
SERVICE = "s3"
TERMINATOR = "aws4_request"
UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"

# SHA-256 of the empty string
EMPTY_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"

# Longest lifetime S3 accepts for a presigned URL (7 days)
MAX_PRESIGN_EXPIRY = 604800


def sha256_hex(data: Union[bytes, str]) -> str:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def _hmac(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


@lru_cache(maxsize=64)
def derive_signing_key(
    secret_key: str, date_stamp: str, region: str, service: str = SERVICE
) -> bytes:
    """Derive the SigV4 signing key.

    HMAC("AWS4" + secret, date) -> region -> service -> "aws4_request".
    The result only depends on its arguments, so it is cached.
    """
    k_date = _hmac(("AWS4" + secret_key).encode("utf-8"), date_stamp)
    k_region = _hmac(k_date, region)
    k_service = _hmac(k_region, service)
    return _hmac(k_service, TERMINATOR)


def credential_scope(date_stamp: str, region: str, service: str = SERVICE) -> str:
    return f"{date_stamp}/{region}/{service}/{TERMINATOR}"


def amz_timestamp(now: datetime) -> tuple[str, str]:
    """Return (amz_date, date_stamp) for a moment in time."""
    now = _as_utc(now)
    return now.strftime("%Y%m%dT%H%M%SZ"), now.strftime("%Y%m%d")


def string_to_sign(amz_date: str, scope: str, canonical_request: "CanonicalRequest") -> str:
    return "\n".join([ALGORITHM, amz_date, scope, canonical_request.digest])


def sign(signing_key: bytes, message: str) -> str:
    """Hex HMAC-SHA256 of a message with a derived signing key."""
    return hmac.new(signing_key, message.encode("utf-8"), hashlib.sha256).hexdigest()


@dataclass(frozen=True)
class CanonicalRequest:
    """The exact request representation SigV4 signs.

    headers holds (lower-cased name, trimmed value) pairs sorted by name.
    """

    method: str
    canonical_uri: str
    canonical_query: str
    headers: tuple[tuple[str, str], ...]
    payload_hash: str

    @classmethod
    def build(
        cls,
        method: str,
        canonical_uri: str,
        query: Optional[Mapping[str, object]],
        headers: Mapping[str, str],
        payload_hash: str,
    ) -> "CanonicalRequest":
        normalized = sorted(
            (name.strip().lower(), " ".join(str(value).split()))
            for name, value in headers.items()
        )
        return cls(
            method=method.upper(),
            canonical_uri=canonical_uri,
            canonical_query=encode_query(query),
            headers=tuple(normalized),
            payload_hash=payload_hash,
        )

    @property
    def signed_headers(self) -> str:
        return ";".join(name for name, _ in self.headers)

    @property
    def canonical_headers(self) -> str:
        return "".join(f"{name}:{value}\n" for name, value in self.headers)

    def __str__(self) -> str:
        return "\n".join([
            self.method,
            self.canonical_uri,
            self.canonical_query,
            self.canonical_headers,
            self.signed_headers,
            self.payload_hash,
        ])

    @property
    def digest(self) -> str:
        return sha256_hex(str(self))


class SigV4Signer:
    """Signs requests for one provider with one set of credentials.

    Args:
        provider: Resolved provider (host, addressing style, signing region)
        credentials: Access key pair
        clock: Returns the current time; defaults to UTC wall clock
    """

    def __init__(
        self,
        provider: Provider,
        credentials: Credentials,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.provider = provider
        self.credentials = credentials
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _now(self, now: Optional[datetime]) -> datetime:
        return _as_utc(now if now is not None else self._clock())

    def _scope(self, date_stamp: str) -> str:
        return credential_scope(date_stamp, self.provider.signing_region)

    def _signing_key(self, date_stamp: str) -> bytes:
        return derive_signing_key(
            self.credentials.secret_key, date_stamp, self.provider.signing_region
        )

    def canonical_uri(self, bucket: str, key: str = "") -> str:
        encoded = encode_key(key) if key else ""
        if key and not encoded:
            raise InvalidParameters(f"Invalid object key: {key!r}")
        return self.provider.canonical_uri(bucket, encoded)

    def sign_headers(
        self,
        method: str,
        bucket: str,
        key: str = "",
        query: Optional[Mapping[str, object]] = None,
        body: bytes = b"",
        headers: Optional[Mapping[str, str]] = None,
        now: Optional[datetime] = None,
    ) -> dict[str, str]:
        """Build the authorization headers for a request.

        The signed set is host, x-amz-content-sha256 and x-amz-date, plus
        any x-amz-* headers passed in ``headers`` (S3 rejects unsigned
        x-amz-* headers) and the session token when one is configured.
        Other entries of ``headers`` are ignored here; callers send them
        unsigned.

        Args:
            method: HTTP method
            bucket: Bucket name ('' for service-level requests)
            key: Object key, raw or encoded
            query: Query parameters
            body: Request body; hashed even when empty
            headers: Extra request headers
            now: Signing time

        Returns:
            Host, X-Amz-Date, X-Amz-Content-SHA256 and Authorization headers
            (plus any signed extras).
        """
        amz_date, date_stamp = amz_timestamp(self._now(now))
        payload_hash = sha256_hex(body or b"")
        host = self.provider.host_for(bucket)

        result = {
            "Host": host,
            "X-Amz-Date": amz_date,
            "X-Amz-Content-SHA256": payload_hash,
        }
        if self.credentials.session_token:
            result["X-Amz-Security-Token"] = self.credentials.session_token
        for name, value in (headers or {}).items():
            if name.lower().startswith("x-amz-") and name.lower() not in {
                "x-amz-date", "x-amz-content-sha256", "x-amz-security-token",
            }:
                result[name] = value

        canonical = CanonicalRequest.build(
            method, self.canonical_uri(bucket, key), query, result, payload_hash
        )
        scope = self._scope(date_stamp)
        signature = sign(
            self._signing_key(date_stamp), string_to_sign(amz_date, scope, canonical)
        )

        result["Authorization"] = (
            f"{ALGORITHM} Credential={self.credentials.access_key}/{scope}, "
            f"SignedHeaders={canonical.signed_headers}, Signature={signature}"
        )
        return result

    def sign_query(
        self,
        method: str,
        bucket: str,
        key: str,
        expires_seconds: int,
        now: Optional[datetime] = None,
    ) -> PresignedUrl:
        """Create a presigned URL.

        Expiry above seven days is clamped to seven days.

        Raises:
            InvalidParameters: If bucket or key is empty, or the expiry is
                not positive
        """
        if not bucket or not key:
            raise InvalidParameters("Bucket and object key are required")
        expires_seconds = clamp_expiry(expires_seconds)

        moment = self._now(now)
        amz_date, date_stamp = amz_timestamp(moment)
        scope = self._scope(date_stamp)

        query = {
            "X-Amz-Algorithm": ALGORITHM,
            "X-Amz-Credential": f"{self.credentials.access_key}/{scope}",
            "X-Amz-Date": amz_date,
            "X-Amz-Expires": str(expires_seconds),
            "X-Amz-SignedHeaders": "host",
        }
        if self.credentials.session_token:
            query["X-Amz-Security-Token"] = self.credentials.session_token

        canonical = CanonicalRequest.build(
            method,
            self.canonical_uri(bucket, key),
            query,
            {"host": self.provider.host_for(bucket)},
            UNSIGNED_PAYLOAD,
        )
        signature = sign(
            self._signing_key(date_stamp), string_to_sign(amz_date, scope, canonical)
        )

        url = build_url(self.provider, bucket, key)
        url = f"{url}?{canonical.canonical_query}&X-Amz-Signature={signature}"
        return PresignedUrl(
            url=url,
            expires_at=moment + timedelta(seconds=expires_seconds),
            expires_seconds=expires_seconds,
        )

    def presign_post(
        self,
        bucket: str,
        key: str,
        expires_seconds: int,
        content_type: Optional[str] = None,
        content_length_range: Optional[tuple[int, int]] = None,
        now: Optional[datetime] = None,
    ) -> PresignedPost:
        """Create form fields for a browser POST upload.

        A key ending in '/' is treated as a prefix: the browser may choose
        any key starting with it.

        Raises:
            UnsupportedOperation: If the provider does not accept POST uploads
            InvalidParameters: If bucket or key is empty, or the limits are bad
        """
        if not self.provider.profile.supports_presigned_post:
            raise UnsupportedOperation(
                f"{self.provider.label} does not support presigned POST uploads"
            )
        if not bucket or not key:
            raise InvalidParameters("Bucket and object key are required")
        expires_seconds = clamp_expiry(expires_seconds)

        moment = self._now(now)
        amz_date, date_stamp = amz_timestamp(moment)
        credential = f"{self.credentials.access_key}/{self._scope(date_stamp)}"
        expires_at = moment + timedelta(seconds=expires_seconds)

        conditions: list = [{"bucket": bucket}]
        if key.endswith("/"):
            conditions.append(["starts-with", "$key", key])
        else:
            conditions.append({"key": key})
        if content_type:
            conditions.append({"Content-Type": content_type})
        if content_length_range is not None:
            low, high = content_length_range
            if low < 0 or high < low:
                raise InvalidParameters("Invalid content length range")
            conditions.append(["content-length-range", low, high])
        conditions.extend([
            {"x-amz-algorithm": ALGORITHM},
            {"x-amz-credential": credential},
            {"x-amz-date": amz_date},
        ])

        fields = {
            "key": key if not key.endswith("/") else key + "${filename}",
            "x-amz-algorithm": ALGORITHM,
            "x-amz-credential": credential,
            "x-amz-date": amz_date,
        }
        if self.credentials.session_token:
            conditions.append({"x-amz-security-token": self.credentials.session_token})
            fields["x-amz-security-token"] = self.credentials.session_token
        if content_type:
            fields["Content-Type"] = content_type

        policy = {
            "expiration": expires_at.strftime("%Y-%m-%dT%H:%M:%S.000Z"),
            "conditions": conditions,
        }
        encoded_policy = base64.b64encode(
            json.dumps(policy, separators=(",", ":")).encode("utf-8")
        ).decode("ascii")
        fields["policy"] = encoded_policy
        fields["x-amz-signature"] = sign(self._signing_key(date_stamp), encoded_policy)

        return PresignedPost(
            url=build_url(self.provider, bucket),
            fields=fields,
            expires_at=expires_at,
        )


def clamp_expiry(expires_seconds: int) -> int:
    """Validate a presign lifetime, clamping it to seven days.

    Raises:
        InvalidParameters: If the lifetime is zero or negative
    """
    expires_seconds = int(expires_seconds)
    if expires_seconds <= 0:
        raise InvalidParameters("Expiry must be a positive number of seconds")
    if expires_seconds > MAX_PRESIGN_EXPIRY:
        logger.warning(
            "Presign expiry of %d seconds exceeds the 7 day limit; clamping to %d",
            expires_seconds, MAX_PRESIGN_EXPIRY,
        )
        return MAX_PRESIGN_EXPIRY
    return expires_seconds


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)
