"""Object key and URL encoding.

Keys are normalized by decoding first and encoding once, so callers may
pass keys that are already percent-encoded without ending up with
double-encoded paths. Keys that try to climb out of the bucket ('..'
segments) or smuggle NUL bytes encode to an empty string.
"""

import re
from typing import TYPE_CHECKING, Mapping, Optional
from urllib.parse import quote, unquote

from s3compat.errors import InvalidParameters

if TYPE_CHECKING:
    from s3compat.providers import Provider


_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")


def decode_key(key: str) -> str:
    """Percent-decode an object key ('+' is left alone)."""
    return unquote(key)


def encode_key(key: str) -> str:
    """Encode an object key for use in a URL path.

    Everything outside the RFC 3986 unreserved set is percent-encoded,
    except '/' which is kept literal so the key's folder structure stays
    visible in the path.

    Args:
        key: Raw or already-encoded object key

    Returns:
        The encoded key, or an empty string when the key is empty, contains
        a '..' path segment or contains a NUL byte.
    """
    decoded = decode_key(key.lstrip("/")).lstrip("/")
    if not decoded:
        return ""
    if "\x00" in decoded or ".." in decoded.split("/"):
        return ""
    return quote(decoded, safe="/")


def encode_query(params: Optional[Mapping[str, object]]) -> str:
    """Build a query string with keys sorted and each part encoded.

    The result is both the query sent on the wire and the canonical query
    string that SigV4 signs, so the two can never drift apart. Empty values
    keep their '=' (e.g. 'delete=').
    """
    if not params:
        return ""
    pairs = sorted(
        (quote(str(k), safe=""), quote("" if v is None else str(v), safe=""))
        for k, v in params.items()
    )
    return "&".join(f"{k}={v}" for k, v in pairs)


def strip_scheme(url: str) -> str:
    """Remove the scheme, query string and fragment from a URL."""
    url = _SCHEME_RE.sub("", url.strip())
    for separator in ("?", "#"):
        url = url.split(separator, 1)[0]
    return url


def build_url(
    provider: "Provider",
    bucket: str,
    key: str = "",
    query: Optional[Mapping[str, object]] = None,
) -> str:
    """Build the full request URL for a bucket/object.

    Path-style providers produce ``scheme://host/bucket/key`` and
    virtual-hosted providers ``scheme://bucket.host/key``. An empty key
    yields no trailing slash.

    Raises:
        InvalidParameters: If a non-empty key encodes to nothing
    """
    encoded = encode_key(key) if key else ""
    if key and not encoded:
        raise InvalidParameters(f"Invalid object key: {key!r}")

    path = provider.canonical_uri(bucket, encoded)
    if path == "/":
        path = ""
    url = f"{provider.endpoint.scheme}://{provider.host_for(bucket)}{path}"

    query_string = encode_query(query)
    if query_string:
        url = f"{url}?{query_string}"
    return url
