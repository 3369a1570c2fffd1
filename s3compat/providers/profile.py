"""Provider profiles and endpoint resolution.

A ProviderProfile is pure data describing one storage vendor: its endpoint
template, region table, addressing style and a few optional hooks for the
vendor quirks that can't be expressed as data (signing region overrides,
alternate hostnames, CDN and public URLs).

A Provider binds a profile to a region and a parameter bag. It resolves
everything once, at construction, and is immutable afterwards; use
with_params() to derive a differently configured copy. Because nothing
changes after construction, a Provider can be shared between threads.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping, Optional

from s3compat.errors import InvalidConfiguration
from s3compat.models import Endpoint, ObjectLocation
from s3compat.urls import decode_key, encode_key, strip_scheme

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"\{([a-z_]+)\}")

# Parameter values treated as "off" for boolean flags
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class RegionPolicy(Enum):
    """What to do with an unknown or empty region."""

    FALLBACK = "fallback"
    STRICT = "strict"


class MatchKind(Enum):
    """How an alternate host is matched against a URL.

    PREFIX: the URL starts with the pattern; the bucket is fixed.
    WILDCARD: the host is '<bucket>.<pattern>' with a single-label bucket.
    PATH: the URL is '<pattern>/<bucket>/<key>'.
    """

    PREFIX = "prefix"
    WILDCARD = "wildcard"
    PATH = "path"


@dataclass(frozen=True)
class RegionInfo:
    """One entry of a provider's region table.

    Attributes:
        label: Human readable name
        code: Region code used for signing
        prefix: Value for the {region_prefix} placeholder
        endpoint: Value for the {endpoint} placeholder (per-region hosts)
    """

    label: str
    code: str
    prefix: str = ""
    endpoint: str = ""


@dataclass(frozen=True)
class AlternateHost:
    """A hostname, other than the primary endpoint, that serves objects."""

    pattern: str
    kind: MatchKind
    bucket: Optional[str] = None

    def match(self, target: str) -> Optional[ObjectLocation]:
        """Try to map a scheme-less URL onto (bucket, key).

        Args:
            target: URL with scheme and query already removed, host lower-cased

        Returns:
            The location, or None if this alternate does not apply.
        """
        pattern = self.pattern.rstrip("/")
        if not pattern:
            return None

        if self.kind is MatchKind.PREFIX:
            if not _starts_at_boundary(target, pattern) or self.bucket is None:
                return None
            rest = target[len(pattern):].lstrip("/")
            return ObjectLocation(self.bucket, decode_key(rest))

        if self.kind is MatchKind.PATH:
            if not _starts_at_boundary(target, pattern):
                return None
            rest = target[len(pattern):].lstrip("/")
            bucket, _, key = rest.partition("/")
            if not bucket:
                return None
            return ObjectLocation(bucket, decode_key(key))

        host, _, path = target.partition("/")
        suffix = "." + pattern
        if not host.endswith(suffix):
            return None
        label = host[: -len(suffix)]
        if not label or "." in label:
            return None
        return ObjectLocation(label, decode_key(path))


def _starts_at_boundary(target: str, pattern: str) -> bool:
    return target == pattern or target.startswith(pattern + "/")


# Hook signatures. Each receives the fully constructed Provider.
SigningRegionHook = Callable[["Provider"], str]
HostHook = Callable[["Provider"], Optional[str]]
AlternatesHook = Callable[["Provider"], list[AlternateHost]]
UrlHook = Callable[["Provider", str, str], Optional[str]]
RegionsHook = Callable[[Mapping[str, object]], dict[str, RegionInfo]]


@dataclass(frozen=True)
class ProviderProfile:
    """Static description of a storage vendor."""

    id: str
    label: str
    endpoint_pattern: str
    regions: Mapping[str, RegionInfo]
    default_region: str
    path_style: bool = True
    region_policy: RegionPolicy = RegionPolicy.STRICT
    required_params: tuple[str, ...] = ()
    force_path_style: bool = False
    supports_presigned_post: bool = True
    # Parameter-name prefixes whose '<prefix><bucket>' entries name a domain
    # serving that bucket (CDNs, custom domains)
    bucket_domain_params: tuple[str, ...] = ("custom_domain_", "public_url_")
    signing_region: Optional[SigningRegionHook] = None
    host_override: Optional[HostHook] = None
    alternates: Optional[AlternatesHook] = None
    public_url: Optional[UrlHook] = None
    cdn_url: Optional[UrlHook] = None
    extra_regions: Optional[RegionsHook] = None
    help_url: str = ""

    @property
    def requires_account_id(self) -> bool:
        return "account_id" in self.required_params

    @property
    def has_integrated_cdn(self) -> bool:
        return self.cdn_url is not None

    def region_table(
        self, params: Optional[Mapping[str, object]] = None
    ) -> dict[str, RegionInfo]:
        """Return the regions valid for this profile and parameter set."""
        table = dict(self.regions)
        if self.extra_regions is not None:
            table.update(self.extra_regions(params or {}))
        return table


class Provider:
    """A provider profile bound to a region and parameters.

    Args:
        profile: The vendor profile
        region: Region code; None or '' means "unspecified"
        params: Free-form parameters (account_id, CDN domains, flags)

    Raises:
        InvalidConfiguration: If a required parameter is missing, the region
            is rejected by a strict provider, or the endpoint template
            cannot be fully resolved.
    """

    def __init__(
        self,
        profile: ProviderProfile,
        region: Optional[str] = None,
        params: Optional[Mapping[str, object]] = None,
    ):
        self.profile = profile
        self.params: Mapping[str, object] = MappingProxyType(dict(params or {}))

        for name in profile.required_params:
            if not self.param(name):
                raise InvalidConfiguration(
                    f"{_param_label(name)} is required for {profile.label}"
                )

        self._regions = profile.region_table(self.params)
        self.region = self._select_region(region)
        self.endpoint = self._resolve()

    def __repr__(self) -> str:
        return (
            f"Provider({self.profile.id!r}, region={self.region!r}, "
            f"host={self.endpoint.host!r})"
        )

    @property
    def id(self) -> str:
        return self.profile.id

    @property
    def label(self) -> str:
        return self.profile.label

    @property
    def region_info(self) -> RegionInfo:
        return self._regions[self.region]

    @property
    def regions(self) -> dict[str, RegionInfo]:
        return dict(self._regions)

    @property
    def path_style(self) -> bool:
        return self.endpoint.path_style

    @property
    def signing_region(self) -> str:
        """Region to put in the credential scope."""
        if self.profile.signing_region is not None:
            return self.profile.signing_region(self)
        return self.region_info.code

    def param(self, name: str, default: str = "") -> str:
        value = self.params.get(name)
        if value is None:
            return default
        return str(value).strip()

    def flag(self, name: str, default: bool = False) -> bool:
        value = self.params.get(name)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() not in _FALSE_VALUES

    def with_params(self, **params) -> "Provider":
        """Return a new Provider with extra or replaced parameters."""
        merged = dict(self.params)
        merged.update(params)
        return Provider(self.profile, self.region, merged)

    def with_region(self, region: str) -> "Provider":
        return Provider(self.profile, region, self.params)

    def _select_region(self, region: Optional[str]) -> str:
        region = (region or "").strip()
        if region and region in self._regions:
            return region

        if self.profile.region_policy is RegionPolicy.FALLBACK:
            if region:
                logger.debug(
                    "Unknown region %r for %s, using %s",
                    region, self.profile.id, self.profile.default_region,
                )
            return self.profile.default_region

        valid = ", ".join(sorted(self._regions))
        if region:
            message = f"Invalid region {region!r} for {self.profile.label}"
        else:
            message = f"A region is required for {self.profile.label}"
        raise InvalidConfiguration(f"{message}. Valid regions: {valid}")

    def _resolve(self) -> Endpoint:
        info = self._regions[self.region]
        endpoint_param = strip_scheme(self.param("endpoint")).rstrip("/")
        values = {
            "region": self.region,
            "region_prefix": info.prefix,
            "account_id": self.param("account_id") or None,
            "endpoint": info.endpoint or endpoint_param or None,
        }

        host = None
        if self.profile.host_override is not None:
            host = self.profile.host_override(self)
        if host is None:
            host = _substitute(self.profile.endpoint_pattern, values)

        unresolved = _PLACEHOLDER_RE.findall(host)
        if unresolved:
            names = ", ".join("{" + name + "}" for name in unresolved)
            raise InvalidConfiguration(
                f"Unresolved endpoint placeholder(s) {names} for {self.profile.label}"
            )

        if self.profile.force_path_style:
            path_style = True
        else:
            path_style = self.flag("path_style", self.profile.path_style)

        # An explicit http:// endpoint implies plain HTTP unless overridden
        default_https = not self.param("endpoint").lower().startswith("http://")
        scheme = "https" if self.flag("use_https", default_https) else "http"
        return Endpoint(host=host.lower(), path_style=path_style, scheme=scheme)

    def host_for(self, bucket: str) -> str:
        """Host a request for this bucket is sent to (and signed with)."""
        if bucket and not self.path_style:
            return f"{bucket}.{self.endpoint.host}"
        return self.endpoint.host

    def canonical_uri(self, bucket: str, encoded_key: str = "") -> str:
        """Canonical URI path for an already-encoded key."""
        if not bucket:
            return "/"
        encoded_key = encoded_key.lstrip("/")
        if self.path_style:
            return f"/{bucket}/{encoded_key}" if encoded_key else f"/{bucket}"
        return f"/{encoded_key}"

    def alternate_hosts(self) -> list[AlternateHost]:
        """Alternate hosts in match order: bucket domains, then vendor hosts."""
        hosts = []
        for name in sorted(self.params):
            for prefix in self.profile.bucket_domain_params:
                if name.startswith(prefix) and len(name) > len(prefix):
                    domain = strip_scheme(self.param(name)).rstrip("/").lower()
                    if domain:
                        hosts.append(AlternateHost(
                            domain, MatchKind.PREFIX, bucket=name[len(prefix):]
                        ))
        if self.profile.alternates is not None:
            hosts.extend(self.profile.alternates(self))
        return hosts

    def reverse_match(self, url: str) -> Optional[ObjectLocation]:
        """Map a URL served by this provider back to (bucket, key).

        The primary endpoint is tried first under the provider's addressing
        style, then the declared alternate hosts. The first match wins.

        Args:
            url: URL with or without scheme

        Returns:
            The matched location, or None if the URL does not belong to
            this provider.
        """
        target = strip_scheme(url)
        host, sep, path = target.partition("/")
        if not host:
            return None
        target = host.lower() + sep + path

        primary = [
            AlternateHost(self.endpoint.host, MatchKind.PATH),
            AlternateHost(self.endpoint.host, MatchKind.WILDCARD),
        ]
        if not self.path_style:
            primary.reverse()

        for candidate in primary + self.alternate_hosts():
            location = candidate.match(target)
            if location is not None:
                return location
        return None

    def is_provider_url(self, url: str) -> bool:
        return self.reverse_match(url) is not None

    def public_url(self, bucket: str, key: str) -> Optional[str]:
        """Public (unsigned) URL for an object, if the vendor offers one."""
        encoded = encode_key(key)
        for prefix in ("custom_domain_", "public_url_"):
            domain = self.param(prefix + bucket)
            if domain:
                return _join_domain(domain, encoded)
        if self.profile.public_url is not None:
            return self.profile.public_url(self, bucket, encoded)
        return None

    def cdn_url(self, bucket: str, key: str) -> Optional[str]:
        """CDN URL for an object, if the vendor has an integrated CDN."""
        if self.profile.cdn_url is None:
            return None
        return self.profile.cdn_url(self, bucket, encode_key(key))


def _substitute(pattern: str, values: Mapping[str, Optional[str]]) -> str:
    def replace(match: re.Match) -> str:
        value = values.get(match.group(1))
        return match.group(0) if value is None else value

    return _PLACEHOLDER_RE.sub(replace, pattern)


def _join_domain(domain: str, encoded_key: str) -> str:
    """Join a configured domain (with or without scheme) and a key."""
    domain = domain.strip().rstrip("/")
    if "://" not in domain:
        domain = "https://" + domain
    return f"{domain}/{encoded_key}" if encoded_key else domain


def _param_label(name: str) -> str:
    if name == "account_id":
        return "Account ID"
    return name.replace("_", " ").capitalize()
