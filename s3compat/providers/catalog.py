"""Built-in provider profiles.

One ProviderProfile per supported vendor, looked up by id. Vendor quirks
live in small hook functions next to their profile rather than in
subclasses.
"""

from typing import Mapping, Optional

from s3compat.errors import InvalidConfiguration
from s3compat.providers.profile import (
    AlternateHost,
    MatchKind,
    Provider,
    ProviderProfile,
    RegionInfo,
    RegionPolicy,
)


def _regions(entries: list[tuple[str, str]]) -> dict[str, RegionInfo]:
    """Build a region table where the region key is also the signing code."""
    return {code: RegionInfo(label=label, code=code) for code, label in entries}


# --- Amazon S3 ---------------------------------------------------------------

AWS_REGIONS = _regions([
    ("us-east-1", "US East (N. Virginia)"),
    ("us-east-2", "US East (Ohio)"),
    ("us-west-1", "US West (N. California)"),
    ("us-west-2", "US West (Oregon)"),
    ("ca-central-1", "Canada (Central)"),
    ("eu-west-1", "EU (Ireland)"),
    ("eu-west-2", "EU (London)"),
    ("eu-west-3", "EU (Paris)"),
    ("eu-central-1", "EU (Frankfurt)"),
    ("eu-central-2", "EU (Zurich)"),
    ("eu-north-1", "EU (Stockholm)"),
    ("eu-south-1", "EU (Milan)"),
    ("eu-south-2", "EU (Spain)"),
    ("ap-east-1", "Asia Pacific (Hong Kong)"),
    ("ap-northeast-1", "Asia Pacific (Tokyo)"),
    ("ap-northeast-2", "Asia Pacific (Seoul)"),
    ("ap-northeast-3", "Asia Pacific (Osaka)"),
    ("ap-southeast-1", "Asia Pacific (Singapore)"),
    ("ap-southeast-2", "Asia Pacific (Sydney)"),
    ("ap-southeast-3", "Asia Pacific (Jakarta)"),
    ("ap-southeast-4", "Asia Pacific (Melbourne)"),
    ("ap-south-1", "Asia Pacific (Mumbai)"),
    ("ap-south-2", "Asia Pacific (Hyderabad)"),
    ("sa-east-1", "South America (São Paulo)"),
    ("me-south-1", "Middle East (Bahrain)"),
    ("me-central-1", "Middle East (UAE)"),
    ("af-south-1", "Africa (Cape Town)"),
    ("il-central-1", "Israel (Tel Aviv)"),
])

# Legacy global endpoint, still used by older URLs and by us-east-1 when
# the standard endpoint is requested
AWS_GLOBAL_HOST = "s3.amazonaws.com"


def _aws_host(provider: Provider) -> Optional[str]:
    if provider.region == "us-east-1" and provider.flag("use_standard_endpoint"):
        return AWS_GLOBAL_HOST
    return None


def _aws_alternates(provider: Provider) -> list[AlternateHost]:
    hosts = [
        AlternateHost(AWS_GLOBAL_HOST, MatchKind.WILDCARD),
        AlternateHost(AWS_GLOBAL_HOST, MatchKind.PATH),
    ]
    for region in AWS_REGIONS:
        if region == provider.region:
            continue
        host = f"s3.{region}.amazonaws.com"
        hosts.append(AlternateHost(host, MatchKind.WILDCARD))
        hosts.append(AlternateHost(host, MatchKind.PATH))
    return hosts


def _aws_cdn_url(provider: Provider, bucket: str, encoded_key: str) -> Optional[str]:
    domain = provider.param(f"cloudfront_domain_{bucket}")
    if not domain:
        return None
    return _https(domain, encoded_key)


AWS_S3 = ProviderProfile(
    id="aws_s3",
    label="Amazon S3",
    endpoint_pattern="s3.{region}.amazonaws.com",
    regions=AWS_REGIONS,
    default_region="us-east-1",
    path_style=True,
    region_policy=RegionPolicy.FALLBACK,
    bucket_domain_params=("cloudfront_domain_", "custom_domain_", "public_url_"),
    host_override=_aws_host,
    alternates=_aws_alternates,
    public_url=_aws_cdn_url,
    cdn_url=_aws_cdn_url,
    help_url="https://docs.aws.amazon.com/general/latest/gr/s3.html",
)


# --- Cloudflare R2 -----------------------------------------------------------

# R2 signs every jurisdiction with the 'auto' region
R2_REGIONS = {
    "default": RegionInfo(label="Automatic", code="auto", prefix=""),
    "eu": RegionInfo(label="European Union", code="auto", prefix="eu."),
    "fedramp": RegionInfo(label="FedRAMP", code="auto", prefix="fedramp."),
    "apac": RegionInfo(label="Asia Pacific", code="auto", prefix="apac."),
}


def _r2_alternates(provider: Provider) -> list[AlternateHost]:
    account_id = provider.param("account_id").lower()
    return [AlternateHost(f"{account_id}.r2.dev", MatchKind.WILDCARD)]


def _r2_public_url(provider: Provider, bucket: str, encoded_key: str) -> Optional[str]:
    return f"https://{bucket}.{provider.param('account_id')}.r2.dev/{encoded_key}"


CLOUDFLARE_R2 = ProviderProfile(
    id="cloudflare_r2",
    label="Cloudflare R2",
    endpoint_pattern="{account_id}.{region_prefix}r2.cloudflarestorage.com",
    regions=R2_REGIONS,
    default_region="default",
    path_style=True,
    region_policy=RegionPolicy.STRICT,
    required_params=("account_id",),
    signing_region=lambda provider: "auto",
    alternates=_r2_alternates,
    public_url=_r2_public_url,
    help_url="https://developers.cloudflare.com/r2/api/s3/api/",
)


# --- Backblaze B2 ------------------------------------------------------------

B2_REGIONS = _regions([
    ("us-west-000", "US West (000)"),
    ("us-west-001", "US West (001)"),
    ("us-west-002", "US West (002)"),
    ("us-west-003", "US West (003)"),
    ("us-west-004", "US West (004)"),
    ("eu-central-003", "EU Central (003)"),
])


def _b2_public_host(provider: Provider) -> Optional[str]:
    account_id = provider.param("account_id")
    if not account_id:
        return None
    return f"f{account_id}.backblazeb2.com"


def _b2_alternates(provider: Provider) -> list[AlternateHost]:
    host = _b2_public_host(provider)
    if host is None:
        return []
    return [AlternateHost(f"{host.lower()}/file", MatchKind.PATH)]


def _b2_public_url(provider: Provider, bucket: str, encoded_key: str) -> Optional[str]:
    host = _b2_public_host(provider)
    if host is None:
        return None
    return f"https://{host}/file/{bucket}/{encoded_key}"


BACKBLAZE_B2 = ProviderProfile(
    id="backblaze",
    label="Backblaze B2",
    endpoint_pattern="s3.{region}.backblazeb2.com",
    regions=B2_REGIONS,
    default_region="us-west-004",
    path_style=False,
    region_policy=RegionPolicy.STRICT,
    alternates=_b2_alternates,
    public_url=_b2_public_url,
    help_url="https://www.backblaze.com/docs/cloud-storage-s3-compatible-api",
)


# --- DigitalOcean Spaces -----------------------------------------------------

DO_REGIONS = _regions([
    ("nyc3", "New York City, United States"),
    ("sfo3", "San Francisco, United States"),
    ("sfo2", "San Francisco, United States (Legacy)"),
    ("ams3", "Amsterdam, Netherlands"),
    ("sgp1", "Singapore"),
    ("fra1", "Frankfurt, Germany"),
    ("syd1", "Sydney, Australia"),
])


def _do_alternates(provider: Provider) -> list[AlternateHost]:
    return [
        AlternateHost(f"{provider.region}.cdn.digitaloceanspaces.com", MatchKind.WILDCARD),
    ]


def _do_cdn_url(provider: Provider, bucket: str, encoded_key: str) -> Optional[str]:
    custom = provider.param(f"custom_cdn_{bucket}")
    if custom:
        return _https(custom, encoded_key)
    return f"https://{bucket}.{provider.region}.cdn.digitaloceanspaces.com/{encoded_key}"


def _do_public_url(provider: Provider, bucket: str, encoded_key: str) -> Optional[str]:
    if provider.flag("edge_caching"):
        return _do_cdn_url(provider, bucket, encoded_key)
    return f"https://{bucket}.{provider.endpoint.host}/{encoded_key}"


DIGITALOCEAN_SPACES = ProviderProfile(
    id="digitalocean_spaces",
    label="DigitalOcean Spaces",
    endpoint_pattern="{region}.digitaloceanspaces.com",
    regions=DO_REGIONS,
    default_region="sfo3",
    path_style=False,
    region_policy=RegionPolicy.FALLBACK,
    bucket_domain_params=("custom_cdn_", "custom_domain_", "public_url_"),
    alternates=_do_alternates,
    public_url=_do_public_url,
    cdn_url=_do_cdn_url,
    help_url="https://docs.digitalocean.com/products/spaces/",
)


# --- Wasabi ------------------------------------------------------------------

WASABI_REGIONS = _regions([
    ("us-east-1", "Virginia 1"),
    ("us-east-2", "Virginia 2"),
    ("us-central-1", "Plano, TX"),
    ("ca-central-1", "Toronto, Canada"),
    ("us-west-1", "Oregon"),
    ("eu-west-1", "London, England"),
    ("eu-west-2", "Paris, France"),
    ("eu-central-1", "Amsterdam, Netherlands"),
    ("eu-central-2", "Frankfurt, Germany"),
    ("ap-northeast-1", "Tokyo, Japan"),
    ("ap-northeast-2", "Osaka, Japan"),
    ("ap-southeast-2", "Sydney, Australia"),
    ("ap-southeast-1", "Singapore"),
])


def _wasabi_cdn_url(provider: Provider, bucket: str, encoded_key: str) -> Optional[str]:
    domain = provider.param(f"cdn_domain_{bucket}")
    if not domain:
        return None
    return _https(domain, encoded_key)


def _wasabi_public_url(provider: Provider, bucket: str, encoded_key: str) -> Optional[str]:
    cdn = _wasabi_cdn_url(provider, bucket, encoded_key)
    if cdn is not None:
        return cdn
    return f"https://{bucket}.{provider.endpoint.host}/{encoded_key}"


WASABI = ProviderProfile(
    id="wasabi",
    label="Wasabi",
    endpoint_pattern="s3.{region}.wasabisys.com",
    regions=WASABI_REGIONS,
    default_region="us-east-1",
    path_style=False,
    region_policy=RegionPolicy.STRICT,
    bucket_domain_params=("cdn_domain_", "custom_domain_", "public_url_"),
    public_url=_wasabi_public_url,
    cdn_url=_wasabi_cdn_url,
    help_url="https://docs.wasabi.com/docs/what-are-the-service-urls-for-wasabi-s-different-storage-regions",
)


# --- Vultr -------------------------------------------------------------------

VULTR_REGIONS = _regions([
    ("ams1", "Amsterdam"),
    ("blr1", "Bangalore"),
    ("sgp1", "Singapore"),
    ("del1", "New Delhi"),
    ("ewr1", "New Jersey"),
    ("sjc1", "Silicon Valley"),
])

VULTR = ProviderProfile(
    id="vultr",
    label="Vultr Object Storage",
    endpoint_pattern="{region}.vultrobjects.com",
    regions=VULTR_REGIONS,
    default_region="ewr1",
    path_style=True,
    force_path_style=True,
    region_policy=RegionPolicy.STRICT,
    help_url="https://docs.vultr.com/vultr-object-storage",
)


# --- Linode (Akamai) ---------------------------------------------------------

# Region key -> (label, cluster host). The signing region is the cluster
# id, i.e. the first label of the host.
_LINODE_CLUSTERS = [
    ("us-southeast", "Atlanta, GA, United States", "us-southeast-1.linodeobjects.com"),
    ("us-ord", "Chicago, IL, United States", "us-ord-1.linodeobjects.com"),
    ("us-lax", "Los Angeles, CA, United States", "us-lax-1.linodeobjects.com"),
    ("us-mia", "Miami, FL, United States", "us-mia-1.linodeobjects.com"),
    ("us-east", "Newark, NJ, United States", "us-east-1.linodeobjects.com"),
    ("us-sea", "Seattle, WA, United States", "us-sea-1.linodeobjects.com"),
    ("us-iad", "Washington, DC, United States", "us-iad-1.linodeobjects.com"),
    ("id-cgk", "Jakarta, Indonesia", "id-cgk-1.linodeobjects.com"),
    ("in-maa", "Chennai, India", "in-maa-1.linodeobjects.com"),
    ("in-bom-2", "Mumbai 2, India", "in-bom-1.linodeobjects.com"),
    ("jp-osa", "Osaka, Japan", "jp-osa-1.linodeobjects.com"),
    ("jp-tyo-3", "Tokyo 3, Japan", "jp-tyo-1.linodeobjects.com"),
    ("ap-south", "Singapore", "ap-south-1.linodeobjects.com"),
    ("sg-sin-2", "Singapore 2", "sg-sin-1.linodeobjects.com"),
    ("eu-central", "Frankfurt, Germany", "eu-central-1.linodeobjects.com"),
    ("de-fra-2", "Frankfurt 2, Germany", "de-fra-1.linodeobjects.com"),
    ("es-mad", "Madrid, Spain", "es-mad-1.linodeobjects.com"),
    ("fr-par", "Paris, France", "fr-par-1.linodeobjects.com"),
    ("gb-lon", "London 2, Great Britain", "gb-lon-1.linodeobjects.com"),
    ("it-mil", "Milan, Italy", "it-mil-1.linodeobjects.com"),
    ("nl-ams", "Amsterdam, Netherlands", "nl-ams-1.linodeobjects.com"),
    ("se-sto", "Stockholm, Sweden", "se-sto-1.linodeobjects.com"),
    ("au-mel", "Melbourne, Australia", "au-mel-1.linodeobjects.com"),
    ("br-gru", "Sao Paulo, Brazil", "br-gru-1.linodeobjects.com"),
]

LINODE_REGIONS = {
    key: RegionInfo(label=label, code=host.split(".", 1)[0], endpoint=host)
    for key, label, host in _LINODE_CLUSTERS
}


def _linode_public_url(provider: Provider, bucket: str, encoded_key: str) -> Optional[str]:
    if not provider.flag(f"website_enabled_{bucket}"):
        return None
    return f"https://{bucket}.{provider.endpoint.host}/{encoded_key}"


LINODE = ProviderProfile(
    id="linode",
    label="Linode Object Storage",
    endpoint_pattern="{endpoint}",
    regions=LINODE_REGIONS,
    default_region="us-east",
    path_style=True,
    region_policy=RegionPolicy.STRICT,
    public_url=_linode_public_url,
    help_url="https://techdocs.akamai.com/cloud-computing/docs/object-storage",
)


# --- Mega S4 -----------------------------------------------------------------

MEGA_REGIONS = _regions([
    ("eu-central-1", "Amsterdam"),
    ("eu-central-2", "Bettembourg"),
    ("ca-central-1", "Montreal"),
    ("ca-west-1", "Vancouver"),
])

MEGA_GLOBAL_HOST = "g.s4.mega.io"


def _mega_alternates(provider: Provider) -> list[AlternateHost]:
    kind = MatchKind.PATH if provider.path_style else MatchKind.WILDCARD
    return [AlternateHost(MEGA_GLOBAL_HOST, kind)]


MEGA_S4 = ProviderProfile(
    id="mega_s4",
    label="Mega S4",
    endpoint_pattern="s3.{region}.s4.mega.io",
    regions=MEGA_REGIONS,
    default_region="eu-central-1",
    path_style=True,
    region_policy=RegionPolicy.STRICT,
    required_params=("account_id",),
    supports_presigned_post=False,
    alternates=_mega_alternates,
    help_url="https://help.mega.io/megas4",
)


# --- Generic S3-compatible ---------------------------------------------------

def _generic_extra_regions(params: Mapping[str, object]) -> dict:
    raw = params.get("regions") or []
    if isinstance(raw, str):
        raw = raw.split(",")
    codes = [str(code).strip() for code in raw if str(code).strip()]
    return {code: RegionInfo(label=code, code=code) for code in codes}


def _generic_signing_region(provider: Provider) -> str:
    return provider.param("signing_region") or provider.region_info.code


GENERIC_S3 = ProviderProfile(
    id="generic_s3",
    label="S3-Compatible Storage",
    endpoint_pattern="{endpoint}",
    regions={"auto": RegionInfo(label="Automatic", code="auto")},
    default_region="auto",
    path_style=True,
    region_policy=RegionPolicy.FALLBACK,
    required_params=("endpoint",),
    signing_region=_generic_signing_region,
    extra_regions=_generic_extra_regions,
)


def _https(domain: str, encoded_key: str) -> str:
    domain = domain.strip().rstrip("/")
    if "://" not in domain:
        domain = "https://" + domain
    return f"{domain}/{encoded_key}"


PROFILES: dict[str, ProviderProfile] = {
    profile.id: profile
    for profile in (
        AWS_S3,
        CLOUDFLARE_R2,
        BACKBLAZE_B2,
        DIGITALOCEAN_SPACES,
        WASABI,
        VULTR,
        LINODE,
        MEGA_S4,
        GENERIC_S3,
    )
}


def get_profile(provider_id: str) -> ProviderProfile:
    """Look up a built-in profile by id.

    Raises:
        InvalidConfiguration: If the id is unknown
    """
    try:
        return PROFILES[provider_id]
    except KeyError:
        known = ", ".join(sorted(PROFILES))
        raise InvalidConfiguration(
            f"Unknown provider {provider_id!r}. Known providers: {known}"
        ) from None


def create_provider(
    provider_id: str,
    region: Optional[str] = None,
    **params,
) -> Provider:
    """Create a Provider for a built-in profile.

    Example:
        >>> create_provider("cloudflare_r2", "eu", account_id="abc123")
    """
    return Provider(get_profile(provider_id), region, params)
