"""boto3 client factory for resolved providers.

For callers who want the full boto3 API on top of a provider resolved by
s3compat: the endpoint, signing region and addressing style all come from
the Provider, so a boto3 client and an S3Client built from the same
Provider talk to the same host in the same way.

The signature version is pinned to 's3v4'; several S3-compatible vendors
reject the legacy signature outright.
"""

import boto3
from botocore.client import Config

from s3compat.models import Credentials
from s3compat.providers import Provider


def addressing_style(provider: Provider) -> str:
    """botocore's name for the provider's addressing style."""
    return "path" if provider.path_style else "virtual"


def build_s3_client(provider: Provider, credentials: Credentials):
    """Build a boto3 S3 client for a resolved provider.

    Args:
        provider: Provider with a resolved endpoint.
        credentials: Access key pair (and optional session token).

    Returns:
        A boto3 S3 client configured for the provider.
    """
    boto_config = Config(
        signature_version="s3v4",
        s3={"addressing_style": addressing_style(provider)},
    )

    return boto3.client(
        "s3",
        endpoint_url=provider.endpoint.base_url,
        aws_access_key_id=credentials.access_key,
        aws_secret_access_key=credentials.secret_key,
        aws_session_token=credentials.session_token,
        region_name=provider.signing_region,
        config=boto_config,
    )
