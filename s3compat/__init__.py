"""
s3compat: a client core for S3-compatible object storage.

Resolves vendor endpoints (AWS S3, Cloudflare R2, Backblaze B2,
DigitalOcean Spaces, Wasabi, Vultr, Linode, MEGA S4 and generic S3),
signs requests and presigned URLs with AWS Signature Version 4, and
normalizes S3 XML responses into plain data models. build_s3_client
hands the same resolved provider to boto3 for the rest of the S3 API.
"""

__version__ = "1.0.0"

from s3compat.boto import build_s3_client
from s3compat.client import S3Client
from s3compat.errors import (
    InvalidConfiguration,
    InvalidParameters,
    RemoteError,
    S3CompatError,
    TransportFailure,
    UnsupportedOperation,
    WireFormatError,
)
from s3compat.models import Credentials
from s3compat.providers import Provider, create_provider

__all__ = [
    "Credentials",
    "InvalidConfiguration",
    "InvalidParameters",
    "Provider",
    "RemoteError",
    "S3Client",
    "S3CompatError",
    "TransportFailure",
    "UnsupportedOperation",
    "WireFormatError",
    "build_s3_client",
    "create_provider",
    "__version__",
]
