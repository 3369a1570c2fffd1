"""JSON reporter for structured output.

Collects everything a command produced and writes it as one JSON document,
suitable for scripting around the CLI.
"""

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from s3compat.errors import RemoteError, S3CompatError
from s3compat.models import (
    BucketListing,
    CorsConfiguration,
    ObjectListing,
    ObjectLocation,
    PresignedUrl,
    UploadCheck,
)
from s3compat.providers import Provider, ProviderProfile
from s3compat.reporters.base import Reporter


def _profile_data(profile: ProviderProfile) -> dict:
    return {
        "id": profile.id,
        "name": profile.label,
        "default_region": profile.default_region,
        "region_policy": profile.region_policy.value,
        "path_style": profile.path_style,
        "required_params": list(profile.required_params),
        "supports_presigned_post": profile.supports_presigned_post,
    }


class JsonReporter(Reporter):
    """JSON reporter for structured output.

    Args:
        output_path: Optional file path to write JSON output
    """

    def __init__(self, output_path: Optional[str] = None):
        self.output_path = output_path
        self._data: dict = {}

    def on_providers(self, profiles: list[ProviderProfile]) -> None:
        self._data["providers"] = [_profile_data(profile) for profile in profiles]

    def on_regions(self, profile: ProviderProfile) -> None:
        data = _profile_data(profile)
        data["regions"] = {
            region_id: asdict(info) for region_id, info in profile.regions.items()
        }
        self._data["provider"] = data

    def on_endpoint(self, provider: Provider) -> None:
        self._data["endpoint"] = {
            "provider": provider.id,
            "region": provider.region,
            "host": provider.endpoint.host,
            "base_url": provider.endpoint.base_url,
            "path_style": provider.path_style,
            "signing_region": provider.signing_region,
        }

    def on_presigned(self, bucket: str, key: str, presigned: PresignedUrl) -> None:
        self._data["presigned"] = {
            "bucket": bucket,
            "key": key,
            "url": presigned.url,
            "expires_at": presigned.expires_at.isoformat(),
            "expires_seconds": presigned.expires_seconds,
        }

    def on_location(self, url: str, location: Optional[ObjectLocation]) -> None:
        self._data["location"] = {
            "url": url,
            "matched": location is not None,
            "bucket": location.bucket if location else None,
            "key": location.key if location else None,
        }

    def on_buckets(self, listing: BucketListing) -> None:
        self._data["buckets"] = asdict(listing)

    def on_objects(self, listing: ObjectListing) -> None:
        self._data["objects"] = asdict(listing)

    def on_cors(self, bucket: str, config: CorsConfiguration, check: UploadCheck) -> None:
        self._data["cors"] = {
            "bucket": bucket,
            "has_cors": config.has_cors,
            "rules": [asdict(rule) for rule in config.rules],
            "upload": {
                "origin": check.origin,
                "allowed": check.allows_upload,
                "methods": check.allowed_methods,
            },
        }

    def on_error(self, error: S3CompatError) -> None:
        data = {"code": error.code, "message": error.message}
        if isinstance(error, RemoteError):
            data["status"] = error.status
            data["request_id"] = error.request_id
        self._data["error"] = data

    def on_complete(self) -> dict:
        """Build the output document and write it if a path was given.

        Returns:
            The generated JSON data as a dictionary
        """
        output = {"timestamp": datetime.now(timezone.utc).isoformat()}
        output.update(self._data)

        if self.output_path:
            self._write_to_file(output)

        return output

    def _write_to_file(self, output: dict) -> None:
        path = Path(self.output_path)

        # Create parent directories if needed
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.output_path, "w", encoding="utf-8") as f:
            json.dump(output, f, indent=2)
