"""Base reporter interface."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from s3compat.errors import S3CompatError
    from s3compat.models import (
        BucketListing,
        CorsConfiguration,
        ObjectListing,
        ObjectLocation,
        PresignedUrl,
        UploadCheck,
    )
    from s3compat.providers import Provider, ProviderProfile


class Reporter(ABC):
    """Abstract base class for command output."""

    @abstractmethod
    def on_providers(self, profiles: list["ProviderProfile"]) -> None:
        """Called with the built-in provider profiles."""
        pass

    @abstractmethod
    def on_regions(self, profile: "ProviderProfile") -> None:
        """Called with one profile whose region table should be shown."""
        pass

    @abstractmethod
    def on_endpoint(self, provider: "Provider") -> None:
        """Called with a resolved provider."""
        pass

    @abstractmethod
    def on_presigned(self, bucket: str, key: str, presigned: "PresignedUrl") -> None:
        """Called when a presigned URL has been created."""
        pass

    @abstractmethod
    def on_location(self, url: str, location: Optional["ObjectLocation"]) -> None:
        """Called with the result of parsing a URL back to bucket and key."""
        pass

    @abstractmethod
    def on_buckets(self, listing: "BucketListing") -> None:
        """Called with a page of buckets."""
        pass

    @abstractmethod
    def on_objects(self, listing: "ObjectListing") -> None:
        """Called with a page of objects."""
        pass

    @abstractmethod
    def on_cors(
        self, bucket: str, config: "CorsConfiguration", check: "UploadCheck"
    ) -> None:
        """Called with a bucket's CORS rules and the upload analysis."""
        pass

    @abstractmethod
    def on_error(self, error: "S3CompatError") -> None:
        """Called when a command fails."""
        pass

    def on_complete(self) -> Optional[dict]:
        """Called once the command has finished."""
        return None
