"""Data models for s3compat.

Plain dataclasses for everything the client hands back to callers. XML
responses are normalized into these records so callers never see the raw
single-vs-list shapes of the wire format.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Credentials:
    """Access key pair used for signing.

    Surrounding whitespace is stripped from both keys, since keys pasted
    from a console frequently carry a trailing newline.
    """

    access_key: str
    secret_key: str = field(repr=False)
    session_token: Optional[str] = field(default=None, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "access_key", self.access_key.strip())
        object.__setattr__(self, "secret_key", self.secret_key.strip())


@dataclass(frozen=True)
class Endpoint:
    """A resolved provider endpoint."""

    host: str
    path_style: bool
    scheme: str = "https"

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}"


@dataclass(frozen=True)
class ObjectLocation:
    """A (bucket, key) pair recovered from a URL."""

    bucket: str
    key: str = ""


@dataclass(frozen=True)
class PageCursor:
    """Pagination state of a listing.

    The token is only kept while the listing is truncated; a truncated
    listing without a token is a valid terminal state.
    """

    is_truncated: bool = False
    token: str = ""

    def __post_init__(self):
        if not self.is_truncated and self.token:
            object.__setattr__(self, "token", "")


@dataclass
class NormalizedObject:
    """An object entry from a bucket listing."""

    key: str
    last_modified: str = ""
    etag: str = ""
    size: int = 0
    storage_class: str = "STANDARD"
    filename: str = ""
    mime_type: str = ""
    category: str = "other"

    @property
    def is_folder(self) -> bool:
        return self.key.endswith("/")

    @property
    def is_multipart(self) -> bool:
        """Multipart uploads carry an ETag of the form '<hash>-<parts>'."""
        return "-" in self.etag

    @property
    def part_count(self) -> int:
        if not self.is_multipart:
            return 0
        suffix = self.etag.rsplit("-", 1)[1]
        return int(suffix) if suffix.isdigit() else 0


@dataclass
class NormalizedBucket:
    """A bucket entry from a bucket listing."""

    name: str
    creation_date: str = ""


@dataclass
class Owner:
    """Bucket owner reported by list-buckets."""

    id: str = ""
    display_name: str = ""


@dataclass
class ObjectListing:
    """One page of a list-objects-v2 call."""

    bucket: str
    prefix: str = ""
    delimiter: str = ""
    objects: list[NormalizedObject] = field(default_factory=list)
    prefixes: list[str] = field(default_factory=list)
    cursor: PageCursor = field(default_factory=PageCursor)

    @property
    def is_truncated(self) -> bool:
        return self.cursor.is_truncated

    @property
    def continuation_token(self) -> str:
        return self.cursor.token


@dataclass
class BucketListing:
    """One page of a list-buckets call."""

    buckets: list[NormalizedBucket] = field(default_factory=list)
    owner: Optional[Owner] = None
    cursor: PageCursor = field(default_factory=PageCursor)


@dataclass
class CorsRule:
    """A single CORS rule.

    max_age_seconds of None means the rule carries no MaxAgeSeconds
    element; 0 is a distinct, valid value.
    """

    allowed_methods: list[str]
    allowed_origins: list[str]
    allowed_headers: list[str] = field(default_factory=list)
    expose_headers: list[str] = field(default_factory=list)
    max_age_seconds: Optional[int] = None
    id: Optional[str] = None


@dataclass
class CorsConfiguration:
    """CORS configuration of a bucket (possibly empty)."""

    rules: list[CorsRule] = field(default_factory=list)

    @property
    def has_cors(self) -> bool:
        return bool(self.rules)

    @property
    def rules_count(self) -> int:
        return len(self.rules)

    @property
    def supports_upload(self) -> bool:
        return any(
            method in ("PUT", "POST")
            for rule in self.rules
            for method in rule.allowed_methods
        )

    @property
    def allowed_origins(self) -> list[str]:
        return _unique(o for rule in self.rules for o in rule.allowed_origins)

    @property
    def allowed_methods(self) -> list[str]:
        return _unique(m for rule in self.rules for m in rule.allowed_methods)


@dataclass
class UploadCheck:
    """Whether a bucket's CORS rules let an origin upload from a browser."""

    origin: str
    allows_upload: bool = False
    allowed_methods: list[str] = field(default_factory=list)
    matching_rules: list[CorsRule] = field(default_factory=list)
    rules_checked: int = 0


@dataclass
class LifecycleFilter:
    prefix: str = ""
    tag_key: str = ""
    tag_value: str = ""


@dataclass
class LifecycleTransition:
    days: Optional[int] = None
    date: str = ""
    storage_class: str = ""


@dataclass
class LifecycleExpiration:
    days: Optional[int] = None
    date: str = ""
    expired_object_delete_marker: bool = False


@dataclass
class LifecycleRule:
    id: str = ""
    status: str = "Disabled"
    filter: LifecycleFilter = field(default_factory=LifecycleFilter)
    transitions: list[LifecycleTransition] = field(default_factory=list)
    expiration: Optional[LifecycleExpiration] = None

    @property
    def enabled(self) -> bool:
        return self.status == "Enabled"


@dataclass
class LifecycleConfiguration:
    """Lifecycle configuration of a bucket (possibly empty)."""

    rules: list[LifecycleRule] = field(default_factory=list)

    @property
    def has_lifecycle(self) -> bool:
        return bool(self.rules)


@dataclass
class CopyResult:
    etag: str = ""
    last_modified: str = ""


@dataclass
class DeletedEntry:
    key: str
    version_id: str = ""


@dataclass
class DeleteFailure:
    key: str
    code: str = "Unknown"
    message: str = "Unknown error"


@dataclass
class BatchDeleteResult:
    """Outcome of a batch delete: successes and failures kept apart."""

    deleted: list[DeletedEntry] = field(default_factory=list)
    failed: list[DeleteFailure] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.deleted)

    @property
    def error_count(self) -> int:
        return len(self.failed)

    def extend(self, other: "BatchDeleteResult") -> None:
        """Merge another batch's outcome into this one."""
        self.deleted.extend(other.deleted)
        self.failed.extend(other.failed)


@dataclass
class ObjectMetadata:
    """Metadata returned by a HEAD object request."""

    key: str
    content_type: str = ""
    content_length: int = 0
    etag: str = ""
    last_modified: str = ""
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def is_folder_placeholder(self) -> bool:
        return (
            self.key.endswith("/")
            and self.content_type == "application/x-directory"
        )


@dataclass
class ObjectContent:
    """Body and metadata of a GET object request."""

    metadata: ObjectMetadata
    body: bytes = b""


@dataclass
class BucketVersioning:
    status: str = "Disabled"
    mfa_delete: str = ""

    @property
    def enabled(self) -> bool:
        return self.status == "Enabled"


@dataclass
class BucketPolicy:
    has_policy: bool = False
    policy: dict = field(default_factory=dict)


@dataclass
class RenameResult:
    """Outcome of a copy-then-delete rename.

    source_deleted is False when the copy succeeded but the original could
    not be removed.
    """

    source_key: str
    target_key: str
    source_deleted: bool = True
    delete_error: Optional[str] = None


@dataclass
class FolderResult:
    folder_path: str
    created: bool = False


@dataclass
class FolderStatus:
    """What a one-item listing of a folder prefix revealed."""

    folder_path: str
    has_placeholder: bool = False
    object_count: int = 0
    subfolder_count: int = 0

    @property
    def exists(self) -> bool:
        return self.object_count > 0 or self.subfolder_count > 0

    @property
    def has_objects(self) -> bool:
        return self.object_count > 0

    @property
    def has_subfolders(self) -> bool:
        return self.subfolder_count > 0


@dataclass
class FolderDeleteResult:
    """Outcome of deleting a folder and the keys under it."""

    folder_path: str
    recursive: bool = False
    result: BatchDeleteResult = field(default_factory=BatchDeleteResult)

    @property
    def deleted_count(self) -> int:
        return self.result.success_count

    @property
    def failed_count(self) -> int:
        return self.result.error_count


@dataclass
class FolderRenameResult:
    """Outcome of moving every object under one prefix to another.

    Objects whose copy failed are in failed and still live under the
    source prefix. Objects in renamed were copied; check source_deleted
    on each to find originals that could not be removed.
    """

    source_prefix: str
    target_prefix: str
    renamed: list[RenameResult] = field(default_factory=list)
    failed: list[DeleteFailure] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.renamed)

    @property
    def failure_count(self) -> int:
        return len(self.failed)


@dataclass
class ExistenceReport:
    """Existence of several keys; keys that could not be checked are in errors."""

    bucket: str
    results: dict[str, bool] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def all_exist(self) -> bool:
        return not self.errors and all(self.results.values())

    @property
    def none_exist(self) -> bool:
        return not any(self.results.values())


@dataclass
class KeyPermissions:
    """Read, write and delete access of a key pair to one bucket.

    Write is only tested when read works, and delete only when write works.
    """

    bucket: str
    read: bool = False
    write: bool = False
    delete: bool = False
    errors: dict[str, str] = field(default_factory=dict)
    tested_at: Optional[datetime] = None

    @property
    def full_access(self) -> bool:
        return self.read and self.write and self.delete


@dataclass
class PresignedUrl:
    url: str
    expires_at: datetime
    expires_seconds: int


@dataclass
class PresignedPost:
    """Form target and fields for a browser POST upload."""

    url: str
    fields: dict[str, str] = field(default_factory=dict)
    expires_at: Optional[datetime] = None


def _unique(values) -> list[str]:
    seen: list[str] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen
