"""Map S3 XML responses onto s3compat's data models.

Each extractor parses a response body, finds its result element (wrapped
or unwrapped), normalizes every collection with as_sequence() and maps
fields one by one with explicit defaults. When the expected result element
is missing entirely, extractors fall back to a recursive search, which
keeps listings working against providers with non-conforming envelopes.
"""

import logging
from typing import Any, Mapping, Optional

from s3compat.errors import RemoteError, WireFormatError
from s3compat.mime import MimeResolver, MimetypesResolver, category_for
from s3compat.models import (
    BatchDeleteResult,
    BucketListing,
    BucketVersioning,
    CopyResult,
    CorsConfiguration,
    CorsRule,
    DeletedEntry,
    DeleteFailure,
    LifecycleConfiguration,
    LifecycleExpiration,
    LifecycleFilter,
    LifecycleRule,
    LifecycleTransition,
    NormalizedBucket,
    NormalizedObject,
    ObjectListing,
    ObjectMetadata,
    Owner,
    PageCursor,
)
from s3compat.xmlcodec import (
    as_sequence,
    child,
    find_all,
    find_value,
    is_true,
    parse_xml,
    result_root,
    text,
    to_int,
)

logger = logging.getLogger(__name__)

_default_resolver = MimetypesResolver()


def strip_etag(value: Any) -> str:
    return text(value).strip('"')


def make_object(
    key: str,
    last_modified: str = "",
    etag: str = "",
    size: int = 0,
    storage_class: str = "",
    mime_resolver: Optional[MimeResolver] = None,
) -> NormalizedObject:
    """Build a NormalizedObject, deriving the display fields from the key."""
    resolver = mime_resolver or _default_resolver
    mime_type = resolver.guess(key)
    return NormalizedObject(
        key=key,
        last_modified=last_modified,
        etag=etag,
        size=size,
        storage_class=storage_class or "STANDARD",
        filename=key.rstrip("/").rsplit("/", 1)[-1],
        mime_type=mime_type,
        category=category_for(mime_type),
    )


def _cursor(node: Any, token_names: tuple[str, ...]) -> PageCursor:
    truncated = is_true(child(node, "IsTruncated"))
    token = ""
    if truncated:
        for name in token_names:
            token = text(child(node, name))
            if token:
                break
    return PageCursor(is_truncated=truncated, token=token)


def parse_object_listing(
    body: Any,
    bucket: str = "",
    mime_resolver: Optional[MimeResolver] = None,
) -> ObjectListing:
    """Parse a list-objects-v2 response."""
    tree = parse_xml(body)
    root = result_root(tree, ("ListBucketResult", "ListObjectsV2Result"))

    if root is None:
        logger.debug("No ListBucketResult element, searching recursively")
        contents = find_all(tree, "Contents")
        prefixes = find_all(tree, "CommonPrefixes")
        search = {
            "IsTruncated": find_value(tree, "IsTruncated"),
            "NextContinuationToken": find_value(tree, "NextContinuationToken"),
            "NextMarker": find_value(tree, "NextMarker"),
        }
        cursor = _cursor(search, ("NextContinuationToken", "NextMarker"))
        prefix = delimiter = ""
    else:
        contents = as_sequence(root.get("Contents"))
        prefixes = as_sequence(root.get("CommonPrefixes"))
        cursor = _cursor(root, ("NextContinuationToken", "NextMarker"))
        prefix = text(root.get("Prefix"))
        delimiter = text(root.get("Delimiter"))
        bucket = bucket or text(root.get("Name"))

    objects = []
    for item in contents:
        key = text(child(item, "Key"))
        if not key:
            continue
        objects.append(make_object(
            key=key,
            last_modified=text(child(item, "LastModified")),
            etag=strip_etag(child(item, "ETag")),
            size=to_int(child(item, "Size")),
            storage_class=text(child(item, "StorageClass")),
            mime_resolver=mime_resolver,
        ))

    prefix_names = []
    for item in prefixes:
        name = text(child(item, "Prefix")) if isinstance(item, dict) else text(item)
        if name:
            prefix_names.append(name)

    return ObjectListing(
        bucket=bucket,
        prefix=prefix,
        delimiter=delimiter,
        objects=objects,
        prefixes=prefix_names,
        cursor=cursor,
    )


def parse_bucket_listing(body: Any) -> BucketListing:
    """Parse a list-buckets response."""
    tree = parse_xml(body)
    root = result_root(tree, ("ListAllMyBucketsResult",)) or tree

    entries = as_sequence(child(root, "Buckets", "Bucket"))
    if not entries:
        # Non-conforming envelopes: any element carrying a Name
        entries = [
            item for item in find_all(tree, "Bucket")
            if isinstance(item, dict) and "Name" in item
        ]

    buckets = []
    for item in entries:
        name = text(child(item, "Name"))
        if name:
            buckets.append(NormalizedBucket(
                name=name,
                creation_date=text(child(item, "CreationDate")),
            ))

    owner = None
    owner_node = child(root, "Owner")
    if isinstance(owner_node, dict):
        owner = Owner(
            id=text(owner_node.get("ID")),
            display_name=text(owner_node.get("DisplayName")),
        )

    return BucketListing(
        buckets=buckets,
        owner=owner,
        cursor=_cursor(root, ("ContinuationToken", "NextMarker")),
    )


def _strings(node: Any) -> list[str]:
    return [value for value in (text(item) for item in as_sequence(node)) if value]


def _cors_rule(node: Mapping) -> CorsRule:
    max_age = node.get("MaxAgeSeconds")
    return CorsRule(
        id=text(node.get("ID")) or None,
        allowed_methods=[m.upper() for m in _strings(node.get("AllowedMethod"))],
        allowed_origins=_strings(node.get("AllowedOrigin")),
        allowed_headers=_strings(node.get("AllowedHeader")),
        expose_headers=_strings(node.get("ExposeHeader")),
        max_age_seconds=None if max_age is None else to_int(max_age),
    )


def parse_cors_configuration(body: Any) -> CorsConfiguration:
    """Parse a get-bucket-cors response."""
    tree = parse_xml(body)
    root = result_root(tree, ("CORSConfiguration",))
    if root is None:
        entries = find_all(tree, "CORSRule")
    else:
        entries = as_sequence(root.get("CORSRule"))
    return CorsConfiguration(
        rules=[_cors_rule(item) for item in entries if isinstance(item, dict)]
    )


def _lifecycle_filter(rule: Mapping) -> LifecycleFilter:
    node = rule.get("Filter")
    if not isinstance(node, dict):
        # Older rules put Prefix directly on the rule
        return LifecycleFilter(prefix=text(rule.get("Prefix")))
    condition = node.get("And") if isinstance(node.get("And"), dict) else node
    tags = as_sequence(condition.get("Tag"))
    tag = tags[0] if tags and isinstance(tags[0], dict) else {}
    return LifecycleFilter(
        prefix=text(condition.get("Prefix")),
        tag_key=text(tag.get("Key")),
        tag_value=text(tag.get("Value")),
    )


def _optional_int(node: Any) -> Optional[int]:
    value = text(node)
    return int(value) if value.isdigit() else None


def _lifecycle_rule(node: Mapping) -> LifecycleRule:
    transitions = [
        LifecycleTransition(
            days=_optional_int(item.get("Days")),
            date=text(item.get("Date")),
            storage_class=text(item.get("StorageClass")),
        )
        for item in as_sequence(node.get("Transition"))
        if isinstance(item, dict)
    ]

    expiration = None
    expiration_node = node.get("Expiration")
    if isinstance(expiration_node, dict):
        expiration = LifecycleExpiration(
            days=_optional_int(expiration_node.get("Days")),
            date=text(expiration_node.get("Date")),
            expired_object_delete_marker=is_true(
                expiration_node.get("ExpiredObjectDeleteMarker")
            ),
        )

    return LifecycleRule(
        id=text(node.get("ID")),
        status=text(node.get("Status")) or "Disabled",
        filter=_lifecycle_filter(node),
        transitions=transitions,
        expiration=expiration,
    )


def parse_lifecycle_configuration(body: Any) -> LifecycleConfiguration:
    """Parse a get-bucket-lifecycle-configuration response."""
    tree = parse_xml(body)
    root = result_root(tree, ("LifecycleConfiguration",))
    entries = find_all(tree, "Rule") if root is None else as_sequence(root.get("Rule"))
    return LifecycleConfiguration(
        rules=[_lifecycle_rule(item) for item in entries if isinstance(item, dict)]
    )


def parse_copy_result(body: Any) -> CopyResult:
    """Parse a copy-object response."""
    tree = parse_xml(body)
    root = result_root(tree, ("CopyObjectResult",)) or tree
    return CopyResult(
        etag=strip_etag(find_value(root, "ETag")),
        last_modified=text(find_value(root, "LastModified")),
    )


def parse_batch_delete_result(body: Any) -> BatchDeleteResult:
    """Parse a multi-object delete response.

    Deleted entries and per-key errors end up in separate lists.
    """
    tree = parse_xml(body)
    root = result_root(tree, ("DeleteResult",))
    if root is None:
        deleted_nodes = find_all(tree, "Deleted")
        error_nodes = find_all(tree, "Error")
    else:
        deleted_nodes = as_sequence(root.get("Deleted"))
        error_nodes = as_sequence(root.get("Error"))

    result = BatchDeleteResult()
    for item in deleted_nodes:
        if isinstance(item, dict):
            result.deleted.append(DeletedEntry(
                key=text(item.get("Key")),
                version_id=text(item.get("VersionId")),
            ))
    for item in error_nodes:
        if isinstance(item, dict):
            result.failed.append(DeleteFailure(
                key=text(item.get("Key")),
                code=text(item.get("Code")) or "Unknown",
                message=text(item.get("Message")) or "Unknown error",
            ))
    return result


def parse_error_envelope(body: Any, status: int, reason: str = "") -> RemoteError:
    """Turn an error response into a RemoteError.

    Bodies that are empty (HEAD requests) or not XML still produce an
    error, with the generic request_failed code.
    """
    fallback = reason or f"Request failed with HTTP status {status}"
    try:
        tree = parse_xml(body)
    except WireFormatError:
        return RemoteError(fallback, status=status)

    node = tree.get("Error")
    if not isinstance(node, dict):
        node = find_value(tree, "Error")
    if not isinstance(node, dict):
        return RemoteError(fallback, status=status)

    code = text(node.get("Code")) or None
    message = text(node.get("Message")) or fallback
    return RemoteError(
        message,
        code=code,
        status=status,
        request_id=text(node.get("RequestId")),
    )


def parse_bucket_location(body: Any) -> str:
    """Region of a bucket; an empty constraint means us-east-1."""
    tree = parse_xml(body)
    return text(tree.get("LocationConstraint")) or "us-east-1"


def parse_versioning(body: Any) -> BucketVersioning:
    tree = parse_xml(body)
    root = result_root(tree, ("VersioningConfiguration",)) or {}
    return BucketVersioning(
        status=text(root.get("Status")) or "Disabled",
        mfa_delete=text(root.get("MfaDelete")),
    )


def parse_object_metadata(key: str, headers: Mapping[str, str]) -> ObjectMetadata:
    """Build ObjectMetadata from HEAD/GET response headers."""
    lowered = {name.lower(): value for name, value in headers.items()}
    length = lowered.get("content-length", "0")
    return ObjectMetadata(
        key=key,
        content_type=lowered.get("content-type", ""),
        content_length=int(length) if str(length).isdigit() else 0,
        etag=lowered.get("etag", "").strip('"'),
        last_modified=lowered.get("last-modified", ""),
        metadata={
            name[len("x-amz-meta-"):]: value
            for name, value in lowered.items()
            if name.startswith("x-amz-meta-")
        },
    )
