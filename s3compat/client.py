"""S3 client for S3-compatible providers.

S3Client wires the pieces together for each operation: the provider
resolves host and addressing style, the URL is built, the request is
signed, the transport sends it and the XML response is normalized into a
model. Errors propagate to the caller as s3compat exceptions, with a few
deliberate exceptions where "not found" is a normal answer:

- get_cors / get_lifecycle / get_bucket_policy return an empty result on 404
- delete_cors reports whether a configuration was present
- object_exists / bucket_exists return False on 404

Bulk helpers (batch_delete, objects_exist, rename_folder, delete_folder)
collect per-key failures on their result instead of stopping at the first.
"""

import base64
import gettext
import hashlib
import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterator, Mapping, Optional, Union

from s3compat.cors import check_upload, validate_rules
from s3compat.errors import (
    InvalidParameters,
    RemoteError,
    WireFormatError,
)
from s3compat.mime import MimeResolver, MimetypesResolver
from s3compat.models import (
    BatchDeleteResult,
    BucketListing,
    BucketPolicy,
    BucketVersioning,
    CopyResult,
    CorsConfiguration,
    CorsRule,
    Credentials,
    DeletedEntry,
    DeleteFailure,
    ExistenceReport,
    FolderDeleteResult,
    FolderRenameResult,
    FolderResult,
    FolderStatus,
    KeyPermissions,
    LifecycleConfiguration,
    ObjectContent,
    ObjectListing,
    ObjectLocation,
    ObjectMetadata,
    PresignedPost,
    PresignedUrl,
    RenameResult,
    UploadCheck,
)
from s3compat.normalize import (
    parse_batch_delete_result,
    parse_bucket_listing,
    parse_bucket_location,
    parse_copy_result,
    parse_cors_configuration,
    parse_error_envelope,
    parse_lifecycle_configuration,
    parse_object_listing,
    parse_object_metadata,
    parse_versioning,
)
from s3compat.providers import Provider
from s3compat.signing import SigV4Signer
from s3compat.transport import (
    HttpResponse,
    HttpxTransport,
    RequestOptions,
    Transport,
    timeout_for,
)
from s3compat.urls import build_url, encode_key
from s3compat.xmlcodec import build_cors_xml, build_delete_xml

logger = logging.getLogger(__name__)

# Keys per multi-object delete request
MAX_BATCH_DELETE = 100

# Below this many keys, individual deletes are used instead of a batch
INDIVIDUAL_DELETE_THRESHOLD = 3

DEFAULT_PAGE_SIZE = 1000

PERMISSION_TEST_PREFIX = "permissions-test-"
PERMISSION_TEST_BODY = b"S3 permissions test file. Safe to delete."


def _content_md5(body: bytes) -> str:
    return base64.b64encode(hashlib.md5(body).digest()).decode("ascii")


class S3Client:
    """Client for one provider and one set of credentials.

    Args:
        provider: Resolved provider
        credentials: Access key pair
        transport: HTTP transport; an HttpxTransport is created when omitted
        mime_resolver: Used to decorate listed objects
        translator: Object with a gettext() method for caller-facing messages
        clock: Time source for signing and permission test timestamps
    """

    def __init__(
        self,
        provider: Provider,
        credentials: Credentials,
        transport: Optional[Transport] = None,
        mime_resolver: Optional[MimeResolver] = None,
        translator=None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.provider = provider
        self.credentials = credentials
        self.signer = SigV4Signer(provider, credentials, clock=clock)
        self.transport = transport or HttpxTransport()
        self.mime_resolver = mime_resolver or MimetypesResolver()
        self._translator = translator or gettext.NullTranslations()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._permissions: dict[str, KeyPermissions] = {}

    def __enter__(self) -> "S3Client":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.transport.close()

    def _(self, message: str) -> str:
        return self._translator.gettext(message)

    def _require(self, **values: str) -> None:
        missing = [name for name, value in values.items() if not value]
        if missing:
            names = " and ".join(name.replace("_", " ") for name in missing)
            raise InvalidParameters(self._("Missing required value: ") + names)

    def _send(
        self,
        operation: str,
        method: str,
        bucket: str = "",
        key: str = "",
        query: Optional[Mapping[str, object]] = None,
        body: bytes = b"",
        headers: Optional[Mapping[str, str]] = None,
        options: Optional[RequestOptions] = None,
    ) -> HttpResponse:
        extra = dict(options.headers) if options is not None else {}
        extra.update(headers or {})

        url = build_url(self.provider, bucket, key, query)
        signed = self.signer.sign_headers(
            method, bucket, key, query=query, body=body, headers=extra
        )
        request_headers = {"Accept": "application/xml"}
        request_headers.update(extra)
        request_headers.update(signed)

        logger.debug("%s: %s %s", operation, method, url)
        return self.transport.send(
            method, url, request_headers, body, timeout_for(operation, options)
        )

    def _call(self, operation: str, method: str, **kwargs) -> HttpResponse:
        """Send a request and raise RemoteError for non-2xx responses."""
        response = self._send(operation, method, **kwargs)
        if not response.ok:
            raise parse_error_envelope(response.body, response.status, response.reason)
        return response

    def _call_or_none(self, operation: str, method: str, **kwargs) -> Optional[HttpResponse]:
        """Like _call, but a 404 yields None."""
        response = self._send(operation, method, **kwargs)
        if response.status == 404:
            return None
        if not response.ok:
            raise parse_error_envelope(response.body, response.status, response.reason)
        return response

    # --- Listings ------------------------------------------------------------

    def list_buckets(
        self,
        max_keys: int = DEFAULT_PAGE_SIZE,
        prefix: str = "",
        marker: str = "",
        options: Optional[RequestOptions] = None,
    ) -> BucketListing:
        query: dict[str, object] = {}
        if max_keys != DEFAULT_PAGE_SIZE:
            query["max-keys"] = max_keys
        if prefix:
            query["prefix"] = prefix
        if marker:
            query["marker"] = marker

        response = self._call("list_buckets", "GET", query=query, options=options)
        return parse_bucket_listing(response.body)

    def list_objects(
        self,
        bucket: str,
        max_keys: int = DEFAULT_PAGE_SIZE,
        prefix: str = "",
        delimiter: str = "/",
        continuation_token: str = "",
        options: Optional[RequestOptions] = None,
    ) -> ObjectListing:
        """List one page of objects (ListObjectsV2).

        Returns:
            The page; follow cursor.token while cursor.is_truncated.
        """
        self._require(bucket=bucket)
        query: dict[str, object] = {"list-type": "2"}
        if max_keys != DEFAULT_PAGE_SIZE:
            query["max-keys"] = max_keys
        if prefix:
            query["prefix"] = prefix
        if delimiter:
            query["delimiter"] = delimiter
        if continuation_token:
            query["continuation-token"] = continuation_token

        response = self._call(
            "list_objects", "GET", bucket=bucket, query=query, options=options
        )
        return parse_object_listing(response.body, bucket, self.mime_resolver)

    def iter_objects(
        self,
        bucket: str,
        prefix: str = "",
        delimiter: str = "/",
        max_keys: int = DEFAULT_PAGE_SIZE,
        options: Optional[RequestOptions] = None,
    ) -> Iterator[ObjectListing]:
        """Yield listing pages until the listing is exhausted.

        Stops when a page is not truncated, or is truncated but carries no
        continuation token.
        """
        token = ""
        while True:
            page = self.list_objects(
                bucket, max_keys, prefix, delimiter, token, options=options
            )
            yield page
            if not page.cursor.is_truncated or not page.cursor.token:
                return
            token = page.cursor.token

    # --- Objects -------------------------------------------------------------

    def head_object(
        self, bucket: str, key: str, options: Optional[RequestOptions] = None
    ) -> ObjectMetadata:
        self._require(bucket=bucket, object_key=key)
        response = self._call("head_object", "HEAD", bucket=bucket, key=key, options=options)
        return parse_object_metadata(key, response.headers)

    def object_exists(
        self, bucket: str, key: str, options: Optional[RequestOptions] = None
    ) -> bool:
        try:
            self.head_object(bucket, key, options=options)
        except RemoteError as e:
            if e.status == 404:
                return False
            raise
        return True

    def objects_exist(
        self,
        bucket: str,
        keys: list[str],
        options: Optional[RequestOptions] = None,
    ) -> ExistenceReport:
        """Check several keys with one HEAD request each.

        A key that cannot be checked (bad key, access denied) is recorded
        in errors and the remaining keys are still checked.
        """
        self._require(bucket=bucket)
        if not keys:
            raise InvalidParameters(self._("At least one object key is required"))

        report = ExistenceReport(bucket=bucket)
        for key in keys:
            try:
                report.results[key] = self.object_exists(bucket, key, options=options)
            except (RemoteError, InvalidParameters) as e:
                report.errors[key] = str(e)
        return report

    def get_object(
        self, bucket: str, key: str, options: Optional[RequestOptions] = None
    ) -> ObjectContent:
        self._require(bucket=bucket, object_key=key)
        response = self._call("get_object", "GET", bucket=bucket, key=key, options=options)
        return ObjectContent(
            metadata=parse_object_metadata(key, response.headers),
            body=response.body,
        )

    def put_object(
        self,
        bucket: str,
        key: str,
        body: Union[bytes, str] = b"",
        content_type: Optional[str] = None,
        metadata: Optional[Mapping[str, str]] = None,
        options: Optional[RequestOptions] = None,
        operation: str = "put_object",
    ) -> str:
        """Upload an object in a single request.

        Returns:
            The ETag reported by the server (quotes stripped).
        """
        self._require(bucket=bucket, object_key=key)
        if isinstance(body, str):
            body = body.encode("utf-8")

        headers = {"Content-Type": content_type or self.mime_resolver.guess(key)}
        for name, value in (metadata or {}).items():
            headers[f"x-amz-meta-{name.lower()}"] = str(value)

        response = self._call(
            operation, "PUT", bucket=bucket, key=key, body=body,
            headers=headers, options=options,
        )
        return response.headers.get("etag", "").strip('"')

    def upload_file(
        self,
        bucket: str,
        key: str,
        path: Union[str, Path],
        content_type: Optional[str] = None,
        metadata: Optional[Mapping[str, str]] = None,
        options: Optional[RequestOptions] = None,
    ) -> str:
        """Upload a local file in a single PUT.

        Raises:
            InvalidParameters: If the file does not exist
        """
        path = Path(path)
        if not path.is_file():
            raise InvalidParameters(self._("File not found: ") + str(path))
        return self.put_object(
            bucket, key, path.read_bytes(),
            content_type=content_type or self.mime_resolver.guess(path.name),
            metadata=metadata,
            options=options,
            operation="upload_object",
        )

    def delete_object(
        self, bucket: str, key: str, options: Optional[RequestOptions] = None
    ) -> None:
        self._require(bucket=bucket, object_key=key)
        self._call("delete_object", "DELETE", bucket=bucket, key=key, options=options)

    def copy_object(
        self,
        source_bucket: str,
        source_key: str,
        target_bucket: str,
        target_key: str,
        options: Optional[RequestOptions] = None,
    ) -> CopyResult:
        self._require(
            source_bucket=source_bucket,
            source_key=source_key,
            target_bucket=target_bucket,
            target_key=target_key,
        )
        encoded_source = encode_key(source_key)
        if not encoded_source:
            raise InvalidParameters(self._("Invalid source key: ") + source_key)

        response = self._call(
            "copy_object", "PUT", bucket=target_bucket, key=target_key,
            headers={"x-amz-copy-source": f"{source_bucket}/{encoded_source}"},
            options=options,
        )
        # S3 can report a failed copy inside a 200 response
        if b"<Error>" in response.body:
            raise parse_error_envelope(response.body, response.status)
        return parse_copy_result(response.body)

    def rename_object(
        self,
        bucket: str,
        source_key: str,
        target_key: str,
        options: Optional[RequestOptions] = None,
    ) -> RenameResult:
        """Copy an object to a new key, then delete the original.

        A failed copy raises. A failed delete after a successful copy is
        reported on the result instead, since the object now exists under
        both keys.
        """
        self.copy_object(bucket, source_key, bucket, target_key, options=options)
        result = RenameResult(source_key=source_key, target_key=target_key)
        try:
            self.delete_object(bucket, source_key, options=options)
        except RemoteError as e:
            logger.warning("Renamed %s but could not delete the original: %s", source_key, e)
            result.source_deleted = False
            result.delete_error = str(e)
        return result

    def create_folder(
        self, bucket: str, folder_path: str, options: Optional[RequestOptions] = None
    ) -> FolderResult:
        """Create a folder placeholder (an empty object ending in '/')."""
        status = self.folder_exists(bucket, folder_path, options=options)
        if status.exists:
            return FolderResult(folder_path=status.folder_path, created=False)

        self.put_object(
            bucket, status.folder_path, b"",
            content_type="application/x-directory", options=options,
        )
        return FolderResult(folder_path=status.folder_path, created=True)

    def _folder_path(self, bucket: str, folder_path: str) -> str:
        path = folder_path.strip("/")
        self._require(bucket=bucket, folder_path=path)
        return path + "/"

    def _list_keys(
        self,
        bucket: str,
        prefix: str,
        recursive: bool,
        options: Optional[RequestOptions],
    ) -> tuple[list[str], list[str]]:
        """All keys under a prefix, plus its subfolders when not recursive."""
        keys: list[str] = []
        prefixes: list[str] = []
        delimiter = "" if recursive else "/"
        for page in self.iter_objects(bucket, prefix=prefix, delimiter=delimiter, options=options):
            keys.extend(obj.key for obj in page.objects)
            prefixes.extend(page.prefixes)
        return keys, prefixes

    def folder_exists(
        self, bucket: str, folder_path: str, options: Optional[RequestOptions] = None
    ) -> FolderStatus:
        """Look for anything under a folder prefix with a one-key listing."""
        path = self._folder_path(bucket, folder_path)
        listing = self.list_objects(bucket, max_keys=1, prefix=path, options=options)
        return FolderStatus(
            folder_path=path,
            has_placeholder=any(obj.key == path for obj in listing.objects),
            object_count=len(listing.objects),
            subfolder_count=len(listing.prefixes),
        )

    def delete_folder(
        self,
        bucket: str,
        folder_path: str,
        recursive: bool = False,
        force: bool = False,
        options: Optional[RequestOptions] = None,
    ) -> FolderDeleteResult:
        """Delete a folder placeholder and optionally what lies under it.

        Without recursive, only the folder's direct children are listed. A
        folder holding anything besides its placeholder is refused unless
        force is set, in which case its direct objects are deleted and its
        subfolders are left in place. With recursive, every key under the
        prefix is deleted through batch_delete.

        Raises:
            InvalidParameters: With code folder_not_empty when the folder has
                content and neither recursive nor force is set, or
                folder_not_found when a plain delete finds no placeholder
        """
        path = self._folder_path(bucket, folder_path)
        keys, prefixes = self._list_keys(bucket, path, recursive, options)

        has_content = bool(prefixes) or any(key != path for key in keys)
        if has_content and not (recursive or force):
            raise InvalidParameters(
                self._("Folder is not empty: ") + path, code="folder_not_empty"
            )
        if not keys and not (recursive or force):
            raise InvalidParameters(
                self._("Folder not found: ") + path, code="folder_not_found"
            )

        result = FolderDeleteResult(folder_path=path, recursive=recursive)
        if keys:
            result.result = self.batch_delete(bucket, keys, options=options)
        if recursive and path not in keys:
            self._remove_placeholder(bucket, path, result.result, options)
        return result

    def _remove_placeholder(
        self,
        bucket: str,
        path: str,
        result: BatchDeleteResult,
        options: Optional[RequestOptions],
    ) -> None:
        # Some providers leave the placeholder out of prefix listings
        try:
            self.delete_object(bucket, path, options=options)
        except RemoteError as e:
            if e.status != 404:
                result.failed.append(DeleteFailure(key=path, code=e.code, message=e.message))
            return
        logger.debug("Removed unlisted folder placeholder %s", path)

    def rename_folder(
        self,
        bucket: str,
        source_prefix: str,
        target_prefix: str,
        recursive: bool = True,
        options: Optional[RequestOptions] = None,
    ) -> FolderRenameResult:
        """Move every object under one prefix to another with rename_object.

        Keys are listed in full before the first copy, so a target nested
        inside the source is not visited twice.

        Raises:
            InvalidParameters: If either prefix is empty or both are the same
        """
        source = self._folder_path(bucket, source_prefix)
        target = self._folder_path(bucket, target_prefix)
        if source == target:
            raise InvalidParameters(self._("Source and target folder are the same"))

        keys, _ = self._list_keys(bucket, source, recursive, options)
        result = FolderRenameResult(source_prefix=source, target_prefix=target)
        for key in keys:
            try:
                renamed = self.rename_object(
                    bucket, key, target + key[len(source):], options=options
                )
            except (RemoteError, InvalidParameters) as e:
                result.failed.append(DeleteFailure(key=key, code=e.code, message=e.message))
            else:
                result.renamed.append(renamed)

        if result.failed:
            logger.warning(
                "Renamed %d of %d objects from %s to %s",
                result.success_count, len(keys), source, target,
            )
        return result

    # --- Batch delete --------------------------------------------------------

    def delete_objects(
        self,
        bucket: str,
        keys: list[str],
        options: Optional[RequestOptions] = None,
    ) -> BatchDeleteResult:
        """Delete up to 100 keys in one multi-object delete request.

        Raises:
            InvalidParameters: If no keys or more than 100 keys are given
            RemoteError: With code batch_delete_not_supported when the
                provider rejects the request body as malformed
        """
        self._require(bucket=bucket)
        if not keys:
            raise InvalidParameters(self._("No objects specified for deletion"))
        if len(keys) > MAX_BATCH_DELETE:
            raise InvalidParameters(
                self._("Too many objects for a single batch delete"),
                code="too_many_objects",
            )

        body = build_delete_xml(keys).encode("utf-8")
        headers = {
            "Content-Type": "application/xml",
            "Content-MD5": _content_md5(body),
        }
        response = self._send(
            "batch_delete", "POST", bucket=bucket, query={"delete": ""},
            body=body, headers=headers, options=options,
        )
        if not response.ok:
            error = parse_error_envelope(response.body, response.status, response.reason)
            if response.status == 400 and (
                error.code == "MalformedXML" or b"MalformedXML" in response.body
            ):
                raise RemoteError(
                    self._("Provider does not support batch delete"),
                    code="batch_delete_not_supported",
                    status=response.status,
                    request_id=error.request_id,
                )
            raise error
        return parse_batch_delete_result(response.body)

    def batch_delete(
        self,
        bucket: str,
        keys: list[str],
        batch_size: int = 50,
        options: Optional[RequestOptions] = None,
    ) -> BatchDeleteResult:
        """Delete many keys, chunking them into multi-object deletes.

        Three keys or fewer are deleted one by one. A chunk the provider
        refuses as unsupported is retried one key at a time.
        """
        self._require(bucket=bucket)
        if not keys:
            raise InvalidParameters(self._("No objects specified for deletion"))

        if len(keys) <= INDIVIDUAL_DELETE_THRESHOLD:
            return self._delete_individually(bucket, keys, options)

        batch_size = max(1, min(batch_size, MAX_BATCH_DELETE))
        result = BatchDeleteResult()
        for start in range(0, len(keys), batch_size):
            chunk = keys[start:start + batch_size]
            try:
                result.extend(self.delete_objects(bucket, chunk, options=options))
            except RemoteError as e:
                if e.code != "batch_delete_not_supported":
                    raise
                logger.info("Batch delete unsupported, deleting %d keys individually", len(chunk))
                result.extend(self._delete_individually(bucket, chunk, options))
        return result

    def _delete_individually(
        self,
        bucket: str,
        keys: list[str],
        options: Optional[RequestOptions],
    ) -> BatchDeleteResult:
        result = BatchDeleteResult()
        for key in keys:
            try:
                self.delete_object(bucket, key, options=options)
            except RemoteError as e:
                result.failed.append(DeleteFailure(key=key, code=e.code, message=e.message))
            except InvalidParameters as e:
                result.failed.append(DeleteFailure(key=key, code=e.code, message=e.message))
            else:
                result.deleted.append(DeletedEntry(key=key))
        return result

    # --- Buckets -------------------------------------------------------------

    def bucket_exists(self, bucket: str, options: Optional[RequestOptions] = None) -> bool:
        self._require(bucket=bucket)
        return self._call_or_none("bucket", "HEAD", bucket=bucket, options=options) is not None

    def get_bucket_location(self, bucket: str, options: Optional[RequestOptions] = None) -> str:
        self._require(bucket=bucket)
        response = self._call(
            "bucket", "GET", bucket=bucket, query={"location": ""}, options=options
        )
        return parse_bucket_location(response.body)

    def get_bucket_versioning(
        self, bucket: str, options: Optional[RequestOptions] = None
    ) -> BucketVersioning:
        self._require(bucket=bucket)
        response = self._call(
            "bucket", "GET", bucket=bucket, query={"versioning": ""}, options=options
        )
        return parse_versioning(response.body)

    def get_bucket_policy(
        self, bucket: str, options: Optional[RequestOptions] = None
    ) -> BucketPolicy:
        self._require(bucket=bucket)
        response = self._call_or_none(
            "bucket", "GET", bucket=bucket, query={"policy": ""}, options=options
        )
        if response is None or not response.body.strip():
            return BucketPolicy(has_policy=False)
        try:
            policy = json.loads(response.body)
        except ValueError as e:
            raise WireFormatError(
                f"Bucket policy is not valid JSON: {e}",
                fragment=response.body[:200].decode("utf-8", errors="replace"),
            ) from e
        return BucketPolicy(has_policy=True, policy=policy)

    def get_lifecycle(
        self, bucket: str, options: Optional[RequestOptions] = None
    ) -> LifecycleConfiguration:
        """Lifecycle rules of a bucket; none configured is an empty result."""
        self._require(bucket=bucket)
        response = self._call_or_none(
            "bucket", "GET", bucket=bucket, query={"lifecycle": ""}, options=options
        )
        if response is None:
            return LifecycleConfiguration()
        return parse_lifecycle_configuration(response.body)

    # --- CORS ----------------------------------------------------------------

    def get_cors(
        self, bucket: str, options: Optional[RequestOptions] = None
    ) -> CorsConfiguration:
        """CORS rules of a bucket; none configured is an empty result."""
        self._require(bucket=bucket)
        response = self._call_or_none(
            "bucket", "GET", bucket=bucket, query={"cors": ""}, options=options
        )
        if response is None:
            return CorsConfiguration()
        return parse_cors_configuration(response.body)

    def put_cors(
        self,
        bucket: str,
        rules: list[CorsRule],
        options: Optional[RequestOptions] = None,
    ) -> None:
        """Replace the CORS configuration of a bucket.

        Raises:
            InvalidParameters: If the rules fail validation
        """
        self._require(bucket=bucket)
        validate_rules(rules)
        body = build_cors_xml(rules).encode("utf-8")
        headers = {
            "Content-Type": "application/xml",
            "Content-MD5": _content_md5(body),
        }
        self._call(
            "bucket", "PUT", bucket=bucket, query={"cors": ""},
            body=body, headers=headers, options=options,
        )

    def delete_cors(self, bucket: str, options: Optional[RequestOptions] = None) -> bool:
        """Remove the CORS configuration.

        Returns:
            False if the bucket had no configuration to begin with.
        """
        self._require(bucket=bucket)
        response = self._call_or_none(
            "bucket", "DELETE", bucket=bucket, query={"cors": ""}, options=options
        )
        return response is not None

    def cors_allows_upload(
        self,
        bucket: str,
        origin: str = "*",
        options: Optional[RequestOptions] = None,
    ) -> UploadCheck:
        return check_upload(self.get_cors(bucket, options=options), origin)

    # --- Permissions ---------------------------------------------------------

    def check_key_permissions(
        self,
        bucket: str,
        use_cache: bool = True,
        options: Optional[RequestOptions] = None,
    ) -> KeyPermissions:
        """Test what the credentials may do in a bucket.

        Read is tested with a one-key listing. Write uploads a small test
        object, and delete removes it again. A refused step is recorded in
        errors under its name; transport failures propagate.
        """
        self._require(bucket=bucket)
        if use_cache and bucket in self._permissions:
            return self._permissions[bucket]

        permissions = KeyPermissions(bucket=bucket, tested_at=self._clock())
        test_key = PERMISSION_TEST_PREFIX + uuid.uuid4().hex[:16] + ".txt"
        step = "read"
        try:
            self.list_objects(bucket, max_keys=1, options=options)
            permissions.read = True
            step = "write"
            self.put_object(
                bucket, test_key, PERMISSION_TEST_BODY,
                content_type="text/plain", options=options,
            )
            permissions.write = True
            step = "delete"
            self.delete_object(bucket, test_key, options=options)
            permissions.delete = True
        except RemoteError as e:
            permissions.errors[step] = str(e)
            if step == "delete":
                logger.warning("Permission test object %s left in %s", test_key, bucket)

        if use_cache:
            self._permissions[bucket] = permissions
        return permissions

    def clear_permissions_cache(self, bucket: Optional[str] = None) -> None:
        if bucket is None:
            self._permissions.clear()
        else:
            self._permissions.pop(bucket, None)

    def can_read(self, bucket: str, use_cache: bool = True) -> bool:
        return self.check_key_permissions(bucket, use_cache).read

    def can_write(self, bucket: str, use_cache: bool = True) -> bool:
        return self.check_key_permissions(bucket, use_cache).write

    def can_delete(self, bucket: str, use_cache: bool = True) -> bool:
        return self.check_key_permissions(bucket, use_cache).delete

    def has_full_access(self, bucket: str, use_cache: bool = True) -> bool:
        return self.check_key_permissions(bucket, use_cache).full_access

    # --- Presigning and URLs -------------------------------------------------

    def presigned_url(
        self,
        bucket: str,
        key: str,
        expires_seconds: int = 3600,
        method: str = "GET",
    ) -> PresignedUrl:
        return self.signer.sign_query(method, bucket, key, expires_seconds)

    def presigned_upload_url(
        self, bucket: str, key: str, expires_seconds: int = 900
    ) -> PresignedUrl:
        return self.signer.sign_query("PUT", bucket, key, expires_seconds)

    def presigned_post(
        self,
        bucket: str,
        key: str,
        expires_seconds: int = 900,
        content_type: Optional[str] = None,
        max_size: Optional[int] = None,
    ) -> PresignedPost:
        length_range = (0, max_size) if max_size is not None else None
        return self.signer.presign_post(
            bucket, key, expires_seconds,
            content_type=content_type,
            content_length_range=length_range,
        )

    def object_url(self, bucket: str, key: str = "") -> str:
        return build_url(self.provider, bucket, key)

    def public_url(self, bucket: str, key: str) -> Optional[str]:
        return self.provider.public_url(bucket, key)

    def parse_url(self, url: str) -> Optional[ObjectLocation]:
        return self.provider.reverse_match(url)
