"""Amazon S3 adapter.

Works with AWS S3 and S3-compatible services (MinIO, Ceph RGW, ...).

Dependencies:
    - boto3
    - botocore
"""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import format_datetime
from typing import TYPE_CHECKING, Any, ClassVar

import boto3
from botocore.config import Config

from cloudstore.infra.observability.metrics import observe_operation
from cloudstore.infra.storage.acl import S3_CANNED_ACLS, resolve_acl
from cloudstore.infra.storage.client import (
    CopyRequest,
    CopyResponse,
    DeleteMultiRequest,
    DeleteMultiResponse,
    DeleteRequest,
    DeleteResponse,
    GetRequest,
    GetResponse,
    Headers,
    HeadRequest,
    HeadResponse,
    ListRequest,
    ListResponse,
    Object,
    PutRequest,
    PutResponse,
    format_rfc3339,
)
from cloudstore.infra.storage.content_type import detect_content_type
from cloudstore.infra.storage.errors import BACKEND_ERRORS, DeleteObjectError
from cloudstore.infra.storage.validation import (
    validate_body,
    validate_bucket,
    validate_keys,
    validate_object,
)

if TYPE_CHECKING:
    from cloudstore.common.config import Settings

# DeleteObjects accepts at most this many keys per request.
DELETE_BATCH_LIMIT = 1000


def _expires(response: dict[str, Any]) -> str:
    raw = response.get("ExpiresString")
    if raw:
        return str(raw)
    value = response.get("Expires")
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return format_datetime(value.astimezone(timezone.utc), usegmt=True)
    return str(value) if value else ""


def _headers(response: dict[str, Any]) -> Headers:
    return Headers(
        accept_ranges=response.get("AcceptRanges") or "",
        cache_control=response.get("CacheControl") or "",
        content_disposition=response.get("ContentDisposition") or "",
        content_encoding=response.get("ContentEncoding") or "",
        content_language=response.get("ContentLanguage") or "",
        content_length=int(response.get("ContentLength") or 0),
        content_range=response.get("ContentRange") or "",
        content_type=response.get("ContentType") or "",
        etag=response.get("ETag") or "",
        expires=_expires(response),
        last_modified=response.get("LastModified"),
        metadata=dict(response.get("Metadata") or {}),
        storage_class=response.get("StorageClass") or "",
        version=response.get("VersionId") or "",
    )


class S3StorageClient:
    """``Service`` implementation backed by a boto3 S3 client.

    The boto3 client is created by the caller (or by ``from_settings``) and
    owns credentials, connection pooling, retries and request signing.
    """

    backend: ClassVar[str] = "s3"

    def __init__(self, *, client: Any) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: "Settings") -> "S3StorageClient":
        return cls(client=cls._build_client(settings))

    @staticmethod
    def _build_client(settings: "Settings") -> Any:
        """Create a boto3 S3 client from settings."""
        addressing_style = (settings.S3_ADDRESSING_STYLE or "auto").strip().lower()
        config = Config(s3={"addressing_style": addressing_style})

        return boto3.client(
            "s3",
            endpoint_url=settings.S3_ENDPOINT_URL,
            region_name=settings.S3_REGION,
            aws_access_key_id=settings.S3_ACCESS_KEY_ID,
            aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY,
            aws_session_token=settings.S3_SESSION_TOKEN,
            use_ssl=bool(settings.S3_USE_SSL),
            config=config,
        )

    def copy(self, request: CopyRequest) -> CopyResponse:
        validate_object(request.source_bucket, request.source_key)
        validate_object(request.bucket, request.key)

        with observe_operation(
            self.backend, "copy", bucket=request.bucket, key=request.key
        ):
            response = self._client.copy_object(
                Bucket=request.bucket,
                Key=request.key,
                CopySource={
                    "Bucket": request.source_bucket,
                    "Key": request.source_key,
                },
                MetadataDirective="COPY",
            )

        result = response.get("CopyObjectResult") or {}
        return CopyResponse(etag=result.get("ETag") or "")

    def head(self, request: HeadRequest) -> HeadResponse:
        validate_object(request.bucket, request.key)

        with observe_operation(
            self.backend, "head", bucket=request.bucket, key=request.key
        ):
            response = self._client.head_object(Bucket=request.bucket, Key=request.key)

        return HeadResponse(headers=_headers(response))

    def get(self, request: GetRequest) -> GetResponse:
        validate_object(request.bucket, request.key)

        with observe_operation(
            self.backend, "get", bucket=request.bucket, key=request.key
        ):
            response = self._client.get_object(Bucket=request.bucket, Key=request.key)

        return GetResponse(headers=_headers(response), body=response["Body"])

    def put(self, request: PutRequest) -> PutResponse:
        validate_object(request.bucket, request.key)
        validate_body(request.body)
        acl = resolve_acl(S3_CANNED_ACLS, request.acl, backend=self.backend)

        params: dict[str, Any] = {
            "Bucket": request.bucket,
            "Key": request.key,
            "Body": request.body,
        }
        content_type = request.content_type or detect_content_type(request.body)
        if content_type:
            params["ContentType"] = content_type
        if acl:
            params["ACL"] = acl
        if request.cache_control:
            params["CacheControl"] = request.cache_control
        if request.content_encoding:
            params["ContentEncoding"] = request.content_encoding
        if request.content_language:
            params["ContentLanguage"] = request.content_language
        if request.content_disposition:
            params["ContentDisposition"] = request.content_disposition
        if request.metadata:
            params["Metadata"] = dict(request.metadata)

        with observe_operation(
            self.backend, "put", bucket=request.bucket, key=request.key
        ):
            self._client.put_object(**params)

        return PutResponse()

    def delete(self, request: DeleteRequest) -> DeleteResponse:
        validate_object(request.bucket, request.key)

        with observe_operation(
            self.backend, "delete", bucket=request.bucket, key=request.key
        ):
            self._client.delete_object(Bucket=request.bucket, Key=request.key)

        return DeleteResponse()

    def delete_multi(self, request: DeleteMultiRequest) -> DeleteMultiResponse:
        validate_bucket(request.bucket)
        validate_keys(request.keys)

        keys = list(request.keys)
        deleted: list[str] = []
        errors: list[Exception] = []
        for start in range(0, len(keys), DELETE_BATCH_LIMIT):
            batch = keys[start : start + DELETE_BATCH_LIMIT]
            try:
                with observe_operation(
                    self.backend, "delete_multi", bucket=request.bucket
                ):
                    response = self._client.delete_objects(
                        Bucket=request.bucket,
                        Delete={
                            "Objects": [{"Key": key} for key in batch],
                            "Quiet": bool(request.quiet),
                        },
                    )
            except BACKEND_ERRORS as exc:
                # The whole request failed; none of its keys are known deleted.
                errors.extend(DeleteObjectError.from_exception(key, exc) for key in batch)
                continue
            deleted.extend(item.get("Key", "") for item in response.get("Deleted", []))
            errors.extend(
                DeleteObjectError(
                    item.get("Key", ""),
                    code=item.get("Code", ""),
                    message=item.get("Message", ""),
                )
                for item in response.get("Errors", [])
            )

        return DeleteMultiResponse(keys=deleted, errors=errors)

    def list(self, request: ListRequest) -> ListResponse:
        validate_bucket(request.bucket)

        params: dict[str, Any] = {"Bucket": request.bucket, "Delimiter": "/"}
        if request.prefix:
            params["Prefix"] = request.prefix
        if request.size > 0:
            params["MaxKeys"] = int(request.size)
        if request.cursor:
            params["ContinuationToken"] = request.cursor

        with observe_operation(
            self.backend, "list", bucket=request.bucket, key=request.prefix
        ):
            response = self._client.list_objects_v2(**params)

        objects = [
            Object(bucket=request.bucket, name=prefix["Prefix"], directory=True)
            for prefix in response.get("CommonPrefixes", [])
        ]
        for item in response.get("Contents", []):
            objects.append(
                Object(
                    bucket=request.bucket,
                    name=item["Key"],
                    etag=item.get("ETag") or "",
                    size=int(item.get("Size") or 0),
                    storage_class=item.get("StorageClass") or "",
                    updated=format_rfc3339(item.get("LastModified")),
                )
            )

        cursor = ""
        if response.get("IsTruncated"):
            cursor = response.get("NextContinuationToken") or ""
        return ListResponse(objects=objects, cursor=cursor)
