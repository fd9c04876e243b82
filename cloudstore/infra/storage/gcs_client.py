"""Google Cloud Storage adapter.

Dependencies:
    - google-cloud-storage
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from google.cloud import storage

from cloudstore.common.config import DEFAULT_GCS_UPLOAD_CHUNK_SIZE
from cloudstore.infra.observability.metrics import observe_operation
from cloudstore.infra.storage.acl import GCS_PREDEFINED_ACLS, resolve_acl
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


def _headers(blob: Any) -> Headers:
    # The JSON API exposes no Accept-Ranges, Content-Range or Expires values.
    return Headers(
        cache_control=blob.cache_control or "",
        content_disposition=blob.content_disposition or "",
        content_encoding=blob.content_encoding or "",
        content_language=blob.content_language or "",
        content_length=int(blob.size or 0),
        content_type=blob.content_type or "",
        etag=blob.etag or "",
        last_modified=blob.updated,
        metadata=dict(blob.metadata or {}),
        storage_class=blob.storage_class or "",
        version=str(blob.generation) if blob.generation else "",
    )


def _object(blob: Any) -> Object:
    return Object(
        bucket=blob.bucket.name,
        name=blob.name,
        cache_control=blob.cache_control or "",
        component_count=int(blob.component_count or 0),
        content_disposition=blob.content_disposition or "",
        content_encoding=blob.content_encoding or "",
        content_language=blob.content_language or "",
        content_type=blob.content_type or "",
        etag=blob.etag or "",
        generation=int(blob.generation or 0),
        metadata=dict(blob.metadata or {}),
        size=int(blob.size or 0),
        storage_class=blob.storage_class or "",
        updated=format_rfc3339(blob.updated),
    )


class GCSStorageClient:
    """``Service`` implementation backed by ``google.cloud.storage.Client``.

    Uploads go through the SDK's resumable upload in ``chunk_size`` pieces.
    Batch deletes are issued key by key; a key the API rejects is reported in
    ``DeleteMultiResponse.errors``, including keys that do not exist (S3 would
    count those as deleted).
    """

    backend: ClassVar[str] = "gcs"

    def __init__(
        self,
        *,
        client: Any,
        chunk_size: int = DEFAULT_GCS_UPLOAD_CHUNK_SIZE,
    ) -> None:
        self._client = client
        self._chunk_size = chunk_size

    @classmethod
    def from_settings(cls, settings: "Settings") -> "GCSStorageClient":
        return cls(
            client=cls._build_client(settings),
            chunk_size=settings.GCS_UPLOAD_CHUNK_SIZE,
        )

    @staticmethod
    def _build_client(settings: "Settings") -> Any:
        """Create a GCS client, falling back to application default credentials."""
        if settings.GCS_CREDENTIALS_FILE:
            return storage.Client.from_service_account_json(
                settings.GCS_CREDENTIALS_FILE, project=settings.GCS_PROJECT
            )
        return storage.Client(project=settings.GCS_PROJECT)

    def copy(self, request: CopyRequest) -> CopyResponse:
        validate_object(request.source_bucket, request.source_key)
        validate_object(request.bucket, request.key)

        source_bucket = self._client.bucket(request.source_bucket)
        destination_bucket = self._client.bucket(request.bucket)
        with observe_operation(
            self.backend, "copy", bucket=request.bucket, key=request.key
        ):
            copied = source_bucket.copy_blob(
                source_bucket.blob(request.source_key),
                destination_bucket,
                new_name=request.key,
            )

        return CopyResponse(etag=copied.etag or "")

    def head(self, request: HeadRequest) -> HeadResponse:
        validate_object(request.bucket, request.key)

        blob = self._client.bucket(request.bucket).blob(request.key)
        with observe_operation(
            self.backend, "head", bucket=request.bucket, key=request.key
        ):
            blob.reload()

        return HeadResponse(headers=_headers(blob))

    def get(self, request: GetRequest) -> GetResponse:
        validate_object(request.bucket, request.key)

        blob = self._client.bucket(request.bucket).blob(request.key)
        with observe_operation(
            self.backend, "get", bucket=request.bucket, key=request.key
        ):
            blob.reload()
            body = blob.open("rb")

        return GetResponse(headers=_headers(blob), body=body)

    def put(self, request: PutRequest) -> PutResponse:
        validate_object(request.bucket, request.key)
        validate_body(request.body)
        acl = resolve_acl(GCS_PREDEFINED_ACLS, request.acl, backend=self.backend)

        blob = self._client.bucket(request.bucket).blob(
            request.key, chunk_size=self._chunk_size
        )
        if request.cache_control:
            blob.cache_control = request.cache_control
        if request.content_encoding:
            blob.content_encoding = request.content_encoding
        if request.content_language:
            blob.content_language = request.content_language
        if request.content_disposition:
            blob.content_disposition = request.content_disposition
        if request.metadata:
            blob.metadata = dict(request.metadata)

        content_type = request.content_type or detect_content_type(request.body)
        with observe_operation(
            self.backend, "put", bucket=request.bucket, key=request.key
        ):
            blob.upload_from_file(
                request.body,
                content_type=content_type or None,
                predefined_acl=acl,
            )

        return PutResponse()

    def delete(self, request: DeleteRequest) -> DeleteResponse:
        validate_object(request.bucket, request.key)

        blob = self._client.bucket(request.bucket).blob(request.key)
        with observe_operation(
            self.backend, "delete", bucket=request.bucket, key=request.key
        ):
            blob.delete()

        return DeleteResponse()

    def delete_multi(self, request: DeleteMultiRequest) -> DeleteMultiResponse:
        validate_bucket(request.bucket)
        validate_keys(request.keys)

        bucket = self._client.bucket(request.bucket)
        deleted: list[str] = []
        errors: list[Exception] = []
        for key in request.keys:
            try:
                with observe_operation(
                    self.backend, "delete_multi", bucket=request.bucket, key=key
                ):
                    bucket.delete_blob(key)
            except BACKEND_ERRORS as exc:
                errors.append(DeleteObjectError.from_exception(key, exc))
                continue
            if not request.quiet:
                deleted.append(key)

        return DeleteMultiResponse(keys=deleted, errors=errors)

    def list(self, request: ListRequest) -> ListResponse:
        validate_bucket(request.bucket)

        params: dict[str, Any] = {"delimiter": "/"}
        if request.prefix:
            params["prefix"] = request.prefix
        if request.size > 0:
            params["page_size"] = int(request.size)
        if request.cursor:
            params["page_token"] = request.cursor

        with observe_operation(
            self.backend, "list", bucket=request.bucket, key=request.prefix
        ):
            iterator = self._client.list_blobs(request.bucket, **params)
            # Only the first page is fetched; the caller drives pagination.
            page = next(iterator.pages, None)
            blobs = list(page) if page is not None else []

        prefixes = getattr(page, "prefixes", ()) if page is not None else ()
        objects = [
            Object(bucket=request.bucket, name=prefix, directory=True)
            for prefix in prefixes
        ]
        objects.extend(_object(blob) for blob in blobs)
        return ListResponse(objects=objects, cursor=iterator.next_page_token or "")
