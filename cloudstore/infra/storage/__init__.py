"""Object storage abstraction layer.

This module provides a protocol-based, provider-neutral interface over
object storage backends, with adapters for Amazon S3 (and S3-compatible
services) and Google Cloud Storage.
"""

from .acl import GCS_PREDEFINED_ACLS, S3_CANNED_ACLS, resolve_acl
from .client import (
    AccessControl,
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
    Service,
)
from .content_type import detect_content_type, sniff_content_type
from .errors import (
    DeleteObjectError,
    ErrorInfo,
    ErrorKind,
    StorageError,
    StorageValidationError,
    UnsupportedOperationError,
    classify_error,
    is_backend_error,
    is_client_error,
    is_not_found,
    status_code,
)
from .factory import build_service, create_service
from .gcs_client import GCSStorageClient
from .s3_client import S3StorageClient

__all__ = [
    "AccessControl",
    "CopyRequest",
    "CopyResponse",
    "DeleteMultiRequest",
    "DeleteMultiResponse",
    "DeleteObjectError",
    "DeleteRequest",
    "DeleteResponse",
    "ErrorInfo",
    "ErrorKind",
    "GCSStorageClient",
    "GCS_PREDEFINED_ACLS",
    "GetRequest",
    "GetResponse",
    "HeadRequest",
    "HeadResponse",
    "Headers",
    "ListRequest",
    "ListResponse",
    "Object",
    "PutRequest",
    "PutResponse",
    "S3StorageClient",
    "S3_CANNED_ACLS",
    "Service",
    "StorageError",
    "StorageValidationError",
    "UnsupportedOperationError",
    "build_service",
    "create_service",
    "classify_error",
    "detect_content_type",
    "is_backend_error",
    "is_client_error",
    "is_not_found",
    "resolve_acl",
    "sniff_content_type",
    "status_code",
]
