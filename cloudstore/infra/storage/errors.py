"""Storage error types and backend-neutral error classification.

Adapters raise the backend SDK's exception unmodified. The helpers here look
at the status already captured on that exception (no network I/O) so that
callers can tell a missing object from an operational fault without
importing a specific SDK.

Capability notes:
    * S3: ``ClientError`` carries the HTTP status in its response metadata.
      ``BotoCoreError`` (connection, credentials, parameter validation) has
      no status, so the status predicates are always ``False`` for it.
    * GCS: ``GoogleAPICallError`` carries the HTTP status as ``code``.
      Transport and auth failures (``requests`` / ``google.auth``) have none.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from botocore.exceptions import BotoCoreError, ClientError
from google.api_core.exceptions import GoogleAPICallError, GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from requests.exceptions import RequestException


class StorageError(RuntimeError):
    """Raised by this package for failures it detects itself."""


class StorageValidationError(StorageError, ValueError):
    """Raised when a request is malformed, before any backend call."""


class UnsupportedOperationError(StorageError):
    """Raised when an adapter cannot perform the requested operation.

    Reserved for adapters that lack an operation; the S3 and GCS adapters
    implement all of them and never raise it.
    """

    def __init__(self, backend: str, operation: str) -> None:
        super().__init__(f"storage: {backend} does not support {operation}")
        self.backend = backend
        self.operation = operation


class DeleteObjectError(StorageError):
    """A single key that a batch delete failed to remove."""

    def __init__(self, key: str, code: str = "", message: str = "") -> None:
        super().__init__(f"storage: failed to delete {key!r}: {code} {message}".rstrip())
        self.key = key
        self.code = code
        self.message = message

    @classmethod
    def from_exception(cls, key: str, exc: BaseException) -> "DeleteObjectError":
        """Record the backend failure that kept ``key`` from being deleted."""
        status = _backend_status(exc)
        code = str(status) if status is not None else type(exc).__name__
        message = getattr(exc, "message", None) or str(exc)
        error = cls(key, code=code, message=str(message))
        error.__cause__ = exc
        return error


BACKEND_ERRORS: tuple[type[BaseException], ...] = (
    BotoCoreError,
    ClientError,
    GoogleAPIError,
    GoogleAuthError,
    RequestException,
)


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    UNSUPPORTED = "unsupported"
    BACKEND_STATUS = "backend_status"
    BACKEND_OPAQUE = "backend_opaque"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class ErrorInfo:
    kind: ErrorKind
    status_code: int | None = None


def _backend_status(exc: BaseException) -> int | None:
    if isinstance(exc, ClientError):
        metadata = exc.response.get("ResponseMetadata") or {}
        status = metadata.get("HTTPStatusCode")
        if status is None:
            # head_object reports a bare status as the error code, e.g. "404".
            code = (exc.response.get("Error") or {}).get("Code", "")
            status = int(code) if str(code).isdigit() else None
        return int(status) if status is not None else None
    if isinstance(exc, GoogleAPICallError):
        return int(exc.code) if exc.code is not None else None
    if isinstance(exc, DeleteObjectError):
        return int(exc.code) if exc.code.isdigit() else None
    return None


def classify_error(exc: BaseException) -> ErrorInfo:
    """Map any exception raised by a ``Service`` call onto an ``ErrorKind``."""
    if isinstance(exc, StorageValidationError):
        return ErrorInfo(ErrorKind.VALIDATION)
    if isinstance(exc, UnsupportedOperationError):
        return ErrorInfo(ErrorKind.UNSUPPORTED)
    # Per-key batch failures are reported by the backend, so they count as
    # backend errors too.
    if isinstance(exc, BACKEND_ERRORS + (DeleteObjectError,)):
        status = _backend_status(exc)
        if status is None:
            return ErrorInfo(ErrorKind.BACKEND_OPAQUE)
        return ErrorInfo(ErrorKind.BACKEND_STATUS, status)
    return ErrorInfo(ErrorKind.UNKNOWN)


def status_code(exc: BaseException) -> int | None:
    return classify_error(exc).status_code


def is_backend_error(exc: BaseException) -> bool:
    return classify_error(exc).kind in (
        ErrorKind.BACKEND_STATUS,
        ErrorKind.BACKEND_OPAQUE,
    )


def is_client_error(exc: BaseException) -> bool:
    status = status_code(exc)
    return status is not None and 400 <= status <= 499


def is_not_found(exc: BaseException) -> bool:
    return status_code(exc) == 404
