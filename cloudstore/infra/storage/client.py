"""Provider-neutral storage contract and data types.

Callers build a request, hand it to whichever ``Service`` implementation
was configured at startup, and get back a response or an exception. The
types below are the only surface application code should depend on;
adapters translate them to and from a specific backend SDK.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import BinaryIO, ClassVar, Protocol, Sequence


def format_rfc3339(value: datetime | None) -> str:
    """Render a backend timestamp the way ``Object.updated`` stores it."""
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class AccessControl(str, Enum):
    """Predefined access policy applied to a newly written object."""

    # Owner gets full control, no one else has access.
    PRIVATE = "private"
    # Owner gets full control, all other principals get read access.
    PUBLIC_READ = "public-read"


@dataclass(frozen=True, slots=True)
class Object:
    """An entry returned by a listing.

    Directory entries are synthesized from common prefixes; they only carry
    ``bucket``, ``name`` and ``directory=True``.
    """

    bucket: str
    name: str
    cache_control: str = ""
    component_count: int = 0
    content_disposition: str = ""
    content_encoding: str = ""
    content_language: str = ""
    content_type: str = ""
    etag: str = ""
    generation: int = 0
    metadata: dict[str, str] = field(default_factory=dict)
    size: int = 0
    storage_class: str = ""
    # RFC 3339
    updated: str = ""
    directory: bool = False


@dataclass(frozen=True, slots=True)
class Headers:
    """Metadata returned by a point read (head or get)."""

    accept_ranges: str = ""
    cache_control: str = ""
    content_disposition: str = ""
    content_encoding: str = ""
    content_language: str = ""
    content_length: int = 0
    content_range: str = ""
    content_type: str = ""
    etag: str = ""
    expires: str = ""
    last_modified: datetime | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    storage_class: str = ""
    # S3 version id or GCS generation, as a string.
    version: str = ""


@dataclass(frozen=True, slots=True)
class CopyRequest:
    source_bucket: str
    source_key: str
    bucket: str
    key: str


@dataclass(frozen=True, slots=True)
class CopyResponse:
    etag: str = ""


@dataclass(frozen=True, slots=True)
class HeadRequest:
    bucket: str
    key: str


@dataclass(frozen=True, slots=True)
class HeadResponse:
    headers: Headers


@dataclass(frozen=True, slots=True)
class GetRequest:
    bucket: str
    key: str


@dataclass(frozen=True, slots=True)
class GetResponse:
    """Headers plus the object data.

    The caller owns ``body`` and must close it, either directly or by using
    the response as a context manager.
    """

    headers: Headers
    body: BinaryIO

    def __enter__(self) -> "GetResponse":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.body.close()


@dataclass(frozen=True, slots=True)
class PutRequest:
    bucket: str
    key: str
    body: BinaryIO | None
    acl: AccessControl | str | None = None
    cache_control: str = ""
    content_type: str = ""
    content_encoding: str = ""
    content_language: str = ""
    content_disposition: str = ""
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class PutResponse:
    pass


@dataclass(frozen=True, slots=True)
class DeleteRequest:
    bucket: str
    key: str


@dataclass(frozen=True, slots=True)
class DeleteResponse:
    pass


@dataclass(frozen=True, slots=True)
class DeleteMultiRequest:
    bucket: str
    keys: Sequence[str]
    quiet: bool = False


@dataclass(frozen=True, slots=True)
class DeleteMultiResponse:
    """Partial-success report of a batch delete.

    ``keys`` lists what was deleted (empty in quiet mode); ``errors`` holds one
    ``DeleteObjectError`` per key that could not be deleted.
    """

    keys: list[str] = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ListRequest:
    bucket: str
    prefix: str = ""
    size: int = 0
    cursor: str = ""


@dataclass(frozen=True, slots=True)
class ListResponse:
    objects: list[Object] = field(default_factory=list)
    # Empty when there are no more pages.
    cursor: str = ""


class Service(Protocol):
    """Capability set every storage adapter implements.

    Each method takes exactly one request and either returns the matching
    response or raises. Validation failures raise ``StorageValidationError``
    before the backend is contacted; backend failures surface as the SDK's
    own exception, unmodified, so they can be inspected with the helpers in
    ``cloudstore.infra.storage.errors``.
    """

    backend: ClassVar[str]

    def copy(self, request: CopyRequest) -> CopyResponse:
        """Server-side copy of ``source_bucket/source_key`` to ``bucket/key``.

        Content and user metadata are copied from the source object.
        """
        ...

    def head(self, request: HeadRequest) -> HeadResponse:
        """Fetch object metadata without transferring the body."""
        ...

    def get(self, request: GetRequest) -> GetResponse:
        """Fetch object metadata and a stream positioned at the first byte."""
        ...

    def put(self, request: PutRequest) -> PutResponse:
        """Store ``body`` under ``bucket/key``.

        When ``content_type`` is empty it is sniffed from the first bytes of
        the body, leaving the body position unchanged.
        """
        ...

    def delete(self, request: DeleteRequest) -> DeleteResponse:
        """Remove one object.

        Deleting a missing key is not guaranteed to raise.
        """
        ...

    def delete_multi(self, request: DeleteMultiRequest) -> DeleteMultiResponse:
        """Best-effort, non-atomic deletion of several keys in one bucket."""
        ...

    def list(self, request: ListRequest) -> ListResponse:
        """Return one page of a ``/``-delimited listing under ``prefix``."""
        ...
