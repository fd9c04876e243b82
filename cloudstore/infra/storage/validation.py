"""Local request checks shared by every adapter."""

from __future__ import annotations

from typing import Any, Sequence

from cloudstore.infra.storage.errors import StorageValidationError


def validate_bucket(bucket: str) -> None:
    if not bucket:
        raise StorageValidationError("storage: bucket name is empty")


def validate_key(key: str) -> None:
    if not key:
        raise StorageValidationError("storage: object name is empty")
    if isinstance(key, (bytes, bytearray)):
        try:
            key.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise StorageValidationError(
                f"storage: object name {key!r} is not valid UTF-8"
            ) from exc
    if not isinstance(key, str):
        raise StorageValidationError(
            f"storage: object name must be str, not {type(key).__name__}"
        )
    try:
        key.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise StorageValidationError(
            f"storage: object name {key!r} is not valid UTF-8"
        ) from exc


def validate_object(bucket: str, key: str) -> None:
    validate_bucket(bucket)
    validate_key(key)


def validate_body(body: Any) -> None:
    if body is None:
        raise StorageValidationError("storage: object body is nil")
    if not callable(getattr(body, "read", None)) or not callable(
        getattr(body, "seek", None)
    ):
        raise StorageValidationError(
            "storage: object body must be a readable, seekable binary stream"
        )
    # pipes and sockets expose seek() but fail on it
    seekable = getattr(body, "seekable", None)
    if callable(seekable) and not seekable():
        raise StorageValidationError("storage: object body is not seekable")


def validate_keys(keys: Sequence[str]) -> None:
    if isinstance(keys, (str, bytes)) or not keys:
        raise StorageValidationError("storage: no object names to delete")
    for key in keys:
        validate_key(key)
