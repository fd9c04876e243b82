"""Per-backend translation of ``AccessControl`` values."""

from __future__ import annotations

from typing import Mapping

from cloudstore.infra.storage.client import AccessControl
from cloudstore.infra.storage.errors import StorageValidationError

S3_CANNED_ACLS: Mapping[AccessControl, str] = {
    AccessControl.PRIVATE: "private",
    AccessControl.PUBLIC_READ: "public-read",
}

GCS_PREDEFINED_ACLS: Mapping[AccessControl, str] = {
    AccessControl.PRIVATE: "private",
    AccessControl.PUBLIC_READ: "publicRead",
}


def resolve_acl(
    table: Mapping[AccessControl, str],
    value: AccessControl | str | None,
    *,
    backend: str,
) -> str | None:
    """Return the backend ACL string for ``value``, or ``None`` to send none."""
    if value is None or value == "":
        return None
    try:
        acl = AccessControl(value)
    except ValueError as exc:
        raise StorageValidationError(f"storage: unknown ACL {value!r}") from exc
    native = table.get(acl)
    if native is None:
        raise StorageValidationError(
            f"storage: ACL {acl.value!r} has no {backend} equivalent"
        )
    return native
