"""In-memory stand-in for a boto3 S3 client, for testing adapters."""

from __future__ import annotations

import hashlib
import io
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from botocore.exceptions import ClientError
from botocore.response import StreamingBody


def _client_error(code: str, status: int, operation: str) -> ClientError:
    return ClientError(
        {
            "Error": {"Code": code, "Message": code},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


@dataclass
class FakeS3:
    """Dict-backed subset of the boto3 S3 client API.

    ``fail_delete_keys`` makes ``delete_objects`` report those keys as
    per-key ``AccessDenied`` errors.
    """

    objects: dict[tuple[str, str], dict[str, Any]] = field(default_factory=dict)
    fail_delete_keys: set[str] = field(default_factory=set)
    calls: list[str] = field(default_factory=list)

    def put_object(self, *, Bucket: str, Key: str, Body: Any, **params: Any) -> dict:
        self.calls.append("put_object")
        data = Body.read()
        etag = f'"{hashlib.md5(data).hexdigest()}"'
        self.objects[(Bucket, Key)] = {
            "data": data,
            "etag": etag,
            "last_modified": datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
            **params,
        }
        return {"ETag": etag}

    def _lookup(self, bucket: str, key: str, operation: str) -> dict[str, Any]:
        try:
            return self.objects[(bucket, key)]
        except KeyError:
            raise _client_error("NoSuchKey", 404, operation) from None

    def _head(self, stored: dict[str, Any]) -> dict[str, Any]:
        response = {
            "AcceptRanges": "bytes",
            "ContentLength": len(stored["data"]),
            "ETag": stored["etag"],
            "LastModified": stored["last_modified"],
            "Metadata": dict(stored.get("Metadata", {})),
        }
        for name in (
            "CacheControl",
            "ContentType",
            "ContentEncoding",
            "ContentLanguage",
            "ContentDisposition",
        ):
            if name in stored:
                response[name] = stored[name]
        return response

    def head_object(self, *, Bucket: str, Key: str) -> dict:
        self.calls.append("head_object")
        return self._head(self._lookup(Bucket, Key, "HeadObject"))

    def get_object(self, *, Bucket: str, Key: str) -> dict:
        self.calls.append("get_object")
        stored = self._lookup(Bucket, Key, "GetObject")
        response = self._head(stored)
        response["Body"] = StreamingBody(io.BytesIO(stored["data"]), len(stored["data"]))
        return response

    def delete_object(self, *, Bucket: str, Key: str) -> dict:
        self.calls.append("delete_object")
        self.objects.pop((Bucket, Key), None)
        return {}

    def delete_objects(self, *, Bucket: str, Delete: dict) -> dict:
        self.calls.append("delete_objects")
        deleted, errors = [], []
        for item in Delete["Objects"]:
            key = item["Key"]
            if key in self.fail_delete_keys:
                errors.append({"Key": key, "Code": "AccessDenied", "Message": "Access Denied"})
                continue
            self.objects.pop((Bucket, key), None)
            deleted.append({"Key": key})
        response: dict[str, Any] = {"Errors": errors} if errors else {}
        if not Delete.get("Quiet"):
            response["Deleted"] = deleted
        return response

    def copy_object(self, *, Bucket: str, Key: str, CopySource: dict, **params: Any) -> dict:
        self.calls.append("copy_object")
        stored = self._lookup(CopySource["Bucket"], CopySource["Key"], "CopyObject")
        self.objects[(Bucket, Key)] = dict(stored)
        return {"CopyObjectResult": {"ETag": stored["etag"]}}

    def list_objects_v2(
        self,
        *,
        Bucket: str,
        Delimiter: str = "",
        Prefix: str = "",
        MaxKeys: int = 1000,
        ContinuationToken: str = "",
    ) -> dict:
        self.calls.append("list_objects_v2")
        entries: list[tuple[str, bool]] = []
        seen_prefixes: set[str] = set()
        for bucket, key in sorted(self.objects):
            if bucket != Bucket or not key.startswith(Prefix):
                continue
            rest = key[len(Prefix) :]
            if Delimiter and Delimiter in rest:
                common = Prefix + rest[: rest.index(Delimiter) + 1]
                if common not in seen_prefixes:
                    seen_prefixes.add(common)
                    entries.append((common, True))
                continue
            entries.append((key, False))

        if ContinuationToken:
            after = ContinuationToken.removeprefix("after:")
            entries = [entry for entry in entries if entry[0] > after]

        page, remaining = entries[:MaxKeys], entries[MaxKeys:]
        response: dict[str, Any] = {
            "IsTruncated": bool(remaining),
            "CommonPrefixes": [{"Prefix": name} for name, is_dir in page if is_dir],
            "Contents": [
                {
                    "Key": name,
                    "ETag": self.objects[(Bucket, name)]["etag"],
                    "Size": len(self.objects[(Bucket, name)]["data"]),
                    "StorageClass": "STANDARD",
                    "LastModified": self.objects[(Bucket, name)]["last_modified"],
                }
                for name, is_dir in page
                if not is_dir
            ],
        }
        if remaining:
            response["NextContinuationToken"] = f"after:{page[-1][0]}"
        return response
