"""Content-type sniffing for uploads that do not declare one.

The MIME type is taken from libmagic over the first ``SNIFF_LEN`` bytes of the
body, so the upload stream is never consumed.
"""

from __future__ import annotations

import io
from typing import BinaryIO

import magic

SNIFF_LEN = 64

OCTET_STREAM = "application/octet-stream"


def sniff_content_type(data: bytes) -> str:
    """Best-guess MIME type of ``data``; never empty."""
    return magic.from_buffer(data, mime=True) or OCTET_STREAM


def detect_content_type(stream: BinaryIO) -> str:
    """Sniff the MIME type of ``stream`` without moving its position.

    Reads at most ``SNIFF_LEN`` bytes from the current position and seeks back
    by exactly the number of bytes read. Returns ``""`` when the stream has no
    data left. Read and seek errors propagate to the caller.
    """
    head = stream.read(SNIFF_LEN)
    if not head:
        return ""
    stream.seek(-len(head), io.SEEK_CUR)
    return sniff_content_type(bytes(head))
