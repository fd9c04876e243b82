"""Tests for content-type sniffing."""

import io
from unittest.mock import patch

import pytest

from cloudstore.infra.storage.content_type import (
    OCTET_STREAM,
    SNIFF_LEN,
    detect_content_type,
    sniff_content_type,
)

PNG_HEADER = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"
    b"\x00\x00\x00\x01\x00\x00\x00\x01\x08\x02\x00\x00\x00\x90wS\xde"
)


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        (b"<!DOCTYPE html>\n<html><head><title>x</title></head></html>", "text/html"),
        (b"%PDF-1.7\n%\xe2\xe3\xcf\xd3\n", "application/pdf"),
        (PNG_HEADER, "image/png"),
        (b"GIF89a\x01\x00\x01\x00\x80\x00\x00\xff\xff\xff\x00\x00\x00!", "image/gif"),
        (b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00", "image/jpeg"),
        (b"just some plain words\n", "text/plain"),
    ],
)
def test_sniff_content_type(data, expected):
    assert sniff_content_type(data) == expected


def test_pdf_with_font_marker_is_still_pdf():
    data = bytearray(b"%PDF-1.7\n1 0 obj\n<< /Type /XObject ".ljust(48, b" "))
    data[34:36] = b"LP"

    assert sniff_content_type(bytes(data)) == "application/pdf"


def test_unrecognised_data_falls_back_to_octet_stream():
    with patch("cloudstore.infra.storage.content_type.magic.from_buffer", return_value=""):
        assert sniff_content_type(b"\x00\x01") == OCTET_STREAM


class TestDetectContentType:
    def test_position_is_restored(self):
        payload = b"prefix-" + b"%PDF-1.4\n" + b"x" * 200
        stream = io.BytesIO(payload)
        stream.seek(7)

        assert detect_content_type(stream) == "application/pdf"
        assert stream.tell() == 7

    def test_only_the_head_is_sniffed(self):
        payload = bytes(range(256)) * 3

        with patch(
            "cloudstore.infra.storage.content_type.magic.from_buffer",
            return_value="application/x-test",
        ) as from_buffer:
            assert detect_content_type(io.BytesIO(payload)) == "application/x-test"

        from_buffer.assert_called_once_with(payload[:SNIFF_LEN], mime=True)

    def test_detection_never_consumes_data(self):
        payload = bytes(range(256)) * 3
        plain = io.BytesIO(payload)
        sniffed = io.BytesIO(payload)

        detect_content_type(sniffed)

        assert sniffed.read() == plain.read()

    def test_reads_at_most_sniff_len(self):
        class CountingStream(io.BytesIO):
            requested: list = []

            def read(self, size=-1):
                self.requested.append(size)
                return super().read(size)

        stream = CountingStream(b"a" * 1000)

        detect_content_type(stream)

        assert stream.requested == [SNIFF_LEN]
        assert stream.tell() == 0

    def test_short_stream(self):
        stream = io.BytesIO(b"hi there\n")

        assert detect_content_type(stream) == "text/plain"
        assert stream.read() == b"hi there\n"

    def test_empty_stream_is_undetectable(self):
        assert detect_content_type(io.BytesIO(b"")) == ""

    def test_seek_error_propagates(self):
        class NoSeek(io.BytesIO):
            def seek(self, *args):
                raise OSError("not seekable")

        with pytest.raises(OSError, match="not seekable"):
            detect_content_type(NoSeek(b"data"))
