from __future__ import annotations

import struct

import pytest

from wrft.errors import FilenameTooLong, InvalidFrame, SizeOverflow
from wrft.packet import (
    REQUEST_SIZE,
    ResponseFrame,
    decode_chunk_header,
    decode_response,
    decode_version,
    encode_chunk,
    encode_get_request,
    encode_put_request,
    encode_version_request,
)


def test_put_request_layout():
    raw = encode_put_request("main.py", 0x01020304)
    assert len(raw) == REQUEST_SIZE == 82
    assert raw[0:2] == b"WA"
    assert raw[2] == 1
    assert raw[3] == 0
    assert raw[4:12] == b"\x00" * 8
    assert raw[12:16] == b"\x04\x03\x02\x01"
    assert raw[16:18] == b"\x07\x00"
    assert raw[18:25] == b"main.py"
    assert raw[25:] == b"\x00" * 57


def test_get_request_has_zero_size():
    raw = encode_get_request("lib/x.py")
    assert raw[2] == 2
    assert raw[12:16] == b"\x00" * 4
    assert struct.unpack_from("<H", raw, 16)[0] == 8


def test_version_request():
    raw = encode_version_request()
    assert len(raw) == 82
    assert raw[:3] == b"WA\x03"
    assert raw[3:] == b"\x00" * 79


def test_filename_of_64_bytes_fills_field():
    name = "a" * 64
    raw = encode_get_request(name)
    assert raw[16:18] == b"\x40\x00"
    assert raw[18:] == name.encode()


def test_filename_of_65_bytes_rejected():
    with pytest.raises(FilenameTooLong):
        encode_get_request("a" * 65)
    with pytest.raises(FilenameTooLong):
        encode_put_request("a" * 65, 1)


def test_filename_length_counts_utf8_bytes():
    raw = encode_get_request("é.txt")
    assert raw[16:18] == b"\x06\x00"
    assert raw[18:24] == "é.txt".encode("utf-8")
    with pytest.raises(FilenameTooLong):
        encode_get_request("é" * 33)


def test_size_limits():
    raw = encode_put_request("big", 2**32 - 1)
    assert raw[12:16] == b"\xff" * 4
    with pytest.raises(SizeOverflow):
        encode_put_request("big", 2**32)
    with pytest.raises(SizeOverflow):
        encode_put_request("neg", -1)


@pytest.mark.parametrize("status", [0, 1, 0x1234, 0xFFFF])
def test_response_status(status):
    assert decode_response(ResponseFrame(status).to_bytes()) == status


def test_response_ignores_trailing_bytes():
    assert decode_response(b"WB\x00\x00junk") == 0


def test_response_bad_signature():
    with pytest.raises(InvalidFrame):
        decode_response(b"WC\x00\x00")


def test_response_too_short():
    with pytest.raises(InvalidFrame):
        decode_response(b"WB\x00")
    # InvalidFrame doubles as ValueError
    with pytest.raises(ValueError):
        decode_response(b"")


def test_chunk_header():
    assert decode_chunk_header(encode_chunk(b"hello")) == (5, 2)
    assert decode_chunk_header(b"\x00\x01") == (256, 2)
    with pytest.raises(InvalidFrame):
        decode_chunk_header(b"\x05")


def test_decode_version():
    assert decode_version(b"\x01\x14\x02") == (1, 20, 2)
    assert decode_version(b"WB\x00\x00") is None
