from __future__ import annotations

import enum
import struct
from dataclasses import dataclass

from .constants import (
    CHUNK_HEADER_FORMAT,
    FILENAME_MAX,
    GET,
    MAX_FILE_SIZE,
    PUT,
    REQUEST_FORMAT,
    REQUEST_SIGNATURE,
    RESPONSE_FORMAT,
    RESPONSE_SIGNATURE,
    STATUS_OK,
    VERSION_QUERY,
)
from .errors import FilenameTooLong, InvalidFrame, SizeOverflow

REQUEST_SIZE = struct.calcsize(REQUEST_FORMAT)
RESPONSE_SIZE = struct.calcsize(RESPONSE_FORMAT)
CHUNK_HEADER_SIZE = struct.calcsize(CHUNK_HEADER_FORMAT)


class Op(enum.IntEnum):
    PUT = PUT
    GET = GET
    VERSION = VERSION_QUERY


def encode_filename(filename: str) -> bytes:
    raw = filename.encode("utf-8")
    if len(raw) > FILENAME_MAX:
        raise FilenameTooLong(f"filename is {len(raw)} bytes, limit is {FILENAME_MAX}: {filename!r}")
    return raw


@dataclass(frozen=True, slots=True)
class RequestFrame:
    op: Op
    filename: bytes = b""
    size: int = 0

    def to_bytes(self) -> bytes:
        return struct.pack(
            REQUEST_FORMAT,
            REQUEST_SIGNATURE,
            int(self.op),
            0,
            0,
            self.size,
            len(self.filename),
            self.filename,
        )

    @staticmethod
    def put(filename: str, size: int) -> "RequestFrame":
        if size < 0 or size > MAX_FILE_SIZE:
            raise SizeOverflow(f"file size {size} does not fit in 32 bits")
        return RequestFrame(op=Op.PUT, filename=encode_filename(filename), size=size)

    @staticmethod
    def get(filename: str) -> "RequestFrame":
        return RequestFrame(op=Op.GET, filename=encode_filename(filename))

    @staticmethod
    def version() -> "RequestFrame":
        return RequestFrame(op=Op.VERSION)


@dataclass(frozen=True, slots=True)
class ResponseFrame:
    status: int

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    def to_bytes(self) -> bytes:
        return struct.pack(RESPONSE_FORMAT, RESPONSE_SIGNATURE, self.status)

    @staticmethod
    def from_bytes(raw: bytes) -> "ResponseFrame":
        if len(raw) < RESPONSE_SIZE:
            raise InvalidFrame(f"response too short: {len(raw)} bytes")
        signature, status = struct.unpack_from(RESPONSE_FORMAT, raw)
        if signature != RESPONSE_SIGNATURE:
            raise InvalidFrame(f"bad response signature {signature!r}")
        return ResponseFrame(status=status)


def encode_put_request(filename: str, size: int) -> bytes:
    return RequestFrame.put(filename, size).to_bytes()


def encode_get_request(filename: str) -> bytes:
    return RequestFrame.get(filename).to_bytes()


def encode_version_request() -> bytes:
    return RequestFrame.version().to_bytes()


def decode_response(raw: bytes) -> int:
    """Return the status code of a response frame; bytes past the header are ignored."""
    return ResponseFrame.from_bytes(raw).status


def decode_chunk_header(raw: bytes) -> tuple[int, int]:
    """Return ``(declared_length, payload_offset)`` for an inbound GET chunk."""
    if len(raw) < CHUNK_HEADER_SIZE:
        raise InvalidFrame(f"chunk too short for header: {len(raw)} bytes")
    (length,) = struct.unpack_from(CHUNK_HEADER_FORMAT, raw)
    return length, CHUNK_HEADER_SIZE


def encode_chunk(payload: bytes) -> bytes:
    return struct.pack(CHUNK_HEADER_FORMAT, len(payload)) + payload


def decode_version(raw: bytes) -> tuple[int, int, int] | None:
    if len(raw) != 3:
        return None
    return raw[0], raw[1], raw[2]
