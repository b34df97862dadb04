from __future__ import annotations

import struct
from collections import deque

import pytest

from wrft.net import BinaryMessage, Message, TextMessage, classify

OK = b"WB\x00\x00"


class FakeDevice:
    """In-memory stand-in for a board running WebREPL."""

    def __init__(self, password: str = "secret", files: dict[str, bytes] | None = None, chunk: int = 5):
        self.password = password
        self.files = dict(files or {})
        self.chunk = chunk
        self.version = b"\x01\x14\x00"
        self.sent: list[str | bytes] = []
        self.inbox: deque[Message] = deque([TextMessage("Password: ")])
        self.closed = False
        self._put: tuple[str, int, bytearray] | None = None
        self._get: deque[bytes] | None = None

    def reply(self, raw: str | bytes) -> None:
        self.inbox.append(classify(raw))

    def send(self, data: str | bytes) -> None:
        self.sent.append(data)
        if isinstance(data, str):
            if data == self.password + "\r":
                self.reply("\r\nWebREPL connected\r\n>>> ")
            elif data.endswith("\r"):
                self.reply(data[:-1] + "\r\n>>> ")
            return
        if self._put is not None:
            name, size, buf = self._put
            buf += data
            if len(buf) >= size:
                self.files[name] = bytes(buf)
                self._put = None
                self.reply(OK)
            return
        if self._get is not None:
            assert data == b"\x00"
            self.reply(self._get.popleft())
            if not self._get:
                self._get = None
                self.reply(OK)
            return
        self._request(data)

    def _request(self, data: bytes) -> None:
        sig, op, _, _, size, fname_len, fname = struct.unpack("<2sBBQLH64s", data)
        assert sig == b"WA"
        name = fname[:fname_len].decode("utf-8")
        if op == 1:
            self._put = (name, size, bytearray())
            self.reply(OK)
            if size == 0:
                self.files[name] = b""
                self._put = None
                self.reply(OK)
        elif op == 2:
            if name not in self.files:
                self.reply(b"WB\x01\x00")
                return
            body = self.files[name]
            pieces = [body[i : i + self.chunk] for i in range(0, len(body), self.chunk)]
            self._get = deque(struct.pack("<H", len(p)) + p for p in pieces)
            self._get.append(b"\x00\x00")
            self.reply(OK)
        elif op == 3:
            self.reply(self.version)

    def recv(self, timeout: float | None = None) -> Message:
        if not self.inbox:
            raise TimeoutError
        return self.inbox.popleft()

    def close(self) -> None:
        self.closed = True

    def binary_sent(self) -> list[bytes]:
        return [m for m in self.sent if isinstance(m, bytes)]


@pytest.fixture
def device() -> FakeDevice:
    return FakeDevice(files={"boot.py": b"import gc\ngc.collect()\n"})
