from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Union

from websockets.sync.client import ClientConnection, connect

from .constants import DEFAULT_PORT


@dataclass(frozen=True, slots=True)
class TextMessage:
    text: str


@dataclass(frozen=True, slots=True)
class BinaryMessage:
    data: bytes


Message = Union[TextMessage, BinaryMessage]


def classify(raw: str | bytes | bytearray | memoryview) -> Message:
    if isinstance(raw, str):
        return TextMessage(raw)
    return BinaryMessage(bytes(raw))


class Transport(Protocol):
    def send(self, data: str | bytes) -> None: ...

    def recv(self, timeout: float | None = None) -> Message: ...

    def close(self) -> None: ...


class WebSocketTransport:
    def __init__(self, ws: ClientConnection):
        self.ws = ws

    @classmethod
    def connect(cls, host: str, port: int = DEFAULT_PORT, timeout: float | None = 10.0) -> "WebSocketTransport":
        # the device does not answer pings
        ws = connect(f"ws://{host}:{port}/", open_timeout=timeout, ping_interval=None, max_size=None)
        return cls(ws)

    def send(self, data: str | bytes) -> None:
        self.ws.send(data)

    def recv(self, timeout: float | None = None) -> Message:
        """Raises ``TimeoutError`` when nothing arrives within ``timeout`` seconds."""
        return classify(self.ws.recv(timeout=timeout))

    def close(self) -> None:
        self.ws.close()
