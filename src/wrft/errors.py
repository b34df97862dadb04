from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .machine import TransferResult


class WebReplError(Exception):
    pass


class InvalidFrame(WebReplError, ValueError):
    pass


class FilenameTooLong(WebReplError, ValueError):
    pass


class SizeOverflow(WebReplError, ValueError):
    pass


class TransferBusy(WebReplError):
    pass


class TransferTimeout(WebReplError):
    pass


class AuthenticationError(WebReplError):
    pass


class TransferFailed(WebReplError):
    def __init__(self, result: "TransferResult"):
        super().__init__(f"{result.op.name.lower()} {result.filename!r} failed: {result.error.name}")
        self.result = result
