"""Transfer state machine for WebREPL put/get/version requests.

The machine never touches the transport. Each call returns a ``Reaction``
listing the messages to send, in order, and a ``TransferResult`` once the
session has reached a terminal state and gone back to ``IDLE``.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

from .constants import ACK, MAX_FILE_SIZE, PUT_CHUNK_SIZE
from .errors import InvalidFrame, SizeOverflow, TransferBusy
from .packet import (
    Op,
    RequestFrame,
    ResponseFrame,
    decode_chunk_header,
    decode_version,
)


class State(enum.Enum):
    IDLE = "idle"
    PUT_AWAIT_INITIAL_ACK = "put-await-initial-ack"
    PUT_AWAIT_FINAL_ACK = "put-await-final-ack"
    GET_AWAIT_INITIAL_ACK = "get-await-initial-ack"
    GET_STREAMING = "get-streaming"
    GET_AWAIT_FINAL_ACK = "get-await-final-ack"
    VERSION_AWAIT_RESPONSE = "version-await-response"


class FailureKind(enum.Enum):
    INVALID_FRAME = "invalid-frame"
    REMOTE_REJECTED = "remote-rejected"
    CHUNK_LENGTH_MISMATCH = "chunk-length-mismatch"


@dataclass(frozen=True, slots=True)
class TransferResult:
    op: Op
    filename: str
    nbytes: int = 0
    data: bytes = b""
    error: FailureKind | None = None
    status: int | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def version(self) -> tuple[int, int, int] | None:
        if self.op is not Op.VERSION:
            return None
        return decode_version(self.data)


@dataclass(frozen=True, slots=True)
class Reaction:
    outbound: tuple[bytes, ...] = ()
    result: TransferResult | None = None


@dataclass(slots=True)
class TransferSession:
    state: State = State.IDLE
    filename: str = ""
    data: bytes = b""
    buffer: bytearray = field(default_factory=bytearray)
    offset: int = 0

    @property
    def active(self) -> bool:
        return self.state is not State.IDLE


class TransferMachine:
    def __init__(self, chunk_size: int = PUT_CHUNK_SIZE):
        self.chunk_size = chunk_size
        self.session = TransferSession()

    @property
    def state(self) -> State:
        return self.session.state

    @property
    def bytes_transferred(self) -> int:
        s = self.session
        if s.state in (State.PUT_AWAIT_INITIAL_ACK, State.PUT_AWAIT_FINAL_ACK):
            return s.offset
        return len(s.buffer)

    def _check_idle(self) -> None:
        if self.session.active:
            raise TransferBusy(f"transfer in progress ({self.session.state.value}, {self.session.filename!r})")

    def start_put(self, filename: str, data: bytes) -> Reaction:
        self._check_idle()
        if len(data) > MAX_FILE_SIZE:
            raise SizeOverflow(f"file size {len(data)} does not fit in 32 bits")
        frame = RequestFrame.put(filename, len(data))
        self.session = TransferSession(
            state=State.PUT_AWAIT_INITIAL_ACK,
            filename=filename,
            data=bytes(data),
        )
        logging.info("put %s; size=%d bytes", filename, len(data))
        return Reaction(outbound=(frame.to_bytes(),))

    def start_get(self, filename: str) -> Reaction:
        self._check_idle()
        frame = RequestFrame.get(filename)
        self.session = TransferSession(state=State.GET_AWAIT_INITIAL_ACK, filename=filename)
        logging.info("get %s", filename)
        return Reaction(outbound=(frame.to_bytes(),))

    def start_version_query(self) -> Reaction:
        self._check_idle()
        self.session = TransferSession(state=State.VERSION_AWAIT_RESPONSE)
        return Reaction(outbound=(RequestFrame.version().to_bytes(),))

    def abandon(self) -> None:
        """Drop the current session locally; the remote may still be waiting."""
        if self.session.active:
            logging.warning("abandoning %s in state %s", self.session.filename or "request", self.session.state.value)
        self.session = TransferSession()

    def handle_binary(self, data: bytes) -> Reaction:
        state = self.session.state
        if state is State.IDLE:
            logging.debug("ignoring %d byte binary message while idle", len(data))
            return Reaction()
        if state is State.PUT_AWAIT_INITIAL_ACK:
            return self._put_initial(data)
        if state is State.PUT_AWAIT_FINAL_ACK:
            return self._put_final(data)
        if state is State.GET_AWAIT_INITIAL_ACK:
            return self._get_initial(data)
        if state is State.GET_STREAMING:
            return self._get_chunk(data)
        if state is State.GET_AWAIT_FINAL_ACK:
            return self._get_final(data)
        return self._version(data)

    def _response(self, op: Op, data: bytes) -> ResponseFrame | Reaction:
        """Decode a response; on failure, finish the session and return the failed reaction."""
        try:
            resp = ResponseFrame.from_bytes(data)
        except InvalidFrame as e:
            logging.debug("%s %s: %s", op.name.lower(), self.session.filename, e)
            return self._finish(op, error=FailureKind.INVALID_FRAME)
        if not resp.ok:
            return self._finish(op, error=FailureKind.REMOTE_REJECTED, status=resp.status)
        return resp

    def _finish(
        self,
        op: Op,
        *,
        error: FailureKind | None = None,
        status: int | None = None,
        nbytes: int = 0,
        data: bytes = b"",
    ) -> Reaction:
        filename = self.session.filename
        self.session = TransferSession()
        if error is None:
            logging.info("%s %s done; %d bytes", op.name.lower(), filename, nbytes)
        else:
            logging.warning("%s %s failed: %s (status=%s)", op.name.lower(), filename, error.value, status)
            nbytes, data = 0, b""
        return Reaction(result=TransferResult(op, filename, nbytes=nbytes, data=data, error=error, status=status))

    def _put_initial(self, data: bytes) -> Reaction:
        resp = self._response(Op.PUT, data)
        if isinstance(resp, Reaction):
            return resp
        s = self.session
        chunks = []
        while s.offset < len(s.data):
            chunk = s.data[s.offset : s.offset + self.chunk_size]
            chunks.append(chunk)
            s.offset += len(chunk)
        s.state = State.PUT_AWAIT_FINAL_ACK
        logging.debug("put %s; queued %d chunks", s.filename, len(chunks))
        return Reaction(outbound=tuple(chunks))

    def _put_final(self, data: bytes) -> Reaction:
        resp = self._response(Op.PUT, data)
        if isinstance(resp, Reaction):
            return resp
        return self._finish(Op.PUT, status=resp.status, nbytes=len(self.session.data))

    def _get_initial(self, data: bytes) -> Reaction:
        resp = self._response(Op.GET, data)
        if isinstance(resp, Reaction):
            return resp
        self.session.state = State.GET_STREAMING
        return Reaction(outbound=(ACK,))

    def _get_chunk(self, data: bytes) -> Reaction:
        s = self.session
        try:
            size, start = decode_chunk_header(data)
        except InvalidFrame as e:
            logging.debug("get %s: %s", s.filename, e)
            return self._finish(Op.GET, error=FailureKind.INVALID_FRAME)

        # one transport message carries exactly one chunk
        if len(data) != start + size:
            logging.debug("get %s: chunk declares %d bytes, message carries %d", s.filename, size, len(data) - start)
            return self._finish(Op.GET, error=FailureKind.CHUNK_LENGTH_MISMATCH)

        if size == 0:
            s.state = State.GET_AWAIT_FINAL_ACK
            return Reaction()

        s.buffer += data[start:]
        logging.debug("get %s; %d bytes", s.filename, len(s.buffer))
        return Reaction(outbound=(ACK,))

    def _get_final(self, data: bytes) -> Reaction:
        resp = self._response(Op.GET, data)
        if isinstance(resp, Reaction):
            return resp
        payload = bytes(self.session.buffer)
        return self._finish(Op.GET, status=resp.status, nbytes=len(payload), data=payload)

    def _version(self, data: bytes) -> Reaction:
        payload = bytes(data)
        self.session = TransferSession()
        logging.info("version response: %r", payload)
        return Reaction(result=TransferResult(Op.VERSION, "", nbytes=len(payload), data=payload))
