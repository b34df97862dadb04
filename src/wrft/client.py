from __future__ import annotations

import logging
import time
from typing import Callable

from . import console
from .constants import DEFAULT_TIMEOUT_S, ENTER_RAW_REPL, EXIT_RAW_REPL, STOP
from .console import ConsoleHandler
from .errors import AuthenticationError, TransferFailed, TransferTimeout
from .machine import Reaction, TransferMachine, TransferResult
from .net import Message, TextMessage, Transport


class WebReplClient:
    """Blocking front end: one transport, one console handler, one transfer machine.

    Text messages go to the console handler, binary messages to the transfer
    machine. Whatever either of them wants sent goes straight back out on the
    transport.
    """

    def __init__(
        self,
        transport: Transport,
        password: str,
        console_sink: Callable[[str], None] | None = None,
        timeout: float = DEFAULT_TIMEOUT_S,
    ):
        self.transport = transport
        self.console = ConsoleHandler(password, console_sink)
        self.machine = TransferMachine()
        self.timeout = timeout

    def dispatch(self, msg: Message) -> TransferResult | None:
        if isinstance(msg, TextMessage):
            for out in self.console.handle_text(msg.text):
                self.transport.send(out)
            return None
        return self._apply(self.machine.handle_binary(msg.data))

    def _apply(self, reaction: Reaction) -> TransferResult | None:
        for out in reaction.outbound:
            self.transport.send(out)
        return reaction.result

    def _pump(self, done: Callable[[TransferResult | None], bool], timeout: float) -> TransferResult | None:
        deadline = time.monotonic() + timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise TimeoutError
            result = self.dispatch(self.transport.recv(timeout=remaining))
            if done(result):
                return result

    def login(self, timeout: float | None = None) -> None:
        try:
            self._pump(lambda _: self.console.authenticated, self.timeout if timeout is None else timeout)
        except TimeoutError:
            raise AuthenticationError("no WebREPL banner from device") from None

    def _run(self, reaction: Reaction, timeout: float | None) -> TransferResult:
        timeout = self.timeout if timeout is None else timeout
        try:
            self._apply(reaction)
            result = self._pump(lambda r: r is not None, timeout)
        except TimeoutError:
            self.machine.abandon()
            raise TransferTimeout(f"no response within {timeout:.1f}s") from None
        except BaseException:
            self.machine.abandon()
            raise
        assert result is not None
        if not result.ok:
            raise TransferFailed(result)
        return result

    def put_file(self, filename: str, data: bytes, timeout: float | None = None) -> TransferResult:
        return self._run(self.machine.start_put(filename, data), timeout)

    def get_file(self, filename: str, timeout: float | None = None) -> TransferResult:
        return self._run(self.machine.start_get(filename), timeout)

    def get_version(self, timeout: float | None = None) -> TransferResult:
        return self._run(self.machine.start_version_query(), timeout)

    def eval(self, command: str) -> None:
        self.transport.send(command)

    def send_stop(self) -> None:
        self.eval(STOP)

    def soft_reset(self) -> None:
        for out in console.soft_reset():
            self.eval(out)

    def enter_raw_repl(self) -> None:
        self.eval(ENTER_RAW_REPL)

    def exit_raw_repl(self) -> None:
        self.eval(EXIT_RAW_REPL)

    def exec(self, command: str) -> None:
        self.eval(console.exec_line(command))

    def exec_from_string(self, code: str) -> None:
        for out in console.raw_exec(code):
            self.eval(out)

    def remove_file(self, filename: str) -> None:
        logging.info("remove %s", filename)
        self.exec_from_string(console.remove_file_code(filename))

    def close(self) -> None:
        self.transport.close()
