from __future__ import annotations

import logging
from typing import Callable, Optional

from .constants import (
    ACCESS_DENIED,
    CONNECTED_BANNER,
    ENTER_RAW_REPL,
    EXIT_RAW_REPL,
    PASSWORD_PROMPT,
    RESET,
    STOP,
)
from .errors import AuthenticationError


def exec_line(command: str) -> str:
    return command + "\r"


def soft_reset() -> list[str]:
    return [STOP, RESET]


def raw_exec(code: str) -> list[str]:
    """Messages that interrupt the board and run ``code`` through the raw REPL."""
    return [STOP, ENTER_RAW_REPL, code, EXIT_RAW_REPL]


def remove_file_code(filename: str) -> str:
    return f"from os import remove\nremove({filename!r})"


class ConsoleHandler:
    """Answers the password prompt and forwards everything else to ``sink``."""

    def __init__(self, password: str, sink: Optional[Callable[[str], None]] = None):
        self.password = password
        self.sink = sink
        self.authenticated = False

    def handle_text(self, text: str) -> list[str]:
        out = []
        if text == PASSWORD_PROMPT:
            logging.debug("password prompt received")
            out.append(exec_line(self.password))
        elif not self.authenticated and ACCESS_DENIED in text:
            raise AuthenticationError("device rejected the password")
        elif CONNECTED_BANNER in text:
            logging.info("authenticated")
            self.authenticated = True
        if self.sink is not None:
            self.sink(text)
        return out
