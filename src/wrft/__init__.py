"""WebREPL file transfer (WRFT)

Client side of MicroPython's WebREPL put/get protocol:
- a pure frame codec (``packet``)
- a reactive transfer state machine that never does I/O itself (``machine``)
- a thin blocking client over a websocket transport (``client``, ``net``)
"""

from .client import WebReplClient
from .errors import WebReplError
from .machine import FailureKind, State, TransferMachine, TransferResult

__all__ = ["FailureKind", "State", "TransferMachine", "TransferResult", "WebReplClient", "WebReplError"]
