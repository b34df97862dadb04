from __future__ import annotations

REQUEST_FORMAT = "<2sBBQLH64s"  # signature, op, flag, reserved, size, fname_len, fname
RESPONSE_FORMAT = "<2sH"  # signature, status
CHUNK_HEADER_FORMAT = "<H"

REQUEST_SIGNATURE = b"WA"
RESPONSE_SIGNATURE = b"WB"

PUT = 1
GET = 2
VERSION_QUERY = 3

STATUS_OK = 0
ACK = b"\x00"

FILENAME_MAX = 64
MAX_FILE_SIZE = 2**32 - 1
PUT_CHUNK_SIZE = 1024

DEFAULT_HOST = "192.168.4.1"
DEFAULT_PORT = 8266
DEFAULT_PASSWORD = "micropythoN"
DEFAULT_TIMEOUT_S = 10.0

PASSWORD_PROMPT = "Password: "
CONNECTED_BANNER = "WebREPL connected"
ACCESS_DENIED = "Access denied"

STOP = "\r\x03"  # CTRL-C
RESET = "\r\x04"  # CTRL-D
ENTER_RAW_REPL = "\r\x01"  # CTRL-A
EXIT_RAW_REPL = "\r\x04\r\x02"  # CTRL-D + CTRL-B
