from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any

from websockets.exceptions import WebSocketException

from .client import WebReplClient
from .constants import DEFAULT_HOST, DEFAULT_PASSWORD, DEFAULT_PORT, DEFAULT_TIMEOUT_S
from .errors import WebReplError
from .net import WebSocketTransport


def emit(args: argparse.Namespace, payload: dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2) if args.json else payload)


def open_client(args: argparse.Namespace) -> WebReplClient:
    transport = WebSocketTransport.connect(args.host, args.port, timeout=args.timeout)
    client = WebReplClient(transport, args.password, console_sink=args.console_sink, timeout=args.timeout)
    try:
        client.login()
    except WebReplError:
        client.close()
        raise
    return client


def cmd_put(args: argparse.Namespace) -> int:
    remote = args.remote or os.path.basename(args.file)
    with open(args.file, "rb") as f:
        data = f.read()

    client = open_client(args)
    try:
        result = client.put_file(remote, data)
    finally:
        client.close()

    emit(args, {"op": "put", "file": remote, "bytes": result.nbytes})
    return 0


def cmd_get(args: argparse.Namespace) -> int:
    out = args.out or os.path.basename(args.remote)
    client = open_client(args)
    try:
        result = client.get_file(args.remote)
    finally:
        client.close()

    with open(out, "wb") as f:
        f.write(result.data)

    emit(args, {"op": "get", "file": args.remote, "out": out, "bytes": result.nbytes})
    return 0


def cmd_ver(args: argparse.Namespace) -> int:
    client = open_client(args)
    try:
        result = client.get_version()
    finally:
        client.close()

    version = result.version
    emit(args, {
        "op": "ver",
        "version": ".".join(map(str, version)) if version else None,
        "raw": result.data.hex(),
    })
    return 0


def cmd_exec(args: argparse.Namespace) -> int:
    client = open_client(args)
    try:
        if args.raw:
            client.exec_from_string(args.code)
        else:
            client.exec(args.code)
    finally:
        client.close()
    return 0


def cmd_rm(args: argparse.Namespace) -> int:
    client = open_client(args)
    try:
        client.remove_file(args.remote)
    finally:
        client.close()
    # fire and forget: the device does not confirm the removal
    emit(args, {"op": "rm", "file": args.remote, "status": "sent"})
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="wrft", description="Push and pull files over MicroPython WebREPL.")
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    p.add_argument("--host", default=DEFAULT_HOST)
    p.add_argument("--port", type=int, default=DEFAULT_PORT)
    p.add_argument("--password", default=os.environ.get("WEBREPL_PASSWORD", DEFAULT_PASSWORD))
    p.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT_S, help="seconds to wait for each response")
    p.add_argument("--json", action="store_true")
    p.add_argument("--echo", action="store_true", help="copy console output to stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    put = sub.add_parser("put", help="send a local file to the device")
    put.add_argument("file")
    put.add_argument("remote", nargs="?", default=None)
    put.set_defaults(func=cmd_put)

    get = sub.add_parser("get", help="fetch a file from the device")
    get.add_argument("remote")
    get.add_argument("--out", default=None)
    get.set_defaults(func=cmd_get)

    ver = sub.add_parser("ver", help="query the device's MicroPython version")
    ver.set_defaults(func=cmd_ver)

    ex = sub.add_parser("exec", help="run a line of code on the device")
    ex.add_argument("code")
    ex.add_argument("--raw", action="store_true", help="run through the raw REPL")
    ex.set_defaults(func=cmd_exec)

    rm = sub.add_parser("rm", help="remove a file from the device")
    rm.add_argument("remote")
    rm.set_defaults(func=cmd_rm)

    args = p.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s [%(levelname)s] %(message)s")
    args.console_sink = sys.stderr.write if args.echo else None

    try:
        return int(args.func(args))
    except (WebReplError, WebSocketException, OSError) as e:
        logging.error("%s", e)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
