from __future__ import annotations

import json

import pytest

from wrft import cli
from wrft.net import WebSocketTransport

from conftest import FakeDevice


@pytest.fixture
def board(monkeypatch):
    dev = FakeDevice(files={"boot.py": b"# boot\n"})
    monkeypatch.setattr(WebSocketTransport, "connect", classmethod(lambda cls, host, port, timeout=None: dev))
    return dev


def run(capsys, *argv) -> tuple[int, dict]:
    rc = cli.main(["--password", "secret", "--json", *argv])
    out = capsys.readouterr().out
    return rc, json.loads(out) if out else {}


def test_put(board, tmp_path, capsys):
    src = tmp_path / "main.py"
    src.write_bytes(b"print('hi')\n")
    rc, out = run(capsys, "put", str(src))
    assert rc == 0
    assert out == {"op": "put", "file": "main.py", "bytes": 12}
    assert board.files["main.py"] == b"print('hi')\n"
    assert board.closed


def test_get(board, tmp_path, capsys):
    dest = tmp_path / "boot.py"
    rc, out = run(capsys, "get", "boot.py", "--out", str(dest))
    assert rc == 0
    assert out["bytes"] == 7
    assert dest.read_bytes() == b"# boot\n"


def test_get_missing(board, tmp_path, capsys):
    rc, _ = run(capsys, "get", "gone.py", "--out", str(tmp_path / "gone.py"))
    assert rc == 1
    assert not (tmp_path / "gone.py").exists()


def test_ver(board, capsys):
    rc, out = run(capsys, "ver")
    assert rc == 0
    assert out == {"op": "ver", "version": "1.20.0", "raw": "011400"}


def test_rm(board, capsys):
    rc, out = run(capsys, "rm", "old.py")
    assert rc == 0
    assert out == {"op": "rm", "file": "old.py", "status": "sent"}
    assert "from os import remove\nremove('old.py')" in board.sent


def test_bad_password(board, capsys):
    rc = cli.main(["--password", "nope", "ver"])
    assert rc == 1
