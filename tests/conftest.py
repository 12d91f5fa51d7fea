from __future__ import annotations
import socket
from pathlib import Path

import pytest

from ports_live.config import CFG
from ports_live.httpd import HTTPServer


def raw_request(port: int, data: bytes, timeout: float = 5.0) -> bytes:
    with socket.create_connection(("127.0.0.1", port), timeout=timeout) as s:
        s.sendall(data)
        return read_all(s)


def read_all(s: socket.socket) -> bytes:
    chunks = []
    while True:
        chunk = s.recv(65536)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def get(port: int, target: str) -> bytes:
    return raw_request(port, f"GET {target} HTTP/1.1\r\nHost: localhost\r\n\r\n".encode())


def split_response(raw: bytes) -> tuple[int, dict, bytes]:
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    status = int(lines[0].split(" ")[1])
    headers = {}
    for line in lines[1:]:
        k, _, v = line.partition(": ")
        headers[k] = v
    return status, headers, body


class FakeScanner:
    """Stands in for PortScanner with a fixed set of busy ports."""

    def __init__(self, ports=()):
        from ports_live.models import ListeningPort
        self.records = [ListeningPort(port=p, pid=1, process_name="busy", address="*") for p in ports]
        self.calls = 0

    def scan(self):
        self.calls += 1
        return list(self.records)

    force_scan = scan


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    root = tmp_path / "site"
    (root / "a").mkdir(parents=True)
    (root / "a" / "b.txt").write_bytes(b"Troy and Abed in the morning\n")
    (root / "docs").mkdir()
    (root / "docs" / "index.html").write_text("<h1>docs</h1>", encoding="utf-8")
    (root / "empty").mkdir()
    (root / "style.css").write_text("body{}", encoding="utf-8")
    return root


@pytest.fixture
def make_server():
    started = []

    def _make(root, **cfg_kwargs) -> HTTPServer:
        server = HTTPServer(0, root, cfg=CFG(servers_file=None, **cfg_kwargs))
        server.start()
        started.append(server)
        return server

    yield _make
    for server in started:
        server.stop()


@pytest.fixture
def server(make_server, site_root) -> HTTPServer:
    return make_server(site_root)
