from __future__ import annotations
import logging
import os
import socket
import threading
from typing import TYPE_CHECKING, Optional

from ..errors import LimitExceeded, PathViolation, ProtocolError
from .request import Request, parse_request
from .responses import error_response, file_response, listing_response, redirect_response
from .sandbox import PathSandbox

if TYPE_CHECKING:
    from .listener import HTTPServer

log = logging.getLogger(__name__)

RECV_SIZE = 4096
HEADER_END = b"\r\n\r\n"
INDEX_FILES = ("index.html", "index.htm")

def route(request: Request, sandbox: PathSandbox) -> bytes:
    try:
        target = sandbox.resolve(request.path)
    except PathViolation:
        log.warning("rejected path outside root: %r", request.path)
        return error_response(403)

    if os.path.isdir(target):
        if not request.path.endswith("/"):
            return redirect_response(request.path + "/")
        for name in INDEX_FILES:
            try:
                index = sandbox.resolve(request.path + name)
            except PathViolation:
                continue
            if os.path.isfile(index):
                return file_response(index)
        return listing_response(target, request.path)

    if os.path.isfile(target) and not request.path.endswith("/"):
        return file_response(target)
    return error_response(404)

class ConnectionSession:
    """One accepted socket: frame one request, write one response, close."""

    def __init__(self, sid: int, sock: socket.socket, server: "HTTPServer"):
        self.id = sid
        self.sock = sock
        self.server = server
        self.timer: Optional[threading.Timer] = None
        self.framed = False
        self.closed = False

    def run(self) -> None:
        try:
            response = self._respond()
            if response is not None and not self.closed:
                # the request deadline covers framing only
                self.sock.settimeout(None)
                self.sock.sendall(response)
        except OSError as e:
            if not self.closed:
                log.debug("session %d: write failed: %s", self.id, e)
        finally:
            self.server.close_session(self.id)

    def close_socket(self) -> None:
        self.closed = True
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self.sock.close()

    def _respond(self) -> Optional[bytes]:
        try:
            raw = self._read_header_block()
        except (ProtocolError, LimitExceeded) as e:
            return error_response(e.status)
        finally:
            self.server.finish_framing(self.id)
        if raw is None:
            return None

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            return error_response(400)
        try:
            request = parse_request(text)
        except ProtocolError as e:
            log.debug("session %d: %s", self.id, e)
            return error_response(e.status)

        log.debug("session %d: GET %s", self.id, request.path)
        return route(request, self.server.sandbox)

    def _read_header_block(self) -> Optional[bytes]:
        """Accumulate bytes until the blank line ending the header block.

        Returns None when the session was closed underneath the read
        (deadline or server stop).
        """
        limit = self.server.cfg.max_header_bytes
        buf = bytearray()
        while True:
            try:
                chunk = self.sock.recv(RECV_SIZE)
            except socket.timeout:
                return None
            except OSError:
                if self.closed:
                    return None
                raise
            if self.closed:
                return None
            if not chunk:
                raise ProtocolError(400, "connection closed before end of headers")
            start = max(0, len(buf) - len(HEADER_END) + 1)
            buf += chunk
            end = buf.find(HEADER_END, start)
            if end != -1 and end + len(HEADER_END) <= limit:
                return bytes(buf[:end])
            if len(buf) > limit:
                raise LimitExceeded(413, "header block too large")
