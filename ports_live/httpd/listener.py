from __future__ import annotations
import itertools
import logging
import os
import socket
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Dict, Optional

from ..config import CFG
from ..errors import BindError
from ..utils.net import bind_host
from .responses import error_response
from .sandbox import PathSandbox
from .session import ConnectionSession

log = logging.getLogger(__name__)

ACCEPT_POLL = 0.5
BACKLOG = 128

FailureCallback = Callable[["HTTPServer", BaseException], None]

class HTTPServer:
    """Static file server for one directory on one port.

    start() binds synchronously and raises BindError; connections are
    accepted on a background thread and handled on a worker pool, at
    most cfg.max_connections at a time.
    """

    def __init__(self, port: int, directory: str | os.PathLike, expose_to_lan: bool = False,
                 cfg: Optional[CFG] = None, on_failure: Optional[FailureCallback] = None):
        self.port = port
        self.directory = Path(directory)
        self.expose_to_lan = expose_to_lan
        self.cfg = cfg or CFG()
        self.on_failure = on_failure
        self.sandbox: Optional[PathSandbox] = None

        self._lock = threading.Lock()
        self._sessions: Dict[int, ConnectionSession] = {}
        self._ids = itertools.count(1)
        self._sock: Optional[socket.socket] = None
        self._pool: Optional[ThreadPoolExecutor] = None
        self._stopping = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._sock is not None

    @property
    def active_connections(self) -> int:
        with self._lock:
            return len(self._sessions)

    def start(self) -> None:
        if self.is_running:
            return
        if isinstance(self.port, bool) or not isinstance(self.port, int) or not 0 <= self.port <= 0xFFFF:
            raise BindError(self.port, ValueError("port must be an integer in 0-65535"))
        sandbox = PathSandbox(self.directory)
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((bind_host(self.expose_to_lan), self.port))
            sock.listen(BACKLOG)
        except OSError as e:
            sock.close()
            log.error("bind failed on port %s: %s", self.port, e)
            raise BindError(self.port, e) from e
        sock.settimeout(ACCEPT_POLL)

        self.port = sock.getsockname()[1]
        self.sandbox = sandbox
        stopping = threading.Event()
        with self._lock:
            self._sock = sock
            self._stopping = stopping
            self._pool = ThreadPoolExecutor(max_workers=self.cfg.max_connections,
                                            thread_name_prefix=f"http-{self.port}")
        threading.Thread(target=self._accept_loop, args=(sock, stopping),
                         name=f"http-accept-{self.port}", daemon=True).start()
        log.info("serving %s on %s:%d", sandbox.root, bind_host(self.expose_to_lan), self.port)

    def stop(self) -> None:
        with self._lock:
            sock, self._sock = self._sock, None
            pool, self._pool = self._pool, None
            sessions = list(self._sessions.values())
            self._sessions.clear()
            for s in sessions:
                if s.timer:
                    s.timer.cancel()
        if sock is None:
            return
        self._stopping.set()
        sock.close()
        for s in sessions:
            s.close_socket()
        if pool:
            pool.shutdown(wait=False, cancel_futures=True)
        log.info("stopped server on port %d", self.port)

    # --- session registry, every mutation under self._lock ----------------

    def close_session(self, sid: int) -> None:
        with self._lock:
            session = self._sessions.pop(sid, None)
            if session and session.timer:
                session.timer.cancel()
        if session:
            session.close_socket()

    def finish_framing(self, sid: int) -> None:
        with self._lock:
            session = self._sessions.get(sid)
            if session:
                session.framed = True
                if session.timer:
                    session.timer.cancel()
                    session.timer = None

    def _expire(self, sid: int) -> None:
        with self._lock:
            session = self._sessions.get(sid)
            if session is None or session.framed:
                return
            del self._sessions[sid]
            session.timer = None
        log.debug("session %d: request deadline expired", sid)
        session.close_socket()

    def _register(self, conn: socket.socket) -> Optional[ConnectionSession]:
        with self._lock:
            if self._pool is None or len(self._sessions) >= self.cfg.max_connections:
                return None
            session = ConnectionSession(next(self._ids), conn, self)
            self._sessions[session.id] = session
            timer = threading.Timer(self.cfg.request_timeout, self._expire, args=(session.id,))
            timer.daemon = True
            session.timer = timer
            timer.start()
            pool = self._pool
        try:
            pool.submit(session.run)
        except RuntimeError:
            # pool shut down by a concurrent stop()
            self.close_session(session.id)
        return session

    # --- accept loop -------------------------------------------------------

    def _accept_loop(self, sock: socket.socket, stopping: threading.Event) -> None:
        while not stopping.is_set():
            try:
                conn, _ = sock.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if stopping.is_set():
                    break
                log.error("accept failed on port %d: %s", self.port, e)
                self.stop()
                if self.on_failure:
                    self.on_failure(self, e)
                break
            conn.settimeout(self.cfg.request_timeout)
            if self._register(conn) is None:
                self._reject(conn)

    def _reject(self, conn: socket.socket) -> None:
        log.warning("connection limit %d reached on port %d", self.cfg.max_connections, self.port)
        try:
            conn.sendall(error_response(503))
        except OSError as e:
            log.debug("could not send 503: %s", e)
        finally:
            conn.close()
