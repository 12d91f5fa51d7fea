from __future__ import annotations
import itertools
import logging
import os
import random
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Set, Union

from .collectors.scanner import PortScanner
from .config import CFG, PROBE_RANDOM_RANGE, PROBE_WINDOW, RESTORE_PORT_RANGE, RESTORE_RANDOM_RANGE
from .errors import BindError, SavedServerDecodeError
from .httpd.listener import HTTPServer
from .models import SavedServer
from .utils.path import to_abs_path
from . import store

log = logging.getLogger(__name__)

@dataclass
class ServerInstance:
    id: int
    server: HTTPServer

    @property
    def port(self) -> int:
        return self.server.port

    @property
    def root_directory(self) -> Path:
        return self.server.directory

    @property
    def expose_to_lan(self) -> bool:
        return self.server.expose_to_lan

    @property
    def local_url(self) -> str:
        return f"http://localhost:{self.port}"

    def lan_url(self, addresses: List[str]) -> Optional[str]:
        if not self.expose_to_lan or not addresses:
            return None
        return f"http://{addresses[0]}:{self.port}"

    def to_saved(self) -> SavedServer:
        return SavedServer(port=self.port, directory_path=str(self.root_directory),
                           expose_to_lan=self.expose_to_lan)

    def to_dict(self, addresses: Optional[List[str]] = None) -> dict:
        return {
            "id": self.id,
            "port": self.port,
            "directory": str(self.root_directory),
            "name": self.root_directory.name,
            "exposeToLAN": self.expose_to_lan,
            "running": self.server.is_running,
            "localURL": self.local_url,
            "lanURL": self.lan_url(addresses or []),
        }

InstanceRef = Union[ServerInstance, int]

class ServerManager:
    def __init__(self, scanner: PortScanner, cfg: Optional[CFG] = None,
                 rng: Optional[random.Random] = None,
                 on_server_failure: Optional[Callable[[ServerInstance, BaseException], None]] = None):
        self.scanner = scanner
        self.cfg = cfg or CFG()
        self.rng = rng or random.Random()
        self.on_server_failure = on_server_failure
        self._lock = threading.Lock()
        self._servers: Dict[int, ServerInstance] = {}
        self._ids = itertools.count(1)

    def snapshot_servers(self) -> List[ServerInstance]:
        with self._lock:
            return list(self._servers.values())

    def get(self, instance_id: int) -> Optional[ServerInstance]:
        with self._lock:
            return self._servers.get(instance_id)

    def is_port_in_use(self, port: int) -> bool:
        if any(s.port == port for s in self.snapshot_servers()):
            return True
        return any(p.port == port for p in self.scanner.scan())

    def find_available_port(self, starting_from: Optional[int] = None) -> int:
        start = self.cfg.default_port if starting_from is None else starting_from
        for port in range(start, min(start + PROBE_WINDOW, 0xFFFF) + 1):
            if not self.is_port_in_use(port):
                return port
        return self.rng.randint(*PROBE_RANDOM_RANGE)

    def start_server(self, port: int, root_directory: Union[str, os.PathLike],
                     expose_to_lan: bool = False, save: bool = True) -> ServerInstance:
        directory = to_abs_path(root_directory)
        if directory is None or not directory.is_dir():
            raise NotADirectoryError(str(root_directory))
        with self._lock:
            instance_id = next(self._ids)
        server = HTTPServer(port, directory, expose_to_lan=expose_to_lan, cfg=self.cfg,
                            on_failure=lambda srv, err: self._server_failed(instance_id, err))
        server.start()
        instance = ServerInstance(id=instance_id, server=server)
        with self._lock:
            self._servers[instance_id] = instance
        if save:
            self.save_servers()
        return instance

    def stop_server(self, instance: InstanceRef) -> None:
        self.stop_servers([instance])

    def stop_servers(self, instances: Iterable[InstanceRef]) -> None:
        ids = [i.id if isinstance(i, ServerInstance) else i for i in instances]
        with self._lock:
            stopped = [self._servers.pop(i) for i in ids if i in self._servers]
        for inst in stopped:
            inst.server.stop()
        self.save_servers()

    def stop_all_servers(self) -> None:
        self.stop_servers(self.snapshot_servers())

    def save_servers(self) -> None:
        path = self.cfg.servers_file
        if not path:
            return
        try:
            if not self.cfg.persist_servers:
                store.clear_servers(path)
                return
            store.save_servers(path, [s.to_saved() for s in self.snapshot_servers()])
        except OSError as e:
            log.error("failed to write saved servers to %s: %s", path, e)

    def restore_servers(self, entries: Optional[list] = None) -> List[ServerInstance]:
        """Start every saved server whose directory still exists.

        A saved port already taken (live scan, active server or an earlier
        entry) moves to the lowest free port in 8080-9000, then to a random
        port above that band.
        """
        if entries is None:
            entries = store.load_saved_entries(self.cfg.servers_file)
        saved: List[SavedServer] = []
        for raw in entries:
            try:
                saved.append(raw if isinstance(raw, SavedServer) else SavedServer.from_dict(raw))
            except SavedServerDecodeError as e:
                log.warning("skipping saved server: %s", e)
        if not saved:
            return []

        used_ports = {p.port for p in self.scanner.scan()}
        reserved: Set[int] = set()
        restored: List[ServerInstance] = []
        for entry in saved:
            if not os.path.isdir(entry.directory_path):
                log.warning("skipping saved server on port %d: %s no longer exists",
                            entry.port, entry.directory_path)
                continue
            taken = reserved | used_ports | {s.port for s in self.snapshot_servers()}
            port = entry.port
            if port in taken:
                port = self._reassign_port(taken)
                log.info("saved port %d is taken, restoring %s on %d", entry.port, entry.directory_path, port)
            reserved.add(port)
            try:
                restored.append(self.start_server(port, entry.directory_path, entry.expose_to_lan, save=False))
            except BindError as e:
                log.error("failed to restore server on port %d: %s", port, e)

        if self.snapshot_servers():
            self.save_servers()
        return restored

    def _reassign_port(self, excluded: Set[int]) -> int:
        lo, hi = RESTORE_PORT_RANGE
        for port in range(lo, hi + 1):
            if port not in excluded:
                return port
        return self.rng.randint(*RESTORE_RANDOM_RANGE)

    def _server_failed(self, instance_id: int, error: BaseException) -> None:
        with self._lock:
            instance = self._servers.pop(instance_id, None)
        if instance is None:
            return
        log.error("server on port %d failed: %s", instance.port, error)
        self.save_servers()
        if self.on_server_failure:
            self.on_server_failure(instance, error)
