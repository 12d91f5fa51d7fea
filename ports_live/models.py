from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Mapping

from .errors import SavedServerDecodeError

@dataclass(frozen=True)
class ListeningPort:
    port: int
    pid: int
    process_name: str
    address: str

    def to_dict(self) -> dict:
        return {"port": self.port, "pid": self.pid,
                "processName": self.process_name, "address": self.address}

@dataclass(frozen=True)
class SavedServer:
    port: int
    directory_path: str
    expose_to_lan: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SavedServer":
        """Decode one persisted entry; entries written before LAN support lack exposeToLAN."""
        if not isinstance(data, Mapping):
            raise SavedServerDecodeError(f"entry is not a mapping: {data!r}")
        port = data.get("port")
        if isinstance(port, bool) or not isinstance(port, int) or not 0 <= port <= 65535:
            raise SavedServerDecodeError(f"invalid port: {port!r}")
        path = data.get("directoryPath")
        if not isinstance(path, str) or not path:
            raise SavedServerDecodeError(f"invalid directoryPath: {path!r}")
        lan = data.get("exposeToLAN", False)
        if not isinstance(lan, bool):
            raise SavedServerDecodeError(f"invalid exposeToLAN: {lan!r}")
        return cls(port=port, directory_path=path, expose_to_lan=lan)

    def to_dict(self) -> dict:
        return {"port": self.port, "directoryPath": self.directory_path,
                "exposeToLAN": self.expose_to_lan}
