from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
import logging

from .utils.path import to_abs_path

log = logging.getLogger(__name__)

DEFAULT_SERVERS_FILE = Path("~/.config/ports-live/servers.json").expanduser()

# -F fields: p=pid, c=command, n=name; +c0 keeps full command names
LSOF_COMMAND = ["lsof", "-iTCP", "-sTCP:LISTEN", "-n", "-P", "-Fpcn", "+c0"]

# Candidate band for reassigning a restored server whose saved port is taken
RESTORE_PORT_RANGE = (8080, 9000)
RESTORE_RANDOM_RANGE = (9001, 65535)
# Random fallback when find_available_port probes past its window
PROBE_WINDOW = 100
PROBE_RANDOM_RANGE = (8200, 9000)

MIME_TYPES = {
    "html": "text/html; charset=utf-8",
    "htm": "text/html; charset=utf-8",
    "css": "text/css",
    "js": "application/javascript",
    "json": "application/json",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "pdf": "application/pdf",
    "txt": "text/plain; charset=utf-8",
    "md": "text/markdown; charset=utf-8",
}
DEFAULT_MIME_TYPE = "application/octet-stream"

@dataclass
class CFG:
    default_port: int = 8080
    persist_servers: bool = True
    servers_file: Optional[Path] = DEFAULT_SERVERS_FILE
    share_on_lan_by_default: bool = False
    max_connections: int = 50
    request_timeout: float = 30.0
    max_header_bytes: int = 64 * 1024
    scan_ttl: float = 2.0
    scan_command: List[str] = field(default_factory=lambda: list(LSOF_COMMAND))

def _positive(value, default, cast):
    if value is None:
        return default
    try:
        v = cast(value)
    except (TypeError, ValueError):
        log.warning("invalid value %r, using default %r", value, default)
        return default
    if v <= 0:
        log.warning("value %r must be positive, using default %r", value, default)
        return default
    return v

def init_cfg_from_args(args) -> CFG:
    cfg = CFG()
    default_port = _positive(getattr(args, "default_port", None), cfg.default_port, int)
    cfg.default_port = default_port if default_port <= 65535 else cfg.default_port
    cfg.persist_servers = not bool(getattr(args, "no_persist", False))
    cfg.share_on_lan_by_default = bool(getattr(args, "lan", False))
    cfg.max_connections = _positive(getattr(args, "max_connections", None), cfg.max_connections, int)
    cfg.scan_ttl = _positive(getattr(args, "scan_ttl", None), cfg.scan_ttl, float)
    if getattr(args, "servers_file", None):
        cfg.servers_file = to_abs_path(args.servers_file)
    return cfg
