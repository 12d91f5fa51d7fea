from __future__ import annotations
import re
from typing import List, Optional, Tuple

from ..models import ListeningPort

UNKNOWN_PROCESS = "unknown"

# COMMAND PID USER FD TYPE DEVICE SIZE/OFF NODE NAME
TABULAR_MIN_COLUMNS = 9
LISTEN_RE = re.compile(r"^(?P<addr>\S+)\s+\(LISTEN\)\s*$")

def _parse_port(s: str) -> Optional[int]:
    s = s.strip()
    if not s.isdigit():
        return None
    port = int(s)
    return port if port <= 0xFFFF else None

def parse_addr(name: str) -> Optional[Tuple[str, int]]:
    """
    Split a name field on its last colon:
      - '127.0.0.1:8080'  -> ('127.0.0.1', 8080)
      - '[::1]:9090'      -> ('[::1]', 9090)
      - '*:22'            -> ('*', 22)
    Returns None when there is no colon or the port is not a 16-bit integer.
    """
    trimmed = name.strip()
    host, sep, port_s = trimmed.rpartition(":")
    if not sep:
        return None
    port = _parse_port(port_s)
    if port is None:
        return None
    return host.strip(), port

def parse_field_output(output: str) -> List[ListeningPort]:
    """Parse `lsof -F pcn` output: p<pid>, c<command>, n<address:port> lines grouped per process."""
    records: List[ListeningPort] = []
    seen: set[int] = set()
    pid: Optional[int] = None
    command: Optional[str] = None

    for line in output.splitlines():
        if not line:
            continue
        tag, value = line[0], line[1:]
        if tag == "p":
            command = None
            try:
                pid = int(value)
            except ValueError:
                pid = None
        elif tag == "c":
            command = value
        elif tag == "n":
            if pid is None:
                continue
            parsed = parse_addr(value)
            if parsed is None:
                continue
            address, port = parsed
            if port in seen:
                continue
            seen.add(port)
            records.append(ListeningPort(port=port, pid=pid,
                                         process_name=command or UNKNOWN_PROCESS,
                                         address=address))
    return records

def parse_tabular_output(output: str) -> List[ListeningPort]:
    """Parse default `lsof -iTCP -sTCP:LISTEN` columns, last column 'address:port (LISTEN)'."""
    records: List[ListeningPort] = []
    seen: set[int] = set()
    for line in output.splitlines():
        cols = line.split()
        if len(cols) < TABULAR_MIN_COLUMNS or cols[0] == "COMMAND":
            continue
        m = LISTEN_RE.match(" ".join(cols[TABULAR_MIN_COLUMNS - 1:]))
        if not m:
            continue
        try:
            pid = int(cols[1])
        except ValueError:
            continue
        parsed = parse_addr(m.group("addr"))
        if parsed is None:
            continue
        address, port = parsed
        if port in seen:
            continue
        seen.add(port)
        records.append(ListeningPort(port=port, pid=pid, process_name=cols[0] or UNKNOWN_PROCESS,
                                     address=address))
    return records

def parse_lsof_output(output: str) -> List[ListeningPort]:
    first = next((ln for ln in output.splitlines() if ln.strip()), "")
    if first.startswith("COMMAND") or len(first.split()) >= TABULAR_MIN_COLUMNS:
        return parse_tabular_output(output)
    return parse_field_output(output)
