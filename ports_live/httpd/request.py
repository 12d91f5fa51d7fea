from __future__ import annotations
from dataclasses import dataclass
from urllib.parse import unquote

from ..errors import ProtocolError

@dataclass(frozen=True)
class Request:
    method: str
    target: str
    path: str   # percent-decoded, always starts with "/"
    query: str = ""
    fragment: str = ""

def split_target(target: str) -> tuple[str, str, str]:
    rest, _, fragment = target.partition("#")
    path, _, query = rest.partition("?")
    return path, query, fragment

def parse_request(header_text: str) -> Request:
    """Parse the request line of a decoded header block.

    Raises ProtocolError(400) for a missing line or target and
    ProtocolError(405) for anything other than a well-formed GET.
    """
    request_line = header_text.split("\r\n", 1)[0]
    parts = request_line.split(" ")
    if not request_line or len(parts) < 2 or not parts[1]:
        raise ProtocolError(400, "missing request line or target")
    method, target = parts[0], parts[1]
    if method != "GET":
        raise ProtocolError(405, f"method {method!r} not allowed")
    if len(parts) > 3 or (len(parts) == 3 and not parts[2].startswith("HTTP/")):
        raise ProtocolError(405, f"malformed request line {request_line!r}")

    raw_path, query, fragment = split_target(target)
    # undecodable bytes survive as surrogates, matching os.fsdecode of on-disk names
    path = unquote(raw_path, errors="surrogateescape")
    if "\x00" in path:
        raise ProtocolError(400, "NUL in path")
    if not path.startswith("/"):
        path = "/" + path
    return Request(method=method, target=target, path=path, query=query, fragment=fragment)
