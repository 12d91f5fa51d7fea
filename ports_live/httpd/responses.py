from __future__ import annotations
import html
import logging
import os
import posixpath
from http import HTTPStatus
from typing import List, Sequence, Tuple
from urllib.parse import quote

from ..config import DEFAULT_MIME_TYPE, MIME_TYPES

log = logging.getLogger(__name__)

HTML_TYPE = "text/html; charset=utf-8"

# RFC 3986 pchar sub-delims stay literal in paths
_PATH_SAFE = "/!$&'()*+,;=:@~"

LISTING_STYLE = """\
body { font-family: -apple-system, ui-sans-serif, system-ui, sans-serif; padding: 20px; }
a { text-decoration: none; color: #007aff; }
a:hover { text-decoration: underline; }
li { padding: 4px 0; }"""

def html_escaped(s: str) -> str:
    return html.escape(s, quote=True)

def percent_encoded_path(path: str) -> str:
    return quote(path, safe=_PATH_SAFE, errors="surrogateescape")

def sanitized_header_value(value: str) -> str:
    return value.replace("\r", "").replace("\n", "").replace("\x00", "")

def mime_type_for(path: str) -> str:
    ext = os.path.splitext(path)[1].lower().lstrip(".")
    return MIME_TYPES.get(ext, DEFAULT_MIME_TYPE)

# Reason phrases for every status the server emits
REASONS = {
    200: "OK",
    301: "Moved Permanently",
    400: "Bad Request",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    413: "Content Too Large",
    500: "Internal Server Error",
    503: "Service Unavailable",
}

def reason_phrase(status: int) -> str:
    if status in REASONS:
        return REASONS[status]
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Unknown"

def render(status: int, content_type: str, body: bytes, *,
           headers: Sequence[Tuple[str, str]] = (), frame_deny: bool = False) -> bytes:
    """Serialize a complete HTTP/1.1 response. Header order is fixed."""
    lines = [
        f"HTTP/1.1 {status} {reason_phrase(status)}",
        f"Content-Type: {content_type}",
        f"Content-Length: {len(body)}",
    ]
    lines += [f"{k}: {sanitized_header_value(v)}" for k, v in headers]
    lines.append("Connection: close")
    if content_type.startswith("text/html"):
        lines.append("X-Content-Type-Options: nosniff")
        if frame_deny:
            lines.append("X-Frame-Options: DENY")
    head = "\r\n".join(lines) + "\r\n\r\n"
    return head.encode("latin-1") + body

def error_response(status: int) -> bytes:
    text = html_escaped(f"{status} {reason_phrase(status)}")
    body = f"<html><body><h1>{text}</h1></body></html>".encode("utf-8")
    return render(status, HTML_TYPE, body, frame_deny=True)

def redirect_response(target_path: str) -> bytes:
    location = sanitized_header_value(percent_encoded_path(target_path))
    body = (f"<html><body><h1>301 Moved Permanently</h1>"
            f"<p><a href=\"{html_escaped(location)}\">{html_escaped(location)}</a></p>"
            f"</body></html>").encode("utf-8")
    return render(301, HTML_TYPE, body, headers=[("Location", location)])

def file_response(path: str) -> bytes:
    try:
        with open(path, "rb") as f:
            body = f.read()
    except OSError as e:
        log.error("cannot read %s: %s", path, e)
        return error_response(500)
    return render(200, mime_type_for(path), body)

def _entries(directory: str) -> List[Tuple[str, bool]]:
    out = []
    with os.scandir(directory) as it:
        for entry in it:
            try:
                is_dir = entry.is_dir()
            except OSError:
                is_dir = False
            out.append((entry.name, is_dir))
    out.sort(key=lambda e: e[0])
    return out

def parent_path(request_path: str) -> str:
    parent = posixpath.dirname(request_path.rstrip("/"))
    return parent if parent.endswith("/") else parent + "/"

def listing_html(request_path: str, entries: List[Tuple[str, bool]]) -> str:
    title = html_escaped(request_path)
    items = []
    if request_path != "/":
        href = html_escaped(percent_encoded_path(parent_path(request_path)))
        items.append(f"<li><a href=\"{href}\">../</a></li>")
    base = request_path if request_path.endswith("/") else request_path + "/"
    for name, is_dir in entries:
        display = name + "/" if is_dir else name
        href = html_escaped(percent_encoded_path(base + display))
        items.append(f"<li><a href=\"{href}\">{html_escaped(display)}</a></li>")
    return "\n".join([
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        "<meta charset=\"utf-8\">",
        f"<title>Index of {title}</title>",
        f"<style>\n{LISTING_STYLE}\n</style>",
        "</head>",
        "<body>",
        f"<h1>Index of {title}</h1>",
        "<ul>",
        *items,
        "</ul>",
        "</body>",
        "</html>",
        "",
    ])

def listing_response(directory: str, request_path: str) -> bytes:
    try:
        entries = _entries(directory)
    except OSError as e:
        log.error("cannot list %s: %s", directory, e)
        return error_response(500)
    body = listing_html(request_path, entries).encode("utf-8", errors="surrogateescape")
    return render(200, HTML_TYPE, body, frame_deny=True)
