from __future__ import annotations
from typing import Optional


class PortsError(Exception):
    """Base class for failures raised by ports_live."""


class BindError(PortsError):
    """Raised when a server cannot bind its port (in use, privileged or invalid)."""

    def __init__(self, port: int, cause: Optional[BaseException] = None):
        self.port = port
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"cannot bind port {port}{detail}")


class ProtocolError(PortsError):
    """Raised for a request that is not a well-formed GET request."""

    def __init__(self, status: int, message: str = ""):
        self.status = status
        super().__init__(message or str(status))


class LimitExceeded(PortsError):
    """Raised when a request or the connection count exceeds a configured bound."""

    def __init__(self, status: int, message: str = ""):
        self.status = status
        super().__init__(message or str(status))


class PathViolation(PortsError):
    """Raised when a request path resolves outside the server root."""


class SavedServerDecodeError(PortsError):
    """Raised for a malformed persisted server entry."""
