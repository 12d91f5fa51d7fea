from .collectors import PortScanner
from .errors import BindError, LimitExceeded, PathViolation, PortsError, ProtocolError, SavedServerDecodeError
from .httpd import HTTPServer
from .manager import ServerInstance, ServerManager
from .models import ListeningPort, SavedServer

__version__ = "0.1.0"
