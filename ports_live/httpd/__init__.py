from .listener import HTTPServer
from .request import Request, parse_request
from .sandbox import PathSandbox
