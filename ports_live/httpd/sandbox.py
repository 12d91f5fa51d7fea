from __future__ import annotations
import os

from ..errors import PathViolation
from ..utils.path import is_within

class PathSandbox:
    """Maps decoded request paths onto a canonical root directory."""

    def __init__(self, root: str | os.PathLike):
        self.root = os.path.realpath(os.fspath(root))

    def resolve(self, request_path: str) -> str:
        # request_path is already percent-decoded; realpath follows every symlink
        candidate = os.path.join(self.root, request_path.lstrip("/"))
        resolved = os.path.realpath(candidate)
        if not is_within(resolved, self.root):
            raise PathViolation(request_path)
        return resolved
