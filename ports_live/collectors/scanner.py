from __future__ import annotations
import logging
import subprocess
import threading
import time
from typing import Callable, List, Optional, Sequence, Tuple

from ..config import LSOF_COMMAND
from ..models import ListeningPort
from .lsof import parse_lsof_output

log = logging.getLogger(__name__)

# (returncode, stdout, stderr)
CommandResult = Tuple[int, str, str]
Runner = Callable[[Sequence[str]], CommandResult]

def run_command(command: Sequence[str]) -> CommandResult:
    proc = subprocess.run(list(command), capture_output=True, text=True, errors="replace")
    return proc.returncode, proc.stdout, proc.stderr

class PortScanner:
    """Listening TCP ports, cached for `ttl` seconds.

    The external command blocks; callers on a latency-sensitive thread
    should call scan() from a worker.
    """

    def __init__(self, ttl: float = 2.0, command: Optional[Sequence[str]] = None,
                 runner: Optional[Runner] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self.command = list(command or LSOF_COMMAND)
        self._runner = runner or run_command
        self._clock = clock
        self._lock = threading.Lock()
        self._records: List[ListeningPort] = []
        self._captured_at: Optional[float] = None

    def scan(self) -> List[ListeningPort]:
        with self._lock:
            if self._captured_at is not None and self._clock() - self._captured_at < self.ttl:
                return list(self._records)
            return self._capture()

    def force_scan(self) -> List[ListeningPort]:
        with self._lock:
            return self._capture()

    def _capture(self) -> List[ListeningPort]:
        records = parse_lsof_output(self._run())
        self._records = records
        self._captured_at = self._clock()
        return list(records)

    def _run(self) -> str:
        try:
            code, out, err = self._runner(self.command)
        except OSError as e:
            log.error("failed to run %s: %s", self.command[0], e)
            return ""
        if code != 0 and not out:
            log.error("%s exited with status %d: %s", self.command[0], code, err.strip() or "unknown error")
            return ""
        if code != 0:
            log.warning("%s exited with status %d: %s", self.command[0], code, err.strip() or "unknown error")
        return out
