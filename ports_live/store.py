from __future__ import annotations
from pathlib import Path
import json
import logging
from typing import Iterable, List, Optional

import yaml

from .models import SavedServer

log = logging.getLogger(__name__)

def _is_yaml(p: Path) -> bool:
    return p.suffix in (".yaml", ".yml")

def load_saved_entries(path: Optional[Path]) -> list:
    """Raw entries from the servers file; [] when missing or unreadable."""
    if not path or not path.exists():
        return []
    try:
        txt = path.read_text(encoding="utf-8")
        data = yaml.safe_load(txt) if _is_yaml(path) else json.loads(txt)
    except (OSError, ValueError, yaml.YAMLError) as e:
        log.error("failed to read saved servers from %s: %s", path, e)
        return []
    if not isinstance(data, list):
        log.error("saved servers in %s is not a list", path)
        return []
    return data

def save_servers(path: Path, servers: Iterable[SavedServer]) -> None:
    data: List[dict] = [s.to_dict() for s in servers]
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    if _is_yaml(path):
        tmp.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    else:
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
    tmp.replace(path)

def clear_servers(path: Optional[Path]) -> None:
    if path and path.exists():
        path.unlink()
