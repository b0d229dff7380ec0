from pathlib import Path
from typing import Callable, List, Union
import json
import logging
import os
import threading

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class HistoryRepository:
    """
    JSON-file persistence for scan history (a list of plain dicts, newest first).
    A missing or unreadable file is treated as an empty history.
    """
    def __init__(self, path: Union[str, Path] = None):
        self.path = Path(path or os.getenv("HISTORY_PATH", "data/scan_history.json"))
        self._lock = threading.Lock()

    def load(self) -> List[dict]:
        with self._lock:
            return self._read()

    def save(self, items: List[dict]) -> None:
        with self._lock:
            self._write(items)

    def update(self, fn: Callable[[List[dict]], List[dict]]) -> List[dict]:
        """Read, transform and write back under one lock acquisition."""
        with self._lock:
            items = fn(self._read())
            self._write(items)
            return items

    def _write(self, items: List[dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(items, ensure_ascii=False), encoding="utf-8")
        tmp_path.replace(self.path)

    def _read(self) -> List[dict]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as err:
            logger.error(f"Failed to parse history at {self.path}: {err}")
            return []
        if not isinstance(data, list):
            logger.error(f"History at {self.path} is not a list, ignoring it")
            return []
        return data
