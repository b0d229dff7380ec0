from __future__ import annotations

from typing import List, Optional
import logging
import os
import time
import uuid

from dotenv import load_dotenv

from models.analysis import AnalysisResult, AnalysisHistoryItem
from repositories.history_repository import HistoryRepository

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class HistoryService:
    """
    Business logic for the scan history: newest first, capped length.
    Delegates persistence to HistoryRepository.
    """

    def __init__(self, repository: HistoryRepository = None, limit: int = None):
        self.repository = repository or HistoryRepository()
        self.limit = limit if limit is not None else int(os.getenv("HISTORY_LIMIT", "50"))

    def record(self, result: AnalysisResult, preview: str, scan_type: str) -> AnalysisHistoryItem:
        item = AnalysisHistoryItem(
            result=result,
            id=str(uuid.uuid4()),
            timestamp=int(time.time() * 1000),
            preview=preview,
            type=scan_type,
        )
        self.repository.update(lambda items: ([item.to_dict()] + items)[:self.limit])
        logger.info(f"Recorded scan {item.id} ({scan_type}, {result.threat_level.value})")
        return item

    def list(self) -> List[AnalysisHistoryItem]:
        history = []
        for raw in self.repository.load():
            try:
                history.append(AnalysisHistoryItem.from_dict(raw))
            except (KeyError, ValueError, TypeError) as err:
                logger.warning(f"Dropping malformed history entry: {err}")
        return history

    def get(self, item_id: str) -> Optional[AnalysisHistoryItem]:
        return next((item for item in self.list() if item.id == item_id), None)

    def clear(self) -> None:
        self.repository.save([])
        logger.info("Scan history cleared")
