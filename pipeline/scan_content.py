"""
Scan Pipeline
Validates the request, prepares the attachment, asks the classifier for a
verdict and records it in the scan history.
"""

import logging
from typing import Optional, Tuple

from models.analysis import AnalysisResult, AnalysisHistoryItem
from models.errors import InputMissingError
from models.upload import Upload
from pipeline.prepare_attachment import prepare_attachment
from services.classification_service import ClassificationService
from services.history_service import HistoryService
from services.image_enhancement_service import ImageEnhancementService

logger = logging.getLogger(__name__)

ENHANCEMENT_NOTE = (
    "[SYSTEM METADATA: Image pre-processed with Edge Sharpening and Contrast Boost "
    "for optimal OCR extraction.]"
)


def build_preview(text: str, upload: Optional[Upload]) -> str:
    if upload is not None and not text:
        return f"Image: {upload.filename}"
    return text


def scan_content(
    text: str,
    upload: Optional[Upload] = None,
    *,
    enhancement_service: ImageEnhancementService,
    classification_service: ClassificationService,
    history_service: HistoryService,
) -> Tuple[AnalysisResult, AnalysisHistoryItem]:
    """
    Run one scan end to end.

    Args:
        text: Suspicious message text (may be empty when a file is given)
        upload: Optional uploaded file
        enhancement_service: Image enhancement pipeline
        classification_service: External classifier client
        history_service: Scan history store

    Returns:
        (AnalysisResult, AnalysisHistoryItem)

    Raises:
        InputMissingError: neither text nor file supplied
        ClassificationError: classifier failure
    """
    text = text or ""
    if not text and upload is None:
        raise InputMissingError("No text or file supplied")

    attachment = prepare_attachment(upload, enhancement_service=enhancement_service)

    prompt = text
    if attachment is not None and attachment.enhanced:
        prompt = f"{text}\n\n{ENHANCEMENT_NOTE}"

    result = classification_service.classify(
        prompt,
        attachment.data if attachment else None,
        attachment.mime_type if attachment else None,
    )
    logger.info(f"Verdict: {result.threat_level.value} (score {result.safety_score})")

    scan_type = upload.kind if upload is not None else "text"
    item = history_service.record(result, build_preview(text, upload), scan_type)
    return result, item
