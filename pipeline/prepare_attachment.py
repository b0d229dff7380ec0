"""
Attachment Preparation
Turns an uploaded file into the single media part sent to the classifier.
Images go through the OCR enhancement pipeline; anything that cannot be
enhanced is sent as-is.
"""

import logging
from typing import Optional

from models.upload import Upload, Attachment
from models.errors import EnhancementError
from services.image_enhancement_service import ImageEnhancementService

logger = logging.getLogger(__name__)


def prepare_attachment(
    upload: Optional[Upload],
    *,
    enhancement_service: ImageEnhancementService,
) -> Optional[Attachment]:
    """
    Args:
        upload: The uploaded file, or None for text-only scans
        enhancement_service: Service running the enhancement pipeline

    Returns:
        Attachment: enhanced JPEG for images, original bytes otherwise
    """
    if upload is None:
        return None

    if not upload.is_image:
        return Attachment(data=upload.data, mime_type=upload.mime_type)

    try:
        enhanced = enhancement_service.enhance(upload.data, upload.mime_type)
    except EnhancementError as err:
        logger.warning(f"Image processing failed for {upload.filename}, falling back to original: {err}")
        return Attachment(data=upload.data, mime_type=upload.mime_type)

    logger.info(f"Enhanced {upload.filename} to {enhanced.width}x{enhanced.height} JPEG")
    return Attachment(data=enhanced.data, mime_type=enhanced.mime_type, enhanced=True)
