from __future__ import annotations

from pathlib import Path
from typing import List, Union
import logging
import os

import numpy as np
from tqdm import tqdm
from dotenv import load_dotenv

from models.image import Image
from models.enhanced_image import EnhancedImage
from models.errors import DecodeError
from models.image_adjustments import EnhancementSettings
from services.image_service import ImageService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class ImageEnhancementService:
    """
    Prepares an uploaded image for OCR-oriented analysis:
    downscale to a bounded width, sharpen edges, stretch contrast, re-encode as JPEG.
    *   Same input bytes always produce the same output bytes.
    *   Each call owns its working buffer; nothing is shared between calls.
    """

    def __init__(self,
                 settings: EnhancementSettings = None,
                 image_service: ImageService = None):
        """
        Args:
            settings: Pipeline constants (defaults to env vars / built-in policy)
            image_service: Decoding and geometry helpers
        """
        self.settings = settings or EnhancementSettings.from_env()
        self.img_svc = image_service or ImageService()
        self.output_suffix = os.getenv("ENHANCED_SUFFIX", "_enhanced")

        logger.info(f"ImageEnhancementService initialized: max_width={self.settings.max_width}, "
                    f"contrast={self.settings.contrast.factor}, quality={self.settings.jpeg_quality}")

    # ─── Public API ────────────────────────────────────────────────
    def enhance(self, source: Union[bytes, str, Path, Image], mime_type: str = None) -> EnhancedImage:
        """
        Run the full pipeline on raw bytes, a file path, or an already decoded Image.
        Raises DecodeError / RenderContextError.
        """
        img = self._to_image(source, mime_type)
        buffer = self.prepare_buffer(img)
        data = self.img_svc.encode_jpeg(buffer, self.settings.jpeg_quality)
        h, w = buffer.shape[:2]

        logger.debug(f"Enhanced {img.width}x{img.height} -> {w}x{h} ({len(data)} bytes)")
        return EnhancedImage(data=data, width=w, height=h)

    def prepare_buffer(self, img: Image) -> np.ndarray:
        """Resize, sharpen and contrast-boost; returns the working buffer before encoding."""
        buffer = self.resize(img)
        self.sharpen(buffer)
        self.boost_contrast(buffer)
        return buffer

    def enhance_file(self, path: Union[str, Path], output_dir: Union[str, Path] = None) -> Path:
        path = Path(path)
        enhanced = self.enhance(path)
        target_dir = Path(output_dir) if output_dir else path.parent
        target = target_dir / f"{path.stem}{self.output_suffix}.jpg"
        return self.img_svc.image_repository.save_bytes(enhanced.data, target)

    def enhance_files(self, paths: List[Union[str, Path]], output_dir: Union[str, Path] = None) -> List[Path]:
        written = []
        for p in tqdm(paths, desc="enhance", ncols=70):
            try:
                written.append(self.enhance_file(p, output_dir))
            except (DecodeError, FileNotFoundError) as err:
                logger.warning(f"Skipping {Path(p).name}: {err}")
        return written

    # ─── Pipeline stages ───────────────────────────────────────────
    def resize(self, img: Image) -> np.ndarray:
        return self.img_svc.resize_to_working(img, self.settings.max_width)

    def sharpen(self, buffer: np.ndarray) -> np.ndarray:
        return self.settings.sharpen.apply(buffer)

    def boost_contrast(self, buffer: np.ndarray) -> np.ndarray:
        return self.settings.contrast.apply(buffer)

    # ─── Internal helpers ──────────────────────────────────────────
    def _to_image(self, source, mime_type: str = None) -> Image:
        if isinstance(source, Image):
            return source
        if isinstance(source, (bytes, bytearray, memoryview)):
            return self.img_svc.decode(bytes(source), mime_type)
        return self.img_svc.load(source)
