from __future__ import annotations

from pathlib import Path
from typing import Union, Iterable, List, Iterator
from io import BytesIO
import logging
import os

import numpy as np
from PIL import Image as PILImage, ImageOps, UnidentifiedImageError
from dotenv import load_dotenv

from models.image import Image
from models.errors import DecodeError, RenderContextError

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

_DECODE_ERRORS = (UnidentifiedImageError, OSError, ValueError, PILImage.DecompressionBombError)


class ImageRepository:
    """
    Handles byte/file I/O for Image entities.
    Everything leaving this class is RGBA; everything it encodes is RGB JPEG.
    """
    def __init__(self):
        self.VALID_EXTS = {
            ext.strip().lower()
            for ext in os.getenv("VALID_IMAGE_EXTENSIONS", ".png,.jpg,.jpeg,.gif,.bmp,.webp").split(",")
        }

    @staticmethod
    def retrieve_image_dimensions(img: Image):
        return img.pixels.shape[:2]

    @staticmethod
    def decode(data: bytes, mime_type: str = None) -> Image:
        """Decode an encoded image byte stream into an RGBA Image."""
        if not data:
            raise DecodeError("Empty image payload")
        try:
            with PILImage.open(BytesIO(data)) as pil_obj:
                pil_obj = ImageOps.exif_transpose(pil_obj)
                arr = np.array(pil_obj.convert("RGBA"), dtype=np.uint8)
        except _DECODE_ERRORS as err:
            raise DecodeError(f"Unsupported or corrupted image data: {err}") from err

        return Image(pixels=arr, mime_type=mime_type)

    def load(self, path: Union[str, Path]) -> Image:
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Image not found or unreadable: {path}")

        img = self.decode(path.read_bytes())
        img.path = path
        return img

    @staticmethod
    def encode_jpeg(pixels: np.ndarray, quality: int = 95) -> bytes:
        """Serialise the RGB channels of an (H, W, 4) buffer as JPEG; alpha is dropped."""
        rgb = np.ascontiguousarray(pixels[..., :3])
        buffer = BytesIO()
        try:
            PILImage.fromarray(rgb).save(buffer, format="JPEG", quality=quality)
        except (OSError, ValueError, TypeError) as err:
            raise RenderContextError(f"JPEG encoding failed: {err}") from err
        return buffer.getvalue()

    @staticmethod
    def save_bytes(data: bytes, path: Union[str, Path]) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    def iter_dir(
        self,
        folder: Union[str, Path],
        *,
        recursive: bool = False,
        exts: Iterable[str] | None = None,
    ) -> Iterator[Path]:
        """
        Yield image file paths one at a time.  Nothing is decoded here.
        """
        folder = Path(folder)
        if not folder.is_dir():
            raise NotADirectoryError(folder)

        allowed = {e.lower() for e in (exts or self.VALID_EXTS)}
        pattern = "**/*" if recursive else "*"

        for p in sorted(folder.glob(pattern)):
            if p.suffix.lower() not in allowed:
                logger.debug(f"Skipping due to extension: {p}")
                continue
            if not p.is_file():
                logger.debug(f"Skipping because not file: {p}")
                continue
            yield p

    def list_dir(
        self, folder: Union[str, Path], *, recursive=False, exts=None
    ) -> List[Path]:
        return list(self.iter_dir(folder, recursive=recursive, exts=exts))
