from pathlib import Path
from typing import Iterable, List, Tuple, Union
import math

import cv2
import numpy as np

from models.image import Image
from models.errors import RenderContextError
from repositories.image_repository import ImageRepository


class ImageService:
    """I/O and geometry helpers.  No enhancement logic lives here."""
    def __init__(self, image_repository: ImageRepository = None):
        self.image_repository = image_repository or ImageRepository()

    def load(self, path: Union[str, Path]) -> Image:
        """Load a single image from disk into an RGBA Image object."""
        return self.image_repository.load(path)

    def decode(self, data: bytes, mime_type: str = None) -> Image:
        """Decode uploaded bytes into an RGBA Image object (raises DecodeError)."""
        return self.image_repository.decode(data, mime_type)

    def encode_jpeg(self, pixels: np.ndarray, quality: int) -> bytes:
        return self.image_repository.encode_jpeg(pixels, quality)

    def list_images(self, folder: Union[str, Path], *, recursive: bool = False) -> List[Path]:
        return self.image_repository.list_dir(folder, recursive=recursive)

    def expand_inputs(self, inputs: Iterable[Union[str, Path]]) -> List[Path]:
        """Turn a mix of file and folder arguments into a flat list of image paths."""
        paths = []
        for item in inputs:
            item = Path(item)
            if item.is_dir():
                paths.extend(self.list_images(item))
            else:
                paths.append(item)
        return paths

    def get_image_dimensions(self, img: Image) -> Tuple[int, int]:
        return self.image_repository.retrieve_image_dimensions(img)

    # ─── Geometry ────────────────────────────────────────────────────
    @staticmethod
    def working_dimensions(width: int, height: int, max_width: int) -> Tuple[int, int]:
        """
        Target (width, height) for a bounded working buffer.
        Height follows the aspect ratio, rounded half up.
        """
        if width <= max_width:
            return width, height
        new_height = math.floor(height * (max_width / width) + 0.5)
        return max_width, max(1, new_height)

    def resize_to_working(self, img: Image, max_width: int) -> np.ndarray:
        """
        Return a fresh (H', W', 4) uint8 working buffer, never a view on img.pixels.
        """
        h, w = self.get_image_dimensions(img)
        new_w, new_h = self.working_dimensions(w, h, max_width)

        if (new_w, new_h) == (w, h):
            return np.ascontiguousarray(img.pixels, dtype=np.uint8).copy()

        try:
            resized = cv2.resize(img.pixels, (new_w, new_h), interpolation=cv2.INTER_AREA)
        except cv2.error as err:
            raise RenderContextError(f"Resampling to {new_w}x{new_h} failed: {err}") from err
        return np.ascontiguousarray(resized, dtype=np.uint8)
