from __future__ import annotations
from dataclasses import dataclass, field
import os

import numpy as np


@dataclass(frozen=True)
class EdgeSharpen:
    """
    Five-tap sharpening kernel over the R, G, B channels:

        [ 0, -1,  0 ]
        [-1,  5, -1 ]
        [ 0, -1,  0 ]

    Border pixels have no full neighbourhood and are copied through.
    """
    center: int = 5
    neighbour: int = -1

    def apply(self, buffer: np.ndarray) -> np.ndarray:
        """
        Sharpen an (H, W, 4) uint8 buffer in place and return it.
        Neighbour reads come from a snapshot taken before any write.
        """
        h, w = buffer.shape[:2]
        if h < 3 or w < 3:
            return buffer

        snapshot = buffer[..., :3].astype(np.int32)     # read-only copy
        acc = self.center * snapshot[1:-1, 1:-1] + self.neighbour * (
            snapshot[:-2, 1:-1]      # top
            + snapshot[2:, 1:-1]     # bottom
            + snapshot[1:-1, :-2]    # left
            + snapshot[1:-1, 2:]     # right
        )
        buffer[1:-1, 1:-1, :3] = np.clip(acc, 0, 255).astype(np.uint8)
        return buffer


@dataclass(frozen=True)
class ContrastBoost:
    """
    Linear contrast stretch around a midpoint:
        out = clamp(value * factor + midpoint * (1 - factor), 0, 255)
    Alpha is left untouched.
    """
    factor: float = 1.20
    midpoint: float = 128.0

    @property
    def intercept(self) -> float:
        return self.midpoint * (1 - self.factor)

    def apply(self, buffer: np.ndarray) -> np.ndarray:
        """Apply the stretch to an (H, W, 4) uint8 buffer in place and return it."""
        rgb = buffer[..., :3].astype(np.float64) * self.factor + self.intercept
        # rint ties to even, same as a clamped 8-bit store
        buffer[..., :3] = np.clip(np.rint(rgb), 0, 255).astype(np.uint8)
        return buffer


@dataclass(frozen=True)
class EnhancementSettings:
    """
    Policy constants of the OCR enhancement pipeline.
    Defaults: 1920 px max width, 5/-1 kernel, 20 % contrast, JPEG quality 95.
    """
    max_width: int = 1920
    sharpen: EdgeSharpen = field(default_factory=EdgeSharpen)
    contrast: ContrastBoost = field(default_factory=ContrastBoost)
    jpeg_quality: int = 95

    @classmethod
    def from_env(cls) -> "EnhancementSettings":
        return cls(
            max_width=int(os.getenv("ENHANCE_MAX_WIDTH", "1920")),
            contrast=ContrastBoost(factor=float(os.getenv("ENHANCE_CONTRAST", "1.20"))),
            jpeg_quality=int(os.getenv("ENHANCE_JPEG_QUALITY", "95")),
        )
