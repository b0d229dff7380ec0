from __future__ import annotations
from dataclasses import dataclass
import base64


@dataclass(frozen=True)
class EnhancedImage:
    """
    Encoded output of the enhancement pipeline.
    Alpha is already discarded; the bytes are a complete JPEG stream.
    """
    data: bytes
    width: int
    height: int
    mime_type: str = "image/jpeg"

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("utf-8")

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.to_base64()}"
