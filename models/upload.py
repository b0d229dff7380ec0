from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class Upload:
    """A user-supplied file: raw bytes plus the name and type the client declared."""
    data: bytes
    filename: str
    mime_type: str = "application/octet-stream"

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    @property
    def kind(self) -> str:
        """History category: image, video or binary."""
        if self.is_image:
            return "image"
        if self.mime_type.startswith("video/"):
            return "video"
        return "binary"


@dataclass(frozen=True)
class Attachment:
    """Media actually sent to the classifier."""
    data: bytes
    mime_type: str
    enhanced: bool = False
