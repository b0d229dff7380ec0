from __future__ import annotations
from dataclasses import dataclass, asdict


class EnhancementError(Exception):
    """Base class for failures inside the image enhancement pipeline."""


class DecodeError(EnhancementError):
    """The supplied resource cannot be interpreted as an image."""


class RenderContextError(EnhancementError):
    """Resampling or encoding surface could not be provided."""


class ClassificationError(Exception):
    """The external classifier failed or returned an unusable report."""


class InputMissingError(ValueError):
    """Neither text nor a file was supplied for a scan."""


@dataclass(frozen=True)
class AppError:
    """
    User-facing description of a failed scan.
    type is one of: validation, network, system, safety, quota.
    """
    title: str
    message: str
    suggestion: str
    type: str

    def to_dict(self) -> dict:
        return asdict(self)
