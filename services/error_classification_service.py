from __future__ import annotations

from typing import List, Tuple
import json

from models.errors import AppError, InputMissingError

INPUT_MISSING = AppError(
    title="Input Missing",
    message="The analysis engine requires data to process.",
    suggestion="Please paste the suspicious text OR upload a screenshot/image.",
    type="validation",
)

DEFAULT_ERROR = AppError(
    title="System Error",
    message="An unexpected error interrupted the analysis protocol.",
    suggestion="Please try again. If the issue persists, refresh the page.",
    type="system",
)

# First match wins; order matters.
_RULES: List[Tuple[Tuple[str, ...], AppError]] = [
    (("safety", "blocked"), AppError(
        title="Safety Protocol Triggered",
        message="The content was flagged by our safety filters as potentially harmful or explicit.",
        suggestion="We cannot process content that violates safety policies. Please redact sensitive/explicit data.",
        type="safety",
    )),
    (("api key", "403", "permission_denied"), AppError(
        title="Authentication Failed",
        message="The system could not verify the API credentials.",
        suggestion="Please check that your GEMINI_API_KEY environment variable is set and valid.",
        type="system",
    )),
    (("429", "quota", "resource exhausted", "too many requests"), AppError(
        title="High Traffic Volume",
        message="The analysis engine is currently at maximum capacity.",
        suggestion="Please wait 30 seconds before retrying to let the queue clear.",
        type="quota",
    )),
    (("fetch", "network", "connection", "503", "500"), AppError(
        title="Connection Severed",
        message="Unable to establish a link with the analysis servers.",
        suggestion="Check your internet connection. Firewalls or VPNs might be blocking the request.",
        type="network",
    )),
    (("json", "token", "syntax", "parse"), AppError(
        title="Report Generation Error",
        message="The AI generated a malformed report that could not be decoded.",
        suggestion="This is a temporary glitch. Please click 'Analyze Risk' again.",
        type="system",
    )),
    (("image", "mime", "format"), AppError(
        title="File Read Error",
        message="The uploaded image data is corrupted or unsupported.",
        suggestion="Try uploading a standard JPG or PNG file.",
        type="validation",
    )),
]


def _full_error_string(exc: BaseException) -> str:
    """Message plus any structured attributes the exception carries, lower-cased."""
    attrs = {k: v for k, v in vars(exc).items() if not k.startswith("_")} if hasattr(exc, "__dict__") else {}
    return json.dumps({"message": str(exc), **attrs}, default=str).lower()


def classify_error(exc: BaseException) -> AppError:
    """Map a scan failure to the user-facing AppError by substring matching."""
    if isinstance(exc, InputMissingError):
        return INPUT_MISSING

    msg = str(exc).lower()
    full = _full_error_string(exc)

    if "finishreason" in full and "safety" in full:
        return _RULES[0][1]
    for needles, app_error in _RULES:
        if any(needle in msg for needle in needles):
            return app_error
    return DEFAULT_ERROR
