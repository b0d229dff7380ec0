from __future__ import annotations

from typing import Optional
import json
import logging
import os

from dotenv import load_dotenv
from google import genai
from google.genai import types as gtypes

from models.analysis import AnalysisResult
from models.errors import ClassificationError

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = """
You are CyberShield, a forensic analyst for phishing, scam and fraud detection.
Examine the supplied message text and/or attachment (screenshots, documents, media).
Read every visible piece of text in images, including small print, URLs, sender
names and phone numbers.

Scoring policy: start the safety score at 100 and subtract for every risk factor
(urgency or threats, requests for money, credentials or OTPs, impersonation of a
brand or authority, mismatched or obfuscated links, too-good-to-be-true offers,
grammar anomalies typical of scam campaigns).

Return strict JSON with:
  threatLevel   one of "Safe", "Suspicious", "High-Risk", "Fraud"
  reason        short explanation of the verdict
  warning       one-sentence actionable warning for the user
  finalVerdict  "Trust" or "Do NOT Trust"
  safetyScore   integer 0-100
  analysisSteps ordered list of forensic steps you performed
""".strip()

RESPONSE_SCHEMA = {
    "type": "object",
    "properties": {
        "threatLevel": {"type": "string", "enum": ["Safe", "Suspicious", "High-Risk", "Fraud"]},
        "reason": {"type": "string"},
        "warning": {"type": "string"},
        "finalVerdict": {"type": "string", "enum": ["Trust", "Do NOT Trust"]},
        "safetyScore": {"type": "integer"},
        "analysisSteps": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["threatLevel", "reason", "warning", "finalVerdict", "safetyScore", "analysisSteps"],
}


class ClassificationService:
    """
    Thin client for the external LLM classifier (Google Gemini).
    The SDK client is created on first use so the service can be
    constructed without credentials.
    """

    def __init__(self, api_key: str = None, model: str = None, client=None):
        self.api_key = api_key or os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
        self.model = model or os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        self.temperature = float(os.getenv("GEMINI_TEMPERATURE", "0.2"))
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise ClassificationError("API key not configured (set GEMINI_API_KEY)")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def classify(self, text: str, media: Optional[bytes] = None, mime_type: Optional[str] = None) -> AnalysisResult:
        """
        Ask the model for a verdict on text plus an optional single attachment.
        Raises ClassificationError on transport, safety or parsing failures.
        """
        parts = [gtypes.Part.from_text(text=text or "Analyze the attached content.")]
        if media is not None:
            parts.append(gtypes.Part.from_bytes(data=media, mime_type=mime_type or "application/octet-stream"))

        config = gtypes.GenerateContentConfig(
            system_instruction=SYSTEM_INSTRUCTION,
            temperature=self.temperature,
            response_mime_type="application/json",
            response_schema=RESPONSE_SCHEMA,
        )

        client = self.client
        logger.info(f"Requesting verdict from {self.model} (attachment={mime_type if media is not None else None})")
        try:
            resp = client.models.generate_content(
                model=self.model,
                contents=[gtypes.Content(role="user", parts=parts)],
                config=config,
            )
        except Exception as e:
            # SDK errors carry HTTP codes / statuses in their message
            raise ClassificationError(str(e)) from e

        return self.parse_response_text(resp.text)

    @staticmethod
    def parse_response_text(raw: Optional[str]) -> AnalysisResult:
        if not raw:
            raise ClassificationError("Response blocked by safety filters (empty response)")
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ClassificationError(f"Malformed JSON report: {e}") from e
        if not isinstance(payload, dict):
            raise ClassificationError("Malformed JSON report: expected an object")
        try:
            return AnalysisResult.from_dict(payload)
        except (KeyError, ValueError, TypeError) as e:
            raise ClassificationError(f"JSON report does not match schema: {e}") from e
