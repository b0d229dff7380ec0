"""
Pytest configuration and fixtures for the CyberShield backend tests.
"""
import os
import sys
from io import BytesIO

import numpy as np
import pytest
from PIL import Image as PILImage

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models.analysis import AnalysisResult, ThreatLevel, Verdict
from models.image_adjustments import EnhancementSettings
from repositories.history_repository import HistoryRepository
from services.history_service import HistoryService
from services.image_enhancement_service import ImageEnhancementService


def encode_png(pixels: np.ndarray) -> bytes:
    """Encode an (H, W, 3|4) uint8 array as PNG bytes."""
    buffer = BytesIO()
    PILImage.fromarray(pixels).save(buffer, format="PNG")
    return buffer.getvalue()


def decode_to_array(data: bytes) -> np.ndarray:
    with PILImage.open(BytesIO(data)) as img:
        return np.array(img.convert("RGB"))


class FakeClassifier:
    """Stands in for the Gemini client; records every call."""

    def __init__(self, result: AnalysisResult = None, error: Exception = None):
        self.result = result or sample_result()
        self.error = error
        self.calls = []
        self.api_key = "test-key"
        self.model = "fake-model"

    def classify(self, text, media=None, mime_type=None):
        self.calls.append({"text": text, "media": media, "mime_type": mime_type})
        if self.error is not None:
            raise self.error
        return self.result


def sample_result(**overrides) -> AnalysisResult:
    fields = dict(
        threat_level=ThreatLevel.FRAUD,
        reason="Requests an OTP while impersonating a bank.",
        warning="Do not share the code.",
        final_verdict=Verdict.DO_NOT_TRUST,
        safety_score=8,
        analysis_steps=["Extracted text", "Checked sender", "Matched OTP scam pattern"],
    )
    fields.update(overrides)
    return AnalysisResult(**fields)


@pytest.fixture
def rgba_factory():
    """Build a uniform RGBA array of the given size."""
    def _make(width, height, value=128, alpha=255):
        arr = np.full((height, width, 4), value, dtype=np.uint8)
        arr[..., 3] = alpha
        return arr
    return _make


@pytest.fixture
def png_bytes(rgba_factory):
    """Small 40x30 grey PNG."""
    return encode_png(rgba_factory(40, 30, value=128))


@pytest.fixture
def enhancement_service():
    return ImageEnhancementService(settings=EnhancementSettings())


@pytest.fixture
def history_service(tmp_path):
    return HistoryService(HistoryRepository(tmp_path / "history.json"), limit=50)


@pytest.fixture
def fake_classifier():
    return FakeClassifier()


@pytest.fixture
def app(monkeypatch, tmp_path, enhancement_service, fake_classifier, history_service):
    """Create Flask test application with isolated services."""
    import api_server
    monkeypatch.setattr(api_server, "enhancement_service", enhancement_service)
    monkeypatch.setattr(api_server, "classification_service", fake_classifier)
    monkeypatch.setattr(api_server, "history_service", history_service)
    api_server.app.config['TESTING'] = True
    return api_server.app


@pytest.fixture
def client(app):
    """Create Flask test client."""
    return app.test_client()
