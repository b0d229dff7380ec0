"""
Tests for the sharpen and contrast value objects.
"""
import numpy as np
import pytest

from models.image_adjustments import ContrastBoost, EdgeSharpen, EnhancementSettings


def reference_sharpen(pixels: np.ndarray) -> np.ndarray:
    """Straightforward per-pixel loop used as the oracle."""
    src = pixels.astype(int)
    out = pixels.copy()
    h, w = pixels.shape[:2]
    for y in range(1, h - 1):
        for x in range(1, w - 1):
            for c in range(3):
                val = (5 * src[y, x, c] - src[y - 1, x, c] - src[y + 1, x, c]
                       - src[y, x - 1, c] - src[y, x + 1, c])
                out[y, x, c] = min(255, max(0, val))
    return out


class TestEdgeSharpen:
    """Test the five-tap sharpening kernel."""

    def test_border_pixels_pass_through(self):
        """Border stays 255 while the interior is 0."""
        buf = np.full((6, 7, 4), 255, dtype=np.uint8)
        buf[1:-1, 1:-1, :3] = 0

        EdgeSharpen().apply(buf)

        assert (buf[0, :, :3] == 255).all()
        assert (buf[-1, :, :3] == 255).all()
        assert (buf[:, 0, :3] == 255).all()
        assert (buf[:, -1, :3] == 255).all()

    @pytest.mark.parametrize("value", [1, 60, 128, 200, 254])
    def test_flat_region_is_identity(self, value):
        buf = np.full((8, 9, 4), value, dtype=np.uint8)
        EdgeSharpen().apply(buf)
        assert (buf[..., :3] == value).all()

    def test_reads_neighbours_from_snapshot(self):
        """The right neighbour must see the pre-sharpen value of its left pixel."""
        buf = np.full((3, 4, 4), 100, dtype=np.uint8)
        buf[1, 1, :3] = 120

        EdgeSharpen().apply(buf)

        assert buf[1, 1, 0] == 200      # 5*120 - 4*100
        assert buf[1, 2, 0] == 80       # 5*100 - 3*100 - 120, not 0

    def test_matches_reference_with_clamping(self):
        rng = np.random.default_rng(7)
        buf = rng.integers(0, 256, size=(9, 11, 4), dtype=np.uint8)
        expected = reference_sharpen(buf)

        EdgeSharpen().apply(buf)

        np.testing.assert_array_equal(buf, expected)

    def test_alpha_untouched(self):
        rng = np.random.default_rng(3)
        buf = rng.integers(0, 256, size=(5, 5, 4), dtype=np.uint8)
        alpha = buf[..., 3].copy()
        EdgeSharpen().apply(buf)
        np.testing.assert_array_equal(buf[..., 3], alpha)

    @pytest.mark.parametrize("shape", [(1, 1, 4), (2, 5, 4), (5, 2, 4)])
    def test_too_small_for_kernel_is_unchanged(self, shape):
        buf = np.full(shape, 90, dtype=np.uint8)
        buf.flat[0] = 10
        before = buf.copy()
        EdgeSharpen().apply(buf)
        np.testing.assert_array_equal(buf, before)


class TestContrastBoost:
    """Test the linear contrast stretch."""

    def test_intercept(self):
        assert ContrastBoost().intercept == pytest.approx(-25.6)

    @pytest.mark.parametrize("value, expected", [
        (128, 128),
        (0, 0),
        (255, 255),
        (100, 94),      # 94.4
        (200, 214),     # 214.4
        (20, 0),        # -1.6 clamps
        (240, 255),     # 262.4 clamps
    ])
    def test_formula(self, value, expected):
        buf = np.full((2, 2, 4), value, dtype=np.uint8)
        ContrastBoost().apply(buf)
        assert (buf[..., :3] == expected).all()

    def test_alpha_untouched(self):
        buf = np.full((3, 3, 4), 200, dtype=np.uint8)
        buf[..., 3] = 77
        ContrastBoost().apply(buf)
        assert (buf[..., 3] == 77).all()

    def test_output_always_in_range(self):
        buf = np.tile(np.arange(256, dtype=np.uint8), (4, 1)).reshape(4, 64, 4)
        ContrastBoost().apply(buf)
        assert buf.dtype == np.uint8
        assert buf.min() >= 0 and buf.max() <= 255


class TestEnhancementSettings:
    """Test policy defaults and env overrides."""

    def test_defaults(self):
        settings = EnhancementSettings()
        assert settings.max_width == 1920
        assert settings.sharpen.center == 5
        assert settings.sharpen.neighbour == -1
        assert settings.contrast.factor == pytest.approx(1.20)
        assert settings.jpeg_quality == 95

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("ENHANCE_MAX_WIDTH", "1280")
        monkeypatch.setenv("ENHANCE_CONTRAST", "1.5")
        monkeypatch.setenv("ENHANCE_JPEG_QUALITY", "80")
        settings = EnhancementSettings.from_env()
        assert settings.max_width == 1280
        assert settings.contrast.factor == pytest.approx(1.5)
        assert settings.jpeg_quality == 80
