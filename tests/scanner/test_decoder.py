"""
Unit tests for the OpenCV-backed decoder.
"""

import cv2
import numpy as np
import pytest

from src.scanner.decoder import OpenCVQRDecoder
from src.scanner.types import DecodeMode

pytestmark = pytest.mark.skipif(
    not hasattr(cv2, "QRCodeEncoder"), reason="OpenCV build without QRCodeEncoder"
)


@pytest.fixture
def symbol():
    """Grayscale dark-on-light QR code with a generous quiet zone."""
    image = cv2.QRCodeEncoder.create().encode("CONTAINER-42")
    image = cv2.resize(image, None, fx=10, fy=10, interpolation=cv2.INTER_NEAREST)
    return cv2.copyMakeBorder(image, 40, 40, 40, 40, cv2.BORDER_CONSTANT, value=255)


class TestOpenCVQRDecoder:
    """Test suite for OpenCVQRDecoder."""

    def test_direct_decode_rgba(self, symbol):
        frame = cv2.cvtColor(symbol, cv2.COLOR_GRAY2RGBA)

        result = OpenCVQRDecoder().decode(frame, DecodeMode.DONT_INVERT)

        assert result is not None
        assert result.payload == "CONTAINER-42"

    def test_reports_location(self, symbol):
        result = OpenCVQRDecoder().decode(symbol, DecodeMode.DONT_INVERT)

        assert result is not None
        assert result.location is not None
        xs = [p.x for p in result.location.as_list()]
        assert min(xs) >= 0
        assert max(xs) <= symbol.shape[1]

    def test_attempt_both_reads_inverted(self, symbol):
        """Test that light-on-dark codes decode in ATTEMPT_BOTH mode."""
        inverted = cv2.bitwise_not(symbol)

        result = OpenCVQRDecoder().decode(inverted, DecodeMode.ATTEMPT_BOTH)

        assert result is not None
        assert result.payload == "CONTAINER-42"

    def test_blank_frame(self, blank_frame):
        assert OpenCVQRDecoder().decode(blank_frame, DecodeMode.ATTEMPT_BOTH) is None

    def test_noise_frame(self):
        rng = np.random.default_rng(seed=3)
        frame = rng.integers(0, 256, size=(120, 160, 3), dtype=np.uint8)

        assert OpenCVQRDecoder().decode(frame, DecodeMode.DONT_INVERT) is None
