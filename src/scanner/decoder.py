"""
OpenCV-backed fast decoder.

Implements the FastDecoder interface with cv2.QRCodeDetector. Symbol
decoding itself (error correction, demodulation) stays inside OpenCV.

Example:
    >>> decoder = OpenCVQRDecoder()
    >>> result = decoder.decode(frame, DecodeMode.DONT_INVERT)
    >>> if result:
    ...     print(result.payload)
"""

import logging
from typing import Optional

import cv2
import numpy as np

from src.common.types import CornerSet
from src.scanner.binarizer import to_grayscale
from src.scanner.types import DecodeMode, DecodeResult

logger = logging.getLogger(__name__)


class OpenCVQRDecoder:
    """
    Fast decoder using cv2.QRCodeDetector.

    DONT_INVERT decodes the luma image as-is. ATTEMPT_BOTH retries on the
    inverted image, covering light-on-dark codes.
    """

    def __init__(self):
        self._detector = cv2.QRCodeDetector()

    def decode(self, raster: np.ndarray, mode: DecodeMode) -> Optional[DecodeResult]:
        """
        Attempt to decode a QR code from a raster.

        Args:
            raster: RGBA, RGB or grayscale uint8 image.
            mode: Polarity handling.

        Returns:
            DecodeResult with payload and detected corners, or None.
        """
        gray = to_grayscale(raster)

        result = self._decode_gray(gray)
        if result is None and mode == DecodeMode.ATTEMPT_BOTH:
            result = self._decode_gray(cv2.bitwise_not(gray))

        if result is not None:
            logger.debug(f"Decoded payload ({mode.value}): {result.payload!r}")

        return result

    def _decode_gray(self, gray: np.ndarray) -> Optional[DecodeResult]:
        try:
            payload, points, _ = self._detector.detectAndDecode(gray)
        except cv2.error as e:
            logger.debug(f"QRCodeDetector failed: {e}")
            return None

        if not payload:
            return None

        return DecodeResult(payload=payload, location=_location_from_points(points))


def _location_from_points(points: Optional[np.ndarray]) -> Optional[CornerSet]:
    """Convert detector corner output (1, 4, 2) into a CornerSet if usable."""
    if points is None:
        return None

    points = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    if points.shape != (4, 2):
        return None

    try:
        return CornerSet.from_numpy(points)
    except ValueError:
        logger.debug(f"Decoder reported colinear corners: {points.tolist()}")
        return None
