"""
Frame binarization for finder-pattern search.

Converts a color frame into a binary mask whose foreground marks pixels
darker than their local neighborhood, so the dark modules of a code become
edge-friendly rings for contour extraction.
"""

import logging

import cv2
import numpy as np

from src.scanner.types import BinarizerConfig

logger = logging.getLogger(__name__)


def to_grayscale(frame: np.ndarray) -> np.ndarray:
    """
    Convert an RGBA, RGB or single-channel frame to 8-bit luma.

    Args:
        frame: uint8 array of shape (H, W), (H, W, 1), (H, W, 3) or (H, W, 4).
               Color channels are in RGB(A) order.

    Returns:
        Grayscale image of shape (H, W).

    Raises:
        ValueError: If the frame shape is not a supported raster layout.
    """
    if frame.ndim == 2:
        return frame.copy()

    if frame.ndim != 3:
        raise ValueError(f"Expected 2D or 3D frame, got shape {frame.shape}")

    channels = frame.shape[2]
    if channels == 1:
        return frame[:, :, 0].copy()
    if channels == 3:
        return cv2.cvtColor(frame, cv2.COLOR_RGB2GRAY)
    if channels == 4:
        return cv2.cvtColor(frame, cv2.COLOR_RGBA2GRAY)

    raise ValueError(f"Expected 1, 3, or 4 channels, got {channels}")


def binarize(frame: np.ndarray, config: BinarizerConfig) -> np.ndarray:
    """
    Grayscale, blur and adaptively threshold a frame.

    Polarity is inverted: locally dark pixels become foreground (1). Inside
    large uniform regions the pixel equals its window mean, so only the dark
    side of each edge survives; a finder pattern turns into concentric rings.

    Args:
        frame: Source raster (RGBA, RGB or grayscale uint8).
        config: Blur kernel, threshold window and offset.

    Returns:
        uint8 mask of shape (H, W) with values in {0, 1}. A uniform frame
        yields an all-zero mask.

    Example:
        >>> frame = np.full((480, 640, 4), 255, dtype=np.uint8)
        >>> mask = binarize(frame, config.binarizer)
        >>> int(mask.max())
        0
    """
    gray = to_grayscale(frame)

    kernel = config.blur_kernel_size
    blurred = cv2.GaussianBlur(
        gray, (kernel, kernel), 0, borderType=cv2.BORDER_DEFAULT
    )

    thresh = cv2.adaptiveThreshold(
        blurred,
        255,
        cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
        cv2.THRESH_BINARY_INV,
        config.adaptive_block_size,
        config.adaptive_offset,
    )

    mask = (thresh > 0).astype(np.uint8)

    logger.debug(
        f"Binarized {gray.shape[1]}x{gray.shape[0]} frame: "
        f"{int(mask.sum())} foreground pixels"
    )

    return mask
