"""
Geometric validation functions for the Scanner module.

Validates the geometry of a located corner set before a homography is
solved from it.
"""

import logging
from typing import Optional, Tuple, Union

import numpy as np

from src.common.types import CornerSet

logger = logging.getLogger(__name__)


def _as_array(corners: Union[CornerSet, np.ndarray, list]) -> np.ndarray:
    if isinstance(corners, CornerSet):
        return corners.to_numpy(dtype=np.float64)
    arr = np.array(corners, dtype=np.float64)
    if arr.shape != (4, 2):
        raise ValueError(f"Expected 4 corners with shape (4, 2), got {arr.shape}")
    return arr


def calculate_edge_lengths(
    corners: Union[CornerSet, np.ndarray, list],
) -> Tuple[float, float, float, float]:
    """
    Calculate the length of all 4 edges of a quadrilateral.

    Args:
        corners: CornerSet, or 4 points in order [TL, TR, BR, BL].

    Returns:
        Tuple of (top_edge, right_edge, bottom_edge, left_edge) lengths.

    Example:
        >>> points = np.array([[100, 100], [300, 100], [300, 300], [100, 300]])
        >>> calculate_edge_lengths(points)
        (200.0, 200.0, 200.0, 200.0)
    """
    tl, tr, br, bl = _as_array(corners)

    top_edge = float(np.linalg.norm(tr - tl))
    right_edge = float(np.linalg.norm(br - tr))
    bottom_edge = float(np.linalg.norm(bl - br))
    left_edge = float(np.linalg.norm(tl - bl))

    logger.debug(
        f"Edge lengths - Top: {top_edge:.1f}, Right: {right_edge:.1f}, "
        f"Bottom: {bottom_edge:.1f}, Left: {left_edge:.1f}"
    )

    return top_edge, right_edge, bottom_edge, left_edge


def calculate_output_dimensions(
    corners: Union[CornerSet, np.ndarray, list],
) -> Tuple[float, float]:
    """
    Calculate width and height of the rectified raster.

    Takes the larger of each pair of opposing sides so a skewed code is
    never under-sampled.

    Returns:
        Tuple of (max_width, max_height).
    """
    top, right, bottom, left = calculate_edge_lengths(corners)

    width = max(top, bottom)
    height = max(left, right)

    logger.debug(f"Output dimensions: {width:.1f} x {height:.1f}")

    return width, height


def is_convex_quadrilateral(corners: Union[CornerSet, np.ndarray, list]) -> bool:
    """
    Check if 4 ordered points form a convex, non-degenerate quadrilateral.

    All consecutive edge cross products must share one sign; a zero cross
    product (colinear corners) counts as degenerate.
    """
    rect = _as_array(corners)
    cross_products = []

    for i in range(4):
        p1 = rect[i]
        p2 = rect[(i + 1) % 4]
        p3 = rect[(i + 2) % 4]

        v1 = p2 - p1
        v2 = p3 - p2

        cross_products.append(v1[0] * v2[1] - v1[1] * v2[0])

    positive = [cp > 1e-6 for cp in cross_products]
    negative = [cp < -1e-6 for cp in cross_products]

    is_convex = all(positive) or all(negative)

    if not is_convex:
        logger.debug(f"Non-convex quadrilateral. Cross products: {cross_products}")

    return is_convex


def validate_corner_geometry(
    corners: Union[CornerSet, np.ndarray, list], min_side_px: float
) -> Tuple[bool, Optional[str]]:
    """
    Check that a corner set can be rectified.

    Args:
        corners: Corners in [TL, TR, BR, BL] order.
        min_side_px: Smallest acceptable output width or height.

    Returns:
        Tuple of (is_valid, reason). reason is None when valid.
    """
    width, height = calculate_output_dimensions(corners)

    if width < min_side_px or height < min_side_px:
        reason = (
            f"Corner set too small: width={width:.1f}, height={height:.1f} "
            f"(minimum {min_side_px}px)"
        )
        logger.debug(reason)
        return False, reason

    if not is_convex_quadrilateral(corners):
        reason = "Corners do not form a convex quadrilateral"
        logger.debug(reason)
        return False, reason

    return True, None
