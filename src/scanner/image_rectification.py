"""
Image Rectification Utilities

Provides canonical corner ordering and the perspective warp that turns a
located code into an axis-aligned raster for the second decode pass.
"""

import logging
from typing import Union

import cv2
import numpy as np

from src.common.types import CornerSet
from src.scanner.errors import DegenerateCornersError, ProcessingError
from src.scanner.geometric_validator import (
    calculate_output_dimensions,
    is_convex_quadrilateral,
    validate_corner_geometry,
)
from src.scanner.types import RectifierConfig

logger = logging.getLogger(__name__)

INTERPOLATION_FLAGS = {
    "linear": cv2.INTER_LINEAR,
    "cubic": cv2.INTER_CUBIC,
    "nearest": cv2.INTER_NEAREST,
}


def order_points(pts: Union[np.ndarray, list]) -> np.ndarray:
    """
    Order 4 points as Top-Left, Top-Right, Bottom-Right, Bottom-Left.

    The ordering depends only on point positions, never on input order:
    - Top-Left: smallest sum (x + y), ties broken by smaller y
    - Bottom-Right: largest sum (x + y), ties broken by larger y
    - Top-Right / Bottom-Left: of the two remaining points, the one with the
      larger difference (x - y) is Top-Right

    Args:
        pts: Array of 4 points with shape (4, 2) or list of [x, y] coordinates.

    Returns:
        float32 array of shape (4, 2) in [TL, TR, BR, BL] order.

    Raises:
        ValueError: If input does not contain exactly 4 points, or the
            ordered points do not form a convex quadrilateral.

    Example:
        >>> order_points([[0, 100], [100, 100], [0, 0], [100, 0]])
        array([[  0.,   0.],
               [100.,   0.],
               [100., 100.],
               [  0., 100.]], dtype=float32)
    """
    pts = np.array(pts, dtype=np.float64)

    if pts.shape != (4, 2):
        raise ValueError(
            f"Expected exactly 4 points with shape (4, 2), got shape {pts.shape}"
        )

    # First pass: x + y picks the extreme Top-Left / Bottom-Right
    s = pts.sum(axis=1)
    by_sum = np.lexsort((pts[:, 1], s))
    tl_idx, br_idx = int(by_sum[0]), int(by_sum[-1])

    # Second pass: x - y splits the remaining two
    remaining = [i for i in range(4) if i not in (tl_idx, br_idx)]
    diff = pts[remaining, 0] - pts[remaining, 1]
    by_diff = np.lexsort((pts[remaining, 0], diff))
    bl_idx = remaining[int(by_diff[0])]
    tr_idx = remaining[int(by_diff[1])]

    rect = pts[[tl_idx, tr_idx, br_idx, bl_idx]].astype(np.float32)

    logger.debug(
        f"Ordered points: TL={rect[0]}, TR={rect[1]}, BR={rect[2]}, BL={rect[3]}"
    )

    if not is_convex_quadrilateral(rect):
        raise ValueError(
            "Ordered points do not form a convex quadrilateral. "
            "The corner set is self-intersecting, concave, or colinear."
        )

    return rect


def rectify(
    frame: np.ndarray, corners: CornerSet, config: RectifierConfig
) -> np.ndarray:
    """
    Warp the quadrilateral spanned by ``corners`` to an axis-aligned raster.

    The output is max(top, bottom) wide and max(left, right) tall. The
    homography maps [TL, TR, BR, BL] to (0, 0), (W, 0), (W, H), (0, H), so
    re-rectifying a W x H raster with its own full-frame corners is the
    identity.

    Args:
        frame: Source raster (any channel layout accepted by OpenCV).
        corners: Canonically ordered code corners.
        config: Minimum side length, border fill and interpolation.

    Returns:
        Rectified raster of shape (H, W) or (H, W, C) matching the frame.

    Raises:
        ValueError: If frame is None or empty.
        DegenerateCornersError: If the corners are too small or not convex.
        ProcessingError: If the homography cannot be solved.

    Example:
        >>> corners = CornerSet.from_numpy(
        ...     np.array([[100, 100], [300, 100], [300, 300], [100, 300]])
        ... )
        >>> rectify(frame, corners, config.rectifier).shape[:2]
        (200, 200)
    """
    if frame is None or frame.size == 0:
        raise ValueError("Invalid input frame: frame is None or empty")

    is_valid, reason = validate_corner_geometry(corners, config.min_side_px)
    if not is_valid:
        raise DegenerateCornersError(reason)

    max_width, max_height = calculate_output_dimensions(corners)
    out_width = int(round(max_width))
    out_height = int(round(max_height))

    src = corners.to_numpy(dtype=np.float32)
    dst = np.array(
        [
            [0, 0],  # Top-Left
            [max_width, 0],  # Top-Right
            [max_width, max_height],  # Bottom-Right
            [0, max_height],  # Bottom-Left
        ],
        dtype=np.float32,
    )

    try:
        M = cv2.getPerspectiveTransform(src, dst)
    except cv2.error as e:
        raise ProcessingError(f"Homography solve failed: {e}") from e

    if not np.all(np.isfinite(M)):
        raise ProcessingError(f"Homography is singular: {M.tolist()}")

    border = config.border_value
    rectified = cv2.warpPerspective(
        frame,
        M,
        (out_width, out_height),
        flags=INTERPOLATION_FLAGS[config.interpolation],
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=(border, border, border, border),
    )

    logger.debug(f"Rectified code region to {out_width}x{out_height} raster")

    return rectified
