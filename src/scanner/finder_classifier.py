"""
Finder-pattern classification.

Filters the contour forest down to candidates that look like QR finder
patterns: quadrilateral, roughly square, and nested three deep.
"""

import logging
from typing import List, Optional, Tuple

import cv2
import numpy as np

from src.common.types import Point
from src.scanner.contour_extractor import has_grandchild
from src.scanner.types import ClassifierConfig, ContourNode, FinderPatternCandidate

logger = logging.getLogger(__name__)


def approximate_quadrilateral(
    contour: np.ndarray, epsilon_ratio: float
) -> Optional[np.ndarray]:
    """
    Simplify a closed contour and keep it only if it has exactly 4 vertices.

    Args:
        contour: (N, 2) boundary points.
        epsilon_ratio: Approximation tolerance as a fraction of arc length.

    Returns:
        (4, 1, 2) approximated polygon, or None for non-quadrilaterals.
    """
    points = contour.reshape(-1, 1, 2).astype(np.int32)
    perimeter = cv2.arcLength(points, True)
    approx = cv2.approxPolyDP(points, epsilon_ratio * perimeter, True)

    if len(approx) != 4:
        return None
    return approx


def is_square_like(
    rect: Tuple[int, int, int, int], aspect_min: float, aspect_max: float
) -> bool:
    """Check bounding-rectangle aspect ratio against exclusive bounds."""
    _, _, width, height = rect
    if height == 0:
        return False
    aspect_ratio = width / height
    return aspect_min < aspect_ratio < aspect_max


def classify_finder_patterns(
    forest: List[ContourNode], config: ClassifierConfig
) -> List[FinderPatternCandidate]:
    """
    Select finder-pattern candidates from a contour forest.

    Tests run cheapest first: vertex count, then aspect ratio, then the
    grandchild nesting check.

    Args:
        forest: Contours with hierarchy from extract_contours.
        config: Approximation tolerance and aspect ratio bounds.

    Returns:
        One candidate per accepted contour, center at the bounding-rectangle
        centroid and size = max(width, height). Empty for an empty forest.

    Example:
        >>> forest = extract_contours(binarize(frame, config.binarizer))
        >>> candidates = classify_finder_patterns(forest, config.classifier)
    """
    candidates: List[FinderPatternCandidate] = []

    for index, node in enumerate(forest):
        if len(node.contour) < 4:
            continue

        approx = approximate_quadrilateral(node.contour, config.approx_epsilon_ratio)
        if approx is None:
            continue

        rect = cv2.boundingRect(approx)
        if not is_square_like(rect, config.aspect_ratio_min, config.aspect_ratio_max):
            continue

        if not has_grandchild(forest, index):
            continue

        x, y, width, height = rect
        candidates.append(
            FinderPatternCandidate(
                center=Point(x=x + width / 2, y=y + height / 2),
                size=float(max(width, height)),
                source_contour_index=index,
            )
        )

    logger.debug(
        f"Classified {len(candidates)} finder-pattern candidates "
        f"from {len(forest)} contours"
    )

    return candidates
