"""
Finder-pattern triple matching.

Searches candidate triples for the right-isosceles arrangement formed by the
three finder patterns of one code, completes the missing fourth corner and
returns the canonically ordered corner set.

Search policy is prominence-first, first match wins: candidates are sorted by
size (largest first) and the first triple passing both geometric tests is
used. No global scoring is attempted, so when several codes are in frame the
most prominent one is chosen.
"""

import logging
from itertools import combinations
from typing import List, Optional, Tuple

from src.common.types import CornerSet, Point
from src.scanner.image_rectification import order_points
from src.scanner.types import FinderPatternCandidate, MatcherConfig

logger = logging.getLogger(__name__)


def passes_right_angle_test(
    s1: float, s2: float, s3: float, tolerance: float
) -> bool:
    """
    Approximate Pythagorean check on sorted side lengths s1 <= s2 <= s3.

    Example:
        >>> passes_right_angle_test(100.0, 100.0, 141.42, 0.1)
        True
        >>> passes_right_angle_test(10.0, 14.1, 14.1, 0.1)
        False
    """
    return abs(s1 * s1 + s2 * s2 - s3 * s3) < tolerance * s3 * s3


def passes_isosceles_test(s1: float, s2: float, tolerance: float) -> bool:
    """Check that the two legs are near-equal: |s1 - s2| < tolerance * s1."""
    return abs(s1 - s2) < tolerance * s1


def label_triangle(p1: Point, p2: Point, p3: Point) -> Tuple[Point, Point, Point]:
    """
    Assign top-left, top-right and bottom-left roles to a right triangle.

    The right-angle vertex, opposite the longest side, is top-left. Of the
    other two, the strictly nearer one becomes top-right; on an exact tie
    the second remaining point does.

    Returns:
        Tuple of (top_left, top_right, bottom_left).
    """
    d12 = p1.distance_to(p2)
    d13 = p1.distance_to(p3)
    d23 = p2.distance_to(p3)
    s3 = max(d12, d13, d23)

    if d12 == s3:
        top_left, others = p3, (p1, p2)
    elif d13 == s3:
        top_left, others = p2, (p1, p3)
    else:
        top_left, others = p1, (p2, p3)

    if top_left.distance_to(others[0]) < top_left.distance_to(others[1]):
        top_right, bottom_left = others[0], others[1]
    else:
        top_right, bottom_left = others[1], others[0]

    return top_left, top_right, bottom_left


def complete_parallelogram(
    top_left: Point, top_right: Point, bottom_left: Point
) -> Point:
    """Derive the bottom-right corner: top_right + bottom_left - top_left."""
    return top_right + bottom_left - top_left


def match_triple(
    candidates: List[FinderPatternCandidate], config: MatcherConfig
) -> Optional[CornerSet]:
    """
    Find the first geometrically valid finder-pattern triple.

    Args:
        candidates: Finder-pattern candidates from the classifier.
        config: Right-angle and isosceles tolerances.

    Returns:
        Canonically ordered CornerSet, or None when fewer than
        ``min_candidates`` candidates exist or no triple validates.

    Example:
        >>> corners = match_triple(candidates, config.matcher)
        >>> if corners is not None:
        ...     print(corners.top_left, corners.bottom_right)
    """
    if len(candidates) < config.min_candidates:
        logger.debug(
            f"Only {len(candidates)} candidates, need {config.min_candidates}"
        )
        return None

    # Stable sort keeps input order among equal sizes
    ranked = sorted(candidates, key=lambda c: c.size, reverse=True)

    for c1, c2, c3 in combinations(ranked, 3):
        p1, p2, p3 = c1.center, c2.center, c3.center

        s1, s2, s3 = sorted(
            [p1.distance_to(p2), p1.distance_to(p3), p2.distance_to(p3)]
        )

        if not passes_right_angle_test(s1, s2, s3, config.right_angle_tolerance):
            continue
        if not passes_isosceles_test(s1, s2, config.isosceles_tolerance):
            continue

        top_left, top_right, bottom_left = label_triangle(p1, p2, p3)
        bottom_right = complete_parallelogram(top_left, top_right, bottom_left)

        try:
            quad = [top_left, top_right, bottom_right, bottom_left]
            ordered = order_points([p.to_tuple() for p in quad])
            corners = CornerSet.from_numpy(ordered)
        except ValueError as e:
            logger.debug(f"Skipping degenerate triple: {e}")
            continue

        logger.debug(
            f"Matched triple (contours {c1.source_contour_index}, "
            f"{c2.source_contour_index}, {c3.source_contour_index}): {corners}"
        )
        return corners

    logger.debug(f"No valid triple among {len(candidates)} candidates")
    return None
