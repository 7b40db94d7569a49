"""
Contour extraction with full nesting hierarchy.

Wraps cv2.findContours in RETR_TREE mode so every contour knows its parent
and first child. Finder patterns are recognized by depth of nesting, so a
flat list of outer boundaries is not enough.
"""

import logging
from typing import List

import cv2
import numpy as np

from src.scanner.types import ContourNode

logger = logging.getLogger(__name__)


def extract_contours(mask: np.ndarray) -> List[ContourNode]:
    """
    Find all closed contours of a binary mask and their nesting.

    Args:
        mask: uint8 array of shape (H, W); any non-zero pixel is foreground.

    Returns:
        Contour forest as a list of ContourNode. Child/parent/sibling fields
        index into the same list, -1 meaning none. Empty for an empty mask.

    Raises:
        ValueError: If mask is not a 2D array.
    """
    if mask.ndim != 2:
        raise ValueError(f"Expected 2D binary mask, got shape {mask.shape}")

    contours, hierarchy = cv2.findContours(
        mask.astype(np.uint8), cv2.RETR_TREE, cv2.CHAIN_APPROX_SIMPLE
    )

    if hierarchy is None or len(contours) == 0:
        logger.debug("No contours found in mask")
        return []

    # hierarchy has shape (1, N, 4): [next, previous, first_child, parent]
    links = hierarchy[0]
    forest = [
        ContourNode(
            contour=contour.reshape(-1, 2),
            next_sibling=int(link[0]),
            previous_sibling=int(link[1]),
            first_child=int(link[2]),
            parent=int(link[3]),
        )
        for contour, link in zip(contours, links)
    ]

    logger.debug(f"Extracted {len(forest)} contours")

    return forest


def child_of(forest: List[ContourNode], index: int) -> int:
    """Index of the first child of ``forest[index]``, or -1."""
    return forest[index].first_child


def has_grandchild(forest: List[ContourNode], index: int) -> bool:
    """
    Check the three-ply nesting signature of a finder pattern.

    True when the contour has a child and that child has a child of its own
    (outer dark ring, inner light ring, dark core).
    """
    child = child_of(forest, index)
    if child == -1:
        return False
    return child_of(forest, child) != -1
