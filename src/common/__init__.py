"""
Common types shared across the scanner modules.

Provides standardized value types (frames, points, corner sets) so the
binarizer, matcher, rectifier and decoder adapters agree on one geometry.
"""

from src.common.types import CornerSet, ImageBuffer, Point

__all__ = ["ImageBuffer", "Point", "CornerSet"]
