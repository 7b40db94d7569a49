"""
Exception types for the Scanner module.

NOT_FOUND is a normal outcome and never an exception; these classes cover
the failures that cross a component boundary.
"""


class ProcessingError(RuntimeError):
    """Unexpected failure inside binarization, contour extraction or warping."""


class DegenerateCornersError(ValueError):
    """Corner set too small or too flat to solve a homography from."""


class AcquisitionError(RuntimeError):
    """Frame source could not deliver a frame (device lost, permission denied)."""
