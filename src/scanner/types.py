"""
Data types and structures for the Scanner module.

Provides type-safe containers for configuration, per-tick intermediates
and the outcome reported for every processed frame.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from src.common.types import CornerSet, Point


class DecodeMode(Enum):
    """Polarity handling requested from a fast decoder."""

    DONT_INVERT = "dontInvert"  # Dark modules on light background only
    ATTEMPT_BOTH = "attemptBoth"  # Also retry on the inverted raster


class OutcomeStatus(Enum):
    """Per-frame pipeline outcomes."""

    FOUND = "FOUND"
    NOT_FOUND = "NOT_FOUND"
    ERROR = "ERROR"


class DecodePass(Enum):
    """Which decode attempt produced a payload."""

    DIRECT = "direct"  # Raw frame, first pass
    RECTIFIED = "rectified"  # Perspective-corrected crop, second pass


class NotFoundReason(Enum):
    """Specific reasons for a NOT_FOUND outcome."""

    NO_FINDER_PATTERNS = "No Finder Patterns"  # Fewer than 3 candidates
    NO_VALID_TRIPLE = "No Valid Triple"  # No right-isosceles arrangement
    DEGENERATE_CORNERS = "Degenerate Corners"  # Corner set unusable for warp
    DECODE_FAILED = "Decode Failed"  # Rectified raster did not decode
    NONE = "None"


@dataclass
class BinarizerConfig:
    """Configuration for grayscale + blur + adaptive threshold."""

    blur_kernel_size: int
    adaptive_block_size: int
    adaptive_offset: float


@dataclass
class ClassifierConfig:
    """Configuration for finder-pattern shape filtering."""

    approx_epsilon_ratio: float  # approxPolyDP epsilon as a fraction of perimeter
    aspect_ratio_min: float  # Exclusive lower bound on bbox width/height
    aspect_ratio_max: float  # Exclusive upper bound on bbox width/height


@dataclass
class MatcherConfig:
    """Configuration for the right-isosceles triple search."""

    right_angle_tolerance: float  # |s1^2 + s2^2 - s3^2| < tol * s3^2
    isosceles_tolerance: float  # |s1 - s2| < tol * s1
    min_candidates: int


@dataclass
class RectifierConfig:
    """Configuration for perspective rectification."""

    min_side_px: float
    border_value: int
    interpolation: str


@dataclass
class SchedulerConfig:
    """Configuration for the frame-synchronous scan loop."""

    cooldown_seconds: float
    frame_rate_hint: float


@dataclass
class PresentationConfig:
    """Outline colors handed to the presentation adapter."""

    direct_outline_color: str
    rectified_outline_color: str


@dataclass
class ScannerConfig:
    """Complete scanner module configuration."""

    binarizer: BinarizerConfig
    classifier: ClassifierConfig
    matcher: MatcherConfig
    rectifier: RectifierConfig
    scheduler: SchedulerConfig
    presentation: PresentationConfig


@dataclass
class ContourNode:
    """
    One contour of the binary mask plus its place in the nesting forest.

    Indices refer to positions in the same forest list; -1 means none.
    """

    contour: np.ndarray  # (N, 2) int32 boundary points
    next_sibling: int
    previous_sibling: int
    first_child: int
    parent: int

    def has_child(self) -> bool:
        return self.first_child != -1


@dataclass
class FinderPatternCandidate:
    """A contour that passed the shape and three-ply nesting tests."""

    center: Point
    size: float
    source_contour_index: int


@dataclass
class DecodeResult:
    """
    Output of a fast decoder.

    Attributes:
        payload: Decoded text.
        location: The decoder's own corner estimate, when it reports one.
    """

    payload: str
    location: Optional[CornerSet] = None


@dataclass
class ScanOutcome:
    """
    Output from processing one frame.

    Attributes:
        status: FOUND, NOT_FOUND or ERROR.
        payload: Decoded text (FOUND only).
        corners: Code corners when known. Set for FOUND, and for NOT_FOUND
            with DECODE_FAILED so the located outline can still be shown.
        decode_pass: Which decode attempt succeeded (FOUND only).
        not_found_reason: Reason for NOT_FOUND, NONE otherwise.
        error_message: Exception text (ERROR only).
        candidate_count: Number of finder-pattern candidates seen this tick.
        processing_time_ms: Wall time spent in the pipeline.
    """

    status: OutcomeStatus
    payload: Optional[str] = None
    corners: Optional[CornerSet] = None
    decode_pass: Optional[DecodePass] = None
    not_found_reason: NotFoundReason = NotFoundReason.NONE
    error_message: Optional[str] = None
    candidate_count: int = 0
    processing_time_ms: float = 0.0

    @classmethod
    def found(
        cls, payload: str, corners: Optional[CornerSet], decode_pass: DecodePass
    ) -> "ScanOutcome":
        return cls(
            status=OutcomeStatus.FOUND,
            payload=payload,
            corners=corners,
            decode_pass=decode_pass,
        )

    @classmethod
    def not_found(
        cls, reason: NotFoundReason, corners: Optional[CornerSet] = None
    ) -> "ScanOutcome":
        return cls(
            status=OutcomeStatus.NOT_FOUND, not_found_reason=reason, corners=corners
        )

    @classmethod
    def error(cls, message: str) -> "ScanOutcome":
        return cls(status=OutcomeStatus.ERROR, error_message=message)

    def is_found(self) -> bool:
        """Check if a payload was decoded."""
        return self.status == OutcomeStatus.FOUND

    def is_not_found(self) -> bool:
        return self.status == OutcomeStatus.NOT_FOUND

    def is_error(self) -> bool:
        return self.status == OutcomeStatus.ERROR

    def get_message(self) -> str:
        """Get human-readable status message."""
        if self.is_found():
            return f"Decoded ({self.decode_pass.value}): {self.payload}"
        if self.is_error():
            return f"Processing error: {self.error_message}"
        return f"Not found: {self.not_found_reason.value}"
