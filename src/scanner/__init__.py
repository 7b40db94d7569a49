"""
QR Finder-Pattern Scanner

Locates a QR code in a video frame when a direct decode fails and produces a
perspective-corrected crop for a second decode attempt.

Pipeline stages:
1. Direct decode on the raw frame
2. Binarization (grayscale, blur, inverted adaptive threshold)
3. Contour extraction with nesting hierarchy
4. Finder-pattern classification
5. Right-isosceles triple matching
6. Perspective rectification
7. Decode on the rectified raster
"""

from src.scanner.config_loader import load_config
from src.scanner.decoder import OpenCVQRDecoder
from src.scanner.errors import AcquisitionError, DegenerateCornersError, ProcessingError
from src.scanner.image_rectification import order_points, rectify
from src.scanner.processor import FrameProcessor, process_frame
from src.scanner.scan_loop import ScanLoop
from src.scanner.triple_matcher import match_triple
from src.scanner.types import (
    DecodeMode,
    DecodePass,
    DecodeResult,
    NotFoundReason,
    OutcomeStatus,
    ScannerConfig,
    ScanOutcome,
)

__all__ = [
    "FrameProcessor",
    "process_frame",
    "ScanLoop",
    "OpenCVQRDecoder",
    "load_config",
    "match_triple",
    "order_points",
    "rectify",
    "AcquisitionError",
    "DegenerateCornersError",
    "ProcessingError",
    "DecodeMode",
    "DecodePass",
    "DecodeResult",
    "NotFoundReason",
    "OutcomeStatus",
    "ScannerConfig",
    "ScanOutcome",
]
