"""
Main processor for the Scanner module.

Orchestrates the per-frame pipeline:
1. Direct decode of the raw frame (fast path)
2. Binarization
3. Contour extraction
4. Finder-pattern classification
5. Triple matching
6. Perspective rectification
7. Second decode on the rectified raster

Implements short-circuit strategy: stops at the first success, and reports
NOT_FOUND as an ordinary outcome rather than an exception.
"""

import logging
import time
from pathlib import Path
from typing import Optional

import numpy as np

from src.common.types import ImageBuffer
from src.scanner.binarizer import binarize
from src.scanner.config_loader import load_config
from src.scanner.contour_extractor import extract_contours
from src.scanner.decoder import OpenCVQRDecoder
from src.scanner.errors import DegenerateCornersError
from src.scanner.finder_classifier import classify_finder_patterns
from src.scanner.image_rectification import rectify
from src.scanner.interfaces import FastDecoder
from src.scanner.tick_scope import TickArena
from src.scanner.triple_matcher import match_triple
from src.scanner.types import (
    DecodeMode,
    DecodePass,
    NotFoundReason,
    ScannerConfig,
    ScanOutcome,
)

logger = logging.getLogger(__name__)


class FrameProcessor:
    """
    Single entry point invoked once per frame tick.

    Holds only immutable collaborators (decoder, config). Every intermediate
    buffer lives in a TickArena released before process_frame returns.

    Example:
        >>> processor = FrameProcessor()
        >>> outcome = processor.process_frame(rgba_frame)
        >>> if outcome.is_found():
        ...     print(outcome.payload, outcome.corners)
    """

    def __init__(
        self,
        decoder: Optional[FastDecoder] = None,
        config: Optional[ScannerConfig] = None,
        config_path: Optional[Path] = None,
    ):
        """
        Initialize the frame processor.

        Args:
            decoder: Fast decoder used for both passes. Defaults to
                OpenCVQRDecoder.
            config: Pre-loaded configuration object. If None, will load from file.
            config_path: Path to config file. If None, uses default location.
        """
        if config is not None:
            self.config = config
            logger.info("Using provided configuration")
        else:
            self.config = load_config(config_path) if config_path else load_config()
            logger.info("Loaded configuration from file")

        self.decoder = decoder if decoder is not None else OpenCVQRDecoder()
        self.last_arena: Optional[TickArena] = None

    def process_frame(self, frame: np.ndarray) -> ScanOutcome:
        """
        Run the detection pipeline on one frame.

        Any unexpected exception is caught here, logged, and returned as an
        ERROR outcome so the scheduling loop keeps running.

        Args:
            frame: RGBA raster of shape (H, W, 4). RGB and grayscale are
                accepted as well.

        Returns:
            ScanOutcome with FOUND, NOT_FOUND or ERROR status.
        """
        start = time.perf_counter()
        arena = TickArena()
        self.last_arena = arena

        try:
            with arena:
                outcome = self._run_stages(frame, arena)
        except Exception as e:
            logger.exception("Frame processing failed")
            outcome = ScanOutcome.error(f"{type(e).__name__}: {e}")

        outcome.processing_time_ms = (time.perf_counter() - start) * 1000.0

        if outcome.is_found():
            logger.info(
                f"QR code decoded via {outcome.decode_pass.value} pass "
                f"in {outcome.processing_time_ms:.1f}ms"
            )
        else:
            logger.debug(outcome.get_message())

        return outcome

    def _run_stages(self, frame: np.ndarray, arena: TickArena) -> ScanOutcome:
        image = ImageBuffer(data=frame)
        frame = image.to_numpy()

        # Stage 1: Direct decode (fast path)
        direct = self.decoder.decode(frame, DecodeMode.DONT_INVERT)
        if direct is not None:
            return ScanOutcome.found(direct.payload, direct.location, DecodePass.DIRECT)

        # Stage 2-4: Binarize, extract contours, classify
        mask = arena.hold("mask", binarize(frame, self.config.binarizer))
        forest = arena.hold("contours", extract_contours(mask))
        candidates = arena.hold(
            "candidates", classify_finder_patterns(forest, self.config.classifier)
        )

        if len(candidates) < self.config.matcher.min_candidates:
            outcome = ScanOutcome.not_found(NotFoundReason.NO_FINDER_PATTERNS)
            outcome.candidate_count = len(candidates)
            return outcome

        # Stage 5: Triple matching
        corners = match_triple(candidates, self.config.matcher)
        if corners is None:
            outcome = ScanOutcome.not_found(NotFoundReason.NO_VALID_TRIPLE)
            outcome.candidate_count = len(candidates)
            return outcome

        # Stage 6: Rectification
        try:
            rectified = arena.hold(
                "rectified", rectify(frame, corners, self.config.rectifier)
            )
        except DegenerateCornersError as e:
            logger.debug(f"Degenerate corner set: {e}")
            outcome = ScanOutcome.not_found(NotFoundReason.DEGENERATE_CORNERS)
            outcome.candidate_count = len(candidates)
            return outcome

        # Stage 7: Second decode on the rectified raster
        second = self.decoder.decode(rectified, DecodeMode.ATTEMPT_BOTH)
        if second is not None:
            outcome = ScanOutcome.found(second.payload, corners, DecodePass.RECTIFIED)
        else:
            outcome = ScanOutcome.not_found(NotFoundReason.DECODE_FAILED, corners)

        outcome.candidate_count = len(candidates)
        return outcome


def process_frame(
    frame: np.ndarray,
    decoder: Optional[FastDecoder] = None,
    config: Optional[ScannerConfig] = None,
) -> ScanOutcome:
    """
    Convenience function for one-shot frame processing.

    Args:
        frame: RGBA raster.
        decoder: Optional fast decoder. Uses OpenCVQRDecoder if None.
        config: Optional custom configuration. Uses default if None.

    Returns:
        ScanOutcome object.

    Example:
        >>> outcome = process_frame(frame)
        >>> print(outcome.get_message())
    """
    processor = FrameProcessor(decoder=decoder, config=config)
    return processor.process_frame(frame)
