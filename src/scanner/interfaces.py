"""
Collaborator interfaces for the Scanner module.

The pipeline consumes a frame source, a fast decoder and a presentation
adapter. None of them is implemented by the core; any object with these
methods can be plugged in (OpenCV-backed versions live in
``src.scanner.decoder`` and ``scripts/run_scanner.py``).
"""

from typing import Optional, Protocol

import numpy as np

from src.common.types import CornerSet
from src.scanner.types import DecodeMode, DecodeResult


class FrameSource(Protocol):
    """Supplies one RGBA raster per tick."""

    def get_frame(self) -> Optional[np.ndarray]:
        """
        Return the current frame, or None when no frame is ready yet.

        Raises:
            AcquisitionError: If the device cannot deliver frames.
        """
        ...

    def pause(self) -> None:
        ...

    def resume(self) -> None:
        ...


class FastDecoder(Protocol):
    """Direct QR decoder for raw pixel buffers."""

    def decode(self, raster: np.ndarray, mode: DecodeMode) -> Optional[DecodeResult]:
        ...


class PresentationAdapter(Protocol):
    """Renders pipeline state for the user."""

    def show_detection_outline(self, corners: CornerSet, color: str) -> None:
        ...

    def show_result(self, payload: str) -> None:
        ...

    def show_idle_state(self) -> None:
        ...

    def show_error_state(self) -> None:
        ...
