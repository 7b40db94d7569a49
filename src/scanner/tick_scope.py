"""
Tick-scoped ownership of intermediate buffers.

Every raster, mask and contour forest allocated while processing one frame
is registered with a TickArena. Leaving the ``with`` block releases all of
them through one cleanup routine, whether the tick ended in success,
not-found or an exception.
"""

import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)


class TickArena:
    """
    Owner of all per-tick intermediates.

    Example:
        >>> with TickArena() as arena:
        ...     mask = arena.hold("mask", binarize(frame, config.binarizer))
        >>> arena.live_count
        0
    """

    def __init__(self):
        self._buffers: Dict[str, Any] = {}
        self._released = False

    def hold(self, name: str, buffer: Any) -> Any:
        """
        Register a buffer for release at tick end and hand it back.

        Raises:
            RuntimeError: If the arena was already released.
        """
        if self._released:
            raise RuntimeError(f"Cannot hold '{name}': tick arena already released")
        self._buffers[name] = buffer
        return buffer

    @property
    def live_count(self) -> int:
        """Number of buffers currently owned."""
        return len(self._buffers)

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> int:
        """
        Drop every held buffer. Safe to call more than once.

        Returns:
            Number of buffers released by this call.
        """
        count = len(self._buffers)
        self._buffers.clear()
        self._released = True
        if count:
            logger.debug(f"Released {count} tick buffers")
        return count

    def __enter__(self) -> "TickArena":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.release()
        return False
