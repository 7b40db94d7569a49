"""
Frame-synchronous scan loop.

Owns the only state that survives between ticks: the pause flag, the
pending resume, and the selected frame source. Each tick runs at most one
pipeline pass to completion before the next one can start.

After a successful decode the loop pauses the frame source for a fixed
cooldown. The resume is a pending deadline tagged with the pause
generation; it becomes a no-op if a newer pause superseded it or the loop
was already resumed (e.g. by switching frame sources).
"""

import logging
import time
from typing import Callable, Optional, Tuple

from src.scanner.errors import AcquisitionError
from src.scanner.interfaces import FrameSource, PresentationAdapter
from src.scanner.processor import FrameProcessor
from src.scanner.types import DecodePass, ScannerConfig, ScanOutcome

logger = logging.getLogger(__name__)


class ScanLoop:
    """
    Cooperative single-threaded scheduler around a FrameProcessor.

    Args:
        frame_source: Initial frame source.
        processor: Pipeline run once per tick.
        presenter: Receives outlines, results and idle/error states.
        config: Scheduler and presentation settings. Defaults to the
            processor's configuration.
        clock: Monotonic clock in seconds (injectable for tests).
        sleep: Sleep function used by run() for frame pacing.

    Example:
        >>> loop = ScanLoop(camera, FrameProcessor(), window)
        >>> loop.run()
    """

    def __init__(
        self,
        frame_source: FrameSource,
        processor: FrameProcessor,
        presenter: PresentationAdapter,
        config: Optional[ScannerConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.frame_source = frame_source
        self.processor = processor
        self.presenter = presenter
        self.config = config if config is not None else processor.config
        self.clock = clock
        self.sleep = sleep

        self.is_paused = False
        self._pause_generation = 0
        self._pending_resume: Optional[Tuple[int, float]] = None
        self._stopped = False

    @property
    def resume_due_at(self) -> Optional[float]:
        """Clock time at which the pending resume fires, if any."""
        if self._pending_resume is None:
            return None
        return self._pending_resume[1]

    def select_frame_source(self, frame_source: FrameSource) -> None:
        """
        Switch to another frame source (e.g. a different camera).

        Any pending resume is cancelled and scanning restarts unpaused.
        """
        logger.info(f"Switching frame source to {frame_source!r}")
        self.frame_source = frame_source
        self._pause_generation += 1
        self._pending_resume = None
        self.is_paused = False

    def tick(self) -> Optional[ScanOutcome]:
        """
        Run one scheduling step.

        Returns:
            The pipeline outcome, or None when the loop is paused, the frame
            source had no frame ready, or acquisition failed.
        """
        self.poll_resume()
        if self.is_paused:
            return None

        try:
            frame = self.frame_source.get_frame()
        except AcquisitionError as e:
            logger.error(f"Frame acquisition failed: {e}")
            self.presenter.show_error_state()
            return None

        if frame is None:
            return None

        outcome = self.processor.process_frame(frame)
        self._present(outcome)

        if outcome.is_found():
            self._pause()

        return outcome

    def poll_resume(self) -> bool:
        """
        Fire the pending resume if its deadline has passed.

        Returns:
            True if the loop resumed during this call.
        """
        if self._pending_resume is None:
            return False

        generation, due_at = self._pending_resume
        if self.clock() < due_at:
            return False

        self._pending_resume = None
        return self._resume(generation)

    def run(self, max_ticks: Optional[int] = None) -> int:
        """
        Tick repeatedly, paced to the configured frame-rate hint.

        While paused, sleeps until the pending resume is due instead of
        ticking.

        Args:
            max_ticks: Stop after this many scheduling steps (None = until
                stop() is called).

        Returns:
            Number of scheduling steps executed.
        """
        interval = 1.0 / self.config.scheduler.frame_rate_hint
        steps = 0
        self._stopped = False

        while not self._stopped and (max_ticks is None or steps < max_ticks):
            started = self.clock()
            self.tick()
            steps += 1

            due_at = self.resume_due_at
            if self.is_paused and due_at is not None:
                delay = due_at - self.clock()
            else:
                delay = interval - (self.clock() - started)

            if delay > 0:
                self.sleep(delay)

        return steps

    def stop(self) -> None:
        """Ask run() to return after the current step."""
        self._stopped = True

    def _pause(self) -> None:
        cooldown = self.config.scheduler.cooldown_seconds
        self.frame_source.pause()
        self.is_paused = True
        self._pause_generation += 1
        self._pending_resume = (self._pause_generation, self.clock() + cooldown)
        logger.info(f"Paused scanning for {cooldown:.1f}s after successful decode")

    def _resume(self, generation: int) -> bool:
        if not self.is_paused or generation != self._pause_generation:
            logger.debug(f"Ignoring stale resume (generation {generation})")
            return False

        self.frame_source.resume()
        self.is_paused = False
        logger.info("Resumed scanning")
        return True

    def _present(self, outcome: ScanOutcome) -> None:
        colors = self.config.presentation

        if outcome.is_found():
            if outcome.corners is not None:
                color = (
                    colors.direct_outline_color
                    if outcome.decode_pass == DecodePass.DIRECT
                    else colors.rectified_outline_color
                )
                self.presenter.show_detection_outline(outcome.corners, color)
            self.presenter.show_result(outcome.payload)
        elif outcome.is_not_found():
            if outcome.corners is not None:
                self.presenter.show_detection_outline(
                    outcome.corners, colors.rectified_outline_color
                )
            self.presenter.show_idle_state()
        else:
            self.presenter.show_error_state()
