"""
Live QR Scanner.

Runs the scan loop against a webcam and shows the result in an OpenCV
window. Press 'q' or Esc to quit, 'c' to switch to the next camera.

Usage:
    # Scan with the first available camera
    python scripts/run_scanner.py

    # List cameras that open successfully
    python scripts/run_scanner.py --list-cameras

    # Use camera 1 with a custom configuration file
    python scripts/run_scanner.py --camera 1 --config my_config.yaml
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.common.types import CornerSet  # noqa: E402
from src.scanner import FrameProcessor, ScanLoop, load_config  # noqa: E402
from src.scanner.errors import AcquisitionError  # noqa: E402

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

WINDOW_NAME = "QR Scanner"
IDLE_MESSAGE = "Point the camera at a QR code..."
ERROR_MESSAGE = "An error occurred."


def enumerate_cameras(max_index: int = 8) -> List[int]:
    """Probe camera indices and return the ones that open."""
    available = []
    for index in range(max_index):
        capture = cv2.VideoCapture(index)
        if capture.isOpened():
            available.append(index)
        capture.release()
    return available


class OpenCVCameraSource:
    """Frame source backed by cv2.VideoCapture, delivering RGBA frames."""

    def __init__(self, index: int, frame_rate_hint: float):
        self.index = index
        self.capture = cv2.VideoCapture(index)
        if not self.capture.isOpened():
            raise AcquisitionError(f"Failed to open camera {index}")
        self.capture.set(cv2.CAP_PROP_FPS, frame_rate_hint)
        self.paused = False
        self.last_frame: Optional[np.ndarray] = None

    def get_frame(self) -> Optional[np.ndarray]:
        if self.paused:
            return None
        ok, bgr = self.capture.read()
        if not ok:
            raise AcquisitionError(f"Camera {self.index} stopped delivering frames")
        self.last_frame = bgr
        return cv2.cvtColor(bgr, cv2.COLOR_BGR2RGBA)

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False

    def release(self) -> None:
        self.capture.release()

    def __repr__(self) -> str:
        return f"OpenCVCameraSource(index={self.index})"


class OpenCVWindowPresenter:
    """Draws outlines and status text over the current camera frame."""

    def __init__(self, source: OpenCVCameraSource):
        self.source = source
        self.canvas: Optional[np.ndarray] = None
        self.message = IDLE_MESSAGE

    def _current_canvas(self) -> Optional[np.ndarray]:
        if self.canvas is None and self.source.last_frame is not None:
            self.canvas = self.source.last_frame.copy()
        return self.canvas

    def show_detection_outline(self, corners: CornerSet, color: str) -> None:
        canvas = self._current_canvas()
        if canvas is None:
            return
        pts = corners.to_numpy().astype(np.int32).reshape(-1, 1, 2)
        cv2.polylines(canvas, [pts], True, _hex_to_bgr(color), 4)

    def show_result(self, payload: str) -> None:
        logger.info(f"Decoded: {payload}")
        self.message = payload

    def show_idle_state(self) -> None:
        self.message = IDLE_MESSAGE

    def show_error_state(self) -> None:
        self.message = ERROR_MESSAGE

    def render(self) -> None:
        """Flush the current canvas and message to the window."""
        canvas = self._current_canvas()
        if canvas is None:
            return
        cv2.putText(
            canvas,
            self.message,
            (10, 30),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.8,
            (255, 255, 255),
            2,
        )
        cv2.imshow(WINDOW_NAME, canvas)
        self.canvas = None


def _hex_to_bgr(color: str) -> tuple:
    value = color.lstrip("#")
    r, g, b = (int(value[i : i + 2], 16) for i in (0, 2, 4))
    return (b, g, r)


def main():
    """Main entry point for the live scanner."""
    parser = argparse.ArgumentParser(description="Scan QR codes from a camera")
    parser.add_argument("--camera", type=int, default=None, help="Camera index")
    parser.add_argument(
        "--config", type=str, default=None, help="Scanner configuration YAML"
    )
    parser.add_argument(
        "--list-cameras", action="store_true", help="List available cameras and exit"
    )
    args = parser.parse_args()

    cameras = enumerate_cameras()
    if args.list_cameras:
        print(f"Available cameras: {cameras}")
        return 0

    if not cameras:
        logger.error("No cameras available")
        return 1

    camera_index = args.camera if args.camera is not None else cameras[0]
    config = load_config(Path(args.config)) if args.config else load_config()

    try:
        source = OpenCVCameraSource(camera_index, config.scheduler.frame_rate_hint)
    except AcquisitionError as e:
        logger.error(str(e))
        return 1

    presenter = OpenCVWindowPresenter(source)
    loop = ScanLoop(source, FrameProcessor(config=config), presenter, config=config)

    try:
        while True:
            loop.tick()
            presenter.render()

            key = cv2.waitKey(1) & 0xFF
            if key in (ord("q"), 27):
                break
            if key == ord("c") and len(cameras) > 1:
                position = (
                    cameras.index(source.index) if source.index in cameras else -1
                )
                next_index = cameras[(position + 1) % len(cameras)]
                source.release()
                source = OpenCVCameraSource(
                    next_index, config.scheduler.frame_rate_hint
                )
                presenter.source = source
                loop.select_frame_source(source)
    finally:
        source.release()
        cv2.destroyAllWindows()

    return 0


if __name__ == "__main__":
    sys.exit(main())
