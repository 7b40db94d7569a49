"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all test modules.
"""

import pytest


def _draw_finder_pattern(image, x, y, module):
    """Draw a 7x7-module finder pattern with its top-left corner at (x, y)."""
    import cv2

    def square(offset, size, value):
        x0, y0 = x + offset * module, y + offset * module
        x1, y1 = x0 + size * module - 1, y0 + size * module - 1
        cv2.rectangle(image, (x0, y0), (x1, y1), value, thickness=-1)

    channels = 1 if image.ndim == 2 else image.shape[2]
    black = (0,) * channels if channels > 1 else 0
    white = (255,) * channels if channels > 1 else 255

    square(0, 7, black)  # Outer dark ring
    square(1, 5, white)  # Light ring
    square(2, 3, black)  # Dark core


@pytest.fixture
def scanner_config():
    """Fixture providing the packaged default configuration."""
    from src.scanner.config_loader import load_config

    return load_config()


@pytest.fixture
def make_code_frame():
    """
    Factory for synthetic RGBA frames holding the three finder patterns of
    a 21-module code.

    Returns (frame, centers) where centers maps "top_left", "top_right" and
    "bottom_left" to the expected finder-pattern centers.
    """
    import numpy as np

    def factory(origin=(100, 100), module=10, shape=(480, 640)):
        frame = np.full((shape[0], shape[1], 4), 255, dtype=np.uint8)
        ox, oy = origin
        far = 14 * module  # 21 - 7 modules

        _draw_finder_pattern(frame, ox, oy, module)
        _draw_finder_pattern(frame, ox + far, oy, module)
        _draw_finder_pattern(frame, ox, oy + far, module)

        half = 3.5 * module
        centers = {
            "top_left": (ox + half, oy + half),
            "top_right": (ox + far + half, oy + half),
            "bottom_left": (ox + half, oy + far + half),
        }
        return frame, centers

    return factory


@pytest.fixture
def blank_frame():
    """Fixture providing a uniform white RGBA frame."""
    import numpy as np

    return np.full((480, 640, 4), 255, dtype=np.uint8)


@pytest.fixture
def nested_square_mask():
    """Fixture providing a binary mask with a three-level nested square."""
    import cv2
    import numpy as np

    mask = np.zeros((200, 200), dtype=np.uint8)
    cv2.rectangle(mask, (20, 20), (180, 180), 1, thickness=-1)
    cv2.rectangle(mask, (40, 40), (160, 160), 0, thickness=-1)
    cv2.rectangle(mask, (60, 60), (140, 140), 1, thickness=-1)
    return mask
