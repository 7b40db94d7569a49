"""
Common type definitions for the QR finder-pattern scanner.

This module provides Pydantic-based type definitions for core data structures
shared by the scanning pipeline: raster frames, points and corner sets.

These types provide:
- Type validation and conversion
- Immutable geometric values (points and corners are frozen)
- Helper methods for common operations
- Integration with numpy arrays and OpenCV
"""

from itertools import combinations
from typing import List, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ImageBuffer(BaseModel):
    """
    Type-safe wrapper for raster frames (numpy.ndarray).

    Frames arrive from the frame source once per tick. This wrapper rejects
    malformed buffers before any OpenCV call touches them.

    Attributes:
        data: The underlying numpy array containing image data.
            Shape: (H, W, 4) for RGBA frames, (H, W, 3) for RGB,
            (H, W) for grayscale.
            Dtype: uint8 (0-255).

    Example:
        >>> frame = np.zeros((480, 640, 4), dtype=np.uint8)
        >>> buffer = ImageBuffer(data=frame)
        >>> print(buffer.width, buffer.height, buffer.channels)  # 640 480 4
    """

    data: np.ndarray = Field(..., description="Image data as numpy array")

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @field_validator("data")
    @classmethod
    def _validate_image(cls, v: np.ndarray) -> np.ndarray:
        """
        Validate that the numpy array is a valid raster.

        Raises:
            ValueError: If array is not a valid image format.
        """
        if not isinstance(v, np.ndarray):
            raise ValueError(f"Expected numpy.ndarray, got {type(v)}")

        if v.size == 0:
            raise ValueError("Image array is empty")

        if len(v.shape) not in (2, 3):
            raise ValueError(
                f"Expected 2D (grayscale) or 3D (color) image, got shape {v.shape}"
            )

        if len(v.shape) == 3 and v.shape[2] not in (1, 3, 4):
            raise ValueError(
                f"Expected 1, 3, or 4 channels for color image, got {v.shape[2]}"
            )

        if v.dtype != np.uint8:
            raise ValueError(
                f"Expected uint8 dtype for image, got {v.dtype}. "
                "Images should be in range [0, 255]"
            )

        return v

    @property
    def shape(self) -> Tuple[int, ...]:
        """Get image shape (H, W) or (H, W, C)."""
        return self.data.shape

    @property
    def height(self) -> int:
        """Get image height in pixels."""
        return int(self.data.shape[0])

    @property
    def width(self) -> int:
        """Get image width in pixels."""
        return int(self.data.shape[1])

    @property
    def channels(self) -> int:
        """Get number of channels (1 for grayscale, 3 for RGB, 4 for RGBA)."""
        if len(self.data.shape) == 2:
            return 1
        return int(self.data.shape[2])

    def to_numpy(self) -> np.ndarray:
        """Get underlying numpy array."""
        return self.data

    def __repr__(self) -> str:
        return f"ImageBuffer(shape={self.shape}, dtype={self.data.dtype})"


class Point(BaseModel):
    """
    Immutable real-valued 2D pixel coordinate (x, y).

    Finder-pattern centers and code corners are sub-pixel quantities, so
    coordinates are kept as floats (no rounding).

    Example:
        >>> point = Point(x=100.5, y=200.0)
        >>> other = Point.from_numpy(np.array([150, 250]))
        >>> point.distance_to(other)
    """

    model_config = ConfigDict(frozen=True)

    x: float = Field(..., description="X-coordinate (horizontal)")
    y: float = Field(..., description="Y-coordinate (vertical)")

    @field_validator("x", "y", mode="before")
    @classmethod
    def _convert_to_float(cls, v) -> float:
        """Accept Python and numpy scalars, reject anything non-numeric."""
        if isinstance(v, (int, float, np.integer, np.floating)) and not isinstance(
            v, bool
        ):
            return float(v)
        raise ValueError(f"Coordinate must be numeric, got {type(v)}")

    @classmethod
    def from_numpy(cls, arr: np.ndarray) -> "Point":
        """
        Create Point from numpy array of shape (2,).

        Raises:
            ValueError: If array shape is not (2,).
        """
        arr = np.asarray(arr)
        if arr.shape != (2,):
            raise ValueError(f"Expected array of shape (2,), got {arr.shape}")
        return cls(x=float(arr[0]), y=float(arr[1]))

    def to_numpy(self, dtype: type = np.float32) -> np.ndarray:
        """Convert Point to numpy array [x, y]."""
        return np.array([self.x, self.y], dtype=dtype)

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def distance_to(self, other: "Point") -> float:
        """
        Calculate Euclidean distance to another point.

        Args:
            other: Target point.

        Returns:
            Euclidean distance as float.
        """
        dx = self.x - other.x
        dy = self.y - other.y
        return float(np.sqrt(dx * dx + dy * dy))

    def __add__(self, other: "Point") -> "Point":
        """Add two points (vector addition)."""
        return Point(x=self.x + other.x, y=self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        """Subtract two points (vector subtraction)."""
        return Point(x=self.x - other.x, y=self.y - other.y)

    def __repr__(self) -> str:
        return f"Point(x={self.x:.2f}, y={self.y:.2f})"


class CornerSet(BaseModel):
    """
    Canonically ordered corners of a located code.

    Order is always (top_left, top_right, bottom_right, bottom_left).
    No three corners may be colinear; a set violating this is rejected on
    construction.

    Example:
        >>> corners = CornerSet.from_numpy(
        ...     np.array([[100, 100], [300, 100], [300, 300], [100, 300]])
        ... )
        >>> corners.to_numpy().shape
        (4, 2)
    """

    model_config = ConfigDict(frozen=True)

    top_left: Point
    top_right: Point
    bottom_right: Point
    bottom_left: Point

    @model_validator(mode="after")
    def _validate_not_colinear(self) -> "CornerSet":
        """Reject corner sets where any three corners lie on one line."""
        for a, b, c in combinations(self.as_list(), 3):
            cross = (b.x - a.x) * (c.y - a.y) - (b.y - a.y) * (c.x - a.x)
            if abs(cross) <= 1e-6:
                raise ValueError(
                    f"Corners {a}, {b}, {c} are colinear; not a valid code outline"
                )
        return self

    @classmethod
    def from_numpy(cls, arr: np.ndarray) -> "CornerSet":
        """
        Create CornerSet from an array of shape (4, 2) in [TL, TR, BR, BL] order.

        Raises:
            ValueError: If array shape is not (4, 2) or corners are colinear.
        """
        arr = np.asarray(arr, dtype=np.float64)
        if arr.shape != (4, 2):
            raise ValueError(f"Expected array of shape (4, 2), got {arr.shape}")
        tl, tr, br, bl = (Point.from_numpy(p) for p in arr)
        return cls(top_left=tl, top_right=tr, bottom_right=br, bottom_left=bl)

    def as_list(self) -> List[Point]:
        """Corners as a list in [TL, TR, BR, BL] order."""
        return [self.top_left, self.top_right, self.bottom_right, self.bottom_left]

    def to_numpy(self, dtype: type = np.float32) -> np.ndarray:
        """Convert to numpy array of shape (4, 2) in [TL, TR, BR, BL] order."""
        return np.array([p.to_tuple() for p in self.as_list()], dtype=dtype)

    def __repr__(self) -> str:
        return (
            f"CornerSet(tl={self.top_left!r}, tr={self.top_right!r}, "
            f"br={self.bottom_right!r}, bl={self.bottom_left!r})"
        )
