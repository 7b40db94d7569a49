"""
Unit tests for common value types.
"""

import numpy as np
import pytest
from pydantic import ValidationError

from src.common.types import CornerSet, ImageBuffer, Point


class TestPoint:
    """Tests for the immutable Point type."""

    def test_keeps_sub_pixel_coordinates(self):
        """Test that coordinates are not rounded."""
        point = Point(x=10.25, y=3.5)

        assert point.x == 10.25
        assert point.y == 3.5

    def test_accepts_numpy_scalars(self):
        """Test construction from numpy array elements."""
        point = Point.from_numpy(np.array([7, 9], dtype=np.int32))

        assert point.to_tuple() == (7.0, 9.0)

    def test_is_immutable(self):
        """Test that assignment to a frozen point fails."""
        point = Point(x=1, y=2)

        with pytest.raises(ValidationError):
            point.x = 5

    def test_vector_arithmetic(self):
        """Test addition and subtraction."""
        a = Point(x=100, y=0)
        b = Point(x=0, y=100)
        origin = Point(x=0, y=0)

        assert a + b - origin == Point(x=100, y=100)

    def test_distance(self):
        """Test Euclidean distance."""
        assert Point(x=0, y=0).distance_to(Point(x=3, y=4)) == pytest.approx(5.0)

    def test_rejects_non_numeric(self):
        """Test that strings are rejected."""
        with pytest.raises(ValidationError):
            Point(x="a", y=1)

    def test_from_numpy_wrong_shape(self):
        """Test that a 3-vector is rejected."""
        with pytest.raises(ValueError, match="Expected array of shape"):
            Point.from_numpy(np.array([1, 2, 3]))


class TestCornerSet:
    """Tests for the CornerSet type."""

    def test_round_trip_order(self):
        """Test that numpy conversion keeps [TL, TR, BR, BL] order."""
        arr = np.array([[100, 100], [300, 100], [300, 300], [100, 300]])
        corners = CornerSet.from_numpy(arr)

        assert corners.top_left == Point(x=100, y=100)
        assert corners.bottom_left == Point(x=100, y=300)
        np.testing.assert_array_equal(corners.to_numpy(), arr.astype(np.float32))

    def test_rejects_colinear_corners(self):
        """Test that three corners on one line are rejected."""
        with pytest.raises(ValueError, match="colinear"):
            CornerSet.from_numpy(
                np.array([[0, 0], [50, 0], [100, 0], [0, 100]], dtype=np.float32)
            )

    def test_rejects_duplicate_corners(self):
        """Test that repeated corners are rejected."""
        with pytest.raises(ValueError):
            CornerSet.from_numpy(
                np.array([[0, 0], [0, 0], [100, 100], [0, 100]], dtype=np.float32)
            )

    def test_wrong_shape(self):
        """Test that 3 points are rejected."""
        with pytest.raises(ValueError, match="Expected array of shape"):
            CornerSet.from_numpy(np.array([[0, 0], [1, 0], [0, 1]]))


class TestImageBuffer:
    """Tests for raster validation."""

    def test_rgba_frame(self):
        """Test a valid RGBA frame."""
        buffer = ImageBuffer(data=np.zeros((48, 64, 4), dtype=np.uint8))

        assert buffer.width == 64
        assert buffer.height == 48
        assert buffer.channels == 4

    @pytest.mark.parametrize(
        "data",
        [
            np.zeros((0, 0, 4), dtype=np.uint8),
            np.zeros((10,), dtype=np.uint8),
            np.zeros((10, 10, 2), dtype=np.uint8),
            np.zeros((10, 10, 4), dtype=np.float32),
        ],
    )
    def test_rejects_malformed(self, data):
        """Test empty, 1D, 2-channel and float buffers are rejected."""
        with pytest.raises(ValidationError):
            ImageBuffer(data=data)
