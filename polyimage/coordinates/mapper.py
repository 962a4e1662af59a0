"""Mapping between image pixel coordinates and feature grid coordinates."""

import numpy as np
from typing import Tuple, Union

from polyimage.config import validate_downsample, validate_window_size
from polyimage.coordinates.geometry import Point, Rectangle


class CoordinateMapper:
    """Transform between image space and feature-grid space."""

    def __init__(self, window_size: int = 13, downsample: int = 1):
        """
        Initialize coordinate mapper.

        Args:
            window_size: Odd window side length
            downsample: Feature stride in pixels
        """
        self.window_size = validate_window_size(window_size)
        self.downsample = validate_downsample(downsample)
        self.margin = (self.window_size - 1) // 2

    def image_to_feat(self, p: Union[Point, Tuple[int, int]]) -> Point:
        """
        Map an image point to the feature centred at, or closest to, it.

        Border points and points outside the image map outside the valid
        feature grid; callers must check bounds before indexing.

        Args:
            p: Image point as Point or (x, y) tuple

        Returns:
            Feature grid point
        """
        x, y = p
        return Point((x - self.margin) // self.downsample,
                     (y - self.margin) // self.downsample)

    def feat_to_image(self, p: Union[Point, Tuple[int, int]]) -> Point:
        """
        Map a feature point to the image pixel at the centre of its window.

        With downsample > 1 several image points share one feature, so this
        is only an approximate inverse of image_to_feat.
        """
        x, y = p
        return Point(x * self.downsample + self.margin,
                     y * self.downsample + self.margin)

    def image_to_feat_rect(self, rect: Rectangle) -> Rectangle:
        """Map both corners of an image rectangle; the result may be empty."""
        return Rectangle.from_corners(self.image_to_feat(rect.tl_corner),
                                      self.image_to_feat(rect.br_corner))

    def feat_to_image_rect(self, rect: Rectangle) -> Rectangle:
        """Map both corners of a feature rectangle; the result may be empty."""
        return Rectangle.from_corners(self.feat_to_image(rect.tl_corner),
                                      self.feat_to_image(rect.br_corner))

    def block_rect(self, row: int, col: int) -> Rectangle:
        """
        Image region whose pixels produced the descriptor at (row, col).

        Returns:
            window_size x window_size rectangle
        """
        center = self.feat_to_image(Point(col, row))
        return Rectangle.centered_at(center, self.window_size)

    def image_to_feat_array(self, points: np.ndarray) -> np.ndarray:
        """
        Vectorised image_to_feat.

        Args:
            points: (N, 2) integer array of (x, y) rows

        Returns:
            (N, 2) array of feature (x, y) rows
        """
        points = np.atleast_2d(np.asarray(points, dtype=np.int64))
        return (points - self.margin) // self.downsample

    def feat_to_image_array(self, points: np.ndarray) -> np.ndarray:
        """Vectorised feat_to_image for an (N, 2) array of (x, y) rows."""
        points = np.atleast_2d(np.asarray(points, dtype=np.int64))
        return points * self.downsample + self.margin
