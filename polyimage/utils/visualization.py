"""Visualization utilities for debugging and display."""

import cv2
import numpy as np
from typing import Iterable, Tuple

from polyimage.coordinates.geometry import Rectangle


def render_feature_map(features: np.ndarray, component: int = 0,
                       colormap: int = cv2.COLORMAP_JET) -> np.ndarray:
    """
    Render one descriptor component as a colour heat map.

    Args:
        features: (nr, nc, num_dimensions) descriptor grid
        component: Descriptor component to show
        colormap: OpenCV colormap id

    Returns:
        (nr, nc, 3) uint8 BGR image; non-finite values are drawn as 0
    """
    if features.ndim != 3:
        raise ValueError(f"Expected an (nr, nc, dims) grid, got shape {features.shape}")
    if not 0 <= component < features.shape[2]:
        raise IndexError(f"Component {component} out of range for {features.shape[2]} dims")

    values = features[:, :, component]
    values = np.where(np.isfinite(values), values, 0.0).astype(np.float32)
    if values.size == 0:
        return np.zeros(values.shape + (3,), dtype=np.uint8)

    scaled = cv2.normalize(values, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)
    return cv2.applyColorMap(scaled, colormap)


def draw_block_rects(image: np.ndarray, rects: Iterable[Rectangle],
                     color: Tuple[int, int, int] = (0, 255, 0),
                     thickness: int = 1) -> np.ndarray:
    """Outline the image regions behind selected descriptors."""
    output = image.copy()
    if output.ndim == 2:
        output = cv2.cvtColor(output, cv2.COLOR_GRAY2BGR)
    for rect in rects:
        cv2.rectangle(output, (rect.left, rect.top), (rect.right, rect.bottom),
                      color, thickness)
    return output
