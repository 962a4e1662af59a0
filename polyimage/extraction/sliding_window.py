"""Sliding-window polynomial coefficient extraction."""

import cv2
import numpy as np
from skimage.util import view_as_windows
from typing import Tuple

from polyimage.config import validate_downsample, validate_window_size
from polyimage.errors import InvalidConfiguration
from polyimage.extraction.pixels import to_intensity

BACKENDS = ("filter", "windows")


def feature_grid_shape(image_shape: Tuple[int, ...], window_size: int,
                       downsample: int = 1) -> Tuple[int, int]:
    """
    Number of feature rows and columns for an image.

    Args:
        image_shape: Image shape, (rows, cols, ...)
        window_size: Odd window side length
        downsample: Feature stride in pixels

    Returns:
        (nr, nc), each clamped at 0 independently
    """
    rows, cols = int(image_shape[0]), int(image_shape[1])
    nr = max(0, (rows - window_size) // downsample + 1)
    nc = max(0, (cols - window_size) // downsample + 1)
    return nr, nc


def normalize_coefficients(coeffs: np.ndarray) -> np.ndarray:
    """
    Divide non-constant coefficients by the constant term and drop it.

    A zero constant term yields inf/nan components rather than an error.

    Args:
        coeffs: (..., num_terms) raw coefficients

    Returns:
        (..., num_terms - 1) normalized descriptors
    """
    with np.errstate(divide='ignore', invalid='ignore'):
        return coeffs[..., 1:] / coeffs[..., :1]


class SlidingWindowExtractor:
    """Applies a fit operator at every admissible window position."""

    def __init__(self, backend: str = "filter"):
        """
        Initialize extractor.

        Args:
            backend: "filter" (one cv2.filter2D pass per term) or
                "windows" (strided window view, one matrix product per row)
        """
        if backend not in BACKENDS:
            raise InvalidConfiguration(
                f"Unknown backend '{backend}', expected one of {BACKENDS}")
        self.backend = backend

    def extract(self, image: np.ndarray, fit_operator: np.ndarray,
                window_size: int, downsample: int = 1) -> np.ndarray:
        """
        Extract normalized polynomial descriptors.

        Args:
            image: Grayscale or BGR image without alpha
            fit_operator: (num_terms x window_size**2) fit operator
            window_size: Odd window side length
            downsample: Feature stride in pixels

        Returns:
            (nr, nc, num_terms - 1) descriptor grid

        Raises:
            UnsupportedPixelFormat: If the image carries an alpha channel
        """
        window_size = validate_window_size(window_size)
        downsample = validate_downsample(downsample)
        if fit_operator.shape[1] != window_size * window_size:
            raise ValueError(
                f"Fit operator has {fit_operator.shape[1]} columns, "
                f"expected {window_size * window_size}")

        image = to_intensity(image)
        nr, nc = feature_grid_shape(image.shape, window_size, downsample)
        num_terms = fit_operator.shape[0]
        if nr == 0 or nc == 0:
            return np.zeros((nr, nc, num_terms - 1))

        if self.backend == "filter":
            coeffs = self._extract_filter(image, fit_operator, window_size, downsample, nr, nc)
        else:
            coeffs = self._extract_windows(image, fit_operator, window_size, downsample, nr, nc)

        return normalize_coefficients(coeffs)

    def _extract_filter(self, image: np.ndarray, fit_operator: np.ndarray,
                        window_size: int, downsample: int,
                        nr: int, nc: int) -> np.ndarray:
        """Correlate the image with each operator row, then sample centres."""
        margin = (window_size - 1) // 2
        row_stop = margin + (nr - 1) * downsample + 1
        col_stop = margin + (nc - 1) * downsample + 1

        kernels = fit_operator.reshape(-1, window_size, window_size)
        coeffs = np.empty((nr, nc, len(kernels)))
        for j, kernel in enumerate(kernels):
            # filter2D anchors the kernel at its centre and correlates (no flip)
            response = cv2.filter2D(image, cv2.CV_64F, np.array(kernel),
                                    borderType=cv2.BORDER_REPLICATE)
            coeffs[:, :, j] = response[margin:row_stop:downsample,
                                       margin:col_stop:downsample]
        return coeffs

    def _extract_windows(self, image: np.ndarray, fit_operator: np.ndarray,
                         window_size: int, downsample: int,
                         nr: int, nc: int) -> np.ndarray:
        """Apply the operator to a strided window view, one feature row at a time."""
        windows = view_as_windows(image, (window_size, window_size), step=downsample)
        operator_t = fit_operator.T
        coeffs = np.empty((nr, nc, fit_operator.shape[0]))
        for r in range(nr):
            coeffs[r] = windows[r].reshape(nc, -1) @ operator_t
        return coeffs


# Utility function for one-shot extraction
def extract_features(image: np.ndarray, fit_operator: np.ndarray, window_size: int,
                     downsample: int = 1, backend: str = "filter") -> np.ndarray:
    """Extract a descriptor grid without keeping an extractor around."""
    extractor = SlidingWindowExtractor(backend)
    return extractor.extract(image, fit_operator, window_size, downsample)
