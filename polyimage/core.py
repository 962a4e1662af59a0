"""
PolyImage Core
Dense polynomial-fit feature extraction over an image
"""

import logging
import time
from typing import Any, Dict, Tuple, Union

import numpy as np

from polyimage.config import DEFAULT_CONFIG, PolyConfig
from polyimage.coordinates.geometry import Point, Rectangle
from polyimage.coordinates.mapper import CoordinateMapper
from polyimage.errors import PolyImageError
from polyimage.extraction.sliding_window import SlidingWindowExtractor, normalize_coefficients
from polyimage.fitting.fit_operator import PolyFitModel, get_fit_model

logger = logging.getLogger(__name__)


def _empty_grid(num_dimensions: int) -> np.ndarray:
    grid = np.zeros((0, 0, num_dimensions))
    grid.setflags(write=False)
    return grid


class PolyImage:
    """
    Local feature extractor that fits a polynomial to every image window.

    The fitted coefficients are intensity normalized by dividing them by the
    constant term, which is then discarded. With downsample N, features are
    only extracted every N pixels.

    Configuration (order, window size, downsample and the derived fit
    operator) is immutable and shared by reference; only the feature grid
    produced by load() is owned by the instance. Concurrent use of one
    instance is not safe, except for copying its configuration into other
    instances while it is not being modified.
    """

    def __init__(self, order: int = 3, window_size: int = 13,
                 downsample: int = 1, backend: str = "filter"):
        """
        Initialize polynomial feature image.

        Args:
            order: Polynomial order in [1, 6]
            window_size: Odd window side length >= 3
            downsample: Feature stride in pixels; fixed for the instance
            backend: Extraction backend, "filter" or "windows"
        """
        self._config = PolyConfig(order=order, window_size=window_size, downsample=downsample)
        self._model = get_fit_model(self._config.order, self._config.window_size)
        self._extractor = SlidingWindowExtractor(backend)
        self._mapper = CoordinateMapper(self._config.window_size, self._config.downsample)
        self._features = _empty_grid(self._model.num_dimensions)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "PolyImage":
        """
        Build from a configuration dictionary.

        Args:
            config: Full config (with a "poly_image" section) or the section itself
        """
        section = config.get("poly_image", config)
        poly_config = PolyConfig.from_dict(section)
        backend = section.get("backend", DEFAULT_CONFIG["poly_image"]["backend"])
        return cls(poly_config.order, poly_config.window_size,
                   poly_config.downsample, backend)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def setup(self, order: int, window_size: int):
        """
        Reconfigure the polynomial order and window size.

        Discards any loaded features. On failure the previous configuration
        and features are kept.

        Raises:
            InvalidConfiguration: If order or window_size is out of range
        """
        try:
            config = self._config.with_fit(order, window_size)
            model = get_fit_model(config.order, config.window_size)
        except PolyImageError as e:
            logger.warning(f"setup rejected | order={order} window_size={window_size}: {e}")
            raise

        self._config = config
        self._model = model
        self._mapper = CoordinateMapper(config.window_size, config.downsample)
        self._features = _empty_grid(model.num_dimensions)
        logger.debug(f"setup | order={config.order} window_size={config.window_size}")

    def clear(self):
        """Reset to the default order and window size and drop all features."""
        defaults = DEFAULT_CONFIG["poly_image"]
        self.setup(defaults["order"], defaults["window_size"])
        logger.debug("clear")

    def copy_configuration(self, other: "PolyImage"):
        """
        Copy everything except the loaded features from another instance.

        After ``b.copy_configuration(a)``, loading the same image into a
        and b produces the same features. The source is only read.
        """
        self._config = other._config
        self._model = other._model
        self._extractor = other._extractor
        self._mapper = other._mapper
        self._features = _empty_grid(other._model.num_dimensions)

    @property
    def config(self) -> PolyConfig:
        return self._config

    @property
    def fit_model(self) -> PolyFitModel:
        return self._model

    @property
    def order(self) -> int:
        return self._config.order

    @property
    def window_size(self) -> int:
        return self._config.window_size

    @property
    def downsample(self) -> int:
        return self._config.downsample

    @property
    def backend(self) -> str:
        return self._extractor.backend

    @property
    def num_dimensions(self) -> int:
        """Number of polynomial coefficients per descriptor, constant term excluded."""
        return self._model.num_dimensions

    # ------------------------------------------------------------------
    # Feature extraction
    # ------------------------------------------------------------------

    def load(self, image: np.ndarray):
        """
        Extract a descriptor for every admissible window of an image.

        Replaces any previously loaded features; on failure they are kept.

        Args:
            image: Grayscale (H, W) or BGR (H, W, 3) image

        Raises:
            UnsupportedPixelFormat: If the image carries an alpha channel
        """
        start_time = time.time()
        features = self._extractor.extract(image, self._model.fit_operator,
                                           self.window_size, self.downsample)
        features.setflags(write=False)
        self._features = features

        duration = (time.time() - start_time) * 1000
        logger.debug(
            f"load | image={np.shape(image)} grid={self.nr}x{self.nc} "
            f"dims={self.num_dimensions} time={duration:.1f}ms")

    def unload(self):
        """Drop the loaded features, keeping the configuration."""
        logger.debug("unload")
        self._features = _empty_grid(self.num_dimensions)

    @property
    def nr(self) -> int:
        return self._features.shape[0]

    @property
    def nc(self) -> int:
        return self._features.shape[1]

    @property
    def size(self) -> int:
        return self.nr * self.nc

    @property
    def features(self) -> np.ndarray:
        """Read-only (nr, nc, num_dimensions) descriptor grid."""
        return self._features

    def __len__(self) -> int:
        return self.size

    def __getitem__(self, index: Tuple[int, int]) -> np.ndarray:
        """
        Descriptor of the window at (row, col).

        Raises:
            IndexError: If (row, col) is outside [0, nr) x [0, nc)
        """
        row, col = index
        if not (0 <= row < self.nr and 0 <= col < self.nc):
            raise IndexError(
                f"Feature ({row}, {col}) out of range for a {self.nr}x{self.nc} grid")
        return self._features[row, col]

    def fit_window(self, window: np.ndarray) -> np.ndarray:
        """Normalized descriptor of a single window_size x window_size patch."""
        return normalize_coefficients(self._model.fit(window))

    # ------------------------------------------------------------------
    # Coordinate mapping
    # ------------------------------------------------------------------

    def get_rect(self) -> Rectangle:
        """Rectangle covering the feature grid, empty when nothing is loaded."""
        return Rectangle(0, 0, self.nc - 1, self.nr - 1)

    def get_block_rect(self, row: int, col: int) -> Rectangle:
        """Image region that produced the descriptor at (row, col)."""
        return self._mapper.block_rect(row, col)

    def image_to_feat_space(self, item: Union[Point, Rectangle]) -> Union[Point, Rectangle]:
        """
        Map an image point or rectangle to feature space.

        Rectangles are mapped corner by corner; the result may be empty.
        Points without a corresponding feature land outside get_rect().
        """
        if isinstance(item, Rectangle):
            return self._mapper.image_to_feat_rect(item)
        return self._mapper.image_to_feat(item)

    def feat_to_image_space(self, item: Union[Point, Rectangle]) -> Union[Point, Rectangle]:
        """
        Map a feature point or rectangle to image space.

        Points map to the centre pixel of their window; this is only an
        approximate inverse of image_to_feat_space() when downsample > 1.
        """
        if isinstance(item, Rectangle):
            return self._mapper.feat_to_image_rect(item)
        return self._mapper.feat_to_image(item)

    def __repr__(self) -> str:
        return (f"PolyImage(order={self.order}, window_size={self.window_size}, "
                f"downsample={self.downsample}, backend='{self.backend}', "
                f"nr={self.nr}, nc={self.nc})")
