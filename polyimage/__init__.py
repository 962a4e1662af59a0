"""
polyimage - dense polynomial-fit local feature descriptors

Fits a low-order 2-D polynomial to every local window of an image and
exposes the intensity-normalized coefficients as a descriptor grid.
"""

from .config import DEFAULT_CONFIG, PolyConfig, load_config
from .coordinates.geometry import Point, Rectangle
from .core import PolyImage
from .errors import (
    CorruptData,
    InvalidConfiguration,
    PolyImageError,
    SingularFit,
    UnsupportedPixelFormat,
)
from .serialization import deserialize, deserialize_from, serialize, serialize_to

__all__ = [
    'PolyImage', 'PolyConfig', 'DEFAULT_CONFIG', 'load_config',
    'Point', 'Rectangle',
    'serialize', 'deserialize', 'serialize_to', 'deserialize_from',
    'PolyImageError', 'InvalidConfiguration', 'UnsupportedPixelFormat',
    'SingularFit', 'CorruptData',
]
__version__ = '1.0.0'
