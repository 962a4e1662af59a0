"""Sliding-window descriptor extraction."""

from .pixels import to_intensity
from .sliding_window import SlidingWindowExtractor, extract_features, feature_grid_shape

__all__ = ['SlidingWindowExtractor', 'extract_features', 'feature_grid_shape', 'to_intensity']
