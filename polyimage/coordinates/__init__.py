"""Image / feature-grid coordinate mapping."""

from .geometry import Point, Rectangle
from .mapper import CoordinateMapper

__all__ = ['Point', 'Rectangle', 'CoordinateMapper']
