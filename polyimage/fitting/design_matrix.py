"""Polynomial design matrix for a square pixel window."""

import numpy as np
from typing import List, Tuple

from polyimage.config import validate_order, validate_window_size


def monomial_exponents(order: int) -> List[Tuple[int, int]]:
    """
    Enumerate 2-D monomials x**px * y**py with px + py <= order.

    Terms are ordered by increasing total degree; within a degree the power
    of x (the column offset) decreases. The constant term is always first,
    so order 2 gives 1, x, y, x^2, xy, y^2.

    Args:
        order: Polynomial order

    Returns:
        List of (px, py) exponent pairs
    """
    order = validate_order(order)
    return [(degree - py, py)
            for degree in range(order + 1)
            for py in range(degree + 1)]


def term_count(order: int) -> int:
    """Number of monomials, constant included, in an order `order` polynomial."""
    order = validate_order(order)
    return (order + 1) * (order + 2) // 2


def window_offsets(window_size: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Column and row offsets of each window pixel, row-major.

    Args:
        window_size: Odd window side length

    Returns:
        Tuple of (dx, dy) arrays of length window_size**2
    """
    window_size = validate_window_size(window_size)
    half = (window_size - 1) // 2
    offsets = np.arange(-half, half + 1, dtype=np.float64)
    dy, dx = np.meshgrid(offsets, offsets, indexing='ij')
    return dx.ravel(), dy.ravel()


class DesignMatrixBuilder:
    """Builds the least-squares design matrix for a polynomial window fit."""

    def __init__(self, order: int = 3, window_size: int = 13):
        """
        Initialize design matrix builder.

        Args:
            order: Polynomial order in [1, 6]
            window_size: Odd window side length >= 3
        """
        self.order = validate_order(order)
        self.window_size = validate_window_size(window_size)
        self.exponents = monomial_exponents(self.order)

    @property
    def num_terms(self) -> int:
        return len(self.exponents)

    def build(self) -> Tuple[np.ndarray, int]:
        """
        Build the design matrix.

        Returns:
            Tuple of (window_size**2 x num_terms matrix, num_terms)
        """
        dx, dy = window_offsets(self.window_size)
        columns = [dx ** px * dy ** py for px, py in self.exponents]
        design = np.column_stack(columns)
        return design, self.num_terms


# Utility function for callers that only need the matrix
def build_design_matrix(order: int, window_size: int) -> Tuple[np.ndarray, int]:
    """Build the (window_size**2 x term_count) design matrix."""
    builder = DesignMatrixBuilder(order, window_size)
    return builder.build()
