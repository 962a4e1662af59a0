"""Least-squares fit operator (pseudo-inverse) for polynomial window fits."""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Tuple

import numpy as np
from scipy import linalg

from polyimage.config import validate_order, validate_window_size
from polyimage.errors import SingularFit
from polyimage.fitting.design_matrix import DesignMatrixBuilder

logger = logging.getLogger(__name__)


def compute_fit_operator(design_matrix: np.ndarray) -> np.ndarray:
    """
    Compute the Moore-Penrose pseudo-inverse of a design matrix.

    For any window vector x, ``operator @ x`` gives the coefficients c
    minimizing ``||design_matrix @ c - x||^2``. When the columns are linearly
    dependent (too few distinct offsets for the order), singular values below
    the rank tolerance are dropped and the minimum-norm solution is returned.

    Args:
        design_matrix: (n_pixels x n_terms) matrix

    Returns:
        (n_terms x n_pixels) fit operator

    Raises:
        SingularFit: If the design matrix is empty, non-finite or all zero
    """
    design_matrix = np.asarray(design_matrix, dtype=np.float64)
    if design_matrix.size == 0 or not np.all(np.isfinite(design_matrix)):
        raise SingularFit("Design matrix is empty or contains non-finite values")

    U, s, Vt = linalg.svd(design_matrix, full_matrices=False)
    tol = s.max() * max(design_matrix.shape) * np.finfo(np.float64).eps
    keep = s > tol
    rank = int(np.sum(keep))
    if rank == 0:
        raise SingularFit("Design matrix has rank 0")
    if rank < design_matrix.shape[1]:
        logger.debug(
            f"Rank deficient design matrix (rank {rank} < {design_matrix.shape[1]} terms), "
            f"using minimum-norm fit")

    return (Vt[keep].T / s[keep]) @ U[:, keep].T


def _read_only(array: np.ndarray) -> np.ndarray:
    array = np.ascontiguousarray(array, dtype=np.float64)
    array.setflags(write=False)
    return array


@dataclass(frozen=True)
class PolyFitModel:
    """Immutable design matrix and fit operator for one (order, window_size)."""

    order: int
    window_size: int
    exponents: Tuple[Tuple[int, int], ...]
    design_matrix: np.ndarray = field(repr=False, compare=False)
    fit_operator: np.ndarray = field(repr=False, compare=False)

    @property
    def num_terms(self) -> int:
        return len(self.exponents)

    @property
    def num_dimensions(self) -> int:
        return self.num_terms - 1

    @property
    def kernels(self) -> np.ndarray:
        """Fit operator rows reshaped to window-shaped correlation kernels."""
        return self.fit_operator.reshape(self.num_terms, self.window_size, self.window_size)

    def fit(self, window: np.ndarray) -> np.ndarray:
        """
        Fit the polynomial to one window.

        Args:
            window: (window_size x window_size) intensities

        Returns:
            Raw coefficient vector of length num_terms
        """
        window = np.asarray(window, dtype=np.float64)
        if window.shape != (self.window_size, self.window_size):
            raise ValueError(
                f"Expected a {self.window_size}x{self.window_size} window, got {window.shape}")
        return self.fit_operator @ window.ravel()


@lru_cache(maxsize=32)
def _cached_model(order: int, window_size: int) -> PolyFitModel:
    builder = DesignMatrixBuilder(order, window_size)
    design, n_terms = builder.build()
    operator = compute_fit_operator(design)

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            f"Fit operator ready | order={order} window_size={window_size} "
            f"terms={n_terms} cond={np.linalg.cond(design):.3g}")

    return PolyFitModel(
        order=order,
        window_size=window_size,
        exponents=tuple(builder.exponents),
        design_matrix=_read_only(design),
        fit_operator=_read_only(operator),
    )


def get_fit_model(order: int, window_size: int) -> PolyFitModel:
    """
    Return the shared fit model for a configuration, computing it once.

    Args:
        order: Polynomial order in [1, 6]
        window_size: Odd window side length >= 3

    Returns:
        Cached PolyFitModel

    Raises:
        InvalidConfiguration: If order or window_size is out of range
        SingularFit: If the configuration cannot be fitted
    """
    return _cached_model(validate_order(order), validate_window_size(window_size))
