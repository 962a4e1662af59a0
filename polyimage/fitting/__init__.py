"""Design matrix construction and least-squares fit operators."""

from .design_matrix import DesignMatrixBuilder, build_design_matrix, monomial_exponents, term_count
from .fit_operator import PolyFitModel, compute_fit_operator, get_fit_model

__all__ = [
    'DesignMatrixBuilder', 'build_design_matrix', 'monomial_exponents', 'term_count',
    'PolyFitModel', 'compute_fit_operator', 'get_fit_model',
]
