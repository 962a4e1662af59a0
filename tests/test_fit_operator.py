"""Tests for fit operator module."""

import pytest
import numpy as np
from scipy import linalg
from polyimage.errors import InvalidConfiguration, SingularFit
from polyimage.fitting.design_matrix import build_design_matrix, term_count, window_offsets
from polyimage.fitting.fit_operator import PolyFitModel, compute_fit_operator, get_fit_model


class TestComputeFitOperator:
    """Test pseudo-inverse computation."""

    def test_operator_shape(self):
        """Test operator is num_terms x window pixels."""
        design, n_terms = build_design_matrix(3, 13)
        operator = compute_fit_operator(design)
        assert operator.shape == (n_terms, 169)

    def test_left_inverse(self):
        """Test operator @ design is the identity."""
        design, n_terms = build_design_matrix(3, 13)
        operator = compute_fit_operator(design)
        assert np.allclose(operator @ design, np.eye(n_terms), atol=1e-9)

    def test_matches_numpy_pinv(self):
        """Test agreement with numpy's pseudo-inverse."""
        design, _ = build_design_matrix(2, 5)
        assert np.allclose(compute_fit_operator(design), np.linalg.pinv(design), atol=1e-12)

    def test_least_squares_solution(self):
        """Test operator minimizes the squared residual."""
        np.random.seed(42)
        design, _ = build_design_matrix(2, 7)
        x = np.random.uniform(0, 255, design.shape[0])
        expected, *_ = np.linalg.lstsq(design, x, rcond=None)
        assert np.allclose(compute_fit_operator(design) @ x, expected)

    def test_large_window_high_order(self):
        """Test a 31x31 sixth-order fit stays well conditioned."""
        design, n_terms = build_design_matrix(6, 31)
        operator = compute_fit_operator(design)
        assert np.all(np.isfinite(operator))
        assert np.allclose(operator @ design, np.eye(n_terms), atol=1e-4)

    def test_underdetermined(self):
        """Test fewer rows than terms gives the minimum-norm solution."""
        design = np.array([[1.0, 0.0, 2.0], [0.0, 1.0, 1.0]])
        operator = compute_fit_operator(design)
        assert operator.shape == (3, 2)
        assert np.allclose(operator, linalg.pinv(design))
        assert np.allclose(design @ operator, np.eye(2))

    def test_rank_deficient(self):
        """Test duplicate columns share the fitted weight."""
        design = np.column_stack([np.ones(9), np.arange(9.0), np.arange(9.0)])
        operator = compute_fit_operator(design)
        assert np.allclose(operator, linalg.pinv(design))

        coeffs = operator @ (2.0 + 4.0 * np.arange(9.0))
        assert np.allclose(coeffs, [2.0, 2.0, 2.0])

    @pytest.mark.parametrize("design", [
        np.zeros((9, 3)),
        np.empty((0, 3)),
        np.array([[1.0, np.nan], [1.0, 2.0], [1.0, 3.0]]),
    ])
    def test_no_usable_fit(self, design):
        """Test zero, empty and non-finite design matrices are rejected."""
        with pytest.raises(SingularFit):
            compute_fit_operator(design)


class TestFitModel:
    """Test cached fit models."""

    def test_model_properties(self):
        """Test model dimensions."""
        model = get_fit_model(3, 13)
        assert isinstance(model, PolyFitModel)
        assert model.num_terms == 10
        assert model.num_dimensions == 9
        assert model.design_matrix.shape == (169, 10)
        assert model.fit_operator.shape == (10, 169)
        assert model.kernels.shape == (10, 13, 13)

    def test_model_cached(self):
        """Test the same configuration returns the same model."""
        assert get_fit_model(2, 9) is get_fit_model(2, 9)
        assert get_fit_model(2, 9) is not get_fit_model(2, 11)

    def test_model_read_only(self):
        """Test shared arrays cannot be modified."""
        model = get_fit_model(2, 5)
        with pytest.raises(ValueError):
            model.fit_operator[0, 0] = 1.0
        with pytest.raises(ValueError):
            model.design_matrix[0, 0] = 1.0

    @pytest.mark.parametrize("order,window_size", [
        (3, 3), (4, 3), (5, 3), (6, 3), (5, 5), (6, 5),
    ])
    def test_window_smaller_than_order(self, order, window_size):
        """Test small windows still produce a least-squares operator."""
        model = get_fit_model(order, window_size)
        assert model.num_dimensions == term_count(order) - 1
        assert model.fit_operator.shape == (term_count(order), window_size ** 2)
        assert np.all(np.isfinite(model.fit_operator))

        # Projection onto the column space reproduces representable windows
        dx, dy = np.meshgrid(np.arange(window_size), np.arange(window_size))
        window = 3.0 + 0.5 * dx - 0.25 * dy
        coeffs = model.fit(window)
        fitted = model.design_matrix @ coeffs
        assert np.allclose(fitted, window.ravel())

    def test_smallest_full_rank_window(self):
        """Test order k fits with window k + 1 (rounded up to odd)."""
        for order in range(1, 7):
            window_size = order + 1 if order % 2 == 0 else order + 2
            model = get_fit_model(order, window_size)
            assert model.num_dimensions == (order + 1) * (order + 2) // 2 - 1

    def test_invalid_configuration(self):
        """Test range checks happen before fitting."""
        with pytest.raises(InvalidConfiguration):
            get_fit_model(0, 13)
        with pytest.raises(InvalidConfiguration):
            get_fit_model(3, 14)

    def test_fit_recovers_polynomial(self):
        """Test fitting a window sampled from a polynomial."""
        model = get_fit_model(2, 5)
        dx, dy = window_offsets(5)
        # 1, x, y, x^2, xy, y^2
        coeffs = np.array([7.0, 0.5, -1.5, 0.25, 2.0, -0.75])
        window = (coeffs[0] + coeffs[1] * dx + coeffs[2] * dy + coeffs[3] * dx ** 2
                  + coeffs[4] * dx * dy + coeffs[5] * dy ** 2).reshape(5, 5)
        assert np.allclose(model.fit(window), coeffs)

    def test_fit_wrong_shape(self):
        """Test window shape is checked."""
        model = get_fit_model(2, 5)
        with pytest.raises(ValueError):
            model.fit(np.zeros((3, 3)))
