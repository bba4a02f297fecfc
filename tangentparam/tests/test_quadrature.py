"""Tests for the triangle quadrature rule and the cubic basis."""

import itertools
import math

import numpy as np
import numpy.testing as npt
import pytest

from tangentparam._quadrature import (
    CUBIC_EXPONENTS,
    DUNAVANT4_BARY,
    DUNAVANT4_WEIGHTS,
    cubic_poly_term,
    cubic_poly_terms,
    quadrature_degree4,
    robust_normalize,
    triangle_area_2d,
    triangle_area_3d,
)


def exact_monomial_integral(verts, xe, ye):
    """Exact integral of x^xe * y^ye over a 2D triangle.

    Expands x and y in barycentric coordinates and integrates every product
    of barycentric coordinates with  int l0^a l1^b l2^c = 2A a! b! c! / (n + 2)!.
    """
    verts = np.asarray(verts, dtype=float)
    area = triangle_area_2d(*verts)
    n = xe + ye
    total = 0.0
    for idx in itertools.product(range(3), repeat=n):
        coeff = (np.prod([verts[i, 0] for i in idx[:xe]])
                 * np.prod([verts[i, 1] for i in idx[xe:]]))
        counts = np.bincount(np.asarray(idx, dtype=int), minlength=3)
        moment = 2.0 * area * np.prod([math.factorial(c) for c in counts]) \
            / math.factorial(n + 2)
        total += coeff * moment
    return total


UNIT = [(0.0, 0.0), (1.0, 0.0), (0.0, 1.0)]
SKEWED = [(0.3, -0.2), (1.7, 0.4), (-0.5, 1.1)]


class TestRuleConstants:
    def test_reference_weights_sum_to_one(self):
        npt.assert_allclose(DUNAVANT4_WEIGHTS.sum(), 1.0, atol=1e-14)

    def test_barycentric_rows_sum_to_one(self):
        npt.assert_allclose(DUNAVANT4_BARY.sum(axis=1), 1.0, atol=1e-14)
        assert np.all(DUNAVANT4_BARY > 0)

    def test_barycentric_triples(self):
        # first point sits at (s, t) = (0.108..., 0.446...)
        npt.assert_allclose(DUNAVANT4_BARY[0],
                            [0.445948490915965, 0.10810301816807, 0.445948490915965],
                            atol=1e-14)
        npt.assert_allclose(DUNAVANT4_BARY[4],
                            [0.8168475729804581, 0.09157621350977101, 0.09157621350977101],
                            atol=1e-14)


class TestQuadrature:
    @pytest.mark.parametrize("verts", [UNIT, SKEWED])
    def test_weights_sum_to_area(self, verts):
        weights, _, _ = quadrature_degree4(*verts)
        npt.assert_allclose(weights.sum(), triangle_area_2d(*verts), rtol=1e-13)

    def test_orientation_does_not_matter(self):
        w1, _, _ = quadrature_degree4(*SKEWED)
        w2, _, _ = quadrature_degree4(SKEWED[0], SKEWED[2], SKEWED[1])
        npt.assert_allclose(w1, w2)
        assert np.all(w1 > 0)

    @pytest.mark.parametrize("verts", [UNIT, SKEWED])
    def test_exact_up_to_degree_four(self, verts):
        weights, points, _ = quadrature_degree4(*verts)
        for xe in range(5):
            for ye in range(5 - xe):
                approx = np.sum(weights * points[:, 0] ** xe * points[:, 1] ** ye)
                exact = exact_monomial_integral(verts, xe, ye)
                npt.assert_allclose(approx, exact, rtol=1e-10, atol=1e-13,
                                    err_msg=f"x^{xe} y^{ye}")

    def test_unit_triangle_moment(self):
        # int x y over the unit right triangle is 1/24
        npt.assert_allclose(exact_monomial_integral(UNIT, 1, 1), 1.0 / 24.0)

    @pytest.mark.parametrize("verts", [UNIT, SKEWED])
    def test_barycentric_reconstruction(self, verts):
        _, points, bary = quadrature_degree4(*verts)
        npt.assert_allclose(bary @ np.asarray(verts), points, atol=1e-13)

    def test_degenerate_triangle_has_zero_weights(self):
        weights, points, _ = quadrature_degree4((0, 0), (1, 1), (2, 2))
        npt.assert_array_equal(weights, 0.0)
        assert points.shape == (6, 2)


class TestCubicBasis:
    def test_exponent_order(self):
        assert CUBIC_EXPONENTS == ((0, 0), (0, 1), (1, 0), (0, 2), (1, 1),
                                   (2, 0), (0, 3), (1, 2), (2, 1), (3, 0))

    def test_single_term(self):
        assert cubic_poly_term(0, 2.0, 3.0) == 1.0
        assert cubic_poly_term(1, 2.0, 3.0) == 3.0
        assert cubic_poly_term(2, 2.0, 3.0) == 2.0
        assert cubic_poly_term(8, 2.0, 3.0) == 12.0
        assert cubic_poly_term(9, 2.0, 3.0) == 8.0

    def test_vectorized_matches_scalar(self):
        pts = np.array([[0.0, 0.0], [0.5, -1.5], [2.0, 3.0]])
        terms = cubic_poly_terms(pts)
        assert terms.shape == (3, 10)
        for i, (x, y) in enumerate(pts):
            for k in range(10):
                npt.assert_allclose(terms[i, k], cubic_poly_term(k, x, y))

    def test_constant_term_at_origin(self):
        npt.assert_array_equal(cubic_poly_terms([[0.0, 0.0]])[0],
                               [1, 0, 0, 0, 0, 0, 0, 0, 0, 0])


class TestHelpers:
    def test_robust_normalize(self):
        npt.assert_allclose(robust_normalize([3.0, 4.0]), [0.6, 0.8])

    def test_robust_normalize_tiny(self):
        npt.assert_array_equal(robust_normalize([1e-12, 0.0]), [0.0, 0.0])
        npt.assert_array_equal(robust_normalize([1e-6, 0.0], threshold=1e-3), [0.0, 0.0])

    def test_triangle_area_3d(self):
        npt.assert_allclose(triangle_area_3d([0, 0, 0], [2, 0, 0], [0, 0, 3]), 3.0)
