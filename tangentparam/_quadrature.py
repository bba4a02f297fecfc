"""
Triangle quadrature and the cubic polynomial basis used on local patches.

The rule is the 6-point symmetric Dunavant rule, exact for polynomials of
degree 4 on a triangle. Points are given on the unit right triangle as blend
coordinates ``(s, t)`` so that a point on a triangle ``(v0, v1, v2)`` is

    p = v0 + s * (v1 - v0) + t * (v2 - v0)

and its barycentric weights are ``(1 - s - t, s, t)``.
"""

import numpy as np

DUNAVANT4_BLEND = np.array([
    [0.10810301816807, 0.445948490915965],
    [0.445948490915965, 0.445948490915965],
    [0.445948490915965, 0.10810301816807],
    [0.816847572980459, 0.091576213509771],
    [0.091576213509771, 0.091576213509771],
    [0.091576213509771, 0.816847572980459],
])

DUNAVANT4_WEIGHTS = np.array([
    0.223381589678011,
    0.223381589678011,
    0.223381589678011,
    0.109951743655322,
    0.109951743655322,
    0.109951743655322,
])

DUNAVANT4_BARY = np.column_stack([
    1.0 - DUNAVANT4_BLEND[:, 0] - DUNAVANT4_BLEND[:, 1],
    DUNAVANT4_BLEND[:, 0],
    DUNAVANT4_BLEND[:, 1],
])

N_QUADRATURE = DUNAVANT4_WEIGHTS.shape[0]

# (x exponent, y exponent) of the 10 cubic monomials, in column order
CUBIC_EXPONENTS = (
    (0, 0), (0, 1), (1, 0),
    (0, 2), (1, 1), (2, 0),
    (0, 3), (1, 2), (2, 1), (3, 0),
)

N_CUBIC_TERMS = len(CUBIC_EXPONENTS)

_X_EXP = np.array([e[0] for e in CUBIC_EXPONENTS])
_Y_EXP = np.array([e[1] for e in CUBIC_EXPONENTS])


def triangle_area_2d(v0, v1, v2) -> float:
    """Unsigned area of a 2D triangle."""
    v01 = np.subtract(v1, v0)
    v02 = np.subtract(v2, v0)
    return 0.5 * abs(v01[0] * v02[1] - v01[1] * v02[0])


def triangle_area_3d(a, b, c) -> float:
    """Area of a 3D triangle from half the cross product length."""
    return 0.5 * float(np.linalg.norm(np.cross(np.subtract(b, a), np.subtract(c, a))))


def robust_normalize(v, threshold: float = 1e-10) -> np.ndarray:
    """Unit vector along ``v``, or the zero vector if ``|v| < threshold``."""
    v = np.asarray(v, dtype=np.float64)
    length = np.linalg.norm(v)
    if length < threshold:
        return np.zeros_like(v)
    return v / length


def quadrature_degree4(v0, v1, v2):
    """Degree-4 quadrature on the 2D triangle ``(v0, v1, v2)``.

    Parameters
    ----------
    v0, v1, v2 : array_like of shape (2,)
        Triangle vertices.

    Returns
    -------
    weights : ndarray of shape (6,)
        Rule weights scaled by the triangle area (they sum to the area).
    points : ndarray of shape (6, 2)
        Quadrature points.
    bary : ndarray of shape (6, 3)
        Barycentric weights of every point with respect to ``(v0, v1, v2)``.
    """
    v0 = np.asarray(v0, dtype=np.float64)
    v1 = np.asarray(v1, dtype=np.float64)
    v2 = np.asarray(v2, dtype=np.float64)

    area = triangle_area_2d(v0, v1, v2)
    weights = DUNAVANT4_WEIGHTS * area
    points = (v0
              + DUNAVANT4_BLEND[:, 0:1] * (v1 - v0)
              + DUNAVANT4_BLEND[:, 1:2] * (v2 - v0))
    return weights, points, DUNAVANT4_BARY.copy()


def cubic_poly_term(term: int, x: float, y: float) -> float:
    """Value of cubic monomial number ``term`` at ``(x, y)``."""
    xe, ye = CUBIC_EXPONENTS[term]
    return x ** xe * y ** ye


def cubic_poly_terms(points) -> np.ndarray:
    """All 10 cubic monomials at each 2D point, shape (n_points, 10)."""
    points = np.atleast_2d(np.asarray(points, dtype=np.float64))
    x = points[:, 0:1]
    y = points[:, 1:2]
    return x ** _X_EXP * y ** _Y_EXP
