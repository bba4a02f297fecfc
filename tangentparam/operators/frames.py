"""
Tangent frames and rotations between vertex normals.

Usage
-----
    from tangentparam.operators.frames import tangent_axes

    axes = tangent_axes(mesh.normals, axis_num=4)   # (n_vertices, 4, 3)
"""

import numpy as np

_PARALLEL_TOL = 1e-6


def _perpendicular(n):
    """Some unit vector perpendicular to the unit vector ``n``."""
    trial = np.array([1.0, 0.0, 0.0])
    if abs(np.dot(trial, n)) > 0.9:
        trial = np.array([0.0, 1.0, 0.0])
    p = trial - np.dot(trial, n) * n
    return p / np.linalg.norm(p)


def rotation_between(a, b) -> np.ndarray:
    """Minimal rotation matrix carrying unit vector ``a`` onto unit vector ``b``.

    Uses the Rodrigues formula. Antiparallel vectors get a half turn about an
    axis perpendicular to ``a``.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    v = np.cross(a, b)
    c = float(np.dot(a, b))
    s = float(np.linalg.norm(v))

    if s < _PARALLEL_TOL:
        if c > 0:
            return np.eye(3)
        k = _perpendicular(a)
        return 2.0 * np.outer(k, k) - np.eye(3)

    k = v / s
    K = np.array([[0.0, -k[2], k[1]],
                  [k[2], 0.0, -k[0]],
                  [-k[1], k[0], 0.0]])
    return np.eye(3) + s * K + (1.0 - c) * (K @ K)


def tangent_axes(normals, axis_num: int, reference=None) -> np.ndarray:
    """Uniformly rotated tangent axes at every vertex.

    The first axis is a reference direction projected onto the tangent plane.
    Axis ``k`` is that direction rotated by ``2*pi*k/axis_num`` about the
    normal, counter-clockwise when seen from the normal's tip.

    Parameters
    ----------
    normals : ndarray of shape (n, 3)
        Unit vertex normals.
    axis_num : int
        Number of axes per vertex (>= 1).
    reference : array_like of shape (3,) or None
        Global reference direction. Defaults to the x axis, with the y axis
        used at vertices whose normal is nearly parallel to it.

    Returns
    -------
    ndarray of shape (n, axis_num, 3)
    """
    if axis_num < 1:
        raise ValueError(f"axis_num must be >= 1, got {axis_num}")
    normals = np.atleast_2d(np.asarray(normals, dtype=np.float64))
    ref = np.array([1.0, 0.0, 0.0]) if reference is None else np.asarray(reference, float)
    alt = np.array([0.0, 1.0, 0.0])

    n = normals.shape[0]
    axes = np.zeros((n, axis_num, 3))
    theta = 2.0 * np.pi * np.arange(axis_num) / axis_num

    for i, nml in enumerate(normals):
        r = ref if abs(np.dot(ref, nml)) < 0.9 * np.linalg.norm(ref) else alt
        t0 = r - np.dot(r, nml) * nml
        length = np.linalg.norm(t0)
        t0 = t0 / length if length > 0 else _perpendicular(nml)
        t1 = np.cross(nml, t0)
        axes[i] = np.cos(theta)[:, None] * t0 + np.sin(theta)[:, None] * t1

    return axes
