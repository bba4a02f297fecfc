"""
Small triangle meshes used as test and example domains.

Every builder returns a ``(points, simplices)`` pair with counter-clockwise
(outward) oriented faces, ready for ``HalfEdgeMesh.from_vf``.
"""

import numpy as np


def single_triangle(edge=1.0):
    """One equilateral triangle in the z = 0 plane."""
    h = edge * np.sqrt(3.0) / 2.0
    points = np.array([
        [0.0, 0.0, 0.0],
        [edge, 0.0, 0.0],
        [edge / 2.0, h, 0.0],
    ])
    simplices = np.array([[0, 1, 2]])
    return points, simplices


def planar_grid(nx=3, ny=3, size=1.0):
    """Regular triangulation of the square [0, size]^2 in the z = 0 plane.

    Parameters
    ----------
    nx, ny : int
        Number of cells along x and y. Each cell is split into two triangles.
    size : float
        Side length of the square.

    Returns
    -------
    points : ndarray of shape ((nx + 1) * (ny + 1), 3)
    simplices : ndarray of shape (2 * nx * ny, 3)
    """
    if nx < 1 or ny < 1:
        raise ValueError("nx and ny must be >= 1")
    xs = np.linspace(0.0, size, nx + 1)
    ys = np.linspace(0.0, size, ny + 1)
    X, Y = np.meshgrid(xs, ys, indexing='xy')
    points = np.column_stack([X.ravel(), Y.ravel(), np.zeros(X.size)])

    simplices = []
    for j in range(ny):
        for i in range(nx):
            v00 = j * (nx + 1) + i
            v10 = v00 + 1
            v01 = v00 + (nx + 1)
            v11 = v01 + 1
            simplices.append([v00, v10, v11])
            simplices.append([v00, v11, v01])
    return points, np.asarray(simplices)


def icosahedron(radius=1.0):
    """Regular icosahedron inscribed in a sphere of the given radius."""
    phi = (1.0 + np.sqrt(5.0)) / 2.0
    points = np.array([
        [-1, phi, 0], [1, phi, 0], [-1, -phi, 0], [1, -phi, 0],
        [0, -1, phi], [0, 1, phi], [0, -1, -phi], [0, 1, -phi],
        [phi, 0, -1], [phi, 0, 1], [-phi, 0, -1], [-phi, 0, 1],
    ], dtype=float)
    points *= radius / np.linalg.norm(points[0])
    simplices = np.array([
        [0, 11, 5], [0, 5, 1], [0, 1, 7], [0, 7, 10], [0, 10, 11],
        [1, 5, 9], [5, 11, 4], [11, 10, 2], [10, 7, 6], [7, 1, 8],
        [3, 9, 4], [3, 4, 2], [3, 2, 6], [3, 6, 8], [3, 8, 9],
        [4, 9, 5], [2, 4, 11], [6, 2, 10], [8, 6, 7], [9, 8, 1],
    ])
    return points, simplices
