"""Mesh builders returning ``(points, simplices)`` pairs."""

from tangentparam.geometry._domains import icosahedron, planar_grid, single_triangle

__all__ = ['single_triangle', 'planar_grid', 'icosahedron']
