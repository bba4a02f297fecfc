"""
Half-edge triangle mesh stored as an arena of integer indices.

Vertices, half-edges and faces live in flat numpy arrays and refer to each
other by index. Half-edge ``e`` starts at vertex ``he_vert[e]``, belongs to face
``he_face[e]`` (-1 on the boundary) and is linked through ``he_next``,
``he_prev`` and ``he_pair``. Face ``f`` owns the half-edges ``3f, 3f+1, 3f+2``
so that its corners come out in the same order as the input simplex.

Usage
-----
    from tangentparam import HalfEdgeMesh

    mesh = HalfEdgeMesh.from_vf(points, simplices)
    for f in mesh.incident_faces(0):
        c = mesh.corner_of(f, 0)
"""

import numpy as np


class MeshTopologyError(ValueError):
    """Raised when the mesh connectivity breaks the half-edge contract."""


def normalized(a, axis=-1, order=2):
    l2 = np.atleast_1d(np.linalg.norm(a, order, axis))
    l2[l2 == 0] = 1
    return a / np.expand_dims(l2, axis)


class HalfEdgeMesh:
    """Read-only half-edge mesh of a triangulated surface.

    Parameters
    ----------
    points : ndarray of shape (n_vertices, 3)
        Vertex positions.
    simplices : ndarray of shape (n_faces, 3)
        Consistently oriented triangles as vertex index triples.
    normals : ndarray of shape (n_vertices, 3) or None
        Per-vertex unit normals. If None, area-weighted face normals are
        accumulated and normalized.
    """

    def __init__(self, points, simplices, normals=None):
        self.points = np.asarray(points, dtype=np.float64)
        simplices = np.asarray(simplices, dtype=np.int64)
        if simplices.size == 0:
            simplices = simplices.reshape(0, 3)

        if self.points.ndim != 2 or self.points.shape[1] != 3:
            raise ValueError(f"points must have shape (n, 3), got {self.points.shape}")
        if simplices.ndim != 2 or simplices.shape[1] != 3:
            raise MeshTopologyError(
                f"simplices must be triangles of shape (m, 3), got {simplices.shape}"
            )
        n = self.points.shape[0]
        if simplices.size and (simplices.min() < 0 or simplices.max() >= n):
            raise MeshTopologyError("simplex refers to a vertex index out of range")

        self.simplices = simplices
        self._build_half_edges()

        self.face_normals = normalized(self._face_cross())
        if normals is None:
            self.normals = self._area_weighted_normals()
        else:
            normals = np.asarray(normals, dtype=np.float64)
            if normals.shape != self.points.shape:
                raise ValueError(
                    f"normals must have shape {self.points.shape}, got {normals.shape}"
                )
            self.normals = normals

    @classmethod
    def from_vf(cls, points, simplices, normals=None):
        """Build a mesh from a ``(points, simplices)`` pair."""
        return cls(points, simplices, normals=normals)

    @property
    def n_vertices(self) -> int:
        return self.points.shape[0]

    @property
    def n_faces(self) -> int:
        return self.simplices.shape[0]

    @property
    def n_half_edges(self) -> int:
        return self.he_vert.shape[0]

    def _build_half_edges(self):
        m = self.n_faces
        n_inner = 3 * m

        origin = self.simplices.reshape(-1)
        target = np.roll(self.simplices, -1, axis=1).reshape(-1)
        local = np.arange(n_inner) % 3
        base = np.arange(n_inner) - local

        he_vert = list(origin)
        he_face = list(np.arange(n_inner) // 3)
        he_next = list(base + (local + 1) % 3)
        he_prev = list(base + (local + 2) % 3)
        he_pair = [-1] * n_inner

        directed = {}
        for e in range(n_inner):
            key = (int(origin[e]), int(target[e]))
            if key in directed:
                raise MeshTopologyError(
                    f"directed edge {key} is used by faces {he_face[directed[key]]} "
                    f"and {he_face[e]}; the mesh is non-manifold or inconsistently oriented"
                )
            directed[key] = e

        # Pair interior half-edges, create boundary twins for the rest
        boundary_out = {}
        for (a, b), e in directed.items():
            twin = directed.get((b, a))
            if twin is not None:
                he_pair[e] = twin
                continue
            bnd = len(he_vert)
            he_vert.append(b)
            he_face.append(-1)
            he_next.append(-1)
            he_prev.append(-1)
            he_pair.append(e)
            he_pair[e] = bnd
            if b in boundary_out:
                raise MeshTopologyError(
                    f"vertex {b} has more than one boundary gap; the mesh is non-manifold"
                )
            boundary_out[b] = bnd

        # Boundary half-edge b->a continues with the boundary half-edge leaving a
        for bnd in boundary_out.values():
            a = int(origin[he_pair[bnd]])
            nxt = boundary_out.get(a)
            if nxt is None:
                raise MeshTopologyError(f"boundary loop is broken at vertex {a}")
            he_next[bnd] = nxt
            he_prev[nxt] = bnd

        self.he_vert = np.asarray(he_vert, dtype=np.int64)
        self.he_face = np.asarray(he_face, dtype=np.int64)
        self.he_next = np.asarray(he_next, dtype=np.int64)
        self.he_prev = np.asarray(he_prev, dtype=np.int64)
        self.he_pair = np.asarray(he_pair, dtype=np.int64)
        self.face_edge = np.arange(m, dtype=np.int64) * 3

        vert_edge = np.full(self.n_vertices, -1, dtype=np.int64)
        used, first = np.unique(origin, return_index=True)
        vert_edge[used] = first
        self.vert_edge = vert_edge

        # Every outgoing half-edge of a vertex must lie on its single ring
        out_degree = np.bincount(self.he_vert, minlength=self.n_vertices)
        for v in used:
            ring_size = sum(1 for _ in self.vertex_ring(v))
            if ring_size != out_degree[v]:
                raise MeshTopologyError(
                    f"vertex {v} joins more than one fan of faces; the mesh is non-manifold"
                )

    def _face_cross(self):
        p = self.points[self.simplices]
        return np.cross(p[:, 1] - p[:, 0], p[:, 2] - p[:, 0])

    def _area_weighted_normals(self):
        acc = np.zeros_like(self.points)
        cross = self._face_cross()
        for k in range(3):
            np.add.at(acc, self.simplices[:, k], cross)
        return normalized(acc)

    def face_areas(self) -> np.ndarray:
        """Area of every face."""
        return 0.5 * np.linalg.norm(self._face_cross(), axis=1)

    # Traversal

    def vertex_ring(self, v):
        """Yield the outgoing half-edges of vertex ``v`` in ``pair -> next`` order.

        Isolated vertices yield nothing. The walk is capped at the number of
        half-edges; a ring that does not close raises ``MeshTopologyError``.
        """
        start = int(self.vert_edge[v])
        if start < 0:
            return
        e = start
        for _ in range(self.n_half_edges):
            yield e
            e = int(self.he_next[self.he_pair[e]])
            if e == start:
                return
        raise MeshTopologyError(f"1-ring of vertex {v} does not close")

    def incident_faces(self, v) -> list:
        """Faces around vertex ``v`` in ring order."""
        return [int(self.he_face[e]) for e in self.vertex_ring(v)
                if self.he_face[e] >= 0]

    def face_corners(self, f) -> np.ndarray:
        """Vertex ids of face ``f`` in corner order."""
        start = int(self.face_edge[f])
        corners = []
        e = start
        while True:
            corners.append(int(self.he_vert[e]))
            e = int(self.he_next[e])
            if e == start:
                break
            if len(corners) == 3:
                raise MeshTopologyError(f"face {f} is not a triangle")
        if len(corners) != 3:
            raise MeshTopologyError(f"face {f} is not a triangle")
        return np.asarray(corners, dtype=np.int64)

    def corner_of(self, f, v) -> int:
        """Corner index of vertex ``v`` within face ``f``."""
        for corner, u in enumerate(self.face_corners(f)):
            if u == v:
                return corner
        raise MeshTopologyError(f"vertex {v} is not incident to face {f}")

    def is_boundary_vertex(self, v) -> bool:
        return any(self.he_face[e] < 0 for e in self.vertex_ring(v))
