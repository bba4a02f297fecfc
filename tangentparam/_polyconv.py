"""
Polynomial convolution operators on tangent-plane patches of a triangle mesh.

Every face corner is flattened into the tangent frame of its vertex, once per
tangent axis, and sampled with a degree-4 quadrature rule. The result is

    S_fv          scatter entries, sample <- 3 vertex-axis slots (barycentric)
    S_vf          reduction entries, vertex-axis slot <- face-corner-axis slots
    D_fw          cubic monomials at every sample, times the quadrature weight
    D_patchinput  relative normal (and height) at every sample

Index layout
------------
    sample offset          = ((face * 3 + corner) * axis_num + axis) * 6 + q
    vertex-axis slot       = vertex * axis_num + axis
    face-corner-axis slot  = (face * 3 + corner) * axis_num + axis

Usage
-----
    from tangentparam import HalfEdgeMesh, polynomial_conv
    from tangentparam.operators import tangent_axes

    mesh = HalfEdgeMesh.from_vf(points, simplices)
    axes = tangent_axes(mesh.normals, axis_num=4)
    conv = polynomial_conv(mesh, axes, use_patch_height=True)
    S = conv.scatter_matrix()      # scipy.sparse.csr_matrix
"""

import logging
import math
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Callable, Optional

import numpy as np
import scipy.sparse

from tangentparam._mesh import HalfEdgeMesh
from tangentparam._quadrature import (
    N_CUBIC_TERMS,
    N_QUADRATURE,
    cubic_poly_terms,
    quadrature_degree4,
    robust_normalize,
    triangle_area_3d,
)
from tangentparam._sparse import SparseEntries
from tangentparam.operators.alignment import AxisAlignment

logger = logging.getLogger(__name__)


@dataclass
class ConvParams:
    """Parameters of the polynomial convolution precomputation.

    Attributes
    ----------
    use_patch_height : bool
        Append the relative height as a 4th patch input component.
    n_workers : int or None
        Threads used by the face sampler. None picks one per CPU core,
        1 runs inline.
    ring_area_eps : float
        1-ring areas below this (or non-finite) count as degenerate.
    normalize_eps : float
        Projected edge directions shorter than this flatten to zero.
    fw_warn_threshold : float
        Magnitude above which a ``D_fw`` entry is reported.
    dtype : str
        Value dtype of all outputs.
    """
    use_patch_height: bool = False
    n_workers: Optional[int] = None
    ring_area_eps: float = 1e-10
    normalize_eps: float = 1e-10
    fw_warn_threshold: float = 1e2
    dtype: str = 'float64'

    @property
    def patch_dim(self) -> int:
        return 4 if self.use_patch_height else 3


def sample_offset(face, corner, axis, q, axis_num):
    """Row of quadrature sample ``q`` of (face, corner, axis)."""
    return ((face * 3 + corner) * axis_num + axis) * N_QUADRATURE + q


def vertex_axis_slot(vertex, axis, axis_num):
    return vertex * axis_num + axis


def face_corner_slot(face, corner, axis, axis_num):
    return (face * 3 + corner) * axis_num + axis


@dataclass
class PolynomialConv:
    """Output of :func:`polynomial_conv`."""
    S_fv: SparseEntries
    S_vf: SparseEntries
    D_fw: np.ndarray
    D_patchinput: np.ndarray
    ring_ref_scale: np.ndarray
    axis_num: int
    n_vertices: int
    n_faces: int

    @property
    def n_samples(self) -> int:
        return self.n_faces * 3 * self.axis_num * N_QUADRATURE

    @property
    def use_patch_height(self) -> bool:
        return self.D_patchinput.shape[1] == 4

    def scatter_matrix(self) -> scipy.sparse.csr_matrix:
        """Sample rows by vertex-axis columns."""
        return self.S_fv.tocsr((self.n_samples, self.n_vertices * self.axis_num))

    def reduction_matrix(self) -> scipy.sparse.csr_matrix:
        """Vertex-axis rows by face-corner-axis columns.

        Rows of vertices with a degenerate 1-ring are empty.
        """
        return self.S_vf.tocsr((self.n_vertices * self.axis_num,
                                self.n_faces * 3 * self.axis_num))

    def to_flat_arrays(self) -> dict:
        """Flat index/value arrays, rows and columns interleaved per entry."""
        return {
            'S_fv_index': self.S_fv.index_array(),
            'S_fv_value': self.S_fv.values,
            'S_vf_index': self.S_vf.index_array(),
            'S_vf_value': self.S_vf.values,
        }


# Vertex-ring aggregation

def ring_area(mesh: HalfEdgeMesh, v) -> float:
    """Sum of the areas of the faces around vertex ``v``."""
    area = 0.0
    for f in mesh.incident_faces(v):
        a, b, c = mesh.points[mesh.face_corners(f)]
        area += triangle_area_3d(a, b, c)
    return area


def build_reduction(mesh: HalfEdgeMesh, axis_num: int, eps: float = 1e-10,
                    dtype=np.float64):
    """Per-vertex reference scales and the reduction entries ``S_vf``.

    Vertices whose 1-ring area is non-finite or below ``eps`` keep a scale of
    1.0 and contribute no entries.

    Returns
    -------
    ring_ref_scale : ndarray of shape (n_vertices,)
    S_vf : SparseEntries
    """
    ring_ref_scale = np.ones(mesh.n_vertices)
    triples = []
    n_degenerate = 0

    for v in range(mesh.n_vertices):
        area = ring_area(mesh, v)
        if not math.isfinite(area) or area < eps:
            n_degenerate += 1
            logger.debug("vertex %d has a degenerate 1-ring (area=%g), skipped", v, area)
            continue
        ring_ref_scale[v] = math.sqrt(area)

        corners = [(f, mesh.corner_of(f, v)) for f in mesh.incident_faces(v)]
        for axis in range(axis_num):
            row = vertex_axis_slot(v, axis, axis_num)
            for f, c in corners:
                triples.append((row, face_corner_slot(f, c, axis, axis_num), 1.0))

    if n_degenerate:
        logger.info("%d of %d vertices have a degenerate 1-ring",
                    n_degenerate, mesh.n_vertices)
    return ring_ref_scale, SparseEntries.from_triples(triples, dtype=dtype)


# Face-corner sampling

def _flatten_corner(edge01, edge02, frame, scale, eps):
    """2D triangle of a face corner in the tangent frame, corner at the origin."""
    pts = [np.zeros(2)]
    for edge in (edge01, edge02):
        proj = np.array([np.dot(edge, frame[0]), np.dot(edge, frame[1])])
        pts.append(robust_normalize(proj, eps) * np.linalg.norm(edge) / scale)
    return pts


def _sample_face(face, mesh, axes, ring_ref_scale, align, params, out):
    S_rows, S_cols, S_vals, D_fw, D_patchinput = out
    axis_num = axes.shape[1]
    vts = mesh.face_corners(face)
    pts = mesh.points[vts]
    nmls = mesh.normals[vts]

    for corner in range(3):
        order = [(corner + i) % 3 for i in range(3)]
        fv = vts[corner]
        fv_pos, fv_nml = pts[corner], nmls[corner]
        scale = ring_ref_scale[fv]
        edge01 = pts[order[1]] - fv_pos
        edge02 = pts[order[2]] - fv_pos

        axis_offset = [0] + [
            int(align(fv_nml, nmls[k], axis_num, axes[fv], axes[vts[k]]))
            for k in order[1:]
        ]
        corner_vts = vts[order]
        corner_pts = pts[order]
        corner_nmls = nmls[order]

        for axis in range(axis_num):
            frame = (axes[fv, axis], np.cross(fv_nml, axes[fv, axis]))
            pts_2d = _flatten_corner(edge01, edge02, frame, scale, params.normalize_eps)
            weights, qua_pts, bary = quadrature_degree4(*pts_2d)

            start = sample_offset(face, corner, axis, 0, axis_num)
            rows = slice(start, start + N_QUADRATURE)
            entries = slice(start * 3, (start + N_QUADRATURE) * 3)

            cols = corner_vts * axis_num + (axis + np.asarray(axis_offset)) % axis_num
            S_rows[entries] = np.repeat(np.arange(start, start + N_QUADRATURE), 3)
            S_cols[entries] = np.tile(cols, N_QUADRATURE)
            S_vals[entries] = bary.reshape(-1)

            mono = cubic_poly_terms(qua_pts)
            fw = mono * weights[:, None]
            D_fw[rows] = fw
            big = np.argwhere(np.abs(fw) > params.fw_warn_threshold)
            for q, term in big:
                logger.warning(
                    "large D_fw value at face %d corner %d axis %d term %d: "
                    "weight=%g monomial=%g point=(%g, %g)",
                    face, corner, axis, term, weights[q],
                    mono[q, term],
                    qua_pts[q, 0], qua_pts[q, 1],
                )

            # Patch input signals, blended from the triangle vertices
            local_nmls = np.column_stack([
                corner_nmls @ fv_nml,
                corner_nmls @ frame[0],
                corner_nmls @ frame[1],
            ])
            D_patchinput[rows, 0:3] = bary @ local_nmls
            if params.use_patch_height:
                local_hgts = (corner_pts - fv_pos) @ fv_nml / scale
                D_patchinput[rows, 3] = bary @ local_hgts


def _n_workers(params: ConvParams, n_faces: int) -> int:
    workers = params.n_workers if (params.n_workers and params.n_workers > 0) \
        else min(n_faces, os.cpu_count() or 1)
    if n_faces < workers * 2:
        workers = 1
    return max(1, workers)


def sample_faces(mesh, axes, ring_ref_scale, align, params, out):
    """Run the face-corner sampler over all faces into pre-sized ``out`` arrays.

    Faces write disjoint row ranges, so batches of faces run on a thread pool
    without locking.
    """
    n_faces = mesh.n_faces
    workers = _n_workers(params, n_faces)

    def run(batch):
        for face in batch:
            _sample_face(face, mesh, axes, ring_ref_scale, align, params, out)

    if workers == 1:
        run(range(n_faces))
        return

    batch_size = max(1, n_faces // (workers * 4))
    batches = [range(i, min(i + batch_size, n_faces))
               for i in range(0, n_faces, batch_size)]
    logger.debug("sampling %d faces in %d batches on %d threads",
                 n_faces, len(batches), workers)
    with ThreadPoolExecutor(max_workers=workers) as ex:
        # list() re-raises the first exception from a worker
        list(ex.map(run, batches))


def _check_axes(axes, n_vertices):
    try:
        axes = np.asarray(axes, dtype=np.float64)
    except ValueError as exc:
        raise ValueError("every vertex must carry the same number of axes") from exc
    if axes.ndim != 3 or axes.shape[2] != 3:
        raise ValueError(
            f"axes must have shape (n_vertices, axis_num, 3), got {axes.shape}"
        )
    if axes.shape[0] != n_vertices:
        raise ValueError(
            f"axes given for {axes.shape[0]} vertices, mesh has {n_vertices}"
        )
    if axes.shape[1] < 1:
        raise ValueError("axis_num must be >= 1")
    return axes


def polynomial_conv(
    mesh: HalfEdgeMesh,
    axes,
    use_patch_height: Optional[bool] = None,
    axis_alignment: Optional[Callable] = None,
    params: Optional[ConvParams] = None,
) -> PolynomialConv:
    """Build the polynomial convolution operators of a mesh.

    Parameters
    ----------
    mesh : HalfEdgeMesh
        Triangle mesh with vertex normals.
    axes : array_like of shape (n_vertices, axis_num, 3)
        Unit tangent axes of every vertex.
    use_patch_height : bool or None
        Overrides ``params.use_patch_height`` when given.
    axis_alignment : callable or None
        ``fn(normal_a, normal_b, axis_num, axes_a, axes_b) -> int``. Defaults
        to ``AxisAlignment("nearest")``.
    params : ConvParams or None
        Numerical and threading parameters.

    Returns
    -------
    PolynomialConv
    """
    params = params if params is not None else ConvParams()
    if use_patch_height is not None:
        params = replace(params, use_patch_height=use_patch_height)
    align = axis_alignment if axis_alignment is not None else AxisAlignment("nearest")
    dtype = np.dtype(params.dtype)

    axes = _check_axes(axes, mesh.n_vertices)
    axis_num = axes.shape[1]
    n_faces = mesh.n_faces
    n_samples = n_faces * 3 * axis_num * N_QUADRATURE

    # Pre-size every output before the parallel phase
    S_fv = SparseEntries.zeros(n_samples * 3, dtype=dtype)
    D_fw = np.zeros((n_samples, N_CUBIC_TERMS), dtype=dtype)
    D_patchinput = np.zeros((n_samples, params.patch_dim), dtype=dtype)

    ring_ref_scale, S_vf = build_reduction(mesh, axis_num, eps=params.ring_area_eps,
                                           dtype=dtype)

    out = (S_fv.rows, S_fv.cols, S_fv.vals, D_fw, D_patchinput)
    sample_faces(mesh, axes, ring_ref_scale, align, params, out)

    logger.info("polynomial conv: %d faces, %d axes, %d samples, %d reduction entries",
                n_faces, axis_num, n_samples, len(S_vf))

    return PolynomialConv(
        S_fv=S_fv,
        S_vf=S_vf,
        D_fw=D_fw,
        D_patchinput=D_patchinput,
        ring_ref_scale=ring_ref_scale,
        axis_num=axis_num,
        n_vertices=mesh.n_vertices,
        n_faces=n_faces,
    )
