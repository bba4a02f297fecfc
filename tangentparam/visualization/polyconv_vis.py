"""Debug overlay of the quadrature samples around a marked vertex.

For the marked vertex and a chosen axis, every quadrature sample of the
incident face corners is placed in 3D from its scatter entries, together with
a second point lifted along the face normal by a fixed cubic evaluated through
``D_fw``.
"""

import warnings
from typing import Optional

import numpy as np

from tangentparam._polyconv import ConvParams, PolynomialConv, polynomial_conv, sample_offset
from tangentparam._quadrature import N_QUADRATURE

SAMPLE_COLOR = (0.2, 0.2, 0.2)
OFFSET_COLOR = (0.2, 0.7, 0.5)

# Coefficients of y - y^2 - y^3 in the cubic monomial order
SAMPLING_COEFF = np.array([0, 1, 0, -1, 0, 0, -1, 0, 0, 0], dtype=float)


class PolynomialConvVis:
    """Holds a mesh, its axes and the operator built on them.

    Parameters
    ----------
    mesh : HalfEdgeMesh
        Triangle mesh.
    axes : array_like of shape (n_vertices, axis_num, 3)
        Tangent axes of every vertex.
    marked_pt : int
        Vertex whose neighbourhood is drawn; -1 draws nothing.
    axis_alignment : callable or None
        Forwarded to ``polynomial_conv``.
    """

    def __init__(self, mesh, axes, marked_pt: int = -1, axis_alignment=None):
        self.mesh = mesh
        self.axes = np.asarray(axes, dtype=np.float64)
        self.marked_pt = marked_pt
        self.axis_alignment = axis_alignment
        self.conv: Optional[PolynomialConv] = None

    def build_polynomialconv(self, params: Optional[ConvParams] = None) -> PolynomialConv:
        """Build the operator without patch heights and keep it on the object."""
        self.conv = polynomial_conv(self.mesh, self.axes, use_patch_height=False,
                                    axis_alignment=self.axis_alignment, params=params)
        return self.conv

    def _marked_valid(self) -> bool:
        return (self.mesh is not None and self.conv is not None
                and 0 <= self.marked_pt < self.mesh.n_vertices)

    def reduction_value(self) -> float:
        """Value of the first ``S_vf`` entry in a row of the marked vertex.

        Returns 0.0 with a warning when the vertex has no reduction entries.
        """
        anum = self.conv.axis_num
        i = self.conv.S_vf.find_row(lambda rows: rows // anum == self.marked_pt)
        if i is None:
            warnings.warn(f"vertex {self.marked_pt} not found in S_vf")
            return 0.0
        return float(self.conv.S_vf.vals[i])

    def overlay_points(self, axis: int = 0):
        """Sample positions and lifted positions around the marked vertex.

        Returns
        -------
        samples : ndarray of shape (k, 3)
        lifted : ndarray of shape (k, 3)
        """
        if not self._marked_valid():
            return np.zeros((0, 3)), np.zeros((0, 3))

        conv, mesh = self.conv, self.mesh
        anum = conv.axis_num
        if not 0 <= axis < anum:
            raise ValueError(f"axis must be in [0, {anum}), got {axis}")
        svf_val = self.reduction_value()

        samples, lifted = [], []
        for f in mesh.incident_faces(self.marked_pt):
            corner = mesh.corner_of(f, self.marked_pt)
            for q in range(N_QUADRATURE):
                offset = sample_offset(f, corner, axis, q, anum)
                entries = slice(offset * 3, offset * 3 + 3)
                vidx = conv.S_fv.cols[entries] // anum
                qua_pt = conv.S_fv.vals[entries] @ mesh.points[vidx]

                poly_val = float(SAMPLING_COEFF @ conv.D_fw[offset]) * svf_val
                samples.append(qua_pt)
                lifted.append(qua_pt + poly_val * mesh.face_normals[f])

        return np.reshape(samples, (-1, 3)), np.reshape(lifted, (-1, 3))

    def draw(self, axis: int = 0, ax=None, s: float = 5.0):
        """Scatter the overlay points on a 3D matplotlib axis.

        Parameters
        ----------
        axis : int
            Tangent axis whose samples are drawn.
        ax : mpl_toolkits.mplot3d.Axes3D or None
            If None, a new 3D figure is created.
        s : float
            Marker size.

        Returns
        -------
        fig, ax
        """
        import matplotlib.pyplot as plt

        if ax is None:
            fig = plt.figure()
            ax = fig.add_subplot(111, projection='3d')
        else:
            fig = ax.get_figure()

        samples, lifted = self.overlay_points(axis)
        if samples.shape[0]:
            ax.scatter(samples[:, 0], samples[:, 1], samples[:, 2],
                       color=SAMPLE_COLOR, s=s, depthshade=False)
            ax.scatter(lifted[:, 0], lifted[:, 1], lifted[:, 2],
                       color=OFFSET_COLOR, s=s, depthshade=False)
        ax.set_xlabel('x')
        ax.set_ylabel('y')
        ax.set_zlabel('z')
        return fig, ax
