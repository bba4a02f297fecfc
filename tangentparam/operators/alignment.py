"""
Axis alignment between the tangent frames of two vertices.

An alignment function has the signature

    fn(normal_a, normal_b, axis_num, axes_a, axes_b) -> int

and returns the offset ``k`` in ``[0, axis_num)`` such that axis ``j`` at
vertex A and axis ``(j + k) % axis_num`` at vertex B point the same way.

Usage
-----
    from tangentparam.operators.alignment import AxisAlignment

    align = AxisAlignment("nearest")
    k = align(n_a, n_b, 4, axes[a], axes[b])
"""

import numpy as np

from tangentparam.operators._registry import MethodRegistry
from tangentparam.operators.frames import rotation_between

alignment_methods = MethodRegistry("axis_alignment")


@alignment_methods.register("nearest")
def axis_map_p2p(normal_a, normal_b, axis_num, axes_a, axes_b) -> int:
    """Offset of the B axis closest to A's first axis after parallel transport.

    ``axes_b`` is rotated by the minimal rotation taking ``normal_b`` onto
    ``normal_a``; the returned index is the rotated B axis with the largest
    dot product against ``axes_a[0]``.
    """
    R = rotation_between(normal_b, normal_a)
    moved = np.asarray(axes_b, dtype=np.float64)[:axis_num] @ R.T
    return int(np.argmax(moved @ np.asarray(axes_a[0], dtype=np.float64))) % axis_num


@alignment_methods.register("identity")
def identity(normal_a, normal_b, axis_num, axes_a, axes_b) -> int:
    """Treat axis ``j`` as the same direction at every vertex."""
    return 0


class AxisAlignment:
    """Callable wrapper around a registered alignment method.

    Parameters
    ----------
    method : str
        Registered method name (default "nearest").
    """

    def __init__(self, method: str = "nearest"):
        self.method = method
        self._func = alignment_methods[method]

    def __call__(self, normal_a, normal_b, axis_num, axes_a, axes_b) -> int:
        return int(self._func(normal_a, normal_b, axis_num, axes_a, axes_b)) % axis_num

    def __repr__(self) -> str:
        return f"AxisAlignment({self.method!r})"
