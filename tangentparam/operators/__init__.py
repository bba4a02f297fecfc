"""
Pluggable operators on vertex tangent frames.

Submodules
----------
alignment : Axis alignment between adjacent vertices (axis_map_p2p, AxisAlignment)
frames    : Tangent axes generation and normal-to-normal rotations
"""

from tangentparam.operators._registry import MethodRegistry
from tangentparam.operators.alignment import (
    AxisAlignment,
    alignment_methods,
    axis_map_p2p,
)
from tangentparam.operators.frames import rotation_between, tangent_axes

__all__ = [
    'MethodRegistry',
    'AxisAlignment', 'alignment_methods', 'axis_map_p2p',
    'rotation_between', 'tangent_axes',
]
