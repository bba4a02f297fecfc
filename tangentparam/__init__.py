"""
Quadrature-based polynomial convolution operators on triangle meshes.

Modules
-------
_mesh       : HalfEdgeMesh index arena and MeshTopologyError
_quadrature : Degree-4 triangle quadrature and the cubic monomial basis
_sparse     : SparseEntries container for (row, col, val) operators
_polyconv   : polynomial_conv, ConvParams, PolynomialConv

Subpackages
-----------
operators     : Axis alignment and tangent frames
geometry      : Example meshes
data          : Save and load computed operators
visualization : Debug overlay of the quadrature samples
"""

from tangentparam._mesh import HalfEdgeMesh, MeshTopologyError
from tangentparam._sparse import SparseEntries
from tangentparam._polyconv import (
    ConvParams,
    PolynomialConv,
    build_reduction,
    polynomial_conv,
    sample_offset,
)

__version__ = '0.1.0'

__all__ = [
    'HalfEdgeMesh', 'MeshTopologyError',
    'SparseEntries',
    'ConvParams', 'PolynomialConv', 'build_reduction', 'polynomial_conv',
    'sample_offset',
]
