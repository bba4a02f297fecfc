"""Visualization utilities for tangentparam operators.

Submodules
----------
polyconv_vis : Debug overlay of quadrature samples around a marked vertex
"""

from tangentparam.visualization.polyconv_vis import PolynomialConvVis

__all__ = ['PolynomialConvVis']
