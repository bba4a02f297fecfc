"""Data handling: save/load computed polynomial convolution operators."""

from tangentparam.data._io import FORMAT, load_conv, save_conv

__all__ = ['save_conv', 'load_conv', 'FORMAT']
