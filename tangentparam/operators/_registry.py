"""
Shared method registry for pluggable per-vertex-pair operators.

Usage
-----
    alignment_methods = MethodRegistry("axis_alignment")
    alignment_methods.register("nearest", axis_map_p2p)
    fn = alignment_methods["nearest"]
    alignment_methods.available()  # ["nearest"]

``register`` also works as a decorator when ``fn`` is omitted::

    @alignment_methods.register("identity")
    def identity(normal_a, normal_b, axis_num, axes_a, axes_b):
        return 0
"""

from typing import Callable, Optional


class MethodRegistry:
    """Registry of named callables.

    Parameters
    ----------
    name : str
        Human-readable name for error messages (e.g., "axis_alignment").
    """

    def __init__(self, name: str):
        self.name = name
        self._methods: dict[str, Callable] = {}

    def register(self, key: str, fn: Optional[Callable] = None):
        """Register ``fn`` under ``key``; without ``fn`` return a decorator."""
        if fn is None:
            def decorator(f):
                self._methods[key] = f
                return f
            return decorator
        self._methods[key] = fn
        return fn

    def __getitem__(self, key: str) -> Callable:
        if key not in self._methods:
            raise KeyError(
                f"Unknown {self.name} method: {key!r}. "
                f"Available: {self.available()}"
            )
        return self._methods[key]

    def __contains__(self, key: str) -> bool:
        return key in self._methods

    def available(self) -> list[str]:
        """Return list of registered method names."""
        return list(self._methods.keys())
