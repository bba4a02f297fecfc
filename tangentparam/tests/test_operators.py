"""Tests for tangentparam.operators (registry, frames, axis alignment)."""

import numpy as np
import numpy.testing as npt
import pytest


# Registry tests

class TestMethodRegistry:
    def test_register_and_retrieve(self):
        from tangentparam.operators import MethodRegistry
        reg = MethodRegistry("test")
        reg.register("foo", lambda x: x + 1)
        assert reg["foo"](5) == 6

    def test_register_as_decorator(self):
        from tangentparam.operators import MethodRegistry
        reg = MethodRegistry("test")

        @reg.register("bar")
        def bar():
            return 7

        assert reg["bar"] is bar
        assert bar() == 7

    def test_unknown_key_raises(self):
        from tangentparam.operators import MethodRegistry
        reg = MethodRegistry("test")
        with pytest.raises(KeyError, match="Unknown test method"):
            reg["nonexistent"]

    def test_available_and_contains(self):
        from tangentparam.operators import MethodRegistry
        reg = MethodRegistry("test")
        reg.register("a", lambda: None)
        reg.register("b", lambda: None)
        assert set(reg.available()) == {"a", "b"}
        assert "a" in reg
        assert "c" not in reg

    def test_builtin_alignment_methods(self):
        from tangentparam.operators import alignment_methods
        assert {"nearest", "identity"} <= set(alignment_methods.available())


# Frames

class TestRotationBetween:
    @pytest.mark.parametrize("a, b", [
        ([0, 0, 1], [0, 0, 1]),
        ([0, 0, 1], [1, 0, 0]),
        ([0, 0, 1], [0, 0, -1]),
        ([1, 0, 0], [-1, 0, 0]),
        ([0.6, 0.0, 0.8], [0.0, 0.6, 0.8]),
    ])
    def test_maps_a_onto_b(self, a, b):
        from tangentparam.operators import rotation_between
        R = rotation_between(a, b)
        npt.assert_allclose(R @ np.asarray(a, float), b, atol=1e-12)
        npt.assert_allclose(R @ R.T, np.eye(3), atol=1e-12)
        npt.assert_allclose(np.linalg.det(R), 1.0, atol=1e-12)


class TestTangentAxes:
    def test_shape_unit_and_tangent(self):
        from tangentparam.operators import tangent_axes
        rng = np.random.default_rng(0)
        normals = rng.normal(size=(10, 3))
        normals /= np.linalg.norm(normals, axis=1)[:, None]
        axes = tangent_axes(normals, 5)
        assert axes.shape == (10, 5, 3)
        npt.assert_allclose(np.linalg.norm(axes, axis=2), 1.0, atol=1e-12)
        npt.assert_allclose(np.einsum('vkd,vd->vk', axes, normals), 0.0, atol=1e-12)

    def test_uniform_rotation(self):
        from tangentparam.operators import tangent_axes
        axes = tangent_axes([[0.0, 0.0, 1.0]], 4)[0]
        npt.assert_allclose(axes, [[1, 0, 0], [0, 1, 0], [-1, 0, 0], [0, -1, 0]],
                            atol=1e-12)

    def test_normal_along_reference_falls_back(self):
        from tangentparam.operators import tangent_axes
        axes = tangent_axes([[1.0, 0.0, 0.0]], 1)[0]
        npt.assert_allclose(axes[0], [0.0, 1.0, 0.0], atol=1e-12)

    def test_axis_num_must_be_positive(self):
        from tangentparam.operators import tangent_axes
        with pytest.raises(ValueError, match="axis_num"):
            tangent_axes([[0.0, 0.0, 1.0]], 0)


# Axis alignment

class TestAxisAlignment:
    @pytest.mark.parametrize("shift", [0, 1, 3])
    def test_nearest_recovers_shift(self, shift):
        from tangentparam.operators import axis_map_p2p, tangent_axes
        n = np.array([0.0, 0.0, 1.0])
        axes_a = tangent_axes([n], 4)[0]
        axes_b = np.roll(axes_a, shift, axis=0)
        assert axis_map_p2p(n, n, 4, axes_a, axes_b) == shift

    def test_nearest_across_tilted_normals(self):
        from tangentparam.operators import axis_map_p2p, tangent_axes
        n_a = np.array([0.0, 0.0, 1.0])
        n_b = np.array([0.3, 0.0, 1.0]) / np.linalg.norm([0.3, 0.0, 1.0])
        axes_a = tangent_axes([n_a], 6)[0]
        axes_b = np.roll(tangent_axes([n_b], 6)[0], 2, axis=0)
        assert axis_map_p2p(n_a, n_b, 6, axes_a, axes_b) == 2

    def test_identity(self):
        from tangentparam.operators import AxisAlignment, tangent_axes
        n = np.array([0.0, 0.0, 1.0])
        axes = tangent_axes([n], 4)[0]
        align = AxisAlignment("identity")
        assert align(n, n, 4, axes, np.roll(axes, 1, axis=0)) == 0

    def test_wrapper_result_in_range(self):
        from tangentparam.operators import AxisAlignment, MethodRegistry
        from tangentparam.operators.alignment import alignment_methods
        alignment_methods.register("_test_big", lambda *args: 7)
        try:
            assert AxisAlignment("_test_big")(None, None, 4, None, None) == 3
        finally:
            alignment_methods._methods.pop("_test_big")
        assert isinstance(alignment_methods, MethodRegistry)

    def test_unknown_method_raises(self):
        from tangentparam.operators import AxisAlignment
        with pytest.raises(KeyError, match="Unknown axis_alignment method"):
            AxisAlignment("does-not-exist")
