"""Tests for radiance estimation along a ray.

Tests cover:
- The sky gradient seen by escaping rays
- Depth limit and absorption (both contribute black)
- Throughput: attenuation products along deterministic paths
- Gamma encoding and non-finite sanitizing

Note: Imports are done inside test methods so that modules declaring
Taichi fields are only loaded after the conftest.py fixture has run ti.init().
"""

import math

import pytest
import taichi as ti


def _vec(v):
    return (float(v[0]), float(v[1]), float(v[2]))


class TestBackground:
    """Rays that hit nothing return the sky colour."""

    def test_straight_up_is_sky_blue(self):
        from pathtracer.core.integrator import trace_ray

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0)) == pytest.approx(
            (0.5, 0.7, 1.0), abs=1e-6
        )

    def test_straight_down_is_white(self):
        from pathtracer.core.integrator import trace_ray

        assert trace_ray((0.0, 0.0, 0.0), (0.0, -3.0, 0.0)) == pytest.approx(
            (1.0, 1.0, 1.0), abs=1e-6
        )

    def test_horizon_is_halfway(self):
        """A horizontal ray gets the midpoint of the gradient."""
        from pathtracer.core.integrator import trace_ray

        assert trace_ray((0.0, 0.0, 0.0), (1.0, 0.0, 0.0)) == pytest.approx(
            (0.75, 0.85, 1.0), abs=1e-6
        )

    def test_depth_zero_miss_still_sees_sky(self):
        """The depth limit only applies once something is hit."""
        from pathtracer.core.integrator import trace_ray

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), depth=0) == pytest.approx(
            (0.5, 0.7, 1.0), abs=1e-6
        )


class TestTermination:
    """Paths that end on a surface contribute black."""

    def test_depth_zero_hit_is_black(self):
        """With no bounces left a hit returns exactly zero."""
        from pathtracer.core.integrator import trace_ray
        from pathtracer.scene import create_single_sphere_scene

        scene, _ = create_single_sphere_scene()
        scene.upload()

        assert trace_ray((0.0, 0.0, -3.0), (0.0, 0.0, 1.0), depth=0) == (0.0, 0.0, 0.0)

    def test_metal_seen_from_inside_is_absorbed(self):
        """Mirror reflections that point into the surface end the path."""
        from pathtracer.core.integrator import trace_ray
        from pathtracer.materials import Metal
        from pathtracer.scene import Scene

        scene = Scene()
        scene.add_sphere((0.0, 0.0, 0.0), 10.0, Metal(albedo=(1.0, 1.0, 1.0)))
        scene.upload()

        for direction in [(0.0, 1.0, 0.0), (1.0, 0.2, -0.3), (0.0, 0.0, -1.0)]:
            assert trace_ray((0.0, 0.0, 0.0), direction) == (0.0, 0.0, 0.0)


class TestThroughput:
    """Deterministic paths multiply attenuations along the way."""

    def test_mirror_floor_reflects_sky(self):
        """One bounce off a grey mirror halves the zenith sky colour."""
        from pathtracer.core.integrator import trace_ray
        from pathtracer.materials import Metal
        from pathtracer.scene import Scene

        scene = Scene()
        scene.add_sphere((0.0, -1000.0, 0.0), 1000.0, Metal(albedo=(0.5, 0.5, 0.5)))
        scene.upload()

        colour = trace_ray((0.0, 1.0, 0.0), (0.0, -1.0, 0.0), depth=1)
        assert colour == pytest.approx((0.25, 0.35, 0.5), abs=1e-4)

    def test_index_one_glass_tints_twice(self):
        """A ray through index-1 glass is tinted on entry and on exit."""
        from pathtracer.core.integrator import trace_ray
        from pathtracer.materials import Glass
        from pathtracer.scene import Scene

        scene = Scene()
        scene.add_sphere(
            (0.0, 0.0, 0.0), 1.0, Glass(albedo=(0.5, 0.5, 1.0), refractive_index=1.0)
        )
        scene.upload()

        colour = trace_ray((0.0, 0.0, -3.0), (0.0, 0.0, 1.0), depth=2)
        assert colour == pytest.approx((0.75 * 0.25, 0.85 * 0.25, 1.0), abs=1e-4)

        # One bounce is not enough to get out again
        assert trace_ray((0.0, 0.0, -3.0), (0.0, 0.0, 1.0), depth=1) == (0.0, 0.0, 0.0)

    def test_green_sphere_blue_channel_bounded_by_albedo(self):
        """Any path that starts on the green sphere keeps at most 0.1 of the blue."""
        from pathtracer.core.integrator import trace_ray
        from pathtracer.scene import create_single_sphere_scene

        scene, _ = create_single_sphere_scene()
        scene.upload()

        for depth in (1, 2, 5):
            for _ in range(20):
                r, g, b = trace_ray((0.0, 0.0, -3.0), (0.0, 0.0, 1.0), depth=depth)
                assert 0.0 <= b <= 0.1 + 1e-6
                assert g >= 0.0 and r >= 0.0

    def test_samples_vary_for_diffuse_surfaces(self):
        """Diffuse bounces are random, so repeated samples differ."""
        from pathtracer.core.integrator import trace_ray
        from pathtracer.scene import create_single_sphere_scene

        scene, _ = create_single_sphere_scene()
        scene.upload()

        samples = {trace_ray((0.0, 0.0, -3.0), (0.0, 0.0, 1.0)) for _ in range(10)}
        assert len(samples) > 1


class TestPostProcessing:
    """Tests for gamma_compress() and sanitize()."""

    def test_gamma_compress_is_square_root(self):
        from pathtracer.core.integrator import gamma_compress
        from pathtracer.core.vector import vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = gamma_compress(vec3(0.25, 1.0, 0.0))

        test_kernel()
        assert _vec(result[None]) == pytest.approx((0.5, 1.0, 0.0), abs=1e-6)

    def test_sanitize_zeroes_non_finite_channels(self):
        from pathtracer.core.integrator import sanitize

        value = ti.field(dtype=ti.math.vec3, shape=())
        result = ti.field(dtype=ti.math.vec3, shape=())
        value[None] = (math.nan, math.inf, 0.5)

        @ti.kernel
        def test_kernel():
            result[None] = sanitize(value[None])

        test_kernel()
        assert _vec(result[None]) == pytest.approx((0.0, 0.0, 0.5))
