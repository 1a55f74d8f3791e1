"""Unit tests for the Ray data structure."""

import taichi as ti


def _vec(v):
    return (float(v[0]), float(v[1]), float(v[2]))


class TestRay:
    """Tests for Ray, make_ray and ray_at."""

    def test_ray_at_parameters(self):
        """ray_at walks along the unnormalized direction, backwards for t < 0."""
        from pathtracer.core.ray import Ray, ray_at
        from pathtracer.core.vector import vec3

        result = ti.field(dtype=ti.math.vec3, shape=3)

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -2.0))
            result[0] = ray_at(ray, 0.0)
            result[1] = ray_at(ray, 2.5)
            result[2] = ray_at(ray, -1.0)

        test_kernel()
        assert _vec(result[0]) == (1.0, 2.0, 3.0)
        assert _vec(result[1]) == (1.0, 2.0, -2.0)
        assert _vec(result[2]) == (1.0, 2.0, 5.0)

    def test_make_ray_keeps_direction_length(self):
        """make_ray stores the direction as given, without normalizing."""
        from pathtracer.core.ray import make_ray
        from pathtracer.core.vector import vec3

        origin = ti.field(dtype=ti.math.vec3, shape=())
        direction = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 1.0, 0.0), vec3(3.0, 0.0, 4.0))
            origin[None] = ray.origin
            direction[None] = ray.direction

        test_kernel()
        assert _vec(origin[None]) == (0.0, 1.0, 0.0)
        assert _vec(direction[None]) == (3.0, 0.0, 4.0)
