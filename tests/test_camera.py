"""Unit tests for the pinhole camera.

Tests cover:
- Viewport geometry from a look-at configuration
- Validation of degenerate cameras
- Ray generation on the device (centre, corners, jitter)
"""

import math

import pytest
import taichi as ti


def _vec(v):
    return (float(v[0]), float(v[1]), float(v[2]))


def _camera(**overrides):
    from pathtracer.camera import PinholeCamera

    config = {
        "lookfrom": (0.0, 0.0, -3.0),
        "lookat": (0.0, 0.0, 0.0),
        "vup": (0.0, 1.0, 0.0),
        "vfov": 90.0,
        "aspect_ratio": 2.0,
    }
    config.update(overrides)
    return PinholeCamera(**config)


class TestCameraFrame:
    """Tests for compute_camera_frame()."""

    def test_frame_vectors(self):
        """Viewport spans 2*tan(vfov/2) vertically and aspect times that across."""
        from pathtracer.camera import compute_camera_frame

        frame = compute_camera_frame(_camera())
        assert frame.origin == (0.0, 0.0, -3.0)
        assert frame.lower_left_corner == pytest.approx((2.0, -1.0, -2.0), abs=1e-9)
        assert frame.horizontal == pytest.approx((-4.0, 0.0, 0.0), abs=1e-9)
        assert frame.vertical == pytest.approx((0.0, 2.0, 0.0), abs=1e-9)

    def test_vertical_extent_follows_vfov(self):
        """Narrower fields of view give a shorter viewport."""
        from pathtracer.camera import compute_camera_frame

        frame = compute_camera_frame(_camera(vfov=60.0, aspect_ratio=1.0))
        expected = 2.0 * math.tan(math.radians(30.0))
        assert math.hypot(*frame.vertical) == pytest.approx(expected)
        assert math.hypot(*frame.horizontal) == pytest.approx(expected)

    def test_with_aspect_ratio(self):
        """with_aspect_ratio returns a modified copy."""
        camera = _camera()
        wider = camera.with_aspect_ratio(3.0)
        assert wider.aspect_ratio == 3.0
        assert camera.aspect_ratio == 2.0
        assert wider.lookfrom == camera.lookfrom

    @pytest.mark.parametrize(
        "overrides",
        [
            {"vfov": 0.0},
            {"vfov": 180.0},
            {"aspect_ratio": 0.0},
            {"lookat": (0.0, 0.0, -3.0)},
            {"vup": (0.0, 0.0, 1.0)},
        ],
    )
    def test_degenerate_cameras_rejected(self, overrides):
        """Out-of-range angles, zero aspect, coincident points and parallel vup."""
        from pathtracer.camera import compute_camera_frame

        with pytest.raises(ValueError):
            compute_camera_frame(_camera(**overrides))


class TestRayGeneration:
    """Tests for setup_camera(), get_ray() and get_ray_jittered()."""

    def test_centre_ray_points_at_lookat(self):
        """The ray through (0.5, 0.5) goes straight toward lookat."""
        from pathtracer.camera import get_ray, setup_camera

        setup_camera(_camera())
        origin = ti.field(dtype=ti.math.vec3, shape=())
        direction = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = get_ray(0.5, 0.5)
            origin[None] = ray.origin
            direction[None] = ray.direction

        test_kernel()
        assert _vec(origin[None]) == pytest.approx((0.0, 0.0, -3.0))
        assert _vec(direction[None]) == pytest.approx((0.0, 0.0, 1.0), abs=1e-6)

    def test_bottom_left_corner(self):
        """(0, 0) maps to the lower-left corner of the viewport."""
        from pathtracer.camera import get_ray, setup_camera

        setup_camera(_camera())
        direction = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            direction[None] = get_ray(0.0, 0.0).direction

        test_kernel()
        # lower_left (2, -1, -2) minus origin (0, 0, -3)
        assert _vec(direction[None]) == pytest.approx((2.0, -1.0, 1.0), abs=1e-6)

    def test_jittered_rays_stay_inside_pixel(self):
        """Jittered rays hit the viewport within their pixel's footprint."""
        from pathtracer.camera import get_ray_jittered, setup_camera

        setup_camera(_camera())
        n = 1024
        hits = ti.field(dtype=ti.math.vec3, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                ray = get_ray_jittered(3, 1, 4, 2)
                hits[i] = ray.origin + ray.direction

        test_kernel()
        points = hits.to_numpy()
        # Pixel (3, 1) of a 4x2 image covers u in [0.75, 1), v in [0.5, 1)
        u = (2.0 - points[:, 0]) / 4.0
        v = (points[:, 1] + 1.0) / 2.0
        assert u.min() >= 0.75 - 1e-6 and u.max() < 1.0 + 1e-6
        assert v.min() >= 0.5 - 1e-6 and v.max() < 1.0 + 1e-6
        # Both axes vary independently
        assert u.std() > 0.03 and v.std() > 0.05

    def test_get_camera_info(self):
        """The uploaded frame can be read back."""
        from pathtracer.camera import get_camera_info, setup_camera

        frame = setup_camera(_camera())
        info = get_camera_info()
        assert info["origin"] == pytest.approx(frame.origin)
        assert info["lower_left"] == pytest.approx(frame.lower_left_corner)
        assert info["horizontal"] == pytest.approx(frame.horizontal)
        assert info["vertical"] == pytest.approx(frame.vertical)
