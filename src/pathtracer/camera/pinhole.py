"""Pinhole camera for primary ray generation.

The camera is described on the host by a look-at configuration and turned
into viewport vectors stored in Taichi fields, so kernels can generate rays
without any per-call setup:

- w: unit vector from lookat toward lookfrom (the camera looks along -w)
- u: unit vector pointing right, normalize(vup x w)
- v: up vector in the image plane, w x u

The viewport sits at unit distance along -w and spans
2 * tan(vfov / 2) vertically and aspect_ratio times that horizontally.
Image coordinates (u, v) in [0, 1]^2 map to the viewport with (0, 0) at the
bottom-left corner.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>> camera = PinholeCamera(
    ...     lookfrom=(2.0, 2.0, -3.0),
    ...     lookat=(0.0, 0.5, 0.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=60.0,
    ...     aspect_ratio=16.0 / 9.0,
    ... )
    >>> setup_camera(camera)
    >>> @ti.kernel
    ... def centre_ray():
    ...     ray = get_ray(0.5, 0.5)
"""

import math
from dataclasses import dataclass, replace

import numpy as np
import taichi as ti

from pathtracer.core.ray import Ray, make_ray


@dataclass(frozen=True)
class PinholeCamera:
    """Look-at configuration of a pinhole (perspective) camera.

    Attributes:
        lookfrom: Camera position in world space.
        lookat: Point the camera looks at.
        vup: Approximate up direction; must not be parallel to the view axis.
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Viewport width divided by height.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float]
    vfov: float
    aspect_ratio: float

    def with_aspect_ratio(self, aspect_ratio: float) -> "PinholeCamera":
        """Return a copy of this camera with another aspect ratio."""
        return replace(self, aspect_ratio=aspect_ratio)


@dataclass(frozen=True)
class CameraFrame:
    """Viewport geometry derived from a PinholeCamera, for inspection."""

    origin: tuple[float, float, float]
    lower_left_corner: tuple[float, float, float]
    horizontal: tuple[float, float, float]
    vertical: tuple[float, float, float]


# Camera state read by the kernels
_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())


def _validate_camera(camera: PinholeCamera) -> None:
    if not 0.0 < camera.vfov < 180.0:
        raise ValueError(f"vfov must be in (0, 180) degrees, got {camera.vfov}")
    if camera.aspect_ratio <= 0.0:
        raise ValueError(f"aspect_ratio must be positive, got {camera.aspect_ratio}")
    if tuple(camera.lookfrom) == tuple(camera.lookat):
        raise ValueError("lookfrom and lookat must be different points")


def compute_camera_frame(camera: PinholeCamera) -> CameraFrame:
    """Compute the viewport vectors of a camera without touching the device.

    Args:
        camera: The camera configuration.

    Returns:
        The origin, lower-left corner and viewport span vectors.

    Raises:
        ValueError: If vfov or aspect_ratio is out of range, if lookfrom
            equals lookat, or if vup is parallel to the view direction.
    """
    _validate_camera(camera)

    half_height = math.tan(math.radians(camera.vfov) / 2.0)
    half_width = camera.aspect_ratio * half_height

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    w = lookfrom - lookat
    w = w / np.linalg.norm(w)

    u = np.cross(vup, w)
    u_norm = np.linalg.norm(u)
    if u_norm == 0.0:
        raise ValueError("vup must not be parallel to the view direction")
    u = u / u_norm

    v = np.cross(w, u)

    lower_left = lookfrom - half_width * u - half_height * v - w
    horizontal = 2.0 * half_width * u
    vertical = 2.0 * half_height * v

    def as_tuple(a: np.ndarray) -> tuple[float, float, float]:
        return (float(a[0]), float(a[1]), float(a[2]))

    return CameraFrame(
        origin=as_tuple(lookfrom),
        lower_left_corner=as_tuple(lower_left),
        horizontal=as_tuple(horizontal),
        vertical=as_tuple(vertical),
    )


def setup_camera(camera: PinholeCamera) -> CameraFrame:
    """Upload a camera to the fields used by get_ray().

    Must be called from Python scope before rendering, and again whenever
    the camera or its aspect ratio changes.

    Args:
        camera: The camera configuration.

    Returns:
        The CameraFrame that was uploaded.

    Raises:
        ValueError: If the camera configuration is degenerate.
    """
    frame = compute_camera_frame(camera)
    _camera_origin[None] = frame.origin
    _lower_left_corner[None] = frame.lower_left_corner
    _viewport_horizontal[None] = frame.horizontal
    _viewport_vertical[None] = frame.vertical
    return frame


@ti.func
def get_ray(u: ti.f32, v: ti.f32) -> Ray:
    """Generate the primary ray through image coordinates (u, v).

    Args:
        u: Horizontal coordinate, 0 = left edge, 1 = right edge.
        v: Vertical coordinate, 0 = bottom edge, 1 = top edge.

    Returns:
        A Ray from the camera origin toward the viewport point. The
        direction is not normalized.
    """
    origin = _camera_origin[None]
    target = _lower_left_corner[None] + u * _viewport_horizontal[None] + v * _viewport_vertical[None]
    return make_ray(origin, target - origin)


@ti.func
def get_ray_jittered(pixel_x: ti.i32, pixel_y: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate a primary ray through a random point of a pixel.

    One uniform [0, 1) offset is drawn per axis, so repeated samples cover
    the pixel area and average out aliasing.

    Args:
        pixel_x: Pixel column (0 = left).
        pixel_y: Pixel row (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.
    """
    offset_x = ti.random(ti.f32)
    offset_y = ti.random(ti.f32)
    u = (ti.cast(pixel_x, ti.f32) + offset_x) / ti.cast(width, ti.f32)
    v = (ti.cast(pixel_y, ti.f32) + offset_y) / ti.cast(height, ti.f32)
    return get_ray(u, v)


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Read back the uploaded camera state for debugging."""
    fields = {
        "origin": _camera_origin,
        "lower_left": _lower_left_corner,
        "horizontal": _viewport_horizontal,
        "vertical": _viewport_vertical,
    }
    info = {}
    for name, field in fields.items():
        vec = field[None]
        info[name] = (float(vec[0]), float(vec[1]), float(vec[2]))
    return info
