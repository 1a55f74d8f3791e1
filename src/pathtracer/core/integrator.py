"""Radiance estimation for primary rays.

A ray that escapes the scene picks up the sky gradient. A ray that hits an
object scatters off its material, and the returned light is the
attenuation times the radiance carried by the scattered ray, down to a
fixed bounce depth. Hitting a surface with no bounces left, or being
absorbed, contributes black.

The estimate is defined recursively, but Taichi functions cannot recurse,
so `sample_radiance` walks the path in a loop and keeps the running product
of attenuations (the throughput). For every path this gives exactly the
value the recursive definition would return.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.integrator import trace_ray
    >>> from pathtracer.scene.showcase import create_single_sphere_scene
    >>> scene, camera = create_single_sphere_scene()
    >>> scene.upload()
    >>> trace_ray((0.0, 0.0, -3.0), (0.0, 0.0, 1.0))  # looks at the sphere
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray, make_ray
from pathtracer.core.vector import lerp, normalize, vec3
from pathtracer.materials.material import scatter
from pathtracer.scene.intersection import test_hits

# =============================================================================
# Rendering Constants
# =============================================================================

# Maximum number of bounces followed per path
MAX_DEPTH = 5

# Accepted hit interval; T_MIN keeps scattered rays off their own surface
T_MIN = 0.001
T_MAX = 1.0e6

# Samples accumulated per pixel before the progressive renderer goes idle
MAX_SAMPLES = 16

# Sky gradient, blended by the height of the ray direction
SKY_WHITE = vec3(1.0, 1.0, 1.0)
SKY_BLUE = vec3(0.5, 0.7, 1.0)


@ti.func
def background(direction: vec3) -> vec3:
    """Colour of the sky seen along a direction.

    White at the nadir, sky blue at the zenith, linear in the y component of
    the normalized direction in between.
    """
    unit_direction = normalize(direction)
    t = (unit_direction.y + 1.0) * 0.5
    return lerp(SKY_WHITE, SKY_BLUE, t)


@ti.func
def sample_radiance(ray: Ray, depth: ti.i32, t_min: ti.f32, t_max: ti.f32) -> vec3:
    """Estimate the light arriving along a ray.

    Args:
        ray: The ray to trace.
        depth: Number of bounces still allowed. With depth == 0 any hit is
            black; a miss still returns the sky.
        t_min: Lower bound (exclusive) of accepted hits, per bounce.
        t_max: Upper bound (exclusive) of accepted hits, per bounce.

    Returns:
        One Monte Carlo sample of the radiance (linear RGB).
    """
    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    origin = ray.origin
    direction = ray.direction
    remaining = depth

    # Cleared when the path ends
    active = 1
    while active == 1:
        rec = test_hits(make_ray(origin, direction), t_min, t_max)

        if rec.hit == 0:
            radiance = throughput * background(direction)
            active = 0
        elif remaining <= 0:
            active = 0
        else:
            scattered, attenuation, did_scatter = scatter(
                rec.material_id, direction, rec.position, rec.normal
            )
            if did_scatter == 0:
                active = 0
            else:
                throughput *= attenuation
                origin = scattered.origin
                direction = scattered.direction
                remaining -= 1

    return radiance


@ti.func
def gamma_compress(colour: vec3) -> vec3:
    """Gamma-2 encode a linear colour (per-channel square root)."""
    return ti.sqrt(colour)


@ti.func
def sanitize(colour: vec3) -> vec3:
    """Replace NaN or infinite channels with zero."""
    result = colour
    for c in ti.static(range(3)):
        if tm.isnan(result[c]) or tm.isinf(result[c]):
            result[c] = 0.0
    return result


# =============================================================================
# Python-callable entry points (debugging and tests)
# =============================================================================


@ti.kernel
def _trace_ray_kernel(
    origin: vec3, direction: vec3, depth: ti.i32, t_min: ti.f32, t_max: ti.f32
) -> vec3:
    return sample_radiance(make_ray(origin, direction), depth, t_min, t_max)


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = MAX_DEPTH,
    t_min: float = T_MIN,
    t_max: float = T_MAX,
) -> tuple[float, float, float]:
    """Trace one ray against the uploaded scene from Python.

    Renders nothing; useful for probing the scene and in tests. The scene
    must have been uploaded beforehand (see Scene.upload()).

    Args:
        origin: Ray origin.
        direction: Ray direction (need not be unit length).
        depth: Maximum number of bounces.
        t_min: Lower bound (exclusive) of accepted hits.
        t_max: Upper bound (exclusive) of accepted hits.

    Returns:
        One linear radiance sample as an (R, G, B) tuple.
    """
    colour = _trace_ray_kernel(vec3(*origin), vec3(*direction), depth, t_min, t_max)
    return (float(colour[0]), float(colour[1]), float(colour[2]))
