"""Sphere primitive with ray-sphere intersection.

The intersection solves the half-b form of the ray-sphere quadratic

    a*t^2 + 2*b*t + c = 0

with a = dot(d, d), b = dot(oc, d), c = dot(oc, oc) - r^2 and
oc = origin - centre. The near root is always tried before the far root,
which decides the surface seen when the ray starts inside the sphere.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.geometry.sphere import Sphere, check_hit
    >>> sphere = Sphere(centre=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use check_hit within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray, ray_at
from pathtracer.core.vector import vec3


@ti.dataclass
class Sphere:
    """A sphere defined by centre point and radius.

    Attributes:
        centre: The centre point of the sphere (vec3).
        radius: The radius of the sphere. Expected to be positive; this is
            not checked, and a non-positive radius yields degenerate normals.
    """

    centre: vec3
    radius: ti.f32


@ti.dataclass
class RayHit:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: 1 if the ray intersected the sphere, 0 if it missed.
        t: The ray parameter of the intersection. Only valid if hit == 1.
        position: The intersection point. Only valid if hit == 1.
        normal: The outward unit normal at the intersection point, i.e.
            (position - centre) / radius. It is never flipped toward the
            ray; materials that care about the side compare it with the ray
            direction themselves. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    position: vec3
    normal: vec3


@ti.func
def check_hit(ray: Ray, sphere: Sphere, t_min: ti.f32, t_max: ti.f32) -> RayHit:
    """Test for ray-sphere intersection inside the open interval (t_min, t_max).

    A discriminant of zero (a tangent ray) counts as a miss. Otherwise the
    near root is accepted if it lies strictly inside the interval, else the
    far root under the same test.

    Args:
        ray: The ray to test.
        sphere: The sphere to test against.
        t_min: Lower bound (exclusive) for an accepted hit.
        t_max: Upper bound (exclusive) for an accepted hit.

    Returns:
        A RayHit. Check the hit field to determine if an intersection was
        accepted.
    """
    oc = ray.origin - sphere.centre
    a = tm.dot(ray.direction, ray.direction)
    b = tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = b * b - a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_position = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)

    if discriminant > 0.0:
        root = ti.sqrt(discriminant)

        t = (-b - root) / a
        valid = (t > t_min) and (t < t_max)

        if not valid:
            t = (-b + root) / a
            valid = (t > t_min) and (t < t_max)

        if valid:
            did_hit = 1
            hit_t = t
            hit_position = ray_at(ray, t)
            hit_normal = (hit_position - sphere.centre) / sphere.radius

    return RayHit(hit=did_hit, t=hit_t, position=hit_position, normal=hit_normal)


@ti.func
def make_sphere(centre: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from centre and radius inside a Taichi kernel."""
    return Sphere(centre=centre, radius=radius)
