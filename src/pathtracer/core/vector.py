"""Vector utilities for GPU-accelerated path tracing.

All vectors are ``taichi.math.vec3`` values and are used interchangeably as
positions, directions and (unnormalized) colours. Addition, subtraction,
scaling and division are the native vector operators; this module adds the
geometric helpers the tracer needs on top of them, plus the random sampling
used by the diffuse and metal materials.

Every function is a ``@ti.func`` and must be called from inside a Taichi
kernel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.vector import reflect, vec3
    >>> @ti.kernel
    ... def mirror() -> vec3:
    ...     return reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))
    >>> mirror()  # (1, 1, 0)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(length_squared(v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Scale a vector to unit length.

    A zero-length input is not guarded against: the division produces
    non-finite components, which then propagate through the radiance
    estimate.

    Args:
        v: The input vector.

    Returns:
        v / length(v).
    """
    return v / length(v)


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Reflect a vector about a normal.

    Computes v - 2 * dot(v, n) * n. Applying it twice with the same unit
    normal returns the original vector.

    Args:
        v: The incoming direction (pointing toward the surface).
        n: The surface normal (should be unit length).

    Returns:
        The reflected direction.
    """
    return v - 2.0 * tm.dot(v, n) * n


@ti.func
def refract(v: vec3, n: vec3, ni_over_nt: ti.f32):
    """Refract a direction through a surface using Snell's law.

    The incoming direction is normalized first. With dt = dot(v_hat, n),
    refraction is possible only when the discriminant

        1 - ni_over_nt^2 * (1 - dt^2)

    is strictly positive; otherwise the ray undergoes total internal
    reflection.

    Args:
        v: The incoming direction (need not be unit length).
        n: The surface normal on the side the ray arrives from.
        ni_over_nt: Ratio of refractive indices (incident / transmitted).

    Returns:
        A tuple (direction, ok). ok is 1 and direction is the refracted
        direction when refraction happens; ok is 0 and direction is the
        zero vector on total internal reflection.
    """
    unit_v = normalize(v)
    dt = tm.dot(unit_v, n)
    discriminant = 1.0 - ni_over_nt * ni_over_nt * (1.0 - dt * dt)
    refracted = vec3(0.0, 0.0, 0.0)
    ok = 0
    if discriminant > 0.0:
        refracted = ni_over_nt * (unit_v - n * dt) - n * ti.sqrt(discriminant)
        ok = 1
    return refracted, ok


@ti.func
def lerp(a: vec3, b: vec3, t: ti.f32) -> vec3:
    """Linearly interpolate between two vectors.

    Not clamped: callers keep t in [0, 1] where it matters.

    Returns:
        (1 - t) * a + t * b.
    """
    return (1.0 - t) * a + t * b


@ti.func
def schlick(cosine: ti.f32, refractive_index: ti.f32) -> ti.f32:
    """Approximate Fresnel reflectance with Schlick's formula.

    Args:
        cosine: Cosine of the angle between the ray and the normal.
        refractive_index: Refractive index of the material.

    Returns:
        r0 + (1 - r0) * (1 - cosine)^5 with r0 = ((1 - n) / (1 + n))^2.
    """
    r0 = (1.0 - refractive_index) / (1.0 + refractive_index)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a uniformly distributed point strictly inside the unit sphere.

    Rejection sampling: draw in [0, 2)^3, shift by (1, 1, 1) and retry until
    the squared length is below 1. About 48% of draws are rejected; the loop
    has no iteration cap.

    Returns:
        A random point with squared length < 1.
    """
    p = vec3(1.0, 1.0, 1.0)
    while tm.dot(p, p) >= 1.0:
        p = vec3(
            ti.random(ti.f32) * 2.0,
            ti.random(ti.f32) * 2.0,
            ti.random(ti.f32) * 2.0,
        ) - vec3(1.0, 1.0, 1.0)
    return p
