"""Diffuse (matte) material implementation.

A diffuse surface scatters toward a random point inside the unit sphere that
sits on top of the hit point:

    target = position + normal + random_in_unit_sphere()

so scattered directions are biased toward the normal. The returned light is
tinted by the albedo and the ray is never absorbed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials.diffuse import Diffuse, scatter_diffuse
    >>> matte_green = Diffuse(albedo=(0.1, 0.9, 0.1))
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_diffuse(albedo, position, normal)
"""

from dataclasses import dataclass

import taichi as ti

from pathtracer.core.vector import random_in_unit_sphere, vec3


@dataclass(frozen=True)
class Diffuse:
    """Diffuse material properties.

    Attributes:
        albedo: Per-channel attenuation (R, G, B), conceptually in [0, 1].
    """

    albedo: tuple[float, float, float]


@ti.func
def scatter_diffuse(albedo: vec3, position: vec3, normal: vec3):
    """Sample a scattered direction for a diffuse surface.

    Args:
        albedo: The diffuse colour (RGB).
        position: The intersection point.
        normal: The outward unit normal at the intersection point.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: target - position, not normalized.
        - attenuation: The albedo, unchanged.
        - did_scatter: Always 1.
    """
    target = position + normal + random_in_unit_sphere()
    scattered_direction = target - position
    return scattered_direction, albedo, 1
