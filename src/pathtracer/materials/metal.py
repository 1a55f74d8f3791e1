"""Metal: mirror reflection blurred by a roughness radius.

A smooth metal (roughness 0) is a perfect mirror. A rough one offsets the
mirror direction by a random point inside a sphere of radius `roughness`,
which blurs reflections.

Mirror direction:
    R = I - 2(I . N)N

where I is the normalized incident direction and N is the surface normal.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials.metal import Metal, scatter_metal
    >>> brushed_red = Metal(albedo=(0.9, 0.1, 0.1), roughness=0.2)
    >>> # Inside a kernel:
    >>> # d, att, did = scatter_metal(albedo, 0.2, ray_direction, normal)
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from pathtracer.core.vector import normalize, random_in_unit_sphere, reflect, vec3


@dataclass(frozen=True)
class Metal:
    """Reflective metal surface.

    Attributes:
        albedo: Tint multiplied into every reflection.
        roughness: Radius of the random offset added to the mirror direction.
            Usually in [0, 1]; larger values are accepted.
    """

    albedo: tuple[float, float, float]
    roughness: float = 0.0


@ti.func
def scatter_metal(
    albedo: vec3,
    roughness: ti.f32,
    incident_direction: vec3,
    normal: vec3,
):
    """Reflect an incoming ray off a metal surface.

    Reflects the normalized incident direction about the surface normal,
    then perturbs the result by roughness * random_in_unit_sphere(). The
    perturbed direction is not renormalized. The ray is absorbed if the
    scattered direction no longer points out of the surface.

    With roughness 0 the perturbation is exactly zero, so the scattered
    direction equals reflect(normalize(incident_direction), normal).

    Args:
        albedo: The reflective colour (RGB).
        roughness: Radius of the random offset; 0 gives a perfect mirror.
        incident_direction: The incoming ray direction (need not be unit length).
        normal: The outward surface normal (unit length).

    Returns:
        (scattered_direction, albedo, did_scatter), with did_scatter == 0
        when the blurred reflection points into the surface.
    """
    reflected = reflect(normalize(incident_direction), normal)
    scattered_direction = reflected + roughness * random_in_unit_sphere()

    did_scatter = 0
    if tm.dot(scattered_direction, normal) > 0.0:
        did_scatter = 1

    return scattered_direction, albedo, did_scatter
