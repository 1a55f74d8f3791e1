"""Glass (dielectric) material implementation.

This module implements dielectric scattering for transparent materials like
glass and water.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when no refracted direction exists

Whether the ray enters or leaves the medium is read from the sign of
dot(direction, normal) against the outward normal. The material then picks
reflection with the Schlick probability (or always, on total internal
reflection) and refraction otherwise, using one uniform random draw.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials.glass import Glass, scatter_glass
    >>> tinted = Glass(albedo=(0.5, 0.5, 1.0), refractive_index=2.5)
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_glass(
    >>> #     albedo, refractive_index, incident_dir, normal
    >>> # )
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from pathtracer.core.vector import length, reflect, refract, schlick, vec3


@dataclass(frozen=True)
class Glass:
    """Glass (dielectric) material properties.

    Attributes:
        albedo: Per-channel tint applied on every bounce, reflected or
            refracted.
        refractive_index: Index of refraction. Common values:
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
    """

    albedo: tuple[float, float, float]
    refractive_index: float = 1.5


@ti.func
def _orient(refractive_index: ti.f32, incident_direction: vec3, normal: vec3):
    """Pick the normal, index ratio and cosine for the side the ray is on."""
    ray_dot_normal = tm.dot(incident_direction, normal)
    outward_normal = normal
    ni_over_nt = 1.0 / refractive_index
    cosine = -ray_dot_normal / length(incident_direction)
    if ray_dot_normal > 0.0:
        # Leaving the medium
        outward_normal = -normal
        ni_over_nt = refractive_index
        cosine = refractive_index * ray_dot_normal / length(incident_direction)
    return outward_normal, ni_over_nt, cosine


@ti.func
def _refract_or_reflect(refractive_index: ti.f32, incident_direction: vec3, normal: vec3):
    """Refracted direction and the probability of reflecting instead."""
    outward_normal, ni_over_nt, cosine = _orient(refractive_index, incident_direction, normal)
    refracted, can_refract = refract(incident_direction, outward_normal, ni_over_nt)
    probability = 1.0
    if can_refract == 1:
        probability = schlick(cosine, refractive_index)
    return refracted, probability


@ti.func
def reflection_probability(
    refractive_index: ti.f32,
    incident_direction: vec3,
    normal: vec3,
) -> ti.f32:
    """Compute the probability that a ray hitting the glass is reflected.

    Args:
        refractive_index: Index of refraction of the material.
        incident_direction: The incoming ray direction (need not be unit length).
        normal: The outward unit normal at the hit point.

    Returns:
        1.0 on total internal reflection, otherwise Schlick's reflectance.
    """
    _, probability = _refract_or_reflect(refractive_index, incident_direction, normal)
    return probability


@ti.func
def scatter_glass(
    albedo: vec3,
    refractive_index: ti.f32,
    incident_direction: vec3,
    normal: vec3,
):
    """Compute scattered ray direction for glass material.

    Args:
        albedo: The glass tint (RGB).
        refractive_index: Index of refraction of the material.
        incident_direction: The incoming ray direction (need not be unit length).
        normal: The outward unit normal at the hit point.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The reflected or refracted direction.
        - attenuation: The albedo, whichever path was taken.
        - did_scatter: Always 1 for glass.
    """
    refracted, probability = _refract_or_reflect(refractive_index, incident_direction, normal)

    scattered_direction = refracted
    if ti.random(ti.f32) < probability:
        scattered_direction = reflect(incident_direction, normal)

    return scattered_direction, albedo, 1
