"""Core rendering module.

Components:
    vector: vec3 helpers (reflect, refract, Schlick, random sampling)
    ray: Ray data structure
    integrator: Radiance estimation along a ray (sky, bounces, depth limit)
    framebuffer: RGBA8 pixel buffer with a bottom-left origin
    progressive: RenderSession, the one-sample-per-frame accumulator

All per-ray work runs in Taichi functions, called from kernels.
"""

from .ray import Ray, make_ray, ray_at
from .vector import (
    cross,
    dot,
    length,
    length_squared,
    lerp,
    normalize,
    random_in_unit_sphere,
    reflect,
    refract,
    schlick,
    vec3,
)

# Note: integrator, framebuffer and progressive are NOT imported here to avoid
# circular imports. Import them directly, e.g.:
#   from pathtracer.core.progressive import RenderSession

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "dot",
    "cross",
    "length",
    "length_squared",
    "normalize",
    "reflect",
    "refract",
    "lerp",
    "schlick",
    "random_in_unit_sphere",
]
