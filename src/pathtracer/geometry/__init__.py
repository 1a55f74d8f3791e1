"""Geometry module: the sphere primitive and its ray intersection test."""

from .sphere import RayHit, Sphere, check_hit, make_sphere

__all__ = [
    "Sphere",
    "RayHit",
    "check_hit",
    "make_sphere",
]
