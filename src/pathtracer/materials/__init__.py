"""Materials module.

Components:
    diffuse: Matte scattering toward a random point above the surface
    metal: Mirror reflection perturbed by roughness
    glass: Reflection or refraction chosen by Schlick's approximation
    material: Material registry (device fields) and scatter dispatch

Each variant is a frozen dataclass on the host and a scatter function
returning (direction, attenuation, did_scatter) on the device.
"""

from .diffuse import Diffuse, scatter_diffuse
from .glass import Glass, reflection_probability, scatter_glass
from .material import (
    MAX_MATERIALS,
    Material,
    MaterialType,
    add_material,
    clear_materials,
    get_material_count,
    material_type_of,
    scatter,
)
from .metal import Metal, scatter_metal

__all__ = [
    # Variants
    "Diffuse",
    "Metal",
    "Glass",
    "Material",
    # Scatter functions
    "scatter_diffuse",
    "scatter_metal",
    "scatter_glass",
    "reflection_probability",
    # Registry
    "MaterialType",
    "MAX_MATERIALS",
    "material_type_of",
    "add_material",
    "clear_materials",
    "get_material_count",
    "scatter",
]
