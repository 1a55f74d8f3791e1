"""Material registry and scatter dispatch.

Materials form a closed set of variants (Diffuse, Metal, Glass). On the
Python side they are frozen dataclasses; on the device side every material
occupies one slot of a structure-of-arrays table:

    material_kinds[i]   - MaterialType tag
    material_albedos[i] - attenuation colour
    material_params[i]  - roughness (Metal), refractive index (Glass),
                          unused (Diffuse)

`scatter` selects the variant with a single switch on the tag, so adding a
variant means adding a dataclass, a scatter function and one branch here.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials import Diffuse, Glass
    >>> from pathtracer.materials.material import add_material, clear_materials
    >>> clear_materials()
    >>> add_material(Diffuse(albedo=(0.5, 0.5, 0.5)))
    0
    >>> add_material(Glass(albedo=(1.0, 1.0, 1.0), refractive_index=1.5))
    1
"""

from enum import IntEnum

import taichi as ti

from pathtracer.core.ray import Ray
from pathtracer.core.vector import vec3
from pathtracer.materials.diffuse import Diffuse, scatter_diffuse
from pathtracer.materials.glass import Glass, scatter_glass
from pathtracer.materials.metal import Metal, scatter_metal

Material = Diffuse | Metal | Glass


class MaterialType(IntEnum):
    """Tag identifying the material variant stored in a registry slot."""

    DIFFUSE = 0
    METAL = 1
    GLASS = 2


MAX_MATERIALS = 1024

material_kinds = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_params = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def material_type_of(material: Material) -> MaterialType:
    """Return the dispatch tag of a material.

    Raises:
        TypeError: If material is not one of Diffuse, Metal or Glass.
    """
    if isinstance(material, Diffuse):
        return MaterialType.DIFFUSE
    if isinstance(material, Metal):
        return MaterialType.METAL
    if isinstance(material, Glass):
        return MaterialType.GLASS
    raise TypeError(
        f"Expected Diffuse, Metal or Glass material, got {type(material).__name__}"
    )


def _material_param(material: Material) -> float:
    if isinstance(material, Metal):
        return float(material.roughness)
    if isinstance(material, Glass):
        return float(material.refractive_index)
    return 0.0


def clear_materials() -> None:
    """Clear the material registry.

    The slot data is left in place and overwritten by later additions.
    """
    num_materials[None] = 0


def add_material(material: Material) -> int:
    """Store a material in the next free registry slot.

    Roughness and refractive index are stored as given; degenerate values
    are not rejected here and show up as NaN/Inf radiance instead.

    Args:
        material: A Diffuse, Metal or Glass instance.

    Returns:
        The slot index (material id) of the stored material.

    Raises:
        TypeError: If material is not one of the supported variants.
        ValueError: If the albedo does not have three components.
        RuntimeError: If the maximum number of materials is exceeded.
    """
    kind = material_type_of(material)
    if len(material.albedo) != 3:
        raise ValueError(
            f"Albedo must have 3 components (R, G, B), got {len(material.albedo)}"
        )

    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    albedo = material.albedo
    material_kinds[idx] = int(kind)
    material_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    material_params[idx] = _material_param(material)
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Return the number of registered materials."""
    return num_materials[None]


@ti.func
def scatter(material_id: ti.i32, direction: vec3, position: vec3, normal: vec3):
    """Scatter an incoming ray off the surface of a registered material.

    Args:
        material_id: Registry slot of the surface material.
        direction: Direction of the incoming ray (need not be unit length).
        position: The hit point; becomes the scattered ray's origin.
        normal: Outward unit normal at the hit point.

    Returns:
        A tuple of (scattered_ray, attenuation, did_scatter). did_scatter == 0
        means the ray was absorbed and the other values are meaningless.
    """
    kind = material_kinds[material_id]
    albedo = material_albedos[material_id]
    param = material_params[material_id]

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if kind == int(MaterialType.DIFFUSE):
        scattered_direction, attenuation, did_scatter = scatter_diffuse(
            albedo, position, normal
        )
    elif kind == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter = scatter_metal(
            albedo, param, direction, normal
        )
    elif kind == int(MaterialType.GLASS):
        scattered_direction, attenuation, did_scatter = scatter_glass(
            albedo, param, direction, normal
        )

    return Ray(origin=position, direction=scattered_direction), attenuation, did_scatter
