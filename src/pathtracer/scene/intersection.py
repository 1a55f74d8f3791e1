"""Scene-level ray intersection over the uploaded spheres.

Spheres are stored in Taichi fields (structure-of-arrays) together with the
registry slot of their material. `test_hits` scans every object and keeps the
closest accepted hit by shrinking the upper bound of the search interval as
it goes.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.intersection import add_sphere, clear_scene, vec3
    >>> clear_scene()
    >>> add_sphere(vec3(0, 0, -1), 0.5, material_id=0)
    0
    >>> # Use test_hits within a Taichi kernel
"""

import taichi as ti

from pathtracer.core.ray import Ray
from pathtracer.core.vector import vec3
from pathtracer.geometry.sphere import Sphere, check_hit


@ti.dataclass
class ObjectHit:
    """Closest intersection of a ray with the scene.

    Attributes:
        hit: 1 if any object was hit, 0 otherwise.
        object_index: Index of the hit object in scene order, -1 on a miss.
        material_id: Material registry slot of the hit object, -1 on a miss.
        t: Ray parameter of the closest hit.
        position: Hit point.
        normal: Outward unit normal of the hit sphere at the hit point.
    """

    hit: ti.i32
    object_index: ti.i32
    material_id: ti.i32
    t: ti.f32
    position: vec3
    normal: vec3


# Maximum number of spheres supported in the scene
MAX_OBJECTS = 1024

# Sphere storage: Structure of Arrays layout for GPU efficiency
object_centres = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
object_radii = ti.field(dtype=ti.f32, shape=MAX_OBJECTS)
object_material_ids = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
num_objects = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres from the device-side scene.

    Only the count is reset; stale slot data is overwritten by later
    additions.
    """
    num_objects[None] = 0


def add_sphere(centre: vec3, radius: float, material_id: int = 0) -> int:
    """Append a sphere to the device-side scene.

    Args:
        centre: The centre point of the sphere.
        radius: The radius of the sphere. Not validated.
        material_id: The material registry slot used when shading the sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of objects is exceeded.
    """
    idx = num_objects[None]
    if idx >= MAX_OBJECTS:
        raise RuntimeError(f"Maximum number of objects ({MAX_OBJECTS}) exceeded")
    object_centres[idx] = centre
    object_radii[idx] = radius
    object_material_ids[idx] = material_id
    num_objects[None] = idx + 1
    return idx


def get_object_count() -> int:
    """Return the number of spheres currently uploaded."""
    return num_objects[None]


@ti.func
def test_hits(ray: Ray, t_min: ti.f32, t_max: ti.f32) -> ObjectHit:
    """Find the closest intersection of a ray with any scene object.

    Each object is tested against (t_min, closest_t), where closest_t starts
    at t_max and drops to the t of every accepted hit, so the surviving hit
    is the nearest one.

    Args:
        ray: The ray to trace.
        t_min: Lower bound (exclusive) for accepted hits.
        t_max: Upper bound (exclusive) for accepted hits.

    Returns:
        An ObjectHit for the closest object, or one with hit == 0 if nothing
        was hit.
    """
    closest_t = t_max
    result = ObjectHit(
        hit=0,
        object_index=-1,
        material_id=-1,
        t=0.0,
        position=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
    )

    for i in range(num_objects[None]):
        sphere = Sphere(centre=object_centres[i], radius=object_radii[i])
        rec = check_hit(ray, sphere, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = ObjectHit(
                hit=1,
                object_index=i,
                material_id=object_material_ids[i],
                t=rec.t,
                position=rec.position,
                normal=rec.normal,
            )

    return result
