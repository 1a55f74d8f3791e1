"""Python-side scene description and device upload.

A Scene is an ordered list of spheres, each carrying one material. It is
built on the host, then uploaded once into the Taichi fields used by the
kernels (see `pathtracer.scene.intersection` and
`pathtracer.materials.material`). After upload the scene is frozen: the
kernels read it concurrently while rendering, so any change has to go
through a new Scene.

Example:
    >>> scene = Scene()
    >>> scene.add_sphere((0.0, 0.5, 0.0), 0.5, Diffuse(albedo=(0.1, 0.9, 0.1)))
    0
    >>> scene.add_sphere((0.0, -1000.0, 0.0), 1000.0, Diffuse(albedo=(0.5, 0.5, 0.5)))
    1
    >>> scene.upload()
"""

from dataclasses import dataclass
from typing import Any

from pathtracer.core.vector import vec3
from pathtracer.materials.diffuse import Diffuse
from pathtracer.materials.glass import Glass
from pathtracer.materials.material import (
    Material,
    MaterialType,
    add_material,
    clear_materials,
    material_type_of,
)
from pathtracer.materials.metal import Metal
from pathtracer.scene.intersection import MAX_OBJECTS, add_sphere, clear_scene


@dataclass(frozen=True)
class SceneObject:
    """One sphere of the scene and its surface material.

    Attributes:
        centre: Centre of the sphere.
        radius: Radius of the sphere. Expected positive, not checked.
        material: The sphere's material.
    """

    centre: tuple[float, float, float]
    radius: float
    material: Material


class Scene:
    """Ordered collection of spheres that can be uploaded to the device.

    Attributes:
        objects: The scene objects in insertion order (read-only view).
        uploaded: True once upload() has run; the scene is frozen from then on.
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self._objects: list[SceneObject] = []
        self._uploaded = False

    def __len__(self) -> int:
        return len(self._objects)

    def __repr__(self) -> str:
        return f"Scene(objects={len(self._objects)}, uploaded={self._uploaded})"

    @property
    def objects(self) -> tuple[SceneObject, ...]:
        return tuple(self._objects)

    @property
    def uploaded(self) -> bool:
        return self._uploaded

    def add_sphere(
        self,
        centre: tuple[float, float, float],
        radius: float,
        material: Material,
    ) -> int:
        """Append a sphere with the given material.

        Args:
            centre: Centre of the sphere.
            radius: Radius of the sphere.
            material: A Diffuse, Metal or Glass instance.

        Returns:
            The index of the new object.

        Raises:
            RuntimeError: If the scene was already uploaded, or if it is full.
            TypeError: If material is not a supported material variant.
        """
        if self._uploaded:
            raise RuntimeError("Scene is frozen after upload(); build a new Scene instead")
        if len(self._objects) >= MAX_OBJECTS:
            raise RuntimeError(f"Maximum number of objects ({MAX_OBJECTS}) exceeded")
        material_type_of(material)

        self._objects.append(
            SceneObject(
                centre=(float(centre[0]), float(centre[1]), float(centre[2])),
                radius=float(radius),
                material=material,
            )
        )
        return len(self._objects) - 1

    def upload(self) -> None:
        """Write the scene into the device fields and freeze it.

        Replaces whatever scene was uploaded before. Uploading the same
        scene again rewrites identical data, which is how a render session
        rebinds a scene after another one was active.
        """
        clear_scene()
        clear_materials()
        for obj in self._objects:
            material_id = add_material(obj.material)
            add_sphere(vec3(*obj.centre), obj.radius, material_id)
        self._uploaded = True

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        spheres = []
        for obj in self._objects:
            material: dict[str, Any] = {
                "type": material_type_of(obj.material).name.lower(),
                "albedo": list(obj.material.albedo),
            }
            if isinstance(obj.material, Metal):
                material["roughness"] = obj.material.roughness
            elif isinstance(obj.material, Glass):
                material["refractive_index"] = obj.material.refractive_index
            spheres.append(
                {"centre": list(obj.centre), "radius": obj.radius, "material": material}
            )
        return {"spheres": spheres}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Scene":
        """Build a scene from a dictionary produced by to_dict().

        Raises:
            ValueError: If a material type is unknown.
        """
        scene = cls()
        for sphere in data.get("spheres", []):
            scene.add_sphere(
                tuple(sphere["centre"]),
                sphere["radius"],
                _material_from_dict(sphere["material"]),
            )
        return scene


def _material_from_dict(data: dict[str, Any]) -> Material:
    kind = data.get("type", "").upper()
    if kind not in MaterialType.__members__:
        raise ValueError(f"Unknown material type: {data.get('type')!r}")

    albedo = tuple(data.get("albedo", (0.5, 0.5, 0.5)))
    material_type = MaterialType[kind]
    if material_type == MaterialType.METAL:
        return Metal(albedo=albedo, roughness=data.get("roughness", 0.0))
    if material_type == MaterialType.GLASS:
        return Glass(albedo=albedo, refractive_index=data.get("refractive_index", 1.5))
    return Diffuse(albedo=albedo)
