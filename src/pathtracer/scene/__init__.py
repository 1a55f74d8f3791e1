"""Scene module.

Components:
    scene: Host-side Scene / SceneObject and upload to the device
    intersection: Device-side sphere storage and closest-hit search
    showcase: The three-material demo scene and a single-sphere test scene
"""

from .intersection import MAX_OBJECTS, ObjectHit, clear_scene, get_object_count, test_hits
from .scene import Scene, SceneObject
from .showcase import ShowcaseParams, create_showcase_scene, create_single_sphere_scene

__all__ = [
    "Scene",
    "SceneObject",
    "ObjectHit",
    "MAX_OBJECTS",
    "clear_scene",
    "get_object_count",
    "test_hits",
    "ShowcaseParams",
    "create_showcase_scene",
    "create_single_sphere_scene",
]
