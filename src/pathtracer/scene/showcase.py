"""Demo scenes.

The showcase scene puts one sphere of each material side by side on a huge
floor sphere, lit only by the sky:

- Left: red metal, slightly rough
- Middle: green diffuse
- Right: blue-tinted glass with a high refractive index
- Floor: grey diffuse sphere of radius 1000 whose top touches y = 0

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.showcase import ShowcaseParams, create_showcase_scene
    >>> scene, camera = create_showcase_scene(ShowcaseParams(metal_roughness=0.0))
    >>> len(scene)
    4
"""

from dataclasses import dataclass

from pathtracer.camera.pinhole import PinholeCamera
from pathtracer.materials.diffuse import Diffuse
from pathtracer.materials.glass import Glass
from pathtracer.materials.metal import Metal
from pathtracer.scene.scene import Scene


@dataclass
class ShowcaseParams:
    """Adjustable parameters of the showcase scene.

    Attributes:
        metal_roughness: Roughness of the metal sphere. Default 0.2.
        glass_refractive_index: Refractive index of the glass sphere.
            Default 2.5.
    """

    metal_roughness: float = 0.2
    glass_refractive_index: float = 2.5


# =============================================================================
# Showcase Constants
# =============================================================================

SPHERE_RADIUS = 0.5
FLOOR_RADIUS = 1000.0

METAL_ALBEDO = (0.9, 0.1, 0.1)
DIFFUSE_ALBEDO = (0.1, 0.9, 0.1)
GLASS_ALBEDO = (0.5, 0.5, 1.0)
FLOOR_ALBEDO = (0.5, 0.5, 0.5)

CAMERA_LOOKFROM = (2.0, 2.0, -3.0)
CAMERA_LOOKAT = (0.0, 0.5, 0.0)
CAMERA_VUP = (0.0, 1.0, 0.0)
CAMERA_VFOV = 60.0


def _showcase_camera(aspect_ratio: float) -> PinholeCamera:
    return PinholeCamera(
        lookfrom=CAMERA_LOOKFROM,
        lookat=CAMERA_LOOKAT,
        vup=CAMERA_VUP,
        vfov=CAMERA_VFOV,
        aspect_ratio=aspect_ratio,
    )


def create_showcase_scene(
    params: ShowcaseParams | None = None,
    aspect_ratio: float = 1.0,
) -> tuple[Scene, PinholeCamera]:
    """Create the three-material showcase scene.

    Args:
        params: Optional ShowcaseParams. If None, uses ShowcaseParams().
        aspect_ratio: Camera aspect ratio. A RenderSession overrides it with
            its own width / height.

    Returns:
        A tuple of (Scene, PinholeCamera). The scene is not uploaded yet.
    """
    if params is None:
        params = ShowcaseParams()

    scene = Scene()
    scene.add_sphere(
        (-1.0, 0.5, 0.0),
        SPHERE_RADIUS,
        Metal(albedo=METAL_ALBEDO, roughness=params.metal_roughness),
    )
    scene.add_sphere((0.0, 0.5, 0.0), SPHERE_RADIUS, Diffuse(albedo=DIFFUSE_ALBEDO))
    scene.add_sphere(
        (1.0, 0.5, 0.0),
        SPHERE_RADIUS,
        Glass(albedo=GLASS_ALBEDO, refractive_index=params.glass_refractive_index),
    )
    scene.add_sphere((0.0, -FLOOR_RADIUS, 0.0), FLOOR_RADIUS, Diffuse(albedo=FLOOR_ALBEDO))

    return scene, _showcase_camera(aspect_ratio)


def create_single_sphere_scene(aspect_ratio: float = 1.0) -> tuple[Scene, PinholeCamera]:
    """Create a green diffuse sphere at the origin resting over the floor.

    The sphere's albedo has a blue component of 0.1, so any path that hits
    it and bounces away carries at most 0.1 of the sky's blue.

    Returns:
        A tuple of (Scene, PinholeCamera) looking at the sphere.
    """
    scene = Scene()
    scene.add_sphere((0.0, 0.0, 0.0), SPHERE_RADIUS, Diffuse(albedo=DIFFUSE_ALBEDO))
    scene.add_sphere((0.0, -FLOOR_RADIUS - SPHERE_RADIUS, 0.0), FLOOR_RADIUS, Diffuse(albedo=FLOOR_ALBEDO))

    camera = PinholeCamera(
        lookfrom=(0.0, 0.0, -3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=CAMERA_VUP,
        vfov=CAMERA_VFOV,
        aspect_ratio=aspect_ratio,
    )
    return scene, camera
