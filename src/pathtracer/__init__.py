"""Progressive sphere path tracer built on Taichi.

Renders scenes of spheres with diffuse, metal and glass materials under a
sky gradient, refining the image by one sample per pixel per frame until a
fixed sample budget is reached.

Subpackages:
    core: Vector utilities, rays, radiance estimation, pixel buffer and the
        progressive frame driver
    geometry: Sphere primitive and ray-sphere intersection
    materials: Diffuse, metal and glass scattering and the material registry
    scene: Scene description, device upload and demo scenes
    camera: Pinhole camera with jittered primary rays
    preview: PNG export, Matplotlib preview and the interactive GGUI window
"""

__version__ = "0.1.0"
