"""Camera module.

Ray generation uses normalized image coordinates:
    u in [0, 1]: left to right across the image
    v in [0, 1]: bottom to top across the image
"""

from .pinhole import (
    CameraFrame,
    PinholeCamera,
    compute_camera_frame,
    get_camera_info,
    get_ray,
    get_ray_jittered,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "CameraFrame",
    "compute_camera_frame",
    "setup_camera",
    "get_ray",
    "get_ray_jittered",
    "get_camera_info",
]
