"""Camera module for view and ray generation.

Components:
    pinhole: Pinhole (perspective) camera looking down -Z

Camera responsibilities:
    - Map pixel coordinates (row 0 at the top) onto the image plane
    - Apply anti-aliasing jitter for sub-pixel sampling
"""

from .pinhole import (
    PinholeCamera,
    ensure_camera,
    get_camera_info,
    get_ray,
    get_ray_jittered,
    pixel_to_image_plane,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "pixel_to_image_plane",
    "get_ray",
    "get_ray_jittered",
    "ensure_camera",
    "get_camera_info",
]
