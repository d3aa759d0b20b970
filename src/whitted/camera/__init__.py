"""Camera module for primary ray generation.

Components:
    pinhole: Fixed pinhole camera at the origin looking down -Z

Camera responsibilities:
    - Derive the image-plane scale from the field of view
    - Map pixel (i, j) to a unit primary ray direction through its center
"""

from .pinhole import (
    get_camera_info,
    get_primary_ray,
    primary_ray_direction,
    setup_camera,
)

__all__ = [
    "setup_camera",
    "get_primary_ray",
    "primary_ray_direction",
    "get_camera_info",
]
