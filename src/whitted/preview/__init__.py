"""Preview module for image output.

Components:
    export: Framebuffer conversion and PPM/PNG export

Example:
    >>> from whitted.preview import save_image
    >>> save_image(framebuffer, "out.png")
"""

from .export import encode_ppm, framebuffer_to_uint8, save_image, save_png, save_ppm

__all__ = [
    "framebuffer_to_uint8",
    "encode_ppm",
    "save_ppm",
    "save_png",
    "save_image",
]
