"""Core rendering module.

This module contains the fundamental building blocks of the ray tracer:

Components:
    ray: Ray data structure and vector utilities
    options: Render options (image size, fov, depth, background, bias)
    integrator: Whitted shading with reflection and refraction
    renderer: Per-pixel render loop and framebuffer access

All compute-intensive operations use Taichi kernels.
"""

from .options import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH, MAX_RECURSION_DEPTH, RenderOptions
from .ray import (
    INFINITY,
    Ray,
    length_squared,
    make_ray,
    mix,
    normalize,
    offset_ray_origin,
    ray_at,
    reflect,
    vec2,
    vec3,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from whitted.core.integrator or whitted.core.renderer when needed.
#
# For rendering, use:
#   from whitted.core.renderer import Renderer

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec2",
    "vec3",
    "INFINITY",
    "length_squared",
    "normalize",
    "mix",
    "reflect",
    "offset_ray_origin",
    "RenderOptions",
    "MAX_IMAGE_WIDTH",
    "MAX_IMAGE_HEIGHT",
    "MAX_RECURSION_DEPTH",
]
