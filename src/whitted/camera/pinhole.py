"""Pinhole camera for primary ray generation.

The camera sits at the world origin looking down the -Z axis, with +Y up
and +X to the right. The image plane is at z = -1; its half-height is
scale = tan(fov / 2) and its half-width is scale * aspect_ratio.

For pixel (i, j), with j = 0 the top row, the ray passes through the pixel
center:

    x = (2 * (i + 0.5) / width - 1) * aspect_ratio * scale
    y = (1 - 2 * (j + 0.5) / height) * scale
    direction = normalize(x, y, -1)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.camera.pinhole import setup_camera, get_primary_ray
    >>> from whitted.core.options import RenderOptions
    >>> setup_camera(RenderOptions(width=64, height=48, fov=90.0))
    >>> # Use get_primary_ray(i, j, width, height) within a Taichi kernel
"""

import math

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from whitted.core.options import RenderOptions
from whitted.core.ray import Ray, make_ray, normalize, vec3

# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_scale = ti.field(dtype=ti.f32, shape=())
_camera_aspect_ratio = ti.field(dtype=ti.f32, shape=())


def _fov_scale(fov: float) -> float:
    return math.tan(math.radians(fov * 0.5))


def setup_camera(options: RenderOptions) -> None:
    """Store the image-plane scale and aspect ratio for ray generation.

    Args:
        options: Render options providing fov, width and height.

    Note:
        This function writes to Taichi fields and should be called from
        Python (not from within a Taichi kernel).
    """
    _camera_scale[None] = _fov_scale(options.fov)
    _camera_aspect_ratio[None] = options.aspect_ratio


@ti.func
def get_primary_ray(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate the primary ray through the center of a pixel.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A Ray from the origin through the pixel center.
    """
    scale = _camera_scale[None]
    x = (2.0 * (ti.cast(pixel_i, ti.f32) + 0.5) / ti.cast(width, ti.f32) - 1.0)
    x *= _camera_aspect_ratio[None] * scale
    y = (1.0 - 2.0 * (ti.cast(pixel_j, ti.f32) + 0.5) / ti.cast(height, ti.f32)) * scale
    direction = normalize(vec3(x, y, -1.0))
    return make_ray(vec3(0.0, 0.0, 0.0), direction)


def primary_ray_direction(
    pixel_i: int,
    pixel_j: int,
    options: RenderOptions,
) -> npt.NDArray[np.float64]:
    """Compute a primary ray direction on the Python side.

    Mirrors get_primary_ray() for use outside kernels, e.g. to aim a single
    debugging ray through a chosen pixel.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).
        options: Render options providing fov, width and height.

    Returns:
        Unit direction vector of shape (3,).
    """
    scale = _fov_scale(options.fov)
    x = (2.0 * (pixel_i + 0.5) / options.width - 1.0) * options.aspect_ratio * scale
    y = (1.0 - 2.0 * (pixel_j + 0.5) / options.height) * scale
    direction = np.array([x, y, -1.0])
    return direction / np.linalg.norm(direction)


def get_camera_info() -> dict[str, float]:
    """Get current camera state for debugging."""
    return {
        "scale": float(_camera_scale[None]),
        "aspect_ratio": float(_camera_aspect_ratio[None]),
    }
