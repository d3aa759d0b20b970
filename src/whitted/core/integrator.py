"""Whitted integrator: recursive ray tracing with Fresnel-weighted bounces.

This module implements the shading engine of the ray tracer. For a ray it
finds the nearest surface and dispatches on the surface's material type:

    DIFFUSE_AND_GLOSSY          Phong illumination with shadow rays
    REFLECTION                  mirror ray, weighted by Fresnel kr
    REFLECTION_AND_REFRACTION   reflection ray weighted by kr plus
                                refraction ray weighted by (1 - kr)

Rays that miss every object, and rays deeper than the configured maximum
depth, return the background color. A reflective or refractive hit with no
bounce left also returns the background color.

Taichi functions cannot recurse, so the recursion is unrolled into an
explicit stack of pending rays. Each entry carries the product of the
Fresnel weights along its path; leaf colors (background or Phong) are
scaled by that weight and summed, which gives exactly the value of the
recursive formulation. A depth-first walk holds at most max_depth + 3
entries, so MAX_STACK comfortably covers MAX_RECURSION_DEPTH.

The stack is a single global field, so every kernel calling cast_ray()
serializes its outermost loop.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.core.integrator import cast_single_ray, setup_render_options
    >>> from whitted.core.options import RenderOptions
    >>> setup_render_options(RenderOptions())
    >>> cast_single_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))  # empty scene
    (0.235294, 0.67451, 0.843137)
"""

import logging
from collections.abc import Sequence

import numpy as np
import taichi as ti
import taichi.math as tm

from whitted.core.options import RenderOptions
from whitted.core.ray import make_ray, normalize, offset_ray_origin, ray_at, reflect
from whitted.materials.dielectric import fresnel, refract
from whitted.materials.material import MaterialType
from whitted.materials.phong import shade_phong
from whitted.scene.intersection import (
    get_material_type,
    object_ior,
    surface_properties,
    trace,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Render Options (GPU-accessible copies)
# =============================================================================

_max_depth = ti.field(dtype=ti.i32, shape=())
_background_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_bias = ti.field(dtype=ti.f32, shape=())
_options_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_options(options: RenderOptions) -> None:
    """Copy the shading-related render options into Taichi fields.

    Args:
        options: The render options to use for subsequent shading.

    Raises:
        ValueError: If the options are invalid.
    """
    options.validate()
    color = options.background_color
    _max_depth[None] = options.max_depth
    _background_color[None] = [color[0], color[1], color[2]]
    _bias[None] = options.bias
    _options_initialized[None] = 1
    logger.debug(
        "Shading options: max_depth=%d, bias=%g, background=%s",
        options.max_depth,
        options.bias,
        tuple(color),
    )


def clear_render_options() -> None:
    """Mark the render options as unset."""
    _options_initialized[None] = 0


def _check_render_options_initialized() -> None:
    """Check if render options are set and raise if not."""
    if _options_initialized[None] == 0:
        raise RuntimeError("Render options not set. Call setup_render_options() first.")


# =============================================================================
# Shading Stack
# =============================================================================

MAX_STACK = 64

_stack_origins = ti.Vector.field(3, dtype=ti.f32, shape=MAX_STACK)
_stack_directions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_STACK)
_stack_weights = ti.Vector.field(3, dtype=ti.f32, shape=MAX_STACK)
_stack_depths = ti.field(dtype=ti.i32, shape=MAX_STACK)


@ti.func
def _push_ray(top: ti.i32, origin: vec3, direction: vec3, depth: ti.i32, weight: vec3) -> ti.i32:
    """Push a pending ray and return the new stack size."""
    new_top = top
    if top < MAX_STACK:
        _stack_origins[top] = origin
        _stack_directions[top] = direction
        _stack_depths[top] = depth
        _stack_weights[top] = weight
        new_top = top + 1
    return new_top


# =============================================================================
# Whitted Shading
# =============================================================================


@ti.func
def cast_ray(origin: vec3, direction: vec3, depth: ti.i32) -> vec3:
    """Compute the color seen along a ray.

    Args:
        origin: The starting point of the ray.
        direction: The ray direction (normalized).
        depth: Recursion depth of this ray (0 for primary rays).

    Returns:
        The radiance (RGB) arriving at the origin along the ray.
    """
    background = _background_color[None]
    max_depth = _max_depth[None]
    bias = _bias[None]

    color = vec3(0.0, 0.0, 0.0)
    top = _push_ray(0, origin, direction, depth, vec3(1.0, 1.0, 1.0))

    while top > 0:
        top -= 1
        ray_origin = _stack_origins[top]
        ray_direction = _stack_directions[top]
        ray_depth = _stack_depths[top]
        weight = _stack_weights[top]

        if ray_depth > max_depth:
            color += weight * background
        else:
            rec = trace(ray_origin, ray_direction)
            if rec.hit == 0:
                color += weight * background
            else:
                obj = rec.object_id
                hit_point = ray_at(make_ray(ray_origin, ray_direction), rec.t)
                normal, st = surface_properties(obj, hit_point, ray_direction, rec.index, rec.uv)
                material_type = get_material_type(obj)
                can_bounce = ray_depth < max_depth

                if material_type == int(MaterialType.REFLECTION_AND_REFRACTION):
                    if not can_bounce:
                        color += weight * background
                    else:
                        ior = object_ior[obj]
                        kr = fresnel(ray_direction, normal, ior)
                        refraction_direction, total_internal = refract(ray_direction, normal, ior)
                        if total_internal == 1:
                            kr = 1.0
                        else:
                            refraction_direction = normalize(refraction_direction)
                            top = _push_ray(
                                top,
                                offset_ray_origin(hit_point, normal, refraction_direction, bias),
                                refraction_direction,
                                ray_depth + 1,
                                weight * (1.0 - kr),
                            )
                        reflection_direction = normalize(reflect(ray_direction, normal))
                        top = _push_ray(
                            top,
                            offset_ray_origin(hit_point, normal, reflection_direction, bias),
                            reflection_direction,
                            ray_depth + 1,
                            weight * kr,
                        )

                elif material_type == int(MaterialType.REFLECTION):
                    if not can_bounce:
                        color += weight * background
                    else:
                        kr = fresnel(ray_direction, normal, object_ior[obj])
                        reflection_direction = normalize(reflect(ray_direction, normal))
                        top = _push_ray(
                            top,
                            offset_ray_origin(hit_point, normal, reflection_direction, bias),
                            reflection_direction,
                            ray_depth + 1,
                            weight * kr,
                        )

                else:
                    color += weight * shade_phong(obj, hit_point, ray_direction, normal, st, bias)

    return color


# =============================================================================
# Python Query API
# =============================================================================

_query_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_color = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _cast_single_ray(depth: ti.i32):
    # Serialized: the shading stack is shared
    ti.loop_config(serialize=True)
    for _ in range(1):
        _query_color[None] = cast_ray(_query_origin[None], _query_direction[None], depth)


def cast_single_ray(
    origin: Sequence[float],
    direction: Sequence[float],
    depth: int = 0,
) -> tuple[float, float, float]:
    """Shade a single ray from Python.

    Useful for testing and for probing individual rays of a scene without
    rendering a whole image.

    Args:
        origin: Ray origin as (x, y, z).
        direction: Ray direction as (x, y, z); normalized before tracing.
        depth: Recursion depth to start at.

    Returns:
        Tuple of (R, G, B) color values.

    Raises:
        RuntimeError: If render options have not been set up.
    """
    _check_render_options_initialized()

    unit = np.asarray(direction, dtype=np.float64)
    norm = np.linalg.norm(unit)
    if norm > 0.0:
        unit = unit / norm

    _query_origin[None] = [origin[0], origin[1], origin[2]]
    _query_direction[None] = unit.tolist()
    _cast_single_ray(depth)

    color = _query_color[None]
    return (float(color[0]), float(color[1]), float(color[2]))
