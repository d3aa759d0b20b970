"""Phong local illumination for DIFFUSE_AND_GLOSSY surfaces.

The Phong model sums, over every point light, a Lambertian diffuse term
and a specular highlight term:

    diffuse  += visibility * I * max(0, N . L)
    specular += visibility * I * max(0, -reflect(-L, N) . D) ^ exponent
    color     = diffuse * diffuse_color(st) * Kd + specular * Ks

where L is the unit direction to the light, D the incoming ray direction
and visibility is 0 when a shadow ray finds an occluder strictly between
the surface point and the light.

Shadow rays start from the hit point pushed off the surface by the bias,
on the side the incoming ray arrived from.

Note: this module is not imported by whitted.materials to avoid a circular
import with the scene storage; import it from whitted.materials.phong.
"""

import taichi as ti
import taichi.math as tm

from whitted.core.ray import length_squared, normalize, reflect
from whitted.scene.intersection import (
    eval_diffuse_color,
    object_kd,
    object_ks,
    object_specular_exponents,
    trace_any,
)
from whitted.scene.lights import light_intensities, light_positions, num_lights

# Type aliases for vectors
vec3 = tm.vec3
vec2 = tm.vec2


@ti.func
def shadow_ray_origin(hit_point: vec3, normal: vec3, ray_direction: vec3, bias: ti.f32) -> vec3:
    """Offset the hit point toward the side the incoming ray came from."""
    result = hit_point + normal * bias
    if tm.dot(ray_direction, normal) >= 0.0:
        result = hit_point - normal * bias
    return result


@ti.func
def shade_phong(
    obj: ti.i32,
    hit_point: vec3,
    ray_direction: vec3,
    normal: vec3,
    st: vec2,
    bias: ti.f32,
) -> vec3:
    """Evaluate direct Phong illumination at a surface point.

    Args:
        obj: Index of the hit object.
        hit_point: The intersection point.
        ray_direction: The incoming ray direction (normalized).
        normal: The surface normal at the hit point.
        st: Texture coordinates at the hit point.
        bias: Shadow ray origin offset.

    Returns:
        The reflected color (RGB).
    """
    light_amount = vec3(0.0, 0.0, 0.0)
    specular = vec3(0.0, 0.0, 0.0)
    shadow_origin = shadow_ray_origin(hit_point, normal, ray_direction, bias)
    exponent = object_specular_exponents[obj]

    for k in range(num_lights[None]):
        to_light = light_positions[k] - hit_point
        light_distance2 = length_squared(to_light)
        light_dir = normalize(to_light)
        intensity = light_intensities[k]

        visibility = 1.0
        if trace_any(shadow_origin, light_dir, light_distance2) == 1:
            visibility = 0.0

        l_dot_n = ti.max(0.0, tm.dot(light_dir, normal))
        light_amount += visibility * l_dot_n * intensity

        reflection_direction = reflect(-light_dir, normal)
        highlight = ti.max(0.0, -tm.dot(reflection_direction, ray_direction)) ** exponent
        specular += visibility * highlight * intensity

    diffuse_color = eval_diffuse_color(obj, st)
    return light_amount * diffuse_color * object_kd[obj] + specular * object_ks[obj]
