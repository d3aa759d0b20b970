"""Procedural checkerboard texture.

The checkerboard is the only texture the renderer supports. Texture
coordinates are scaled by CHECKER_SCALE, and the fractional part of each
axis is thresholded at 0.5; the XOR of the two tests selects one of the
two checker colors.
"""

import taichi as ti
import taichi.math as tm

from whitted.core.ray import mix
from whitted.materials.material import CHECKER_COLOR_A, CHECKER_COLOR_B

# Type aliases for vectors
vec3 = tm.vec3
vec2 = tm.vec2

# Number of checker cells per unit of texture coordinate
CHECKER_SCALE = 5.0


@ti.func
def checkerboard(st: vec2) -> vec3:
    """Evaluate the checkerboard color at texture coordinates st.

    Uses the floor-based fractional part, so cells keep alternating across
    negative coordinates. A truncating remainder (fmod) would instead mirror
    the pattern about zero, doubling the cells that touch each axis.
    """
    above_s = tm.fract(st.x * CHECKER_SCALE) > 0.5
    above_t = tm.fract(st.y * CHECKER_SCALE) > 0.5
    pattern = 0.0
    if above_s != above_t:
        pattern = 1.0
    color_a = vec3(CHECKER_COLOR_A[0], CHECKER_COLOR_A[1], CHECKER_COLOR_A[2])
    color_b = vec3(CHECKER_COLOR_B[0], CHECKER_COLOR_B[1], CHECKER_COLOR_B[2])
    return mix(color_a, color_b, pattern)
