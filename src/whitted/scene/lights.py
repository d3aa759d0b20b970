"""Point light storage.

Lights are stored in Taichi fields in insertion order and read by the
Phong shading code for every diffuse hit. A light has a position and an
RGB intensity; intensities are not bounded above.
"""

from collections.abc import Sequence

import taichi as ti

# Maximum number of point lights in the scene
MAX_LIGHTS = 64

light_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_intensities = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_lights() -> None:
    """Remove all lights from the scene."""
    num_lights[None] = 0


def add_light(position: Sequence[float], intensity: Sequence[float]) -> int:
    """Add a point light to the scene.

    Args:
        position: Light position as (x, y, z).
        intensity: Light intensity as (R, G, B).

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
    """
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    light_positions[idx] = [position[0], position[1], position[2]]
    light_intensities[idx] = [intensity[0], intensity[1], intensity[2]]
    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])
