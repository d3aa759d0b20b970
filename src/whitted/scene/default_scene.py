"""Default demo scene.

This module provides a factory function to create the classic Whitted demo
scene, viewed from the camera at the origin looking down -Z:

- A diffuse blue-grey sphere on the left
- A glass sphere (reflection and refraction) in front of it
- A checkerboard floor made of two triangles at y = -3
- Two white point lights above the scene

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.core.renderer import Renderer
    >>> from whitted.scene.default_scene import create_default_scene
    >>>
    >>> scene, options = create_default_scene()
    >>> Renderer(options).render()
"""

from whitted.core.options import RenderOptions
from whitted.materials.material import Material, MaterialType
from whitted.scene.manager import SceneManager

# =============================================================================
# Scene Constants
# =============================================================================

DIFFUSE_SPHERE_CENTER = (-1.0, 0.0, -12.0)
DIFFUSE_SPHERE_RADIUS = 2.0
DIFFUSE_SPHERE_COLOR = (0.6, 0.7, 0.8)

GLASS_SPHERE_CENTER = (0.5, -0.5, -8.0)
GLASS_SPHERE_RADIUS = 1.5
GLASS_SPHERE_IOR = 1.5

# Floor quad split into two counter-clockwise triangles (seen from above)
FLOOR_VERTICES = [(-5.0, -3.0, -6.0), (5.0, -3.0, -6.0), (5.0, -3.0, -16.0), (-5.0, -3.0, -16.0)]
FLOOR_INDICES = [0, 1, 3, 1, 2, 3]
FLOOR_ST = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]

# (position, intensity) pairs
LIGHTS = [
    ((-20.0, 70.0, 20.0), 0.5),
    ((30.0, 50.0, -12.0), 1.0),
]


# =============================================================================
# Scene Factory
# =============================================================================


def create_default_scene(
    options: RenderOptions | None = None,
) -> tuple[SceneManager, RenderOptions]:
    """Create the default demo scene.

    Args:
        options: Render options to return with the scene. If None, uses
            RenderOptions() (1600x1600, 90 degree fov, depth 5).

    Returns:
        A tuple of (SceneManager, RenderOptions).

    Example:
        >>> scene, options = create_default_scene()
        >>> scene.get_sphere_count(), scene.get_mesh_count(), scene.get_light_count()
        (2, 1, 2)
    """
    if options is None:
        options = RenderOptions()

    scene = SceneManager()

    scene.add_sphere(
        DIFFUSE_SPHERE_CENTER,
        DIFFUSE_SPHERE_RADIUS,
        Material(
            material_type=MaterialType.DIFFUSE_AND_GLOSSY,
            diffuse_color=DIFFUSE_SPHERE_COLOR,
        ),
    )
    scene.add_sphere(
        GLASS_SPHERE_CENTER,
        GLASS_SPHERE_RADIUS,
        Material(
            material_type=MaterialType.REFLECTION_AND_REFRACTION,
            ior=GLASS_SPHERE_IOR,
        ),
    )
    scene.add_mesh(
        FLOOR_VERTICES,
        FLOOR_INDICES,
        FLOOR_ST,
        Material(material_type=MaterialType.DIFFUSE_AND_GLOSSY),
    )

    for position, intensity in LIGHTS:
        scene.add_light(position, intensity)

    return scene, options
