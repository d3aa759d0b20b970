"""Materials module.

Components:
    material: Material parameters, material types and diffuse patterns
    dielectric: Snell refraction and exact Fresnel reflectance
    texture: Procedural checkerboard
    phong: Phong shading with shadow rays (import from whitted.materials.phong)

Every object carries one Material. The integrator dispatches on its
MaterialType: Phong shading for DIFFUSE_AND_GLOSSY, Fresnel-weighted
secondary rays for REFLECTION and REFLECTION_AND_REFRACTION.
"""

from .dielectric import fresnel, refract
from .material import (
    CHECKER_COLOR_A,
    CHECKER_COLOR_B,
    DiffusePattern,
    Material,
    MaterialType,
)
from .texture import CHECKER_SCALE, checkerboard

__all__ = [
    "Material",
    "MaterialType",
    "DiffusePattern",
    "CHECKER_COLOR_A",
    "CHECKER_COLOR_B",
    "CHECKER_SCALE",
    "checkerboard",
    "refract",
    "fresnel",
]
