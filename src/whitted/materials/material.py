"""Material parameters shared by every scene object.

Every object carries the same material record regardless of its geometry:
a diffuse color, Phong weights (Kd, Ks) and exponent, an index of
refraction, and a material type tag that selects one of the three shading
behaviours of the Whitted integrator.

Example:
    >>> from whitted.materials.material import Material, MaterialType
    >>> glass = Material(material_type=MaterialType.REFLECTION_AND_REFRACTION, ior=1.5)
    >>> glass.validate()
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any


class MaterialType(IntEnum):
    """Shading behaviour of a surface.

    The integrator dispatches on this value at every hit:
    DIFFUSE_AND_GLOSSY evaluates Phong lighting with shadow rays,
    REFLECTION_AND_REFRACTION spawns Fresnel-weighted reflection and
    refraction rays, REFLECTION spawns a Fresnel-weighted mirror ray.
    """

    DIFFUSE_AND_GLOSSY = 0
    REFLECTION_AND_REFRACTION = 1
    REFLECTION = 2


class DiffusePattern(IntEnum):
    """How an object's diffuse color is evaluated from texture coordinates."""

    SOLID = 0
    CHECKERBOARD = 1


# Colors of the procedural checkerboard (pattern off, pattern on)
CHECKER_COLOR_A = (0.815, 0.235, 0.031)
CHECKER_COLOR_B = (0.937, 0.937, 0.231)


@dataclass
class Material:
    """Material parameters of a scene object.

    Attributes:
        material_type: Shading behaviour (see MaterialType).
        diffuse_color: Diffuse RGB color, each component in [0, 1].
        kd: Weight of the Lambertian term.
        ks: Weight of the Phong specular term.
        ior: Index of refraction used by the Fresnel and Snell computations.
        specular_exponent: Phong specular exponent.
    """

    material_type: MaterialType = MaterialType.DIFFUSE_AND_GLOSSY
    diffuse_color: tuple[float, float, float] = (0.2, 0.2, 0.2)
    kd: float = 0.8
    ks: float = 0.2
    ior: float = 1.3
    specular_exponent: float = 25.0

    def validate(self) -> None:
        """Check that the parameters are physically meaningful.

        Raises:
            ValueError: If any parameter is out of range.
        """
        if len(self.diffuse_color) != 3:
            raise ValueError(f"Diffuse color must have 3 components, got {len(self.diffuse_color)}")
        for i, component in enumerate(self.diffuse_color):
            if component < 0.0 or component > 1.0:
                raise ValueError(f"Diffuse color component {i} = {component} is outside [0, 1]")
        if self.kd < 0.0:
            raise ValueError(f"Kd = {self.kd} must be non-negative")
        if self.ks < 0.0:
            raise ValueError(f"Ks = {self.ks} must be non-negative")
        if self.ior < 1.0:
            raise ValueError(
                f"Index of refraction = {self.ior} is less than 1.0. "
                "IOR must be >= 1.0 for physically meaningful materials."
            )
        if self.specular_exponent < 0.0:
            raise ValueError(f"Specular exponent = {self.specular_exponent} must be non-negative")

    def to_dict(self) -> dict[str, Any]:
        """Export the material to a JSON-compatible dictionary."""
        return {
            "type": self.material_type.name.lower(),
            "diffuse_color": list(self.diffuse_color),
            "kd": self.kd,
            "ks": self.ks,
            "ior": self.ior,
            "specular_exponent": self.specular_exponent,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Material":
        """Build a material from a dictionary produced by to_dict().

        Missing keys take their default values.

        Raises:
            ValueError: If the material type name is unknown.
        """
        type_name = data.get("type", "diffuse_and_glossy").upper()
        if type_name not in MaterialType.__members__:
            raise ValueError(f"Unknown material type: {data.get('type')}")

        color = data.get("diffuse_color", [0.2, 0.2, 0.2])
        return cls(
            material_type=MaterialType[type_name],
            diffuse_color=(color[0], color[1], color[2]),
            kd=data.get("kd", 0.8),
            ks=data.get("ks", 0.2),
            ior=data.get("ior", 1.3),
            specular_exponent=data.get("specular_exponent", 25.0),
        )
