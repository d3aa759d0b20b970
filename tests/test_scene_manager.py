"""Tests for the SceneManager.

Tests cover:
- Adding spheres, meshes and lights with validation
- Object and light bookkeeping
- Dictionary and JSON serialization round trips
"""

import json

import pytest

FLOOR_VERTICES = [(-5.0, -3.0, -6.0), (5.0, -3.0, -6.0), (5.0, -3.0, -16.0), (-5.0, -3.0, -16.0)]
FLOOR_INDICES = [0, 1, 3, 1, 2, 3]
FLOOR_ST = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]


class TestObjects:
    """Tests for adding objects."""

    def test_add_sphere(self):
        """Test adding a sphere records its parameters."""
        from whitted.materials.material import Material
        from whitted.scene.manager import SceneManager, SphereInfo

        scene = SceneManager()
        material = Material(diffuse_color=(0.6, 0.7, 0.8))
        index = scene.add_sphere((-1, 0, -12), 2, material)

        assert index == 0
        assert scene.get_object_count() == 1
        assert scene.get_sphere_count() == 1
        info = scene.get_object_info(0)
        assert isinstance(info, SphereInfo)
        assert info.center == (-1.0, 0.0, -12.0)
        assert info.radius == 2.0
        assert info.material is material

    def test_add_sphere_default_material(self):
        """Test a sphere without a material gets the default one."""
        from whitted.materials.material import Material
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_sphere((0, 0, -5), 1.0)
        assert scene.get_object_info(0).material == Material()

    @pytest.mark.parametrize("radius", [0.0, -1.0])
    def test_non_positive_radius_rejected(self, radius):
        """Test spheres must have a positive radius."""
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError, match="radius must be positive"):
            scene.add_sphere((0, 0, -5), radius)
        assert scene.get_object_count() == 0

    def test_invalid_material_rejected(self):
        """Test material parameters are validated before storage."""
        from whitted.materials.material import Material
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError, match="Index of refraction"):
            scene.add_sphere((0, 0, -5), 1.0, Material(ior=0.5))
        with pytest.raises(ValueError, match="outside"):
            scene.add_sphere((0, 0, -5), 1.0, Material(diffuse_color=(1.5, 0.0, 0.0)))
        assert scene.get_object_count() == 0

    def test_add_mesh(self):
        """Test adding a mesh records vertices, triangles and pattern."""
        from whitted.materials.material import DiffusePattern
        from whitted.scene.manager import MeshInfo, SceneManager

        scene = SceneManager()
        index = scene.add_mesh(FLOOR_VERTICES, FLOOR_INDICES, FLOOR_ST)

        assert index == 0
        assert scene.get_mesh_count() == 1
        info = scene.get_object_info(0)
        assert isinstance(info, MeshInfo)
        assert info.triangle_count == 2
        assert info.pattern == DiffusePattern.CHECKERBOARD

    def test_mesh_without_st(self):
        """Test texture coordinates default to zero per vertex."""
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_mesh(FLOOR_VERTICES, FLOOR_INDICES)
        assert scene.get_object_info(0).st == [(0.0, 0.0)] * 4

    @pytest.mark.parametrize(
        ("indices", "st", "message"),
        [
            ([0, 1], FLOOR_ST, "multiple of 3"),
            ([0, 1, 4], FLOOR_ST, "out of range"),
            ([0, -1, 2], FLOOR_ST, "out of range"),
            ([], FLOOR_ST, "at least one triangle"),
            (FLOOR_INDICES, FLOOR_ST[:3], "one texture coordinate per vertex"),
        ],
    )
    def test_invalid_mesh_rejected(self, indices, st, message):
        """Test malformed mesh data raises ValueError."""
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError, match=message):
            scene.add_mesh(FLOOR_VERTICES, indices, st)
        assert scene.get_object_count() == 0

    def test_objects_keep_insertion_order(self):
        """Test spheres and meshes share one index space in insertion order."""
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        assert scene.add_sphere((0, 0, -5), 1.0) == 0
        assert scene.add_mesh(FLOOR_VERTICES, FLOOR_INDICES, FLOOR_ST) == 1
        assert scene.add_sphere((0, 0, -9), 1.0) == 2
        assert scene.get_sphere_count() == 2
        assert scene.get_mesh_count() == 1


class TestLights:
    """Tests for adding lights."""

    def test_scalar_intensity_broadcast(self):
        """Test a scalar intensity applies to all channels."""
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_light((-20, 70, 20), 0.5)
        assert scene.lights[0].intensity == (0.5, 0.5, 0.5)
        assert scene.get_light_count() == 1

    def test_rgb_intensity(self):
        """Test an RGB intensity is stored as given."""
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_light((0, 10, 0), (1.0, 0.5, 2.0))
        assert scene.lights[0].intensity == (1.0, 0.5, 2.0)

    def test_negative_intensity_rejected(self):
        """Test negative intensities raise ValueError."""
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError, match="non-negative"):
            scene.add_light((0, 10, 0), (1.0, -0.1, 1.0))

    def test_light_capacity(self):
        """Test exceeding the light capacity raises RuntimeError."""
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        for i in range(scene.get_max_lights()):
            scene.add_light((float(i), 10.0, 0.0), 1.0)
        with pytest.raises(RuntimeError, match="Maximum number of lights"):
            scene.add_light((0.0, 10.0, 0.0), 1.0)

    def test_clear(self):
        """Test clear removes objects and lights."""
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_sphere((0, 0, -5), 1.0)
        scene.add_light((0, 10, 0), 1.0)
        scene.clear()
        assert scene.get_object_count() == 0
        assert scene.get_light_count() == 0
        assert scene.objects == []
        assert scene.lights == []


class TestSerialization:
    """Tests for dictionary and JSON serialization."""

    def _build(self):
        from whitted.materials.material import Material, MaterialType
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_sphere((-1, 0, -12), 2, Material(diffuse_color=(0.6, 0.7, 0.8)))
        scene.add_sphere(
            (0.5, -0.5, -8),
            1.5,
            Material(material_type=MaterialType.REFLECTION_AND_REFRACTION, ior=1.5),
        )
        scene.add_mesh(FLOOR_VERTICES, FLOOR_INDICES, FLOOR_ST)
        scene.add_light((-20, 70, 20), 0.5)
        return scene

    def test_to_dict_layout(self):
        """Test the dictionary lists objects and lights in order."""
        data = self._build().to_dict()

        assert [obj["type"] for obj in data["objects"]] == ["sphere", "sphere", "mesh"]
        assert data["objects"][1]["material"]["type"] == "reflection_and_refraction"
        assert data["objects"][2]["pattern"] == "checkerboard"
        assert data["lights"] == [{"position": [-20.0, 70.0, 20.0], "intensity": [0.5, 0.5, 0.5]}]
        assert "options" not in data

    def test_dict_round_trip(self):
        """Test from_dict rebuilds an identical scene."""
        from whitted.scene.manager import SceneManager

        data = self._build().to_dict()
        scene = SceneManager()
        assert scene.from_dict(data) is None
        assert scene.to_dict() == data
        assert scene.get_object_count() == 3
        assert scene.get_light_count() == 1

    def test_json_round_trip_with_options(self, tmp_path):
        """Test save_json/load_json preserve the scene and render options."""
        from whitted.core.options import RenderOptions
        from whitted.scene.manager import SceneManager

        options = RenderOptions(width=320, height=240, max_depth=3)
        original = self._build()
        path = tmp_path / "scene.json"
        original.save_json(path, options)
        expected = original.to_dict()

        assert json.loads(path.read_text())["options"]["width"] == 320

        scene = SceneManager()
        loaded_options = scene.load_json(path)
        assert loaded_options == options
        assert scene.to_dict() == expected

    def test_unknown_object_type(self):
        """Test an unknown object type raises ValueError."""
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError, match="Unknown object type"):
            scene.from_dict({"objects": [{"type": "cube"}]})

    def test_unknown_material_type(self):
        """Test an unknown material type raises ValueError."""
        from whitted.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError, match="Unknown material type"):
            scene.from_dict(
                {"objects": [{"type": "sphere", "radius": 1.0, "material": {"type": "metal"}}]}
            )

    def test_invalid_options_in_file(self, tmp_path):
        """Test invalid stored options raise ValueError."""
        from whitted.scene.manager import SceneManager

        path = tmp_path / "scene.json"
        path.write_text(json.dumps({"objects": [], "lights": [], "options": {"fov": 0}}))
        with pytest.raises(ValueError):
            SceneManager().load_json(path)

    def test_non_object_json_rejected(self, tmp_path):
        """Test a JSON file that is not an object raises ValueError."""
        from whitted.scene.manager import SceneManager

        path = tmp_path / "scene.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(ValueError, match="JSON object"):
            SceneManager().load_json(path)

    def test_failed_load_keeps_current_scene(self, tmp_path):
        """Test a file with a bad object leaves the loaded scene in place."""
        from whitted.scene.intersection import trace_ray

        scene = self._build()
        expected = scene.to_dict()

        path = tmp_path / "bad.json"
        path.write_text(
            json.dumps(
                {
                    "objects": [
                        {"type": "sphere", "center": [3, 0, -5], "radius": 1.0},
                        {"type": "sphere", "center": [0, 0, -5], "radius": -1.0},
                    ],
                    "lights": [],
                }
            )
        )
        with pytest.raises(ValueError, match="radius must be positive"):
            scene.load_json(path)

        assert scene.to_dict() == expected
        assert scene.get_object_count() == 3
        assert scene.get_light_count() == 1
        # The Taichi storage still holds the original objects
        assert trace_ray((3, 0, 0), (0, 0, -1)) is None
        hit = trace_ray((-1, 0, 0), (0, 0, -1))
        assert hit is not None
        assert hit.object_id == 0

    def test_bad_light_rejected_before_clearing(self):
        """Test an invalid light is caught before any object is replaced."""
        scene = self._build()
        expected = scene.to_dict()

        with pytest.raises(ValueError, match="non-negative"):
            scene.from_dict(
                {
                    "objects": [{"type": "sphere", "center": [0, 0, -5], "radius": 1.0}],
                    "lights": [{"position": [0, 10, 0], "intensity": -1.0}],
                }
            )

        assert scene.to_dict() == expected

    def test_bad_options_rejected_before_clearing(self):
        """Test invalid render options leave the current scene in place."""
        scene = self._build()
        expected = scene.to_dict()

        with pytest.raises(ValueError):
            scene.from_dict({"objects": [], "lights": [], "options": {"fov": 0}})

        assert scene.to_dict() == expected

    def test_too_many_lights_rejected_before_clearing(self):
        """Test a file exceeding light capacity raises ValueError without clearing."""
        from whitted.scene.manager import SceneManager

        scene = self._build()
        expected = scene.to_dict()
        lights = [{"position": [0, 10, 0], "intensity": 1.0}] * (SceneManager.get_max_lights() + 1)

        with pytest.raises(ValueError, match="lights, maximum"):
            scene.from_dict({"objects": [], "lights": lights})

        assert scene.to_dict() == expected
