"""Unit tests for triangle intersection and mesh texturing.

Tests cover:
- Ray hitting a counter-clockwise triangle (t and barycentrics)
- Cyclic relabeling keeps the hit; reversed winding (back face) is not hit
- Hits outside the triangle and behind the ray
- Flat triangle normal and texture coordinate interpolation
- Procedural checkerboard colors
"""

import pytest
import taichi as ti

# Triangle at z = -5, counter-clockwise when seen from the origin
V0 = (-1.0, -1.0, -5.0)
V1 = (1.0, -1.0, -5.0)
V2 = (0.0, 1.0, -5.0)


def _intersect(v0, v1, v2, origin, direction):
    """Run intersect_triangle in a kernel and return (hit, t, u, v)."""
    from whitted.geometry.triangle import intersect_triangle, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    values = ti.field(dtype=ti.f32, shape=3)

    @ti.kernel
    def test_kernel():
        h, t, u, v = intersect_triangle(
            vec3(v0[0], v0[1], v0[2]),
            vec3(v1[0], v1[1], v1[2]),
            vec3(v2[0], v2[1], v2[2]),
            vec3(origin[0], origin[1], origin[2]),
            vec3(direction[0], direction[1], direction[2]),
        )
        hit[None] = h
        values[0] = t
        values[1] = u
        values[2] = v

    test_kernel()
    return hit[None], values[0], values[1], values[2]


class TestTriangleIntersection:
    """Tests for one-sided ray-triangle intersection."""

    def test_hit_front_face(self):
        """Test a ray hitting the front of the triangle."""
        hit, t, u, v = _intersect(V0, V1, V2, (0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert t == pytest.approx(5.0, abs=1e-5)
        assert u == pytest.approx(0.25, abs=1e-5)
        assert v == pytest.approx(0.5, abs=1e-5)

    def test_reversed_winding_is_not_hit(self):
        """Test a clockwise (back-facing) triangle yields no intersection."""
        hit, _, _, _ = _intersect(V0, V2, V1, (0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 0

    @pytest.mark.parametrize(
        "a, b, c", [(V0, V1, V2), (V1, V2, V0), (V2, V0, V1)], ids=["v0v1v2", "v1v2v0", "v2v0v1"]
    )
    def test_cyclic_relabel_gives_same_hit(self, a, b, c):
        """Test rotating the vertex labels keeps the winding and the hit."""
        hit, t, u, v = _intersect(a, b, c, (0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert t == pytest.approx(5.0, abs=1e-5)
        # Barycentrics follow the labels but name the same point
        for axis, expected in enumerate((0.0, 0.0, -5.0)):
            point = (1.0 - u - v) * a[axis] + u * b[axis] + v * c[axis]
            assert point == pytest.approx(expected, abs=1e-5)

    @pytest.mark.parametrize("a, b, c", [(V0, V2, V1), (V2, V1, V0), (V1, V0, V2)])
    def test_any_reversed_labelling_is_not_hit(self, a, b, c):
        """Test every clockwise labelling of the triangle is culled."""
        hit, _, _, _ = _intersect(a, b, c, (0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 0

    def test_miss_outside_triangle(self):
        """Test a ray passing outside the triangle edges."""
        hit, _, _, _ = _intersect(V0, V1, V2, (3.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 0

    def test_triangle_behind_ray(self):
        """Test a triangle behind the ray origin is not hit."""
        hit, _, _, _ = _intersect(V0, V1, V2, (0.0, 0.0, -10.0), (0.0, 0.0, 1.0))
        assert hit == 0

    def test_parallel_ray_misses(self):
        """Test a ray in the triangle's plane is treated as a miss."""
        hit, _, _, _ = _intersect(V0, V1, V2, (-3.0, 0.0, -5.0), (1.0, 0.0, 0.0))
        assert hit == 0


class TestTriangleSurface:
    """Tests for triangle normal and texture coordinates."""

    def test_normal_faces_counter_clockwise_side(self):
        """Test the flat normal points toward the viewer of a CCW triangle."""
        from whitted.geometry.triangle import triangle_normal, vec3

        normal = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            normal[None] = triangle_normal(
                vec3(V0[0], V0[1], V0[2]), vec3(V1[0], V1[1], V1[2]), vec3(V2[0], V2[1], V2[2])
            )

        test_kernel()
        n = normal[None]
        assert n[0] == pytest.approx(0.0, abs=1e-6)
        assert n[1] == pytest.approx(0.0, abs=1e-6)
        assert n[2] == pytest.approx(1.0, abs=1e-6)

    def test_interpolate_st(self):
        """Test barycentric interpolation of texture coordinates."""
        from whitted.geometry.triangle import interpolate_st, vec2

        result = ti.field(dtype=ti.math.vec2, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = interpolate_st(
                vec2(0.0, 0.0), vec2(1.0, 0.0), vec2(0.0, 1.0), vec2(0.25, 0.5)
            )

        test_kernel()
        assert result[None][0] == pytest.approx(0.25)
        assert result[None][1] == pytest.approx(0.5)


class TestCheckerboard:
    """Tests for the procedural checkerboard."""

    def _color_at(self, s, t):
        from whitted.materials.texture import checkerboard, vec2

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = checkerboard(vec2(s, t))

        test_kernel()
        c = result[None]
        return (float(c[0]), float(c[1]), float(c[2]))

    def test_first_cell_uses_color_a(self):
        """Test both fractional parts below 0.5 select the first color."""
        from whitted.materials.material import CHECKER_COLOR_A

        assert self._color_at(0.05, 0.05) == pytest.approx(CHECKER_COLOR_A, abs=1e-6)

    def test_neighbouring_cell_uses_color_b(self):
        """Test crossing one cell boundary switches to the second color."""
        from whitted.materials.material import CHECKER_COLOR_B

        assert self._color_at(0.15, 0.05) == pytest.approx(CHECKER_COLOR_B, abs=1e-6)
        assert self._color_at(0.05, 0.15) == pytest.approx(CHECKER_COLOR_B, abs=1e-6)

    def test_diagonal_cell_uses_color_a(self):
        """Test crossing a boundary on both axes returns to the first color."""
        from whitted.materials.material import CHECKER_COLOR_A

        assert self._color_at(0.15, 0.15) == pytest.approx(CHECKER_COLOR_A, abs=1e-6)

    def test_negative_coordinates_keep_alternating(self):
        """Test cells continue across zero instead of mirroring."""
        from whitted.materials.material import CHECKER_COLOR_A, CHECKER_COLOR_B

        # fract(-0.25) == 0.75, so this cell differs from its mirror at (0.05, 0.05)
        assert self._color_at(-0.05, 0.05) == pytest.approx(CHECKER_COLOR_B, abs=1e-6)
        assert self._color_at(-0.05, -0.05) == pytest.approx(CHECKER_COLOR_A, abs=1e-6)
