"""Geometry module for shape primitives.

This module provides geometric primitives and intersection algorithms:

Components:
    sphere: Sphere primitive with ray-sphere intersection
    triangle: One-sided ray-triangle intersection (Moller-Trumbore)

All intersection routines are implemented as Taichi functions (@ti.func).
Intersection follows the pattern:
    hit, t, u, v = intersect_shape(...)
"""

from .sphere import Sphere, intersect_sphere, make_sphere, solve_quadratic, sphere_surface_properties
from .triangle import interpolate_st, intersect_triangle, triangle_normal

__all__ = [
    "Sphere",
    "make_sphere",
    "solve_quadratic",
    "intersect_sphere",
    "sphere_surface_properties",
    "intersect_triangle",
    "triangle_normal",
    "interpolate_st",
]
