"""Whitted-style ray tracer built on Taichi.

This package renders scenes of spheres and triangle meshes lit by point
lights, using the classic Whitted algorithm:
- Phong diffuse and specular shading with hard shadows
- Fresnel-weighted mirror reflection
- Refraction through dielectrics with total internal reflection

Subpackages:
    core: Vector utilities, render options, the Whitted integrator and renderer
    geometry: Ray-sphere and ray-triangle intersection
    materials: Material parameters, Fresnel/Snell, Phong shading, checkerboard
    scene: Object and light storage, scene traversal, scene manager
    camera: Pinhole camera with primary ray generation
    preview: Framebuffer export (PPM, PNG)
"""

__version__ = "0.1.0"
