"""Dielectric interface optics: Snell refraction and Fresnel reflectance.

Transparent (REFLECTION_AND_REFRACTION) and mirror-like (REFLECTION)
surfaces both weight their secondary rays by the Fresnel reflectance kr.
The surrounding medium is assumed to be air (ior = 1).

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Exact (unpolarized) Fresnel equations: kr = (Rs^2 + Rp^2) / 2
    - Total internal reflection when sin(theta_t) >= 1

The sign of dot(I, N) tells which side of the surface the ray is on:
negative means the ray enters the object, positive means it leaves it,
in which case the roles of the two indices of refraction are swapped.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.materials.dielectric import fresnel, refract
    >>> # Use within a Taichi kernel:
    >>> # direction, total_internal = refract(incident, normal, ior)
    >>> # kr = fresnel(incident, normal, ior)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def refract(incident: vec3, normal: vec3, ior: ti.f32):
    """Refract an incident direction through a surface using Snell's law.

    Args:
        incident: The incoming direction (should be normalized).
        normal: The outward surface normal (should be normalized).
        ior: Index of refraction of the object.

    Returns:
        Tuple of (direction, total_internal) where total_internal is 1 when
        no transmitted ray exists. The direction is then the zero vector and
        must not be traced.
    """
    cos_i = tm.clamp(tm.dot(incident, normal), -1.0, 1.0)
    eta_i = 1.0
    eta_t = ior
    n = normal
    if cos_i < 0.0:
        # Entering the object
        cos_i = -cos_i
    else:
        # Leaving the object
        eta_i = ior
        eta_t = 1.0
        n = -normal

    eta = eta_i / eta_t
    k = 1.0 - eta * eta * (1.0 - cos_i * cos_i)

    direction = vec3(0.0, 0.0, 0.0)
    total_internal = 1
    if k >= 0.0:
        direction = eta * incident + (eta * cos_i - ti.sqrt(k)) * n
        total_internal = 0

    return direction, total_internal


@ti.func
def fresnel(incident: vec3, normal: vec3, ior: ti.f32) -> ti.f32:
    """Compute the Fresnel reflectance kr for an unpolarized ray.

    At normal incidence this reduces to ((n1 - n2) / (n1 + n2))^2. By
    conservation of energy the transmitted fraction is 1 - kr.

    Args:
        incident: The incoming direction (should be normalized).
        normal: The outward surface normal (should be normalized).
        ior: Index of refraction of the object.

    Returns:
        The reflected fraction in [0, 1]; 1 on total internal reflection.
    """
    cos_i = tm.clamp(tm.dot(incident, normal), -1.0, 1.0)
    eta_i = 1.0
    eta_t = ior
    if cos_i > 0.0:
        eta_i = ior
        eta_t = 1.0

    sin_t = eta_i / eta_t * ti.sqrt(ti.max(0.0, 1.0 - cos_i * cos_i))

    kr = 1.0
    if sin_t < 1.0:
        cos_t = ti.sqrt(ti.max(0.0, 1.0 - sin_t * sin_t))
        cos_i = ti.abs(cos_i)
        rs = ((eta_t * cos_i) - (eta_i * cos_t)) / ((eta_t * cos_i) + (eta_i * cos_t))
        rp = ((eta_i * cos_i) - (eta_t * cos_t)) / ((eta_i * cos_i) + (eta_t * cos_t))
        kr = (rs * rs + rp * rp) / 2.0

    return kr
