"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection

All intersection routines are implemented as Taichi functions (@ti.func).
They return the ray parameter of the hit, or NO_HIT on a miss:
    t = intersect_sphere(ray_origin, ray_direction, sphere, t_min, t_max)
"""

from .sphere import NO_HIT, Sphere, intersect_sphere, make_sphere, sphere_normal

__all__ = [
    "Sphere",
    "NO_HIT",
    "intersect_sphere",
    "sphere_normal",
    "make_sphere",
]
