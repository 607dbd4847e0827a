"""Metallic (mirror) material scatter.

Metallic surfaces reflect the incoming direction about the surface normal:

    R = I - 2(I . N)N

The incoming direction is taken as the segment from the ray origin to the hit
point, so its length is carried into the reflected direction. Roughness is not
consulted; every metallic surface is a perfect mirror.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinytracer.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # direction = scatter_metal(ray_origin, hit_point, normal)
"""

import taichi as ti
import taichi.math as tm

from tinytracer.core.ray import reflect

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_metal(ray_origin: vec3, hit_point: vec3, normal: vec3) -> vec3:
    """Compute the mirror-reflected direction at a hit point.

    Args:
        ray_origin: Origin of the incoming ray.
        hit_point: The intersection point on the surface.
        normal: The outward surface normal (unit length).

    Returns:
        The reflected direction (not normalized).
    """
    return reflect(hit_point - ray_origin, normal)
