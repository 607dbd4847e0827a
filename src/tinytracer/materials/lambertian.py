"""Diffuse material scatter.

Diffuse surfaces scatter toward normal + random_unit_vector, which gives a
cosine-weighted distribution over the hemisphere around the normal without
building a local frame. When the random vector almost exactly cancels the
normal, the normal itself is used as the scatter direction so that the next
ray never has a zero-length direction.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinytracer.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # state, direction = scatter_lambertian(state, normal)
"""

import taichi as ti
import taichi.math as tm

from tinytracer.core.ray import near_zero
from tinytracer.core.sampling import random_unit_vector

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def lambertian_direction(normal: vec3, unit_offset: vec3) -> vec3:
    """Combine a normal and a random unit vector into a diffuse scatter direction.

    Args:
        normal: The outward surface normal (unit length).
        unit_offset: A unit vector drawn uniformly on the sphere.

    Returns:
        normal + unit_offset, or normal alone when that sum is near zero.
        The result is not normalized.
    """
    direction = normal + unit_offset
    if near_zero(direction):
        direction = normal
    return direction


@ti.func
def scatter_lambertian(state: ti.u32, normal: vec3):
    """Sample a diffuse scatter direction.

    Args:
        state: The random stream state.
        normal: The outward surface normal (unit length).

    Returns:
        A tuple (new_state, direction).
    """
    s, offset = random_unit_vector(state)
    return s, lambertian_direction(normal, offset)
