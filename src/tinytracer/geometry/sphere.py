"""Sphere primitive and ray-sphere intersection.

The intersection uses the half-b form of the quadratic, with oc pointing from
the ray origin to the sphere center:

    a = dot(direction, direction)
    h = dot(direction, oc)
    c = dot(oc, oc) - radius^2
    discriminant = h^2 - a*c
    t = (h -/+ sqrt(discriminant)) / a

The near root is tried first, then the far root. Both ends of the accepted
interval are exclusive, so a hit exactly at t_min (the shadow-acne offset) or
at t_max is rejected.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinytracer.geometry.sphere import Sphere, intersect_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use intersect_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Sentinel returned by intersect_sphere when the ray misses
NO_HIT = -1.0


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.func
def intersect_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> ti.f32:
    """Find the nearest ray parameter in (t_min, t_max) where the ray hits the sphere.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (non-zero, need not be unit).
        sphere: The sphere to test.
        t_min: Exclusive lower bound on t.
        t_max: Exclusive upper bound on t.

    Returns:
        The hit parameter t, or NO_HIT if the ray misses or both roots fall
        outside the interval.
    """
    oc = sphere.center - ray_origin
    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = h * h - a * c

    result = NO_HIT
    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        t = (h - sqrt_d) / a
        if t <= t_min or t >= t_max:
            t = (h + sqrt_d) / a
            if t > t_min and t < t_max:
                result = t
        else:
            result = t

    return result


@ti.func
def sphere_normal(sphere: Sphere, point: vec3) -> vec3:
    """Outward unit normal at a point on the sphere surface.

    No front-face flip is applied: for rays starting inside the sphere the
    normal still points away from the center.
    """
    return (point - sphere.center) / sphere.radius


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius."""
    return Sphere(center=center, radius=radius)
