"""Scene storage and closest-hit queries.

Spheres and their materials are stored in Taichi fields (Structure of Arrays)
so the render kernels can read them directly. intersect_scene() walks every
sphere in insertion order and keeps the strictly closest hit, which means the
first sphere reaching the minimal distance wins a tie.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinytracer.materials.material import Material
    >>> from tinytracer.scene.intersection import add_sphere, clear_scene, intersect_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, Material(albedo=(0.5, 0.5, 0.5)))
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from tinytracer.geometry.sphere import NO_HIT, Sphere, intersect_sphere
from tinytracer.materials.material import Material

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class HitRecord:
    """Result of a closest-hit query.

    Attributes:
        hit: 1 if some sphere was hit, 0 otherwise.
        sphere_index: Index of the hit sphere. Only valid if hit == 1.
        t: Ray parameter of the hit. Only valid if hit == 1.
    """

    hit: ti.i32
    sphere_index: ti.i32
    t: ti.f32


# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_roughness = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_metallic = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres from the scene.

    Resets the sphere count to zero. The field data is overwritten when new
    spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(
    center: tuple[float, float, float],
    radius: float,
    material: Material,
) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (must be positive).
        material: The material, copied into the scene storage.

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If the radius is not positive.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if not radius > 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

    sphere_centers[idx] = [float(c) for c in center]
    sphere_radii[idx] = radius
    sphere_albedos[idx] = list(material.albedo)
    sphere_roughness[idx] = material.roughness
    sphere_metallic[idx] = material.metallic
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def get_sphere(index: ti.i32) -> Sphere:
    """Load the geometry of a stored sphere."""
    return Sphere(center=sphere_centers[index], radius=sphere_radii[index])


@ti.func
def get_sphere_albedo(index: ti.i32) -> vec3:
    """Load the material albedo of a stored sphere."""
    return sphere_albedos[index]


@ti.func
def get_sphere_metallic(index: ti.i32) -> ti.f32:
    """Load the material metallic flag of a stored sphere."""
    return sphere_metallic[index]


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Find the closest sphere hit by a ray.

    Each sphere is tested with the current closest distance as its exclusive
    upper bound, so a later sphere only replaces the hit when it is strictly
    closer.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        t_min: Exclusive lower bound on t.
        t_max: Exclusive upper bound on t.

    Returns:
        A HitRecord for the closest hit, or one with hit == 0 on a miss.
    """
    closest_t = t_max
    result = HitRecord(hit=0, sphere_index=-1, t=0.0)

    for i in range(num_spheres[None]):
        t = intersect_sphere(ray_origin, ray_direction, get_sphere(i), t_min, closest_t)
        if t != NO_HIT:
            closest_t = t
            result = HitRecord(hit=1, sphere_index=i, t=t)

    return result
