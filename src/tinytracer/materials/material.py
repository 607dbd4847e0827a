"""Material description and scatter dispatch.

A Material is owned by value by the sphere that uses it. On the Python side it
is a frozen dataclass validated at construction; on the Taichi side its fields
live in the scene storage arrays and scatter() picks the mirror or diffuse
rule from the metallic flag.

Example:
    >>> from tinytracer.materials.material import Material
    >>> grey = Material(albedo=(0.5, 0.5, 0.5))
    >>> mirror = Material(albedo=(1.0, 1.0, 1.0), metallic=1.0)
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from tinytracer.materials.lambertian import scatter_lambertian
from tinytracer.materials.metal import scatter_metal

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class Material:
    """Surface material of a sphere.

    Attributes:
        albedo: Reflectance color as (R, G, B), each component in [0, 1].
        roughness: Stored with the material but not used by scatter: diffuse
            surfaces are always fully rough and metallic ones perfect mirrors.
        metallic: 0 selects diffuse scatter, any other value mirror reflection.

    Raises:
        ValueError: If albedo does not have three components or any component
            is outside [0, 1].
    """

    albedo: tuple[float, float, float]
    roughness: float = 1.0
    metallic: float = 0.0

    def __post_init__(self) -> None:
        if len(self.albedo) != 3:
            raise ValueError(f"Albedo must have 3 components, got {len(self.albedo)}")

        for i, component in enumerate(self.albedo):
            if not 0.0 <= component <= 1.0:
                raise ValueError(
                    f"Albedo component {i} = {component} is outside [0, 1]. "
                    "This would violate energy conservation."
                )

        # Normalize to a plain float tuple so equality and to_config are stable
        object.__setattr__(self, "albedo", tuple(float(c) for c in self.albedo))

    @property
    def is_metallic(self) -> bool:
        """Whether the material reflects like a mirror."""
        return self.metallic != 0.0


@ti.func
def scatter(
    state: ti.u32,
    ray_origin: vec3,
    hit_point: vec3,
    normal: vec3,
    metallic: ti.f32,
):
    """Generate the direction of the next ray leaving a surface.

    Args:
        state: The random stream state (untouched for metallic surfaces).
        ray_origin: Origin of the incoming ray.
        hit_point: The intersection point.
        normal: The outward unit normal at the hit point.
        metallic: Material flag; nonzero selects mirror reflection.

    Returns:
        A tuple (new_state, direction). The direction is not normalized.
    """
    s = state
    direction = vec3(0.0, 0.0, 0.0)
    if metallic != 0.0:
        direction = scatter_metal(ray_origin, hit_point, normal)
    else:
        s, direction = scatter_lambertian(s, normal)
    return s, direction
