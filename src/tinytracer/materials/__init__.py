"""Materials module for surface scattering.

Components:
    material: Material description and scatter dispatch
    lambertian: Diffuse scatter (normal plus random unit vector)
    metal: Perfect mirror reflection

A material is either diffuse or metallic; scatter() picks the rule from the
metallic flag. All scatter computations are implemented as Taichi functions.
"""

from .lambertian import lambertian_direction, scatter_lambertian
from .material import Material, scatter
from .metal import scatter_metal

__all__ = [
    "Material",
    "scatter",
    "scatter_lambertian",
    "lambertian_direction",
    "scatter_metal",
]
