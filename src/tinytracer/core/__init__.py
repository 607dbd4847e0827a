"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure and vector helpers
    sampling: Explicit-state random number streams and unit vector sampling
    pixels: RGBA8 pixel buffer handed out by the renderer
    integrator: Light transport and the per-pixel sampling kernels
    renderer: Stateful renderer with progressive accumulation

All compute-intensive operations use Taichi kernels and run on the CPU or GPU
backend chosen at ti.init().
"""

from .pixels import PixelBuffer
from .ray import (
    NEAR_ZERO_EPSILON,
    Ray,
    length_squared,
    make_ray,
    near_zero,
    ray_at,
    reflect,
    vec3,
)
from .sampling import (
    next_u32,
    random_unit_vector,
    random_unit_vector_with_attempts,
    sample_unit_vectors,
    seed_stream,
    uniform_float,
    uniform_float_range,
    uniform_vec2,
    uniform_vec2_range,
    uniform_vec3,
    uniform_vec3_range,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports
# and field allocation on package import.
# Import directly from tinytracer.core.integrator or tinytracer.core.renderer.
#
# For rendering, use:
#   from tinytracer.core.renderer import Renderer

__all__ = [
    "PixelBuffer",
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length_squared",
    "reflect",
    "near_zero",
    "NEAR_ZERO_EPSILON",
    "next_u32",
    "seed_stream",
    "uniform_float",
    "uniform_float_range",
    "uniform_vec2",
    "uniform_vec2_range",
    "uniform_vec3",
    "uniform_vec3_range",
    "random_unit_vector",
    "random_unit_vector_with_attempts",
    "sample_unit_vectors",
]
