"""Path tracing integrator and image sampling kernels.

This module implements the light transport and the per-pixel sampling loop.

Light transport: a ray bounces between spheres until it escapes to the sky or
the bounce budget runs out. Each bounce multiplies the path throughput by
ATTENUATION * albedo of the hit material; an escaping ray picks up the
constant SKY_COLOR, and a path that exhausts its budget contributes black.
This is the iterative form of

    color(ray, depth) = 0                                   if depth <= 0
                      = SKY_COLOR                           if ray misses
                      = 0.25 * albedo * color(scattered, depth - 1)

Image sampling: each pixel owns a random stream seeded from (seed, pixel
index). A render pass draws one jittered sample per pixel and adds it to a
running sum; resolving divides by the sample count, applies a square-root
tone curve, clamps to [0, 1] and packs RGBA8 with opaque alpha.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinytracer.core.integrator import render_image
    >>> from tinytracer.scene.spheres import create_three_spheres_scene
    >>>
    >>> scene = create_three_spheres_scene()
    >>> pixels = render_image(320, 180, num_samples=16, seed=1)
"""

import taichi as ti
import taichi.math as tm

from tinytracer.camera.pinhole import ensure_camera, get_ray_jittered
from tinytracer.core.pixels import PixelBuffer
from tinytracer.core.ray import make_ray, ray_at, vec3
from tinytracer.core.sampling import seed_stream
from tinytracer.geometry.sphere import sphere_normal
from tinytracer.materials.material import scatter
from tinytracer.scene.intersection import (
    get_sphere,
    get_sphere_albedo,
    get_sphere_metallic,
    intersect_scene,
)

# =============================================================================
# Rendering Constants
# =============================================================================

# Maximum ray bounces (path length)
MAX_DEPTH = 50

# Samples per pixel for a full render
SAMPLES_PER_PIXEL = 150

# Throughput factor applied at every bounce, regardless of material
ATTENUATION = 0.25

# t_min and t_max for ray intersection; t_min keeps scattered rays off their own surface
T_MIN = 0.001
T_MAX = float("inf")

# Ambient sky color returned by rays that escape the scene
SKY_COLOR = vec3(0.5, 0.8, 0.9)

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Buffers are indexed [row, column] with row 0 at the top of the image
_color_sum = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))
_rng_state = ti.field(dtype=ti.u32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))
_pixels = ti.field(dtype=ti.u8, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH, 4))

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())
_sample_count = ti.field(dtype=ti.i32, shape=())
_seed = ti.field(dtype=ti.i32, shape=())

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())

MAX_SEED = 2**31 - 1


def _validate_seed(seed: int) -> None:
    if not 0 <= seed <= MAX_SEED:
        raise ValueError(f"Seed must be in [0, {MAX_SEED}], got {seed}")


def setup_render_target(width: int, height: int, seed: int = 0) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions, clears the accumulation and seeds one
    random stream per pixel. If no camera has been set up yet, the default
    camera (origin, 60 degree FOV) is uploaded.

    Args:
        width: Image width in pixels (1 to MAX_IMAGE_WIDTH).
        height: Image height in pixels (1 to MAX_IMAGE_HEIGHT).
        seed: Seed for the per-pixel random streams, in [0, 2^31).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum
            supported size, or if the seed is out of range.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    _validate_seed(seed)

    _image_width[None] = width
    _image_height[None] = height
    _seed[None] = seed
    _render_target_initialized[None] = 1

    ensure_camera()
    clear_render_target()


def clear_render_target(seed: int | None = None) -> None:
    """Clear the accumulation and reseed the per-pixel streams.

    Args:
        seed: New seed for the streams. Defaults to the current seed.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If the seed is out of range.
    """
    _check_render_target_initialized()
    if seed is not None:
        _validate_seed(seed)
        _seed[None] = seed

    _color_sum.fill(0.0)
    _sample_count[None] = 0
    width, height = get_image_dimensions()
    _seed_streams(int(_seed[None]), width, height)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def get_total_samples() -> int:
    """Get the number of samples accumulated per pixel so far."""
    return int(_sample_count[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def trace_color(state: ti.u32, origin: vec3, direction: vec3, max_depth: ti.i32):
    """Estimate the color carried back along a ray.

    Args:
        state: The random stream state.
        origin: Ray origin.
        direction: Ray direction (non-zero).
        max_depth: Bounce budget. At zero or below the result is black.

    Returns:
        A tuple (new_state, color).
    """
    s = state
    ray_origin = origin
    ray_direction = direction
    throughput = vec3(1.0, 1.0, 1.0)
    color = vec3(0.0, 0.0, 0.0)

    # Active flag for path continuation
    active = 1

    for _ in range(max_depth):
        if active == 1:
            record = intersect_scene(ray_origin, ray_direction, T_MIN, T_MAX)

            if record.hit == 0:
                color = throughput * SKY_COLOR
                active = 0
            else:
                sphere = get_sphere(record.sphere_index)
                hit_point = ray_at(make_ray(ray_origin, ray_direction), record.t)
                normal = sphere_normal(sphere, hit_point)

                next_direction = vec3(0.0, 0.0, 0.0)
                s, next_direction = scatter(
                    s,
                    ray_origin,
                    hit_point,
                    normal,
                    get_sphere_metallic(record.sphere_index),
                )

                throughput *= ATTENUATION * get_sphere_albedo(record.sphere_index)
                ray_origin = hit_point
                ray_direction = next_direction

    return s, color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _seed_streams(seed: ti.i32, width: ti.i32, height: ti.i32):
    for y, x in ti.ndrange(height, width):
        _rng_state[y, x] = seed_stream(seed, y * width + x)


@ti.kernel
def _render_one_spp(width: ti.i32, height: ti.i32, max_depth: ti.i32):
    """Trace one jittered sample through every pixel and add it to the sum."""
    for y, x in ti.ndrange(height, width):
        state = _rng_state[y, x]
        state, ray = get_ray_jittered(state, x, y, width, height)
        state, color = trace_color(state, ray.origin, ray.direction, max_depth)

        # Check for NaN/Inf and replace with zero
        for c in ti.static(range(3)):
            if tm.isnan(color[c]) or tm.isinf(color[c]):
                color[c] = 0.0

        _color_sum[y, x] += color
        _rng_state[y, x] = state


@ti.kernel
def _resolve_pixels(width: ti.i32, height: ti.i32, sample_count: ti.i32):
    """Average, tone map and pack the accumulated samples into RGBA8."""
    for y, x in ti.ndrange(height, width):
        color = _color_sum[y, x] / ti.cast(sample_count, ti.f32)
        color = tm.clamp(ti.sqrt(color), 0.0, 1.0)
        for c in ti.static(range(3)):
            _pixels[y, x, c] = ti.cast(color[c] * 255.0, ti.u8)
        _pixels[y, x, 3] = ti.cast(255, ti.u8)


@ti.kernel
def _trace_single_ray(
    seed: ti.i32,
    origin: vec3,
    direction: vec3,
    max_depth: ti.i32,
) -> vec3:
    state = seed_stream(seed, 0)
    state, color = trace_color(state, origin, direction, max_depth)
    return color


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int = MAX_DEPTH,
    seed: int = 0,
) -> tuple[float, float, float]:
    """Trace a single ray against the current scene.

    This is a Python-callable entry point for testing and debugging. Image
    rendering goes through render_passes() and resolve_pixels().

    Args:
        origin: Ray origin.
        direction: Ray direction (non-zero).
        max_depth: Bounce budget.
        seed: Seed for the ray's random stream.

    Returns:
        Tuple of (R, G, B) linear color values.

    Raises:
        ValueError: If the direction is zero or the seed is out of range.
    """
    if all(c == 0.0 for c in direction):
        raise ValueError("Ray direction must be non-zero")
    _validate_seed(seed)

    color = _trace_single_ray(seed, vec3(*origin), vec3(*direction), max_depth)
    return (float(color[0]), float(color[1]), float(color[2]))


def render_passes(num_samples: int = 1, max_depth: int = MAX_DEPTH) -> None:
    """Accumulate samples into the render target.

    Each pass adds one sample per pixel. Can be called repeatedly; the
    per-pixel streams continue where the previous pass stopped.

    Args:
        num_samples: Number of samples to add per pixel.
        max_depth: Bounce budget for every path.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    for _ in range(num_samples):
        _render_one_spp(width, height, max_depth)
        _sample_count[None] += 1


def resolve_pixels() -> PixelBuffer:
    """Convert the accumulated samples into an RGBA8 pixel buffer.

    Returns:
        A PixelBuffer of the active image size.

    Raises:
        RuntimeError: If render target has not been set up or no samples
            have been rendered yet.
    """
    _check_render_target_initialized()

    sample_count = get_total_samples()
    if sample_count == 0:
        raise RuntimeError("No samples rendered yet. Call render_passes() first.")

    width, height = get_image_dimensions()
    _resolve_pixels(width, height, sample_count)

    full = _pixels.to_numpy()
    return PixelBuffer(full[:height, :width, :].copy())


def render_image(
    width: int,
    height: int,
    num_samples: int = SAMPLES_PER_PIXEL,
    seed: int = 0,
    max_depth: int = MAX_DEPTH,
) -> PixelBuffer:
    """Render the current scene into a fresh pixel buffer.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        num_samples: Samples per pixel (must be positive).
        seed: Seed for the per-pixel random streams.
        max_depth: Bounce budget for every path.

    Returns:
        The rendered PixelBuffer.

    Raises:
        ValueError: If the arguments are out of range.
    """
    if num_samples <= 0:
        raise ValueError(f"num_samples must be positive, got {num_samples}")

    setup_render_target(width, height, seed)
    render_passes(num_samples, max_depth)
    return resolve_pixels()
