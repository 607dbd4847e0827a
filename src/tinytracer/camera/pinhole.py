"""Pinhole camera model for primary ray generation.

The camera sits at a position in world space and looks down -Z with +Y up.
The image plane is at unit distance in front of the camera. A pixel
coordinate (x, y), with y = 0 at the top row, maps to the image-plane point

    u = (2 * (x + 0.5) / width - 1) * aspect_ratio * fov_scale
    v = (1 - 2 * (y + 0.5) / height) * fov_scale

where fov_scale = tan(vfov / 2). The primary ray direction is the normalized
vector (u, v, -1).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinytracer.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>>
    >>> setup_camera(PinholeCamera(position=(0.0, 0.0, 0.0), vfov=60.0))
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(10.0, 20.0, 64, 48)  # Ray through pixel (10, 20)
"""

import math
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from tinytracer.core.ray import Ray, make_ray, vec3
from tinytracer.core.sampling import uniform_vec2_range

vec2 = tm.vec2

DEFAULT_VFOV = 60.0

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        position: Camera position in world space (x, y, z).
        vfov: Vertical field of view in degrees, in (0, 180).
    """

    position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    vfov: float = DEFAULT_VFOV

    def __post_init__(self) -> None:
        if len(self.position) != 3:
            raise ValueError(f"Camera position must have 3 components, got {len(self.position)}")
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"Vertical field of view must be in (0, 180) degrees, got {self.vfov}")

    @property
    def fov_scale(self) -> float:
        """Half-height of the image plane at unit distance."""
        return math.tan(math.radians(self.vfov) / 2.0)


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_fov_scale = ti.field(dtype=ti.f32, shape=())

# Flag to track if a camera has been uploaded
_camera_initialized = ti.field(dtype=ti.i32, shape=())


def setup_camera(camera: PinholeCamera) -> None:
    """Upload camera state for use by the render kernels.

    Args:
        camera: Camera configuration with position and FOV.

    Note:
        This function writes to Taichi fields and should be called from
        Python (not from within a Taichi kernel).
    """
    _camera_origin[None] = [float(c) for c in camera.position]
    _fov_scale[None] = camera.fov_scale
    _camera_initialized[None] = 1


def ensure_camera() -> None:
    """Upload the default camera if no camera has been set up yet.

    The default is a camera at the origin with a 60 degree vertical FOV.
    """
    if _camera_initialized[None] == 0:
        setup_camera(PinholeCamera())


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def pixel_to_image_plane(px: ti.f32, py: ti.f32, width: ti.i32, height: ti.i32) -> vec2:
    """Map a (possibly jittered) pixel coordinate onto the image plane.

    Args:
        px: Horizontal pixel coordinate (0 = left edge column).
        py: Vertical pixel coordinate (0 = top row).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        The (u, v) image-plane coordinates at z = -1 relative to the camera.
    """
    w = ti.cast(width, ti.f32)
    h = ti.cast(height, ti.f32)
    aspect_ratio = w / h
    fov = _fov_scale[None]
    u = (2.0 * ((px + 0.5) / w) - 1.0) * aspect_ratio * fov
    v = (1.0 - 2.0 * ((py + 0.5) / h)) * fov
    return vec2(u, v)


@ti.func
def get_ray(px: ti.f32, py: ti.f32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate the primary ray through a pixel coordinate.

    Returns:
        A Ray from the camera position with a unit-length direction.
    """
    uv = pixel_to_image_plane(px, py, width, height)
    direction = tm.normalize(vec3(uv.x, uv.y, -1.0))
    return make_ray(_camera_origin[None], direction)


@ti.func
def get_ray_jittered(state: ti.u32, pixel_x: ti.i32, pixel_y: ti.i32, width: ti.i32, height: ti.i32):
    """Generate a primary ray with a box-filter jitter for anti-aliasing.

    The pixel coordinate is offset by a uniform value in [-0.5, 0.5) on each
    axis before projection.

    Args:
        state: The random stream state.
        pixel_x: Pixel column (0 = left).
        pixel_y: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A tuple (new_state, ray).
    """
    s, offset = uniform_vec2_range(state, -0.5, 0.5)
    px = ti.cast(pixel_x, ti.f32) + offset.x
    py = ti.cast(pixel_y, ti.f32) + offset.y
    return s, get_ray(px, py, width, height)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float] | float]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with the uploaded origin and fov_scale.
    """
    origin = _camera_origin[None]
    return {
        "origin": (float(origin[0]), float(origin[1]), float(origin[2])),
        "fov_scale": float(_fov_scale[None]),
    }
