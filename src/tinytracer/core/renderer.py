"""Renderer driving the image sampling loop.

This module wraps the integrator kernels with a small stateful interface:
- Full renders at a fixed sample count
- Batch rendering with progress callbacks or a generator
- Reset with optional reseeding for reproducible renders

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinytracer.core.renderer import Renderer
    >>> from tinytracer.scene.spheres import create_three_spheres_scene
    >>>
    >>> scene = create_three_spheres_scene()
    >>> renderer = Renderer(426, 240, seed=3)
    >>> pixels = renderer.render(150, batch_size=10)
    >>> pixels.to_bytes()  # 426 * 240 * 4 bytes, RGBA8
"""

from collections.abc import Callable, Generator
from dataclasses import dataclass

from tinytracer.core.integrator import (
    MAX_DEPTH,
    SAMPLES_PER_PIXEL,
    clear_render_target,
    get_total_samples,
    render_passes,
    resolve_pixels,
    setup_render_target,
)
from tinytracer.core.pixels import PixelBuffer

# Type alias for progress callback
# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


@dataclass
class RenderSettings:
    """Settings for a single render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Bounce budget per path.
        seed: Seed for the per-pixel random streams.
    """

    width: int
    height: int
    samples_per_pixel: int = SAMPLES_PER_PIXEL
    max_depth: int = MAX_DEPTH
    seed: int = 0

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {self.width}x{self.height}")
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")


class Renderer:
    """Accumulates samples for the current scene and resolves them into pixels.

    The renderer owns the dimensions, seed and bounce budget and delegates
    storage to the integrator's render target (Taichi fields), so only one
    renderer is active at a time.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        seed: Seed the per-pixel streams were last reset with.
        max_depth: Bounce budget per path.
    """

    def __init__(self, width: int, height: int, *, seed: int = 0, max_depth: int = MAX_DEPTH) -> None:
        """Initialize the renderer.

        Args:
            width: Image width in pixels (max 2048).
            height: Image height in pixels (max 2048).
            seed: Seed for the per-pixel random streams, in [0, 2^31).
            max_depth: Bounce budget per path.

        Raises:
            ValueError: If dimensions or seed are out of range, or max_depth
                is negative.
        """
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")

        setup_render_target(width, height, seed)
        self._width = width
        self._height = height
        self._seed = seed
        self.max_depth = max_depth

    @classmethod
    def from_settings(cls, settings: RenderSettings) -> "Renderer":
        """Create a renderer from RenderSettings."""
        return cls(settings.width, settings.height, seed=settings.seed, max_depth=settings.max_depth)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def seed(self) -> int:
        """Get the seed of the current accumulation."""
        return self._seed

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return get_total_samples()

    def reset(self, seed: int | None = None) -> None:
        """Clear the accumulation and reseed the per-pixel streams.

        Args:
            seed: New seed. Defaults to the current one, which makes the next
                render repeat the previous one exactly.
        """
        clear_render_target(seed)
        if seed is not None:
            self._seed = seed

    def render(
        self,
        num_samples: int = SAMPLES_PER_PIXEL,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> PixelBuffer:
        """Render samples and return the resolved image.

        Accumulates the specified number of samples into the existing buffer.
        Can be called multiple times to keep refining the image.

        Args:
            num_samples: Number of samples to add per pixel.
            batch_size: Number of samples to render before each callback.
            callback: Optional callback called after each batch with
                (current_total_samples, target_total_samples).

        Returns:
            The resolved PixelBuffer.

        Raises:
            ValueError: If num_samples or batch_size is not positive.
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

        return self.get_pixels()

    def render_progressive(
        self,
        num_samples: int = SAMPLES_PER_PIXEL,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Render samples progressively, yielding progress after each batch.

        Args:
            num_samples: Number of samples to add per pixel.
            batch_size: Number of samples to render before each yield.

        Yields:
            Tuple of (current_total_samples, target_total_samples).

        Raises:
            ValueError: If num_samples or batch_size is not positive.
        """
        if num_samples <= 0:
            raise ValueError(f"num_samples must be positive, got {num_samples}")
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        target_samples = self.sample_count + num_samples

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            render_passes(batch, self.max_depth)
            remaining -= batch
            yield (self.sample_count, target_samples)

    def get_pixels(self) -> PixelBuffer:
        """Resolve the accumulated samples into a pixel buffer.

        Raises:
            RuntimeError: If no samples have been rendered yet.
        """
        return resolve_pixels()

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"seed={self.seed}, samples={self.sample_count})"
        )
