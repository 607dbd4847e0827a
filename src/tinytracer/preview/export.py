"""Image export utilities for rendered images.

This module provides functions for saving rendered pixel buffers to files.

Supported formats:
    - PNG (8-bit RGBA via Pillow)

Example:
    >>> from tinytracer.preview.export import save_png
    >>> from tinytracer.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(426, 240)
    >>> pixels = renderer.render(150)
    >>> save_png(pixels, "output.png")
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image as PILImage

from tinytracer.core.pixels import PixelBuffer


def pixels_to_pil(pixels: PixelBuffer) -> PILImage.Image:
    """Convert a pixel buffer to a Pillow RGBA image.

    Args:
        pixels: The rendered pixel buffer.

    Returns:
        An RGBA image with the top row of the buffer at the top.
    """
    return PILImage.fromarray(np.ascontiguousarray(pixels.data))


def save_png(pixels: PixelBuffer, filepath: str | Path) -> None:
    """Save a pixel buffer as an RGBA PNG file.

    The buffer is already tone mapped, so the bytes are written as-is.

    Args:
        pixels: The rendered pixel buffer.
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the path does not end in .png.
    """
    path = Path(filepath)
    if path.suffix.lower() != ".png":
        raise ValueError(f"Output path must end in .png, got {filepath}")

    pixels_to_pil(pixels).save(path, format="PNG")


def load_png(filepath: str | Path) -> PixelBuffer:
    """Load a PNG file into a pixel buffer.

    Non-RGBA images are converted, with opaque alpha for images without one.

    Args:
        filepath: Path of the PNG file.

    Returns:
        The image as a PixelBuffer.
    """
    with PILImage.open(filepath) as image:
        data = np.asarray(image.convert("RGBA"), dtype=np.uint8).copy()
    return PixelBuffer(data)

