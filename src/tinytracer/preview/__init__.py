"""Preview module for output and visualization.

Components:
    export: PNG export via Pillow
    window: Taichi GGUI preview window

Example:
    >>> from tinytracer.preview import PreviewWindow, save_png
    >>> save_png(pixels, "output.png")
    >>> PreviewWindow(pixels.width, pixels.height).show(pixels)
"""

from tinytracer.preview.export import load_png, pixels_to_pil, save_png
from tinytracer.preview.window import PreviewWindow

__all__ = [
    "PreviewWindow",
    "save_png",
    "load_png",
    "pixels_to_pil",
]
