"""Preview window using Taichi GGUI.

This module shows a rendered pixel buffer in a ti.ui.Window and keeps it on
screen until the user closes the window or presses Escape.

Example:
    >>> from tinytracer.preview.window import PreviewWindow
    >>>
    >>> window = PreviewWindow(426, 240)
    >>> if window.is_display_available():
    ...     window.show(pixels)
"""

from __future__ import annotations

import os

import numpy as np
import taichi as ti

from tinytracer.core.pixels import PixelBuffer


class PreviewWindow:
    """Window displaying one rendered image.

    The window is created lazily on the first call to show(), so the object
    can be built and fed images in headless environments.

    Attributes:
        width: Window width in pixels.
        height: Window height in pixels.
        display_image: Taichi field storing the display image (RGB float),
            indexed (x, y) with y = 0 at the bottom as GGUI expects.
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        title: str = "tinytracer",
    ) -> None:
        """Initialize the preview window.

        Args:
            width: Window width in pixels.
            height: Window height in pixels.
            title: Window title.

        Raises:
            ValueError: If dimensions are not positive.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Window dimensions must be positive, got {width}x{height}")

        self.width = width
        self.height = height
        self._title = title

        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None

        self.display_image: ti.MatrixField = ti.Vector.field(
            3, dtype=ti.f32, shape=(width, height)
        )

    def _initialize_window(self) -> None:
        """Create the Taichi GGUI window and canvas."""
        if self._window is not None:
            return

        self._window = ti.ui.Window(
            name=self._title,
            res=(self.width, self.height),
            vsync=True,
        )
        self._canvas = self._window.get_canvas()

    def update_image(self, pixels: PixelBuffer) -> None:
        """Upload a pixel buffer into the display field.

        Args:
            pixels: The rendered image. Alpha is ignored.

        Raises:
            ValueError: If the buffer size does not match the window.
        """
        if (pixels.width, pixels.height) != (self.width, self.height):
            raise ValueError(
                f"Image size {pixels.width}x{pixels.height} doesn't match "
                f"window {self.width}x{self.height}"
            )

        # Buffer rows run top to bottom; GGUI fields are (x, y) from the bottom
        image = pixels.rgb_float()
        image_transposed = np.ascontiguousarray(
            np.transpose(np.flipud(image), (1, 0, 2))
        )
        self.display_image.from_numpy(image_transposed)

    def is_running(self) -> bool:
        """Check if the window is still open."""
        return self._window is not None and self._window.running

    def _escape_pressed(self) -> bool:
        assert self._window is not None
        while self._window.get_event(ti.ui.PRESS):
            if self._window.event.key == ti.ui.ESCAPE:
                return True
        return False

    def show(self, pixels: PixelBuffer) -> None:
        """Display an image and block until the window is dismissed.

        Returns when the window is closed or Escape is pressed.

        Args:
            pixels: The rendered image to display.
        """
        self.update_image(pixels)
        self._initialize_window()
        assert self._window is not None and self._canvas is not None

        while self._window.running:
            if self._escape_pressed():
                self._window.running = False
                break
            self._canvas.set_image(self.display_image)
            self._window.show()

    def close(self) -> None:
        """Close the preview window."""
        if self._window is not None:
            self._window.running = False

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering.

        Returns:
            True if a display is available, False for headless environments.
        """
        display = os.environ.get("DISPLAY")
        wayland = os.environ.get("WAYLAND_DISPLAY")

        # Windows generally always has display
        if os.name == "nt":
            return True

        # On macOS, display is always available if not in SSH
        if os.uname().sysname == "Darwin":
            ssh_connection = os.environ.get("SSH_CONNECTION")
            if ssh_connection and not display:
                return False
            return True

        # On Linux, check for X11 or Wayland
        return bool(display or wayland)
