"""RGBA8 pixel buffer produced by the renderer.

The buffer holds one opaque RGBA8 color per pixel, row-major with the top row
first. It is the only thing the renderer hands to the outside world; export
and display consume it read-only.

Example:
    >>> import numpy as np
    >>> from tinytracer.core.pixels import PixelBuffer
    >>> buffer = PixelBuffer(np.zeros((2, 3, 4), dtype=np.uint8))
    >>> buffer.width, buffer.height
    (3, 2)
    >>> len(buffer.to_bytes())
    24
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt


@dataclass(frozen=True)
class PixelBuffer:
    """Rendered image as RGBA8 values.

    Attributes:
        data: Array of shape (height, width, 4) with dtype uint8, channels in
            R, G, B, A order.

    Raises:
        ValueError: If data is not a (height, width, 4) uint8 array.
    """

    data: npt.NDArray[np.uint8]

    def __post_init__(self) -> None:
        if self.data.ndim != 3 or self.data.shape[2] != 4:
            raise ValueError(f"Pixel data must have shape (height, width, 4), got {self.data.shape}")
        if self.data.dtype != np.uint8:
            raise ValueError(f"Pixel data must be uint8, got {self.data.dtype}")
        # Keep a private read-only copy so the caller's array stays writable
        data = np.array(self.data, copy=True)
        data.setflags(write=False)
        object.__setattr__(self, "data", data)

    @property
    def width(self) -> int:
        """Image width in pixels."""
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        """Image height in pixels."""
        return int(self.data.shape[0])

    def pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        """Get the (R, G, B, A) value at column x, row y (0 = top)."""
        r, g, b, a = self.data[y, x]
        return int(r), int(g), int(b), int(a)

    def to_bytes(self) -> bytes:
        """Raw bytes, width * height * 4 long, in R, G, B, A order."""
        return self.data.tobytes()

    def packed(self) -> npt.NDArray[np.uint32]:
        """Pack every pixel into a 32-bit RGBA8888 word.

        Returns:
            Flat array of length width * height holding
            r << 24 | g << 16 | b << 8 | a, row-major.
        """
        channels = self.data.astype(np.uint32)
        words = (
            (channels[..., 0] << 24)
            | (channels[..., 1] << 16)
            | (channels[..., 2] << 8)
            | channels[..., 3]
        )
        return words.reshape(-1)

    def rgb_float(self) -> npt.NDArray[np.float32]:
        """RGB channels as float32 in [0, 1], shape (height, width, 3)."""
        return self.data[..., :3].astype(np.float32) / 255.0

    @classmethod
    def from_packed(cls, words: npt.NDArray[np.uint32], width: int, height: int) -> PixelBuffer:
        """Rebuild a buffer from packed RGBA8888 words.

        Raises:
            ValueError: If the number of words does not match width * height.
        """
        words = np.asarray(words, dtype=np.uint32)
        if words.size != width * height:
            raise ValueError(f"Expected {width * height} packed pixels, got {words.size}")

        words = words.reshape(height, width)
        data = np.stack(
            [(words >> shift) & 0xFF for shift in (24, 16, 8, 0)],
            axis=-1,
        ).astype(np.uint8)
        return cls(data)
