"""RGBA8 pixel buffer that the progressive renderer draws into.

Pixels are addressed as (x, y) with (0, 0) at the bottom-left corner, the
same convention the camera uses for image coordinates. Conversions to NumPy
flip to the usual image row order (top row first).
"""

import numpy as np
import taichi as ti

# Colour a buffer is cleared to: transparent black
CLEAR_COLOUR = (0, 0, 0, 0)


class PixelBuffer:
    """A width x height grid of RGBA8 pixels backed by a Taichi field.

    Attributes:
        width: Width in pixels.
        height: Height in pixels.
        pixels: The underlying ti.Vector.field(4, ti.u8) of shape
            (width, height). Kernels write it directly.

    Example:
        >>> buffer = PixelBuffer(320, 240)
        >>> buffer.write(0, 0, (255, 0, 0, 255))  # bottom-left pixel
        >>> buffer.to_numpy()[-1, 0]
        array([255,   0,   0, 255], dtype=uint8)
    """

    def __init__(self, width: int, height: int) -> None:
        """Allocate a buffer cleared to CLEAR_COLOUR.

        Raises:
            ValueError: If width or height is not positive.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Pixel buffer dimensions must be positive, got {width}x{height}")
        self._width = int(width)
        self._height = int(height)
        self.pixels = ti.Vector.field(4, dtype=ti.u8, shape=(self._width, self._height))
        self.clear()

    def __repr__(self) -> str:
        return f"PixelBuffer(width={self._width}, height={self._height})"

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def size(self) -> tuple[int, int]:
        """(width, height) of the buffer."""
        return self._width, self._height

    def clear(self) -> None:
        """Set every pixel to CLEAR_COLOUR."""
        self.pixels.fill(0)

    def _check_bounds(self, x: int, y: int) -> None:
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self._width}x{self._height} buffer")

    def read(self, x: int, y: int) -> tuple[int, int, int, int]:
        """Return the RGBA value of pixel (x, y)."""
        self._check_bounds(x, y)
        value = self.pixels[x, y]
        return (int(value[0]), int(value[1]), int(value[2]), int(value[3]))

    def write(self, x: int, y: int, rgba: tuple[int, int, int, int]) -> None:
        """Set pixel (x, y). Components are clamped to [0, 255]."""
        self._check_bounds(x, y)
        self.pixels[x, y] = [min(max(int(c), 0), 255) for c in rgba]

    def to_numpy(self) -> np.ndarray:
        """Copy the buffer to a (height, width, 4) uint8 array, top row first."""
        image = self.pixels.to_numpy()
        # (width, height, 4) -> (height, width, 4), then bottom-left origin -> top-left
        image = np.transpose(image, (1, 0, 2))
        return np.ascontiguousarray(np.flipud(image)).astype(np.uint8)

    def to_float_rgb(self) -> np.ndarray:
        """Copy the colour channels to a (height, width, 3) float32 array in [0, 1]."""
        return self.to_numpy()[:, :, :3].astype(np.float32) / 255.0
