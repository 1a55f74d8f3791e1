"""PNG export of rendered images (8-bit via Pillow).

Example:
    >>> from pathtracer.preview.export import save_png
    >>> session.render(buffer)
    >>> save_png(buffer, "showcase.png")
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from pathtracer.core.framebuffer import PixelBuffer


def save_png(
    buffer: PixelBuffer,
    filepath: str | Path,
    *,
    include_alpha: bool = False,
) -> None:
    """Save a pixel buffer as a PNG file, top row first.

    Args:
        buffer: The pixel buffer to save.
        filepath: Output file path (should end in .png).
        include_alpha: Write RGBA instead of RGB. Cleared pixels are then
            fully transparent.
    """
    image = buffer.to_numpy()
    if include_alpha:
        PILImage.fromarray(image).save(filepath)
    else:
        PILImage.fromarray(np.ascontiguousarray(image[:, :, :3])).save(filepath)


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a display-encoded float image in [0, 1] to uint8.

    Values are clamped and rounded to the nearest level.
    """
    return (np.clip(image, 0.0, 1.0) * 255.0 + 0.5).astype(np.uint8)


def save_png_from_array(image: npt.NDArray, filepath: str | Path) -> None:
    """Save an (H, W, 3) or (H, W, 4) image array as PNG.

    uint8 arrays are written as-is; float arrays are treated as
    display-encoded values in [0, 1].

    Raises:
        ValueError: If the array is not an RGB or RGBA image.
    """
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Expected an (H, W, 3) or (H, W, 4) image, got shape {image.shape}")

    if image.dtype != np.uint8:
        image = image_to_uint8(image)

    PILImage.fromarray(np.ascontiguousarray(image)).save(filepath)


def load_png(filepath: str | Path) -> npt.NDArray[np.float32]:
    """Load a PNG as an (H, W, 3) float32 array in [0, 1]."""
    with PILImage.open(filepath) as img:
        rgb = np.asarray(img.convert("RGB"), dtype=np.float32)
    return rgb / 255.0


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
